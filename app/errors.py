"""
Booking decision errors. None of these are transient, so callers never retry them.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class Conflict(BookingError):
    """Requested range overlaps an active booking for the gear item."""
    status_code = 409

    def __init__(self, gear_id: str, name: str | None = None, start_date=None, end_date=None):
        label = name or gear_id
        super().__init__(f"'{label}' is already booked for the selected dates")
        self.gear_id = gear_id
        self.name = name
        self.start_date = start_date
        self.end_date = end_date

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "gearId": self.gear_id,
            "name": self.name,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
        }


class NotFound(BookingError):
    status_code = 404


class InvalidTransition(BookingError):
    def __init__(self, current_status: str, message: str | None = None):
        super().__init__(
            message or f"Booking cannot be changed because it is already {current_status}"
        )
        self.current_status = current_status

    def to_dict(self) -> dict:
        return {"error": self.message, "status": self.current_status}


class InvalidInput(BookingError):
    pass

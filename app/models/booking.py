"""
Booking model: who rented which gear items, for which dates, and where it stands.
Each gear item in a booking is its own BookingItem row.
"""

import uuid
from datetime import datetime, timezone
from app import db


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    ALL = (PENDING, CONFIRMED, REJECTED, CANCELLED)
    # Only these hold the gear; rejected/cancelled bookings never block a date
    ACTIVE = (PENDING, CONFIRMED)
    TERMINAL = (REJECTED, CANCELLED)


class RefundStatus:
    PENDING = "pending"
    PROCESSED = "processed"


def generate_booking_id() -> str:
    return uuid.uuid4().hex


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.String(32), primary_key=True, default=generate_booking_id)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    address_id = db.Column(db.Integer, db.ForeignKey("addresses.id"), nullable=True)
    customer_name = db.Column(db.String(120), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING, index=True)
    refund_status = db.Column(db.String(20), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    undertaking_signed = db.Column(db.Boolean, default=False)
    aadhaar_number = db.Column(db.String(12), nullable=True)
    aadhaar_url = db.Column(db.String(500), nullable=True)

    user = db.relationship("User", backref=db.backref("bookings", lazy=True))
    address = db.relationship("Address")
    items = db.relationship(
        "BookingItem",
        backref="booking",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="BookingItem.position",
    )

    @property
    def is_active(self) -> bool:
        return self.status in BookingStatus.ACTIVE

    @property
    def gear_ids(self) -> list:
        return [item.gear_id for item in self.items]

    @property
    def start_date(self):
        return min((item.start_date for item in self.items), default=None)

    @property
    def end_date(self):
        return max((item.end_date for item in self.items), default=None)

    def to_dict(self, include_address=False) -> dict:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "gearIds": self.gear_ids,
            "items": [item.to_dict() for item in self.items],
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "refundStatus": self.refund_status,
            "customerName": self.customer_name,
            "addressId": self.address_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "undertakingSigned": bool(self.undertaking_signed),
        }
        if include_address:
            data["deliveryAddress"] = self.address.to_dict() if self.address else None
            data["aadhaarNumber"] = self.aadhaar_number
            data["aadhaarUrl"] = self.aadhaar_url
        return data

    def __repr__(self):
        return f"<Booking {self.id}: {self.gear_ids} [{self.status}]>"


class BookingItem(db.Model):
    __tablename__ = "booking_items"
    __table_args__ = (
        db.Index("ix_booking_items_gear_range", "gear_id", "start_date", "end_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.String(32), db.ForeignKey("bookings.id"), nullable=False)
    gear_id = db.Column(db.String(64), db.ForeignKey("gears.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    gear = db.relationship("Gear")

    def to_dict(self) -> dict:
        return {
            "gearId": self.gear_id,
            "name": self.gear.name if self.gear else None,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "quantity": self.quantity,
        }

    def __repr__(self):
        return f"<BookingItem {self.gear_id}: {self.start_date} → {self.end_date}>"

"""
Booking availability.

A gear item is unavailable for [start, end] when a pending or confirmed booking
holds a line item for the same gear whose range overlaps it, endpoints included:
    existing.start <= requested.end AND requested.start <= existing.end

Availability is checked and then the booking is inserted in a separate step.
Two concurrent checkouts for the same gear can both pass the check before either
row exists, so there is no hard exclusivity guarantee: the re-check in
create_booking only narrows the window.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from app import db
from app.errors import Conflict, InvalidInput, InvalidTransition, NotFound
from app.models.booking import Booking, BookingItem, BookingStatus, RefundStatus
from app.models.gear import Gear
from app.models.user import Address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date

    def overlaps(self, other: "DateRange") -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
        }


@dataclass(frozen=True)
class ItemDateRange:
    gear_id: str
    start_date: date
    end_date: date
    name: str | None = None
    quantity: int = 1

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


@dataclass
class AvailabilityResult:
    available: list = field(default_factory=list)
    conflicts: list = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.conflicts

    def unavailable_items(self) -> list:
        return [
            {
                "id": c.gear_id,
                "name": c.name,
                "startDate": c.start_date.isoformat(),
                "endDate": c.end_date.isoformat(),
            }
            for c in self.conflicts
        ]


# ── INPUT NORMALIZATION ───────────────────────────────────────────────────────

def parse_date(value):
    """Accept a date, a datetime or an ISO string (a time part is ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def split_gear_ids(value) -> list:
    """
    Legacy bookings carried their gear as one string: "A,B" from old clients,
    or a JSON array string like '["A","B"]' from old rows.
    """
    if isinstance(value, (list, tuple)):
        parts = value
    elif isinstance(value, str):
        raw = value.strip()
        parts = None
        if raw.startswith("["):
            try:
                parts = json.loads(raw)
            except ValueError:
                parts = None
        if not isinstance(parts, list):
            parts = raw.split(",")
    else:
        return []
    return [str(p).strip() for p in parts if p is not None and str(p).strip()]


def _to_request(raw, strict: bool):
    if isinstance(raw, ItemDateRange):
        return raw

    if not isinstance(raw, dict):
        if strict:
            raise InvalidInput("Each cart item must be an object")
        return None

    gear_id = raw.get("id") or raw.get("gearId")
    gear_id = str(gear_id).strip() if gear_id is not None else ""
    start_date = parse_date(raw.get("startDate"))
    end_date = parse_date(raw.get("endDate"))

    quantity = raw.get("quantity")
    try:
        quantity = 1 if quantity is None else int(quantity)
    except (TypeError, ValueError):
        quantity = 0

    problem = None
    if not gear_id:
        problem = "gear id is missing"
    elif start_date is None or end_date is None:
        problem = "startDate and endDate must be valid YYYY-MM-DD dates"
    elif start_date > end_date:
        problem = "startDate must not be after endDate"
    elif quantity < 1:
        problem = "quantity must be at least 1"

    if problem:
        if strict:
            raise InvalidInput(f"Invalid cart item {gear_id or '?'}: {problem}")
        logger.warning("Skipping cart item %r: %s", gear_id or None, problem)
        return None

    return ItemDateRange(
        gear_id=gear_id,
        start_date=start_date,
        end_date=end_date,
        name=raw.get("name"),
        quantity=quantity,
    )


def coerce_requests(items, strict: bool = False) -> list:
    """
    Turn raw cart lines into ItemDateRange values.
    Lines with no id or unusable dates are dropped unless strict is set,
    in which case the first bad line raises InvalidInput.
    """
    requests = []
    for raw in items or []:
        item = _to_request(raw, strict)
        if item is not None:
            requests.append(item)
    return requests


def normalize_line_items(cart_items=None, gear_id=None, start_date=None, end_date=None, strict=False) -> list:
    """
    Accept either an explicit cart (list of {id|gearId, startDate, endDate})
    or the legacy shape, a single gear id string shared by one date range.
    Both come out as the same list of line items.
    """
    if cart_items is not None:
        if not isinstance(cart_items, list):
            raise InvalidInput("cartItems must be a list")
        raw = cart_items
    elif gear_id:
        raw = [
            {"id": gid, "startDate": start_date, "endDate": end_date}
            for gid in split_gear_ids(gear_id)
        ]
    else:
        raw = []
    return coerce_requests(raw, strict=strict)


# ── QUERIES ───────────────────────────────────────────────────────────────────

def _active_items_query(gear_id: str):
    return BookingItem.query.join(Booking).filter(
        Booking.status.in_(BookingStatus.ACTIVE),
        BookingItem.gear_id == gear_id,
    )


def find_overlapping_items(request: ItemDateRange) -> list:
    return _active_items_query(request.gear_id).filter(
        BookingItem.start_date <= request.end_date,
        BookingItem.end_date >= request.start_date,
    ).all()


def check_availability(requests, strict: bool = False) -> AvailabilityResult:
    """Read-only. Reports, per requested (gear, range), whether it is free."""
    checked = coerce_requests(requests, strict=strict)

    names = {}
    gear_ids = {r.gear_id for r in checked}
    if gear_ids:
        names = {
            g.id: g.name for g in Gear.query.filter(Gear.id.in_(gear_ids)).all()
        }

    result = AvailabilityResult()
    for request in checked:
        if find_overlapping_items(request):
            result.conflicts.append(ItemDateRange(
                gear_id=request.gear_id,
                start_date=request.start_date,
                end_date=request.end_date,
                name=names.get(request.gear_id) or request.name,
                quantity=request.quantity,
            ))
        else:
            result.available.append(request)
    return result


def find_overlap_within(requests):
    """First line that overlaps an earlier line of the same request for the same gear, or None."""
    seen = {}
    for request in requests:
        for earlier in seen.get(request.gear_id, []):
            if earlier.date_range.overlaps(request.date_range):
                return request
        seen.setdefault(request.gear_id, []).append(request)
    return None


def get_booked_date_ranges(gear_id: str) -> list:
    items = _active_items_query(gear_id).order_by(BookingItem.start_date).all()
    return [DateRange(item.start_date, item.end_date) for item in items]


# ── BOOKING LIFECYCLE ─────────────────────────────────────────────────────────

def create_booking(owner_id, line_items, delivery_address_id=None, customer_name=None, strict=False) -> Booking:
    """
    Store a new pending booking after a last availability check.
    Raises Conflict for the first unavailable line item; nothing is written then.
    """
    requests = coerce_requests(line_items, strict=strict)
    if not requests:
        raise InvalidInput("At least one gear item with valid dates is required")

    gear_ids = {r.gear_id for r in requests}
    names = {g.id: g.name for g in Gear.query.filter(Gear.id.in_(gear_ids)).all()}
    unknown = sorted(gear_ids - set(names))
    if unknown:
        raise InvalidInput(f"Unknown gear item(s): {', '.join(unknown)}")

    clash = find_overlap_within(requests)
    if clash is not None:
        logger.info(
            "Booking refused: gear %s requested twice for overlapping dates", clash.gear_id
        )
        raise Conflict(clash.gear_id, names.get(clash.gear_id), clash.start_date, clash.end_date)

    if delivery_address_id is not None:
        address = db.session.get(Address, delivery_address_id)
        # Guests cannot attach a saved address; it must belong to the owner
        if not address or owner_id is None or address.user_id != owner_id:
            raise InvalidInput("Delivery address not found")

    result = check_availability(requests)
    if not result.valid:
        first = result.conflicts[0]
        logger.info(
            "Booking refused: gear %s taken for %s..%s",
            first.gear_id, first.start_date, first.end_date,
        )
        raise Conflict(first.gear_id, first.name, first.start_date, first.end_date)

    booking = Booking(
        user_id=owner_id,
        address_id=delivery_address_id,
        customer_name=customer_name,
        status=BookingStatus.PENDING,
    )
    booking.items = [
        BookingItem(
            gear_id=r.gear_id,
            position=position,
            start_date=r.start_date,
            end_date=r.end_date,
            quantity=r.quantity,
        )
        for position, r in enumerate(requests)
    ]
    db.session.add(booking)
    db.session.commit()

    logger.info("Booking %s created for gear %s", booking.id, booking.gear_ids)
    return booking


def get_booking(booking_id, auth=None) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    if auth is not None and not auth.is_admin and booking.user_id != auth.user_id:
        raise NotFound("Booking not found")
    return booking


def cancel_booking(booking_id, requested_by) -> Booking:
    booking = get_booking(booking_id, requested_by)
    if booking.status in BookingStatus.TERMINAL:
        raise InvalidTransition(
            booking.status,
            f"Booking cannot be cancelled because it is already {booking.status}",
        )

    booking.status = BookingStatus.CANCELLED
    booking.refund_status = RefundStatus.PENDING
    db.session.commit()

    logger.info("Booking %s cancelled by user %s", booking.id, requested_by.user_id)
    return booking


def set_booking_status(booking_id, new_status: str) -> Booking:
    """Admin override. Leaving 'cancelled' drops any pending refund marker."""
    if new_status not in BookingStatus.ALL:
        raise InvalidInput("Invalid status")

    booking = get_booking(booking_id)
    booking.status = new_status
    if new_status == BookingStatus.CANCELLED:
        booking.refund_status = RefundStatus.PENDING
    else:
        booking.refund_status = None
    db.session.commit()

    logger.info("Booking %s marked as %s", booking.id, new_status)
    return booking


def mark_refund_processed(booking_id) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if not booking or booking.status != BookingStatus.CANCELLED:
        raise NotFound("Booking not found or not cancelled")

    booking.refund_status = RefundStatus.PROCESSED
    db.session.commit()
    return booking


def get_undertaking_booking(booking_id, auth) -> Booking:
    """The owner's confirmed booking that still needs a signed undertaking."""
    booking = db.session.get(Booking, booking_id)
    if not booking or booking.user_id != auth.user_id or booking.status != BookingStatus.CONFIRMED:
        raise NotFound("Booking not found or not eligible for undertaking")
    if booking.undertaking_signed:
        raise InvalidTransition(booking.status, "Undertaking already signed")
    return booking


def sign_undertaking(booking_id, auth, aadhaar_number, aadhaar_url) -> Booking:
    booking = get_undertaking_booking(booking_id, auth)
    booking.undertaking_signed = True
    booking.aadhaar_number = aadhaar_number
    booking.aadhaar_url = aadhaar_url
    db.session.commit()
    return booking

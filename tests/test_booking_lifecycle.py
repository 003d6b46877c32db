from datetime import date

import pytest

from app.errors import Conflict, InvalidInput, InvalidTransition, NotFound
from app.models.booking import Booking, BookingStatus, RefundStatus
from app.models.user import Address
from app.services.availability import (
    cancel_booking,
    create_booking,
    get_booking,
    mark_refund_processed,
    normalize_line_items,
    set_booking_status,
    sign_undertaking,
)


def _line(gear_id, start="2024-08-01", end="2024-08-03"):
    return {"id": gear_id, "startDate": start, "endDate": end}


def test_create_booking_persists_pending_booking(db, user):
    booking = create_booking(user.id, [_line("1"), _line("2", "2024-08-02", "2024-08-06")])

    stored = db.session.get(Booking, booking.id)
    assert stored.status == BookingStatus.PENDING
    assert stored.user_id == user.id
    assert stored.gear_ids == ["1", "2"]
    assert stored.start_date == date(2024, 8, 1)
    assert stored.end_date == date(2024, 8, 6)
    assert stored.created_at is not None
    assert stored.refund_status is None


def test_create_booking_generates_unique_ids(user):
    first = create_booking(user.id, [_line("1", "2024-08-01", "2024-08-01")])
    second = create_booking(user.id, [_line("1", "2024-08-02", "2024-08-02")])
    assert first.id and second.id and first.id != second.id


def test_guest_checkout_has_no_owner(app):
    booking = create_booking(None, [_line("3")], customer_name="Walk-in")
    assert booking.user_id is None
    assert booking.customer_name == "Walk-in"


def test_conflict_creates_nothing(db, user, make_booking):
    make_booking(["2"], "2024-08-03", "2024-08-04")
    before = Booking.query.count()

    with pytest.raises(Conflict) as excinfo:
        create_booking(user.id, [_line("1"), _line("2")])

    assert excinfo.value.gear_id == "2"
    assert excinfo.value.name == "Insta360 X3"
    assert excinfo.value.status_code == 409
    assert Booking.query.count() == before


def test_conflict_names_first_blocked_item(user, make_booking):
    make_booking(["3", "4"], "2024-08-01", "2024-08-10")
    with pytest.raises(Conflict) as excinfo:
        create_booking(user.id, [_line("1"), _line("4"), _line("3")])
    assert excinfo.value.gear_id == "4"


def test_second_overlapping_booking_is_refused(user):
    create_booking(user.id, [_line("5", "2024-09-01", "2024-09-05")])
    with pytest.raises(Conflict):
        create_booking(user.id, [_line("5", "2024-09-05", "2024-09-07")])


def test_same_gear_twice_with_overlapping_dates_is_refused(user):
    with pytest.raises(Conflict) as excinfo:
        create_booking(user.id, [
            _line("1", "2024-08-01", "2024-08-05"),
            _line("1", "2024-08-03", "2024-08-07"),
        ])
    assert excinfo.value.gear_id == "1"
    assert excinfo.value.name == "GoPro Hero 11 Black"
    assert excinfo.value.start_date == date(2024, 8, 3)
    assert Booking.query.count() == 0


def test_same_gear_twice_on_separate_dates_is_allowed(user):
    booking = create_booking(user.id, [
        _line("1", "2024-08-01", "2024-08-02"),
        _line("1", "2024-08-03", "2024-08-04"),
    ])
    assert booking.gear_ids == ["1", "1"]


def test_create_booking_requires_a_valid_line(user):
    with pytest.raises(InvalidInput):
        create_booking(user.id, [])
    with pytest.raises(InvalidInput):
        create_booking(user.id, [{"id": "1"}])


def test_create_booking_rejects_unknown_gear(user):
    with pytest.raises(InvalidInput) as excinfo:
        create_booking(user.id, [_line("nope")])
    assert "nope" in excinfo.value.message


def test_delivery_address_must_belong_to_owner(db, user, make_user):
    other = make_user(email="other@example.com")
    address = Address(user_id=other.id, street="1 Main St", city="Pune", state="MH", zip="411001")
    db.session.add(address)
    db.session.commit()

    with pytest.raises(InvalidInput):
        create_booking(user.id, [_line("1")], delivery_address_id=address.id)

    booking = create_booking(other.id, [_line("1")], delivery_address_id=address.id)
    assert booking.to_dict(include_address=True)["deliveryAddress"]["city"] == "Pune"


def test_legacy_and_cart_bookings_have_equal_line_items(user):
    legacy = create_booking(
        user.id,
        normalize_line_items(gear_id="1,2", start_date="2024-10-01", end_date="2024-10-02"),
    )
    legacy_items = [i.to_dict() for i in legacy.items]
    cancel_booking(legacy.id, _auth_for(user))

    cart = create_booking(
        user.id,
        normalize_line_items(cart_items=[_line("1", "2024-10-01", "2024-10-02"), _line("2", "2024-10-01", "2024-10-02")]),
    )
    assert [i.to_dict() for i in cart.items] == legacy_items


def _auth_for(user):
    from app.utils.jwt_helper import AuthContext
    return AuthContext.from_user(user)


def test_cancel_twice_fails_the_second_time(user, user_auth, make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03", status=BookingStatus.PENDING, user=user)

    cancelled = cancel_booking(booking.id, user_auth)
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.refund_status == RefundStatus.PENDING

    with pytest.raises(InvalidTransition) as excinfo:
        cancel_booking(booking.id, user_auth)
    assert excinfo.value.current_status == BookingStatus.CANCELLED
    assert excinfo.value.to_dict()["status"] == BookingStatus.CANCELLED


def test_rejected_booking_cannot_be_cancelled(user, user_auth, make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03", status=BookingStatus.REJECTED, user=user)
    with pytest.raises(InvalidTransition):
        cancel_booking(booking.id, user_auth)


def test_cancel_frees_the_dates(user, user_auth):
    booking = create_booking(user.id, [_line("1")])
    cancel_booking(booking.id, user_auth)
    assert create_booking(user.id, [_line("1")]).status == BookingStatus.PENDING


def test_cancel_hides_other_users_bookings(user_auth, make_user, make_booking):
    stranger = make_user(email="stranger@example.com")
    booking = make_booking(["1"], "2024-08-01", "2024-08-03", user=stranger)

    with pytest.raises(NotFound):
        cancel_booking(booking.id, user_auth)
    with pytest.raises(NotFound):
        cancel_booking("missing", user_auth)


def test_admin_can_cancel_any_booking(admin_auth, user, make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03", user=user)
    assert cancel_booking(booking.id, admin_auth).status == BookingStatus.CANCELLED


def test_status_round_trip_sets_and_clears_refund(make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03")

    set_booking_status(booking.id, BookingStatus.CANCELLED)
    assert booking.refund_status == RefundStatus.PENDING

    set_booking_status(booking.id, BookingStatus.CONFIRMED)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.refund_status is None


def test_set_status_validates_input(make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03")
    with pytest.raises(InvalidInput):
        set_booking_status(booking.id, "shipped")
    with pytest.raises(NotFound):
        set_booking_status("missing", BookingStatus.CONFIRMED)


def test_refund_only_for_cancelled_bookings(make_booking):
    booking = make_booking(["1"], "2024-08-01", "2024-08-03")
    with pytest.raises(NotFound):
        mark_refund_processed(booking.id)

    set_booking_status(booking.id, BookingStatus.CANCELLED)
    assert mark_refund_processed(booking.id).refund_status == RefundStatus.PROCESSED


def test_get_booking_respects_ownership(user, user_auth, admin_auth, make_user, make_booking):
    mine = make_booking(["1"], "2024-08-01", "2024-08-03", user=user)
    theirs = make_booking(["2"], "2024-08-01", "2024-08-03", user=make_user(email="x@example.com"))

    assert get_booking(mine.id, user_auth).id == mine.id
    assert get_booking(theirs.id, admin_auth).id == theirs.id
    with pytest.raises(NotFound):
        get_booking(theirs.id, user_auth)


def test_undertaking_needs_confirmed_unsigned_booking(user, user_auth, make_booking):
    pending = make_booking(["1"], "2024-08-01", "2024-08-03", status=BookingStatus.PENDING, user=user)
    with pytest.raises(NotFound):
        sign_undertaking(pending.id, user_auth, "123412341234", "https://example.com/doc.pdf")

    confirmed = make_booking(["2"], "2024-08-01", "2024-08-03", user=user)
    signed = sign_undertaking(confirmed.id, user_auth, "123412341234", "https://example.com/doc.pdf")
    assert signed.undertaking_signed is True

    with pytest.raises(InvalidTransition):
        sign_undertaking(confirmed.id, user_auth, "123412341234", "https://example.com/doc.pdf")

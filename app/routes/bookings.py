"""
Booking routes: customers rent one or more gear items for a date range
    POST   /api/validate-cart                        - check cart lines against active bookings
    POST   /api/rentals                              - create a pending booking (guest checkout allowed)
    GET    /api/bookings                             - current user's bookings
    GET    /api/bookings/<id>                        - one booking (owner or admin)
    PUT    /api/bookings/<id>/cancel                 - cancel own booking
    POST   /api/bookings/<id>/aadhaar/generate-otp   - start undertaking verification
    POST   /api/bookings/<id>/aadhaar/submit-otp     - finish verification, sign undertaking
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from app.errors import InvalidInput
from app.models.booking import Booking
from app.services import availability
from app.utils import aadhaar_helper
from app.utils.jwt_helper import jwt_required, jwt_optional

booking_bp = Blueprint("bookings", __name__)

logger = logging.getLogger(__name__)


def _strict_line_items() -> bool:
    return bool(current_app.config.get("STRICT_LINE_ITEMS"))


def _parse_address_id(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput("addressId must be an integer")


# POST /api/validate-cart
@booking_bp.route("/validate-cart", methods=["POST"])
def validate_cart():
    """
    Request body:
    {
        "cartItems": [
            {"id": "1", "name": "GoPro Hero 11 Black", "startDate": "2024-03-01", "endDate": "2024-03-05"}
        ]
    }
    """
    data = request.get_json(silent=True) or {}
    cart_items = data.get("cartItems")

    if not cart_items or not isinstance(cart_items, list):
        return jsonify({"valid": True}), 200

    result = availability.check_availability(cart_items, strict=_strict_line_items())
    if not result.valid:
        return jsonify({
            "valid": False,
            "message": "Some items are not available for the selected dates.",
            "unavailableItems": result.unavailable_items(),
        }), 400

    return jsonify({"valid": True}), 200


# POST /api/rentals
@booking_bp.route("/rentals", methods=["POST"])
@jwt_optional
def create_rental(auth):
    """
    Request body, either the cart form:
    {
        "cartItems": [{"id": "1", "startDate": "2024-03-01", "endDate": "2024-03-05"}],
        "addressId": 3,
        "customerDetails": {"name": "Asha Rao"}
    }
    or the legacy single-string form:
    {
        "gearId": "1,2",
        "startDate": "2024-03-01",
        "endDate": "2024-03-05"
    }
    """
    data = request.get_json(silent=True) or {}
    strict = _strict_line_items()

    line_items = availability.normalize_line_items(
        cart_items=data.get("cartItems"),
        gear_id=data.get("gearId"),
        start_date=data.get("startDate"),
        end_date=data.get("endDate"),
        strict=strict,
    )
    customer_name = None
    customer_details = data.get("customerDetails")
    if isinstance(customer_details, dict):
        customer_name = (customer_details.get("name") or "").strip() or None

    booking = availability.create_booking(
        owner_id=auth.user_id if auth else None,
        line_items=line_items,
        delivery_address_id=_parse_address_id(data.get("addressId")),
        customer_name=customer_name,
        strict=strict,
    )

    return jsonify({
        "message": "Rental booked successfully",
        "rental": booking.to_dict(),
    }), 201


# GET /api/bookings
@booking_bp.route("/bookings", methods=["GET"])
@jwt_required
def my_bookings(auth):
    bookings = Booking.query.filter_by(user_id=auth.user_id) \
        .order_by(Booking.created_at.desc()).all()
    return jsonify([b.to_dict() for b in bookings]), 200


# GET /api/bookings/<id>
@booking_bp.route("/bookings/<booking_id>", methods=["GET"])
@jwt_required
def get_booking(booking_id, auth):
    booking = availability.get_booking(booking_id, auth)
    return jsonify({"booking": booking.to_dict(include_address=True)}), 200


# PUT /api/bookings/<id>/cancel
@booking_bp.route("/bookings/<booking_id>/cancel", methods=["PUT"])
@jwt_required
def cancel_booking(booking_id, auth):
    booking = availability.cancel_booking(booking_id, auth)
    return jsonify({
        "message": "Booking cancelled successfully",
        "booking": booking.to_dict(),
    }), 200


# POST /api/bookings/<id>/aadhaar/generate-otp
@booking_bp.route("/bookings/<booking_id>/aadhaar/generate-otp", methods=["POST"])
@jwt_required
def generate_aadhaar_otp(booking_id, auth):
    data = request.get_json(silent=True) or {}
    aadhaar_number = str(data.get("aadhaarNumber") or "").strip()

    if len(aadhaar_number) != 12 or not aadhaar_number.isdigit():
        return jsonify({"error": "Valid 12-digit Aadhaar number is required"}), 400

    availability.get_undertaking_booking(booking_id, auth)

    try:
        client_id = aadhaar_helper.generate_otp(aadhaar_number)
    except aadhaar_helper.AadhaarError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"clientId": client_id, "message": "OTP Sent Successfully"}), 200


# POST /api/bookings/<id>/aadhaar/submit-otp
@booking_bp.route("/bookings/<booking_id>/aadhaar/submit-otp", methods=["POST"])
@jwt_required
def submit_aadhaar_otp(booking_id, auth):
    data = request.get_json(silent=True) or {}
    client_id = data.get("clientId")
    otp = str(data.get("otp") or "").strip()
    aadhaar_number = str(data.get("aadhaarNumber") or "").strip() or None

    if not client_id or not otp:
        return jsonify({"error": "Client ID and OTP are required"}), 400

    availability.get_undertaking_booking(booking_id, auth)

    try:
        document_url = aadhaar_helper.submit_otp(client_id, otp)
    except aadhaar_helper.AadhaarError as e:
        return jsonify({"error": str(e)}), 400

    booking = availability.sign_undertaking(
        booking_id, auth, aadhaar_number, data.get("aadhaarUrl") or document_url
    )
    logger.info("Undertaking signed for booking %s", booking.id)

    return jsonify({
        "message": "Undertaking signed and Aadhaar verified successfully!",
        "booking": booking.to_dict(),
    }), 200

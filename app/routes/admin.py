"""
Admin routes for the booking console.
Only users with role="admin" can access these endpoints.
"""

from flask import Blueprint, request, jsonify
from app.models.booking import Booking, BookingStatus
from app.models.user import User
from app.services import availability
from app.utils.jwt_helper import admin_required

admin_bp = Blueprint("admin", __name__)


# ── LIST ALL BOOKINGS ─────────────────────────────────────────────────────────

@admin_bp.route("/bookings", methods=["GET"])
@admin_required
def list_bookings(auth):
    """
    All bookings, newest first, with delivery address details and the user list.
    Optional: ?status=pending|confirmed|rejected|cancelled
    """
    status = request.args.get("status")

    query = Booking.query
    if status:
        if status not in BookingStatus.ALL:
            return jsonify({"error": "Invalid status filter"}), 400
        query = query.filter_by(status=status)

    bookings = query.order_by(Booking.created_at.desc()).all()
    users = User.query.order_by(User.id).all()

    return jsonify({
        "total": len(bookings),
        "bookings": [b.to_dict(include_address=True) for b in bookings],
        "users": [u.to_dict() for u in users],
    }), 200


@admin_bp.route("/bookings/summary", methods=["GET"])
@admin_required
def bookings_summary(auth):
    """Per-status counts for the dashboard badges."""
    counts = {status: Booking.query.filter_by(status=status).count() for status in BookingStatus.ALL}
    return jsonify({**counts, "total": sum(counts.values())}), 200


# ── STATUS ────────────────────────────────────────────────────────────────────

@admin_bp.route("/bookings/<booking_id>/status", methods=["PUT"])
@admin_required
def update_booking_status(booking_id, auth):
    """
    Request body:
    { "status": "confirmed" }    // pending | confirmed | rejected | cancelled
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status")

    booking = availability.set_booking_status(booking_id, status)
    return jsonify({
        "message": f"Booking marked as {status}",
        "booking": booking.to_dict(),
    }), 200


# ── REFUND ────────────────────────────────────────────────────────────────────

@admin_bp.route("/bookings/<booking_id>/refund", methods=["PUT"])
@admin_required
def mark_refund(booking_id, auth):
    booking = availability.mark_refund_processed(booking_id)
    return jsonify({
        "message": "Refund marked as processed",
        "booking": booking.to_dict(),
    }), 200

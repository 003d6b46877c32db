"""
Gear catalog routes
    GET    /api/gears                      - list catalog (public)
    GET    /api/gears/<id>                 - gear detail (public)
    GET    /api/gears/<id>/booked-dates    - ranges held by pending/confirmed bookings
    POST   /api/gears                      - add gear (admin)
    PUT    /api/gears/<id>                 - update gear (admin)
    DELETE /api/gears/<id>                 - delete gear (admin)
"""

from flask import Blueprint, request, jsonify
from app import db
from app.models.gear import Gear
from app.models.booking import BookingItem
from app.services.availability import get_booked_date_ranges
from app.utils.jwt_helper import admin_required

gears_bp = Blueprint("gears", __name__)


def _validate_gear_fields(data: dict, partial=False):
    """Returns (fields, error_response)."""
    fields = {}

    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            return None, (jsonify({"error": "name is required"}), 400)
        fields["name"] = name

    if "category" in data or not partial:
        category = (data.get("category") or "").strip()
        if not category:
            return None, (jsonify({"error": "category is required"}), 400)
        fields["category"] = category

    if "pricePerDay" in data or not partial:
        try:
            price = float(data.get("pricePerDay"))
        except (TypeError, ValueError):
            return None, (jsonify({"error": "pricePerDay must be a number"}), 400)
        if price < 0:
            return None, (jsonify({"error": "pricePerDay cannot be negative"}), 400)
        fields["price_per_day"] = price

    if "thumbnail" in data:
        fields["thumbnail"] = (data.get("thumbnail") or "").strip()

    if "images" in data:
        images = data.get("images") or []
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            return None, (jsonify({"error": "images must be a list of URLs"}), 400)
        fields["images"] = images

    return fields, None


@gears_bp.route("", methods=["GET"])
def list_gears():
    query = Gear.query
    category = request.args.get("category")
    if category:
        query = query.filter_by(category=category)
    gears = query.order_by(Gear.category, Gear.name).all()
    return jsonify([g.to_dict() for g in gears]), 200


@gears_bp.route("/<gear_id>", methods=["GET"])
def get_gear(gear_id):
    gear = db.session.get(Gear, gear_id)
    if not gear:
        return jsonify({"error": "Gear not found"}), 404
    return jsonify(gear.to_dict()), 200


@gears_bp.route("/<gear_id>/booked-dates", methods=["GET"])
def get_booked_dates(gear_id):
    """Used by the storefront calendar to grey out dates that are already taken."""
    return jsonify([r.to_dict() for r in get_booked_date_ranges(gear_id)]), 200


@gears_bp.route("", methods=["POST"])
@admin_required
def create_gear(auth):
    """
    Request body:
    {
        "name":        "GoPro Hero 12",
        "category":    "Camera",
        "pricePerDay": 55,
        "thumbnail":   "https://...",
        "images":      ["https://..."]
    }
    """
    data = request.get_json() or {}
    fields, error = _validate_gear_fields(data)
    if error:
        return error

    gear = Gear(**fields)
    db.session.add(gear)
    db.session.commit()

    return jsonify({"message": "Gear created successfully", "gear": gear.to_dict()}), 201


@gears_bp.route("/<gear_id>", methods=["PUT"])
@admin_required
def update_gear(gear_id, auth):
    gear = db.session.get(Gear, gear_id)
    if not gear:
        return jsonify({"error": "Gear not found"}), 404

    fields, error = _validate_gear_fields(request.get_json() or {}, partial=True)
    if error:
        return error

    for key, value in fields.items():
        setattr(gear, key, value)
    db.session.commit()

    return jsonify({"message": "Gear updated successfully", "gear": gear.to_dict()}), 200


@gears_bp.route("/<gear_id>", methods=["DELETE"])
@admin_required
def delete_gear(gear_id, auth):
    gear = db.session.get(Gear, gear_id)
    if not gear:
        return jsonify({"error": "Gear not found"}), 404

    # Line items reference the gear; booking history must stay intact
    if BookingItem.query.filter_by(gear_id=gear_id).first():
        return jsonify({"error": "Gear has bookings and cannot be deleted"}), 409

    db.session.delete(gear)
    db.session.commit()
    return jsonify({"message": "Gear deleted successfully"}), 200

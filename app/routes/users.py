"""
Account routes for the signed-in customer
    PUT    /api/users/me                 - update name / email
    POST   /api/users/me/password        - change password
    GET    /api/users/me/addresses       - list delivery addresses (default first)
    POST   /api/users/me/addresses       - add a delivery address
"""

from flask import Blueprint, request, jsonify
from app import db
from app.models.user import User, Address
from app.utils.jwt_helper import jwt_required, generate_tokens

users_bp = Blueprint("users", __name__)


@users_bp.route("/users/me", methods=["PUT"])
@jwt_required
def update_profile(auth):
    data = request.get_json() or {}
    user = db.session.get(User, auth.user_id)

    new_name  = (data.get("name")  or "").strip()
    new_email = (data.get("email") or "").strip().lower()

    if new_name:
        if len(new_name) < 2:
            return jsonify({"error": "Name must be at least 2 characters"}), 400
        user.name = new_name

    if new_email and new_email != user.email:
        if "@" not in new_email:
            return jsonify({"error": "Invalid email address"}), 400
        if User.query.filter(User.email == new_email, User.id != user.id).first():
            return jsonify({"error": "Email already in use"}), 409
        user.email = new_email

    db.session.commit()
    return jsonify({
        "message": "Profile updated",
        "user": user.to_dict(),
        **generate_tokens(user.id),
    }), 200


@users_bp.route("/users/me/password", methods=["POST"])
@jwt_required
def change_password(auth):
    data = request.get_json() or {}
    user = db.session.get(User, auth.user_id)
    current_password = data.get("current_password")
    new_password = data.get("new_password")

    if not current_password or not new_password:
        return jsonify({"error": "current_password and new_password are required"}), 400
    if not user.check_password(current_password):
        return jsonify({"error": "Current password is incorrect"}), 401
    if len(new_password) < 6:
        return jsonify({"error": "New password must be at least 6 characters"}), 400

    user.set_password(new_password)
    db.session.commit()
    return jsonify({"message": "Password changed successfully"}), 200


@users_bp.route("/users/me/addresses", methods=["GET"])
@jwt_required
def list_addresses(auth):
    addresses = Address.query.filter_by(user_id=auth.user_id).order_by(
        Address.is_default.desc(), Address.id
    ).all()
    return jsonify([a.to_dict() for a in addresses]), 200


@users_bp.route("/users/me/addresses", methods=["POST"])
@jwt_required
def add_address(auth):
    """
    Request body:
    {
        "street":    "12 MG Road",
        "city":      "Bengaluru",
        "state":     "KA",
        "zip":       "560001",
        "isDefault": true
    }
    The first address a user adds always becomes the default.
    """
    data = request.get_json() or {}

    fields = {key: (str(data.get(key) or "")).strip() for key in ("street", "city", "state", "zip")}
    missing = [key for key, value in fields.items() if not value]
    if missing:
        return jsonify({"error": f"Missing required field(s): {', '.join(missing)}"}), 400

    wants_default = bool(data.get("isDefault"))
    existing_count = Address.query.filter_by(user_id=auth.user_id).count()

    if wants_default:
        Address.query.filter_by(user_id=auth.user_id).update({"is_default": False})

    address = Address(
        user_id=auth.user_id,
        is_default=wants_default or existing_count == 0,
        **fields,
    )
    db.session.add(address)
    db.session.commit()

    return jsonify({
        "message": "Address added successfully",
        "address": address.to_dict(),
    }), 201

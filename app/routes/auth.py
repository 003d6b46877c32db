import jwt
import logging
from flask import Blueprint, request, jsonify
from app import db
from app.models.user import User, UserRole
from app.utils.jwt_helper import generate_tokens, decode_token, jwt_required

auth_bp = Blueprint("auth", __name__)

logger = logging.getLogger(__name__)


def check_if_empty(name: str, email: str, password: str):
    if not name or not email or not password:
        return (jsonify({"error": "name, email, and password are required"}), 400)
    if len(name) < 2:
        return (jsonify({"error": "Name must be at least 2 characters"}), 400)
    if len(password) < 6:
        return (jsonify({"error": "Password must be at least 6 characters"}), 400)
    if "@" not in email:
        return (jsonify({"error": "Invalid email address"}), 400)
    return None


@auth_bp.route("/register", methods=["POST"])
def register():
    """
    Create a customer account. Admin accounts are never created here.

    Request body:
    {
        "name":     "Asha Rao",
        "email":    "asha@example.com",
        "password": "secret123"
    }
    """
    data = request.get_json() or {}

    name     = (data.get("name")  or "").strip()
    email    = (data.get("email") or "").strip().lower()
    password =  data.get("password") or ""

    validation_error = check_if_empty(name, email, password)
    if validation_error:
        return validation_error

    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already registered"}), 409

    user = User(name=name, email=email, role=UserRole.USER)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    logger.info("Registered user %s", user.id)
    tokens = generate_tokens(user.id)
    return jsonify({
        "message": "Account created successfully",
        "user": user.to_dict(),
        **tokens,
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data     = request.get_json() or {}
    email    = (data.get("email") or "").strip().lower()
    password =  data.get("password") or ""

    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401
    if not user.is_active:
        return jsonify({"error": "Account is deactivated"}), 403

    tokens = generate_tokens(user.id)
    return jsonify({
        "message": "Login successful",
        "user": user.to_dict(),
        **tokens,
    }), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """Issue a new access token using a valid refresh token."""
    data = request.get_json() or {}
    refresh_token = data.get("refresh_token")

    if not refresh_token:
        return jsonify({"error": "Refresh token is required"}), 400

    try:
        payload = decode_token(refresh_token, token_type="refresh")
    except jwt.ExpiredSignatureError:
        return jsonify({"error": "Refresh token has expired, please log in again"}), 401
    except jwt.InvalidTokenError as e:
        return jsonify({"error": f"Invalid refresh token: {str(e)}"}), 401

    user = db.session.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        return jsonify({"error": "User not found or inactive"}), 401

    tokens = generate_tokens(user.id)
    return jsonify({"message": "Token refreshed successfully", **tokens}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required
def me(auth):
    user = db.session.get(User, auth.user_id)
    return jsonify({"user": user.to_dict()}), 200

import jwt
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
from flask import request, jsonify, current_app
from app import db
from app.models.user import User, UserRole


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, handed to views as the ``auth`` keyword argument."""
    user_id: int
    email: str
    role: str
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "AuthContext":
        return cls(user_id=user.id, email=user.email, role=user.role, name=user.name)


def generate_tokens(user_id: int) -> dict:
    """Generate access and refresh tokens for a user."""
    now = datetime.now(timezone.utc)

    access_payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        "type": "access",
    }

    refresh_payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + current_app.config["JWT_REFRESH_TOKEN_EXPIRES"],
        "type": "refresh",
    }

    access_token = jwt.encode(
        access_payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm="HS256",
    )
    refresh_token = jwt.encode(
        refresh_payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm="HS256",
    )

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "Bearer",
        "expires_in": int(current_app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds()),
    }


def decode_token(token: str, token_type: str = "access") -> dict:
    """Decode and validate a JWT token."""
    payload = jwt.decode(
        token,
        current_app.config["JWT_SECRET_KEY"],
        algorithms=["HS256"],
    )
    if payload.get("type") != token_type:
        raise jwt.InvalidTokenError("Invalid token type")
    return payload


def _authenticate():
    """
    Resolve the bearer token on the current request.
    Returns (AuthContext, None) on success, (None, error_response) otherwise,
    and (None, None) when no Authorization header was sent at all.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return None, None
    if not auth_header.startswith("Bearer "):
        return None, (jsonify({"error": "Missing or invalid Authorization header"}), 401)

    token = auth_header.split(" ", 1)[1]
    try:
        payload = decode_token(token, token_type="access")
    except jwt.ExpiredSignatureError:
        return None, (jsonify({"error": "Access token has expired"}), 401)
    except jwt.InvalidTokenError as e:
        return None, (jsonify({"error": f"Invalid token: {str(e)}"}), 401)

    user = db.session.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        return None, (jsonify({"error": "User not found or inactive"}), 401)

    return AuthContext.from_user(user), None


def jwt_required(f):
    """Decorator to protect routes with JWT access token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth, error = _authenticate()
        if error:
            return error
        if auth is None:
            return jsonify({"error": "Missing or invalid Authorization header"}), 401
        return f(*args, auth=auth, **kwargs)

    return decorated


def jwt_optional(f):
    """Like jwt_required, but guests get through with auth=None."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth, error = _authenticate()
        if error:
            return error
        return f(*args, auth=auth, **kwargs)

    return decorated


def admin_required(f):
    """Decorator: requires valid JWT + admin role."""
    @wraps(f)
    @jwt_required
    def decorated(*args, auth, **kwargs):
        if not auth.is_admin:
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, auth=auth, **kwargs)
    return decorated

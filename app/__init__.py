import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from config import config

db = SQLAlchemy()
bcrypt = Bcrypt()

logger = logging.getLogger(__name__)


def create_app(config_name="default"):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    from app.utils.logging_helper import setup_json_logging, init_request_id
    from app.utils.cors_helper import configure_cors

    if not app.testing:
        setup_json_logging(app.config["LOG_LEVEL"])
    init_request_id(app)
    configure_cors(app, app.config["ALLOWED_ORIGINS"])

    db.init_app(app)
    bcrypt.init_app(app)

    from app.models import user, gear, booking  # noqa: F401
    from app.routes.auth import auth_bp
    from app.routes.users import users_bp
    from app.routes.gears import gears_bp
    from app.routes.bookings import booking_bp
    from app.routes.admin import admin_bp
    from app.routes.payment import payment_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api")
    app.register_blueprint(gears_bp, url_prefix="/api/gears")
    app.register_blueprint(booking_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(payment_bp, url_prefix="/api/payment")

    _register_error_handlers(app)
    _register_commands(app)

    with app.app_context():
        db.create_all()

    return app


def _register_error_handlers(app):
    from werkzeug.exceptions import HTTPException
    from app.errors import BookingError

    @app.errorhandler(BookingError)
    def handle_booking_error(e):
        logger.info("Booking request refused: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500


def _register_commands(app):
    @app.cli.command("seed-gears")
    def seed_gears_command():
        """Populate the gear catalog with the starter items when it is empty."""
        from app.models.gear import seed_catalog

        created = seed_catalog()
        print(f"Seeded {created} gear item(s).")

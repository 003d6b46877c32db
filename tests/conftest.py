from datetime import date

import pytest

from app import create_app, db as _db
from app.models.booking import Booking, BookingItem, BookingStatus
from app.models.gear import Gear, seed_catalog
from app.models.user import User, UserRole
from app.utils.jwt_helper import AuthContext, generate_tokens


@pytest.fixture()
def app():
    """
    Fresh app on an in-memory database, catalog seeded, app context pushed.
    """
    app = create_app("testing")
    with app.app_context():
        seed_catalog()
        _db.session.add(Gear(id="cam1", name="Cinema Camera", category="Camera", price_per_day=80, images=[]))
        _db.session.commit()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def make_user(app):
    def _make(email="renter@example.com", role=UserRole.USER, password="secret123", name="Test Renter"):
        user = User(name=name, email=email, role=role)
        user.set_password(password)
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def admin(make_user):
    return make_user(email="admin@example.com", role=UserRole.ADMIN, name="Shop Admin")


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {generate_tokens(user.id)['access_token']}"}


@pytest.fixture()
def headers_for(app):
    return bearer


@pytest.fixture()
def user_headers(user):
    return bearer(user)


@pytest.fixture()
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture()
def user_auth(user):
    return AuthContext.from_user(user)


@pytest.fixture()
def admin_auth(admin):
    return AuthContext.from_user(admin)


@pytest.fixture()
def make_booking(app):
    """
    Insert a booking row directly, bypassing the availability check.
    """
    def _make(gear_ids, start, end, status=BookingStatus.CONFIRMED, user=None):
        booking = Booking(user_id=user.id if user else None, status=status)
        booking.items = [
            BookingItem(
                gear_id=gear_id,
                position=position,
                start_date=date.fromisoformat(start),
                end_date=date.fromisoformat(end),
            )
            for position, gear_id in enumerate(gear_ids)
        ]
        _db.session.add(booking)
        _db.session.commit()
        return booking

    return _make

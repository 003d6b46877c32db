"""
Gear catalog: the rentable items and their daily price.
"""

import uuid
from app import db


STARTER_GEARS = [
    {"id": "1", "name": "GoPro Hero 11 Black", "category": "Camera", "price_per_day": 45, "thumbnail": "/placeholder-camera.jpg"},
    {"id": "2", "name": "Insta360 X3", "category": "Camera", "price_per_day": 50, "thumbnail": "/placeholder-camera2.jpg"},
    {"id": "3", "name": "Rode Wireless GO II", "category": "Audio", "price_per_day": 25, "thumbnail": "/placeholder-audio.jpg"},
    {"id": "4", "name": "DJI Mic", "category": "Audio", "price_per_day": 30, "thumbnail": "/placeholder-audio2.jpg"},
    {"id": "5", "name": "Helmet Chin Mount", "category": "Mounts", "price_per_day": 10, "thumbnail": "/placeholder-mount.jpg"},
]


def generate_gear_id() -> str:
    return uuid.uuid4().hex[:12]


class Gear(db.Model):
    __tablename__ = "gears"

    id = db.Column(db.String(64), primary_key=True, default=generate_gear_id)
    name = db.Column(db.String(120), nullable=False)
    category = db.Column(db.String(60), nullable=False)
    price_per_day = db.Column(db.Float, nullable=False)
    thumbnail = db.Column(db.String(500), nullable=True, default="")
    images = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "pricePerDay": self.price_per_day,
            "thumbnail": self.thumbnail or "",
            "images": self.images or [],
        }

    def __repr__(self):
        return f"<Gear {self.id}: {self.name} ({self.price_per_day}/day)>"


def seed_catalog() -> int:
    """Insert the starter gear list if the catalog is empty. Returns how many were added."""
    if Gear.query.count() > 0:
        return 0
    db.session.add_all([Gear(images=[], **item) for item in STARTER_GEARS])
    db.session.commit()
    return len(STARTER_GEARS)

#!/usr/bin/env python3
"""Seed script to create the admin account and a few sample destinations."""

from motour.core.config import settings
from motour.core.database import SessionLocal, engine, Base
from motour.models import AdminUser, User, Destination
from motour.auth.password import password_manager
from motour.schemas.destination import DestinationCreate
from motour.services.destinations import create_destination
from motour.services.ratings import upsert_rating

SAMPLE_DESTINATIONS = [
    {
        "name": "Mount Pulag",
        "photos": {"main": "https://res.cloudinary.com/demo/image/upload/pulag.jpg", "others": []},
        "geo": {"lat": 16.5966, "lng": 120.8907},
        "category": "Nature",
        "description": "Sea of clouds at sunrise from the third highest peak in the Philippines",
        "address": "Kabayan, Benguet",
        "tags": ["hiking", "sunrise", "camping"],
    },
    {
        "name": "Intramuros",
        "photos": {"main": "https://res.cloudinary.com/demo/image/upload/intramuros.jpg", "others": []},
        "geo": {"lat": 14.5896, "lng": 120.9747},
        "category": "Historical",
        "description": "The walled city of Manila",
        "address": "Intramuros, Manila",
        "tags": ["heritage", "walking", "museums"],
    },
    {
        "name": "Cloud 9",
        "photos": {"main": "https://res.cloudinary.com/demo/image/upload/cloud9.jpg", "others": []},
        "geo": {"lat": 9.8127, "lng": 126.1614},
        "category": "Beach",
        "description": "Surfing boardwalk on Siargao island",
        "address": "General Luna, Siargao",
        "tags": ["surfing", "island"],
    },
]


def create_sample_data():
    """Create the seed admin, a demo rider and sample destinations with ratings."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        admin = db.query(AdminUser).filter(AdminUser.username == settings.admin_seed_username).first()
        if not admin:
            admin = AdminUser(
                username=settings.admin_seed_username,
                password_hash=password_manager.hash_password(settings.admin_seed_password),
                role=settings.admin_seed_role
            )
            db.add(admin)
            db.commit()
            print(f"Admin user created: {admin.username} ({admin.role})")
        else:
            print(f"Admin user already exists: {admin.username}")

        rider = db.query(User).filter(User.email == "rider@example.com").first()
        if not rider:
            rider = User(
                name="Demo Rider",
                email="rider@example.com",
                hashed_password=password_manager.hash_password("rider123"),
                location="Philippines",
                is_verified=True
            )
            db.add(rider)
            db.commit()
            db.refresh(rider)

        created = 0
        for sample, stars in zip(SAMPLE_DESTINATIONS, (5, 4, 5)):
            if db.query(Destination).filter(Destination.name == sample["name"]).first():
                continue
            destination = create_destination(db, DestinationCreate(**sample))
            upsert_rating(db, destination.id, rider.id, stars, comment="Worth the ride")
            created += 1

        print("Sample data created successfully!")
        print(f"Demo user: {rider.email}")
        print(f"Created {created} destinations")

    except Exception as e:
        print(f"Error creating sample data: {e}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    create_sample_data()

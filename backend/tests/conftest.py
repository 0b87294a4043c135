import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from motour.main import app
from motour.core.database import Base, SessionLocal, engine
from motour.models import AdminUser, Destination, User
from motour.auth.jwt_manager import jwt_manager, USER_SCOPE, ADMIN_SCOPE
from motour.auth.password import password_manager
from motour.auth.rate_limiter import login_rate_limiter
from motour.services.media import MediaUploadError, UploadResult, get_media_client


class FakeMediaClient:
    """Stands in for the media host; records uploads instead of sending them."""

    def __init__(self):
        self.uploads = []
        self.fail = False
        self.configured = True
        self.cloud_name = "test-cloud"

    async def upload(self, data, filename, content_type, folder, resource_type="auto", transformation=None):
        if self.fail:
            raise MediaUploadError("media host is down")
        self.uploads.append({"filename": filename, "folder": folder, "resource_type": resource_type})
        public_id = f"{folder}/{len(self.uploads)}"
        return UploadResult(
            url=f"https://media.test/{public_id}",
            public_id=public_id,
            resource_type=resource_type
        )

    def thumbnail_url(self, public_id):
        return f"https://media.test/{public_id}.jpg"


@pytest.fixture(scope="session")
def password_hash():
    return password_manager.hash_password("secret123")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    login_rate_limiter.reset()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def media_client():
    fake = FakeMediaClient()
    app.dependency_overrides[get_media_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_media_client, None)


@pytest.fixture
def client(db, media_client):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name="Rider", email=None, hashed_password="not-a-real-hash", **fields):
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"rider{counter['n']}@example.com",
            hashed_password=hashed_password,
            **fields
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_admin(db):
    def _make_admin(username="admin", role="admin", password_hash="not-a-real-hash"):
        admin = AdminUser(username=username, password_hash=password_hash, role=role)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return _make_admin


@pytest.fixture
def make_destination(db):
    def _make_destination(name="Mount Pulag", category="Nature", **fields):
        destination = Destination(
            name=name,
            photos={"main": "https://media.test/main.jpg", "others": []},
            lat=16.59,
            lng=120.89,
            category=category,
            tags=fields.pop("tags", ["hiking"]),
            **fields
        )
        db.add(destination)
        db.commit()
        db.refresh(destination)
        return destination

    return _make_destination


def user_headers(user):
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user.id, USER_SCOPE)}"}


def admin_headers(admin):
    token = jwt_manager.create_access_token(admin.id, ADMIN_SCOPE, role=admin.role)
    return {"Authorization": f"Bearer {token}"}


def destination_payload(**overrides):
    payload = {
        "name": "Intramuros",
        "photos": {"main": "https://media.test/intramuros.jpg", "others": []},
        "geo": {"lat": 14.58, "lng": 120.97},
        "category": "Historical",
        "description": "The walled city",
        "address": "Manila",
        "tags": ["heritage"],
    }
    payload.update(overrides)
    return payload

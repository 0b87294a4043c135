from conftest import user_headers


def test_register_then_login(client, db):
    registered = client.post(
        "/api/auth/register",
        json={"name": "Juan", "email": "Juan@Example.com", "password": "secret123"}
    )

    assert registered.status_code == 201
    assert registered.json()["user"]["email"] == "juan@example.com"

    logged_in = client.post("/api/auth/login", json={"email": "juan@example.com", "password": "secret123"})
    assert logged_in.status_code == 200

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {logged_in.json()['token']}"})
    assert me.json()["name"] == "Juan"


def test_register_duplicate_email_conflicts(client, make_user):
    make_user(email="taken@example.com")

    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "taken@example.com", "password": "secret123"}
    )

    assert response.status_code == 409


def test_wrong_password_is_rejected(client, make_user, password_hash):
    make_user(email="rider@example.com", hashed_password=password_hash)

    response = client.post("/api/auth/login", json={"email": "rider@example.com", "password": "wrong-one"})

    assert response.status_code == 401


def test_repeated_failed_logins_lock_the_account(client):
    credentials = {"email": "nobody@example.com", "password": "guess"}

    statuses = [client.post("/api/auth/login", json=credentials).status_code for _ in range(6)]

    assert statuses == [401] * 5 + [429]


def test_blocked_user_is_forbidden(client, make_user):
    user = make_user(status="blocked")

    assert client.get("/api/auth/me", headers=user_headers(user)).status_code == 403


def test_garbage_token_is_rejected(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_profile_defaults_and_updates(client, make_user):
    user = make_user(name="Maria", email="maria@example.com")
    headers = user_headers(user)

    profile = client.get("/api/profile", headers=headers).json()
    assert profile["location"] == "Philippines"
    assert profile["totalDistance"] == "0 km"
    assert profile["memberSince"]

    assert client.put("/api/profile/phone", json={"phone": "+63 917 123 4567"}, headers=headers).status_code == 200
    assert client.put("/api/profile/phone", json={"phone": "call me"}, headers=headers).status_code == 400

    stats = client.put("/api/profile/stats", json={"tripsCompleted": 3}, headers=headers).json()["stats"]
    assert stats["tripsCompleted"] == 3

    profile = client.get("/api/profile", headers=headers).json()
    assert profile["phone"] == "+63 917 123 4567"
    assert profile["tripsCompleted"] == 3


def test_profile_email_must_be_unique(client, make_user):
    make_user(email="first@example.com")
    headers = user_headers(make_user(email="second@example.com"))

    assert client.put("/api/profile/email", json={"email": "first@example.com"}, headers=headers).status_code == 409
    response = client.put("/api/profile/email", json={"email": "Fresh@example.com"}, headers=headers)
    assert response.json()["email"] == "fresh@example.com"


def test_profile_image_upload(client, make_user, media_client):
    headers = user_headers(make_user())

    response = client.post(
        "/api/profile/upload-image",
        files={"image": ("me.png", b"\x89PNG", "image/png")},
        headers=headers
    )

    assert response.status_code == 200
    assert client.get("/api/profile", headers=headers).json()["profileImage"] == response.json()["profileImage"]

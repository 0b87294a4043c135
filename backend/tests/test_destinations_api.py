from sqlalchemy.exc import SQLAlchemyError

from motour.models import Destination, Rating, SavedDestination
from motour.services import ratings as rating_service
from conftest import admin_headers, destination_payload, user_headers


def test_list_destinations_filters_by_category(client, make_destination):
    make_destination(name="Pulag", category="Nature")
    make_destination(name="Intramuros", category="Historical")

    response = client.get("/api/destinations", params={"category": "Historical"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Intramuros"]


def test_create_destination_ignores_submitted_average_rating(client, make_user):
    user = make_user()

    response = client.post(
        "/api/destinations",
        json=destination_payload(averageRating=4.9),
        headers=user_headers(user)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["averageRating"] == 0
    assert body["geo"] == {"lat": 14.58, "lng": 120.97}
    assert body["photos"]["main"] == "https://media.test/intramuros.jpg"


def test_create_destination_requires_authentication(client):
    response = client.post("/api/destinations", json=destination_payload())

    assert response.status_code == 401
    assert "request_id" in response.json()


def test_create_destination_lists_every_invalid_field(client, make_user):
    payload = destination_payload(category="Volcano", geo={"lat": 120, "lng": 0})
    del payload["name"]

    response = client.post("/api/destinations", json=payload, headers=user_headers(make_user()))

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "category", "geo.lat"} <= fields


def test_rating_upsert_returns_201_then_200(client, db, make_user, make_destination):
    destination = make_destination()
    user = make_user()
    url = f"/api/destinations/{destination.id}/ratings"

    created = client.post(url, json={"rating": 3, "comment": "ok"}, headers=user_headers(user))
    updated = client.post(url, json={"rating": 5, "comment": "great"}, headers=user_headers(user))

    assert created.status_code == 201
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["user"]["name"] == user.name
    assert db.query(Rating).count() == 1

    detail = client.get(f"/api/destinations/{destination.id}").json()
    assert detail["destination"]["averageRating"] == 5.0
    assert [rating["comment"] for rating in detail["ratings"]] == ["great"]


def test_average_rating_across_users(client, make_user, make_destination):
    destination = make_destination()
    url = f"/api/destinations/{destination.id}/ratings"

    for value in (5, 5, 4):
        assert client.post(url, json={"rating": value}, headers=user_headers(make_user())).status_code == 201

    detail = client.get(f"/api/destinations/{destination.id}").json()
    assert detail["destination"]["averageRating"] == 4.7
    assert len(detail["ratings"]) == 3


def test_rating_values_must_be_whole_numbers_in_range(client, db, make_user, make_destination):
    destination = make_destination()
    headers = user_headers(make_user())
    url = f"/api/destinations/{destination.id}/ratings"

    for value in (0, 6, 3.5, "3", True):
        response = client.post(url, json={"rating": value}, headers=headers)
        assert response.status_code == 400, value
        assert response.json()["errors"][0]["field"] == "rating"

    assert db.query(Rating).count() == 0


def test_rating_media_is_stored_with_camel_case_keys(client, db, make_user, make_destination):
    destination = make_destination()
    media = [{"url": "https://media.test/v.mp4", "publicId": "v", "type": "video", "thumbnail": "https://media.test/v.jpg"}]

    response = client.post(
        f"/api/destinations/{destination.id}/ratings",
        json={"rating": 4, "media": media},
        headers=user_headers(make_user())
    )

    assert response.status_code == 201
    assert response.json()["media"] == media
    assert db.query(Rating).one().media == media


def test_rating_unknown_destination_is_404(client, make_user):
    response = client.post("/api/destinations/999/ratings", json={"rating": 4}, headers=user_headers(make_user()))

    assert response.status_code == 404
    assert response.json()["error"] == "Destination not found"


def test_rating_survives_failed_average_recompute(client, db, make_user, make_destination, monkeypatch):
    destination = make_destination()

    def broken(db, destination_id):
        raise SQLAlchemyError("database went away")

    monkeypatch.setattr(rating_service, "recompute_average_rating", broken)
    response = client.post(
        f"/api/destinations/{destination.id}/ratings",
        json={"rating": 5},
        headers=user_headers(make_user())
    )

    assert response.status_code == 201
    assert db.query(Rating).count() == 1


def test_delete_own_rating_resets_average(client, db, make_user, make_destination):
    destination = make_destination()
    user = make_user()
    url = f"/api/destinations/{destination.id}/ratings"
    client.post(url, json={"rating": 4}, headers=user_headers(user))

    response = client.delete(url, headers=user_headers(user))

    assert response.status_code == 200
    assert client.delete(url, headers=user_headers(user)).status_code == 404
    assert client.get(f"/api/destinations/{destination.id}").json()["destination"]["averageRating"] == 0


def test_admin_delete_destination_cascades_ratings_and_saves(client, db, make_user, make_admin, make_destination):
    destination = make_destination()
    other = make_destination(name="Kept")
    user = make_user()
    client.post(f"/api/destinations/{destination.id}/ratings", json={"rating": 4}, headers=user_headers(user))
    client.post(f"/api/destinations/{other.id}/ratings", json={"rating": 2}, headers=user_headers(user))
    client.post(f"/api/saved-destinations/{destination.id}", headers=user_headers(user))

    response = client.delete(f"/admin/destinations/{destination.id}", headers=admin_headers(make_admin()))

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Destination).filter(Destination.id == destination.id).count() == 0
    assert db.query(Rating).filter(Rating.destination_id == destination.id).count() == 0
    assert db.query(SavedDestination).count() == 0
    assert db.query(Rating).filter(Rating.destination_id == other.id).count() == 1
    assert client.get(f"/api/destinations/{destination.id}").status_code == 404


def test_integral_float_rating_is_stored_as_integer(client, db, make_user, make_destination):
    destination = make_destination()

    response = client.post(
        f"/api/destinations/{destination.id}/ratings",
        json={"rating": 3.0},
        headers=user_headers(make_user())
    )

    assert response.status_code == 201
    assert response.json()["rating"] == 3
    assert db.query(Rating).one().rating == 3

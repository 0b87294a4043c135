import pytest
from sqlalchemy.exc import SQLAlchemyError

from motour.models import Destination, Rating
from motour.services import ratings as rating_service
from motour.services.ratings import (
    compute_average_rating,
    reconcile_average_ratings,
    round_rating,
    upsert_rating,
    validate_rating_value,
)


def _average(db, destination_id):
    db.expire_all()
    return db.query(Destination).filter(Destination.id == destination_id).one().average_rating


@pytest.mark.parametrize("value,expected", [
    (4.666, 4.7),
    (4.65, 4.7),
    (4.64, 4.6),
    (3.0, 3.0),
    (1.25, 1.3),
])
def test_round_rating_rounds_half_up_to_one_decimal(value, expected):
    assert round_rating(value) == expected


@pytest.mark.parametrize("value", [0, 6, -1, 3.5, "3", True, None])
def test_validate_rating_value_rejects_out_of_range_and_non_integers(value):
    with pytest.raises(ValueError):
        validate_rating_value(value)


def test_average_of_several_ratings(db, make_user, make_destination):
    destination = make_destination()
    for value in (5, 5, 4):
        upsert_rating(db, destination.id, make_user().id, value)

    assert _average(db, destination.id) == 4.7
    assert compute_average_rating(db, destination.id) == 4.7


def test_upsert_updates_existing_rating_in_place(db, make_user, make_destination):
    destination = make_destination()
    user = make_user()

    first, created = upsert_rating(db, destination.id, user.id, 2, comment="meh")
    assert created is True
    assert _average(db, destination.id) == 2.0

    second, created = upsert_rating(db, destination.id, user.id, 5, comment="changed my mind")
    assert created is False
    assert second.id == first.id
    assert second.comment == "changed my mind"
    assert db.query(Rating).filter(Rating.destination_id == destination.id).count() == 1
    assert _average(db, destination.id) == 5.0


def test_upsert_keeps_media_when_none_is_given(db, make_user, make_destination):
    destination = make_destination()
    user = make_user()
    media = [{"url": "https://media.test/a.jpg", "publicId": "a", "type": "image"}]

    upsert_rating(db, destination.id, user.id, 4, media=media)
    rating, _ = upsert_rating(db, destination.id, user.id, 3)

    assert rating.media == media


def test_upsert_rejects_more_than_three_media_items(db, make_user, make_destination):
    destination = make_destination()
    media = [{"url": f"https://media.test/{i}.jpg", "publicId": str(i), "type": "image"} for i in range(4)]

    with pytest.raises(ValueError):
        upsert_rating(db, destination.id, make_user().id, 4, media=media)

    assert db.query(Rating).count() == 0


def test_deleting_last_rating_resets_average_to_zero(db, make_user, make_destination):
    destination = make_destination()
    rating, _ = upsert_rating(db, destination.id, make_user().id, 4)

    assert rating_service.delete_rating(db, rating.id) == destination.id
    assert _average(db, destination.id) == 0.0


def test_delete_missing_rating_returns_none(db):
    assert rating_service.delete_rating(db, 12345) is None


def test_update_rating_recomputes_average(db, make_user, make_destination):
    destination = make_destination()
    rating, _ = upsert_rating(db, destination.id, make_user().id, 1)
    upsert_rating(db, destination.id, make_user().id, 2)

    rating_service.update_rating(db, rating, value=5, comment="edited")

    assert _average(db, destination.id) == 3.5


def test_failed_recompute_keeps_rating_and_leaves_average_stale(db, make_user, make_destination, monkeypatch):
    destination = make_destination()

    def broken(db, destination_id):
        raise SQLAlchemyError("database went away")

    monkeypatch.setattr(rating_service, "recompute_average_rating", broken)
    rating, created = upsert_rating(db, destination.id, make_user().id, 5)

    assert created is True
    assert db.query(Rating).filter(Rating.id == rating.id).count() == 1
    assert _average(db, destination.id) == 0.0


def test_reconcile_repairs_stale_averages(db, make_user, make_destination):
    rated = make_destination(name="Rated")
    unrated = make_destination(name="Unrated")
    upsert_rating(db, rated.id, make_user().id, 4)
    upsert_rating(db, rated.id, make_user().id, 5)

    db.query(Destination).filter(Destination.id == rated.id).update({Destination.average_rating: 1.0})
    db.query(Destination).filter(Destination.id == unrated.id).update({Destination.average_rating: 3.0})
    db.commit()

    assert reconcile_average_ratings(db) == {"checked": 2, "updated": 2}
    assert _average(db, rated.id) == 4.5
    assert _average(db, unrated.id) == 0.0

    assert reconcile_average_ratings(db) == {"checked": 2, "updated": 0}


def test_concurrent_first_insert_is_retried_as_update(db, make_user, make_destination, monkeypatch):
    destination = make_destination()
    user = make_user()
    upsert_rating(db, destination.id, user.id, 2)

    real_find = rating_service._find_rating
    calls = {"n": 0}

    def stale_first_lookup(db, user_id, destination_id):
        # The first lookup misses as if another request inserted the row meanwhile
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(db, user_id, destination_id)

    monkeypatch.setattr(rating_service, "_find_rating", stale_first_lookup)
    rating, created = upsert_rating(db, destination.id, user.id, 4, comment="second try")

    assert created is False
    assert rating.rating == 4
    assert rating.comment == "second try"
    assert db.query(Rating).filter(Rating.destination_id == destination.id).count() == 1
    assert _average(db, destination.id) == 4.0


def test_integral_float_rating_is_accepted():
    assert validate_rating_value(3.0) == 3
    assert isinstance(validate_rating_value(3.0), int)

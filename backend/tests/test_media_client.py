import asyncio

import pytest

from motour.services.media import MediaHostClient, MediaUploadError, parse_upload_response


def test_successful_response_becomes_upload_result():
    result = parse_upload_response(200, {
        "secure_url": "https://res.cloudinary.com/demo/image/upload/a.jpg",
        "public_id": "motour/destinations/a",
        "resource_type": "image",
    })

    assert result.url == "https://res.cloudinary.com/demo/image/upload/a.jpg"
    assert result.public_id == "motour/destinations/a"
    assert result.resource_type == "image"


@pytest.mark.parametrize("status,payload", [
    (400, {"error": {"message": "Invalid image file"}}),
    (401, {"error": "Invalid Signature"}),
    (500, ["unexpected", "list"]),
    (502, None),
    (200, ["not", "a", "dict"]),
    (200, {"public_id": "missing-url"}),
    (200, {"secure_url": "https://x", "public_id": 42}),
])
def test_unusable_responses_raise_media_upload_error(status, payload):
    with pytest.raises(MediaUploadError):
        parse_upload_response(status, payload)


def test_error_message_is_carried_through():
    with pytest.raises(MediaUploadError, match="Invalid Signature"):
        parse_upload_response(401, {"error": "Invalid Signature"})


def test_unconfigured_client_refuses_to_upload():
    client = MediaHostClient(cloud_name=None, api_key=None, api_secret=None)

    assert client.configured is False
    with pytest.raises(MediaUploadError):
        asyncio.run(client.upload(b"data", "a.jpg", "image/jpeg", folder="motour/test"))


def test_signature_ignores_empty_params_and_is_order_independent():
    client = MediaHostClient(cloud_name="demo", api_key="key", api_secret="secret")

    first = client._sign({"timestamp": 1, "folder": "motour", "transformation": None})
    second = client._sign({"folder": "motour", "timestamp": 1})

    assert first == second
    assert client.thumbnail_url("motour/ratings/v") == "https://res.cloudinary.com/demo/video/upload/so_0/motour/ratings/v.jpg"

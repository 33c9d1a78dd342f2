"""Catalog client — decoding, memoization, and status-code mapping.

The HTTP session is a MagicMock; no network access.
"""

from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from soundbored.catalog_service import CatalogClient, Sound, decode_catalog
from soundbored.config import Config
from soundbored.errors import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ProtocolError,
)

RECORDS = [
    {"id": 1, "filename": "airhorn.wav", "tags": ["meme"]},
    {"id": 2, "filename": "applause.wav"},
]


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


@pytest.fixture
def client(session):
    return CatalogClient(Config("https://sounds.example.com/api", "tok"), session=session)


# ---------------------------------------------------------------------------
# decode_catalog
# ---------------------------------------------------------------------------


def test_bare_and_wrapped_payloads_decode_identically():
    bare = decode_catalog(RECORDS)
    wrapped = decode_catalog({"data": RECORDS, "success": True})

    assert bare == wrapped
    assert bare == [
        Sound(id=1, filename="airhorn.wav", tags=("meme",)),
        Sound(id=2, filename="applause.wav", tags=()),
    ]


def test_null_tags_become_empty():
    assert decode_catalog([{"id": 7, "filename": "x.wav", "tags": None}])[0].tags == ()


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "sounds",
        {"sounds": RECORDS},
        {"data": {"id": 1}},
        [{"filename": "no-id.wav"}],
        [{"id": "1", "filename": "string-id.wav"}],
        [{"id": True, "filename": "bool-id.wav"}],
        [{"id": 1}],
        [{"id": 1, "filename": "x.wav", "tags": "meme"}],
        ["not a record"],
    ],
)
def test_unrecognized_shapes_raise_protocol_error(payload):
    with pytest.raises(ProtocolError):
        decode_catalog(payload)


# ---------------------------------------------------------------------------
# fetch_sounds
# ---------------------------------------------------------------------------


def test_client_sets_bearer_auth(client, session):
    assert session.headers["Authorization"] == "Bearer tok"
    assert client.base_url == "https://sounds.example.com/api"


def test_fetch_sounds_hits_list_endpoint(client, session):
    session.request.return_value = make_response(payload={"data": RECORDS})

    sounds = client.fetch_sounds()

    session.request.assert_called_once_with("GET", "https://sounds.example.com/api/sounds")
    assert [s.filename for s in sounds] == ["airhorn.wav", "applause.wav"]


def test_fetch_sounds_is_memoized(client, session):
    """Two fetches in one run issue exactly one request."""
    session.request.return_value = make_response(payload=RECORDS)

    first = client.fetch_sounds()
    second = client.fetch_sounds()

    assert session.request.call_count == 1
    assert first is second


def test_failed_fetch_is_not_cached(client, session):
    session.request.side_effect = [
        make_response(status=500, reason="Internal Server Error"),
        make_response(payload=RECORDS),
    ]

    with pytest.raises(ApiError):
        client.fetch_sounds()
    assert len(client.fetch_sounds()) == 2


def test_fetch_401_raises_auth_error(client, session):
    session.request.return_value = make_response(status=401, reason="Unauthorized")
    with pytest.raises(AuthError, match="API token"):
        client.fetch_sounds()


def test_fetch_other_status_raises_api_error(client, session):
    session.request.return_value = make_response(status=503, reason="Service Unavailable")

    with pytest.raises(ApiError) as exc_info:
        client.fetch_sounds()

    assert exc_info.value.status == 503
    assert "503" in str(exc_info.value)
    assert not isinstance(exc_info.value, AuthError)


def test_fetch_transport_failure_raises_network_error(client, session):
    session.request.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(NetworkError, match="connection refused"):
        client.fetch_sounds()


def test_fetch_invalid_json_raises_protocol_error(client, session):
    response = make_response()
    response.json.side_effect = ValueError("Expecting value")
    session.request.return_value = response

    with pytest.raises(ProtocolError):
        client.fetch_sounds()


# ---------------------------------------------------------------------------
# play_sound
# ---------------------------------------------------------------------------


def test_play_sound_posts_to_play_endpoint(client, session):
    session.request.return_value = make_response(status=204, reason="No Content")

    client.play_sound(42)

    session.request.assert_called_once_with(
        "POST", "https://sounds.example.com/api/sounds/42/play"
    )


def test_play_404_raises_not_found_with_id(client, session):
    session.request.return_value = make_response(status=404, reason="Not Found")

    with pytest.raises(NotFoundError) as exc_info:
        client.play_sound(999)

    assert "999" in str(exc_info.value)
    assert exc_info.value.sound_id == 999
    assert exc_info.value.status == 404


def test_play_401_raises_auth_error(client, session):
    session.request.return_value = make_response(status=401, reason="Unauthorized")
    with pytest.raises(AuthError):
        client.play_sound(1)


def test_play_other_status_raises_api_error(client, session):
    session.request.return_value = make_response(status=500, reason="Internal Server Error")
    with pytest.raises(ApiError, match="Failed to play sound"):
        client.play_sound(1)


def test_play_transport_failure_raises_network_error(client, session):
    session.request.side_effect = requests.Timeout("read timed out")
    with pytest.raises(NetworkError):
        client.play_sound(1)

from unittest.mock import MagicMock

import pytest

from soundbored.catalog_service import Sound


def make_response(status=200, payload=None, reason="OK"):
    """Fake requests.Response with just the attributes the client reads."""
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    response.json.return_value = payload
    return response


@pytest.fixture
def sounds():
    return [
        Sound(id=1, filename="airhorn.wav", tags=("meme",)),
        Sound(id=2, filename="applause.wav"),
        Sound(id=3, filename="sad_trombone.mp3", tags=("fail", "meme")),
        Sound(id=4, filename="drumroll.wav", tags=("suspense",)),
    ]

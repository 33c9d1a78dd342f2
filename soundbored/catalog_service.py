from dataclasses import dataclass
from typing import Any

import requests

from soundbored.config import Config
from soundbored.errors import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ProtocolError,
)
from soundbored.logger import get_logger


@dataclass(frozen=True)
class Sound:
    id: int
    filename: str
    tags: tuple[str, ...] = ()

    @property
    def searchable_text(self) -> str:
        return " ".join((self.filename, *self.tags))

    @classmethod
    def from_dict(cls, data: Any) -> "Sound":
        if not isinstance(data, dict):
            raise ProtocolError(f"Invalid sound record: {data!r}")

        sound_id = data.get("id")
        filename = data.get("filename")
        # bool is an int subclass, and never a valid id
        if not isinstance(sound_id, int) or isinstance(sound_id, bool):
            raise ProtocolError(f"Sound record has no integer id: {data!r}")
        if not isinstance(filename, str):
            raise ProtocolError(f"Sound {sound_id} has no filename")

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ProtocolError(f"Sound {sound_id} has invalid tags: {tags!r}")

        return cls(id=sound_id, filename=filename, tags=tuple(tags))


def decode_catalog(payload: Any) -> list[Sound]:
    """Accept either a bare list of sounds or ``{"data": [...]}``."""
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        records = payload["data"]
    else:
        raise ProtocolError("Invalid API response structure")
    return [Sound.from_dict(record) for record in records]


class CatalogClient:
    """Talks to the Soundbored API. One instance per run; it owns the sound cache."""

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self.logger = get_logger("catalog_service")
        self._base_url = config.api_base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {config.token}",
                "Content-Type": "application/json",
            }
        )
        self._sounds: list[Sound] | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(self, method: str, path: str) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            return self._session.request(method, url)
        except requests.RequestException as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise NetworkError(f"Network error: {e}") from e

    def fetch_sounds(self) -> list[Sound]:
        if self._sounds is not None:
            return self._sounds

        response = self._request("GET", "/sounds")
        if response.status_code == 401:
            raise AuthError()
        if not response.ok:
            raise ApiError(
                f"API error: {response.status_code} {response.reason}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(f"Response is not valid JSON: {e}") from e

        self._sounds = decode_catalog(payload)
        self.logger.info(f"Fetched {len(self._sounds)} sounds")
        return self._sounds

    def play_sound(self, sound_id: int) -> None:
        response = self._request("POST", f"/sounds/{sound_id}/play")
        if response.status_code == 401:
            raise AuthError()
        if response.status_code == 404:
            raise NotFoundError(sound_id)
        if not response.ok:
            raise ApiError(
                f"Failed to play sound: {response.status_code} {response.reason}",
                status=response.status_code,
            )
        self.logger.info(f"Played sound {sound_id}")

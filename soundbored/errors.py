"""Exceptions raised by the soundbored client."""

from __future__ import annotations


class SoundboredError(Exception):
    """Base class for every error the client reports to the user."""


class ConfigError(SoundboredError):
    pass


class NetworkError(SoundboredError):
    """The request never got a response (DNS, refused connection, reset...)."""


class ProtocolError(SoundboredError):
    """The server answered with a body we don't understand."""


class ApiError(SoundboredError):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(ApiError):
    def __init__(
        self, message: str = "Authentication failed. Please check your API token."
    ) -> None:
        super().__init__(message, status=401)


class NotFoundError(ApiError):
    def __init__(self, sound_id: int) -> None:
        super().__init__(f"Sound with ID {sound_id} not found.", status=404)
        self.sound_id = sound_id

"""Terminal client for searching and playing sounds on a Soundbored server."""

__version__ = "0.1.0"

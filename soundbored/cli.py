"""Plain-text output for the non-interactive commands."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

from soundbored.catalog_service import Sound
from soundbored.config import Config, api_base_to_base_url, redact_token


def format_sound(sound: Sound) -> str:
    tags = f" [tags: {', '.join(sound.tags)}]" if sound.tags else ""
    return f"- {sound.filename}{tags}"


def print_status(message: str) -> None:
    print(message)


def print_ok(message: str) -> None:
    print(f"✓ {message}")


def print_error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def print_search_results(sounds: Sequence[Sound], query: str) -> None:
    if query and not sounds:
        print(f'No sounds found matching "{query}"')
        return

    if query:
        print(f'Found {len(sounds)} sounds matching "{query}":')
    else:
        print(f"Found {len(sounds)} sounds:")
    for sound in sounds:
        print(format_sound(sound))


def print_config(config: Config, path: Path) -> None:
    print(f"Config path: {path}")
    print(f"Base URL: {api_base_to_base_url(config.api_base_url)}")
    print(f"API token: {redact_token(config.token)}")

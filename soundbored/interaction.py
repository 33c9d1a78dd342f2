"""Interaction state machine for the search-and-play loop.

Input events go through ``transition``, a pure function returning the next
state plus an optional effect. ``InteractionLoop`` owns the current state,
performs the effects against the catalog client, and turns failures into
messages so a bad request never ends the session.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from soundbored.catalog_service import Sound
from soundbored.errors import SoundboredError
from soundbored.logger import get_logger
from soundbored.search import rank

if TYPE_CHECKING:
    from soundbored.catalog_service import CatalogClient

EXIT_CONFIRM_WINDOW = 2.0
WINDOW_SIZE = 10

Ranker = Callable[[str, Sequence[Sound]], list[Sound]]


class Phase(Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    EXITED = "exited"


class Key(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    FAST_UP = "fast_up"
    FAST_DOWN = "fast_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    FIRST = "first"
    LAST = "last"
    CONFIRM = "confirm"
    SOFT_CANCEL = "soft_cancel"
    HARD_CANCEL = "hard_cancel"
    RESIZE = "resize"
    TICK = "tick"


_STEPS = {
    Key.UP: -1,
    Key.DOWN: 1,
    Key.FAST_UP: -5,
    Key.FAST_DOWN: 5,
    Key.PAGE_UP: -10,
    Key.PAGE_DOWN: 10,
}

# Keys that leave a pending exit confirmation alone.
_PASSIVE_KEYS = {Key.SOFT_CANCEL, Key.RESIZE, Key.TICK}


@dataclass(frozen=True)
class InputEvent:
    key: Key
    char: str = ""
    at: float = 0.0


@dataclass(frozen=True)
class PlayRequest:
    sound: Sound


@dataclass(frozen=True)
class InteractionState:
    phase: Phase = Phase.LOADING
    catalog: tuple[Sound, ...] = ()
    query: str = ""
    matches: tuple[Sound, ...] = ()
    selected_index: int = 0
    last_played: Sound | None = None
    playing: bool = False
    exit_armed_until: float | None = None
    error: str | None = None
    notice: str | None = None

    @property
    def selected(self) -> Sound | None:
        if not self.matches:
            return None
        return self.matches[self.selected_index]

    @property
    def exit_armed(self) -> bool:
        return self.exit_armed_until is not None


def clamp_index(index: int, count: int) -> int:
    return max(0, min(index, max(0, count - 1)))


def visible_window(count: int, selected: int, size: int = WINDOW_SIZE) -> tuple[int, int]:
    """Slice bounds of the list rows to draw, keeping the selection centered."""
    start = max(0, min(selected - size // 2, count - size))
    end = min(count, start + size)
    return start, end


def ready_state(
    catalog: Sequence[Sound], query: str = "", ranker: Ranker = rank
) -> InteractionState:
    catalog = tuple(catalog)
    return InteractionState(
        phase=Phase.READY,
        catalog=catalog,
        query=query,
        matches=tuple(ranker(query, catalog)),
    )


def _with_query(state: InteractionState, query: str, ranker: Ranker) -> InteractionState:
    return replace(
        state,
        query=query,
        matches=tuple(ranker(query, state.catalog)),
        selected_index=0,
    )


def _soft_cancel(
    state: InteractionState, event: InputEvent, ranker: Ranker
) -> InteractionState:
    if state.query:
        return replace(_with_query(state, "", ranker), exit_armed_until=None, notice=None)
    if state.exit_armed_until is not None and event.at < state.exit_armed_until:
        return replace(state, phase=Phase.EXITED, exit_armed_until=None, notice=None)
    return replace(
        state,
        exit_armed_until=event.at + EXIT_CONFIRM_WINDOW,
        notice="Press Ctrl+C again to exit",
    )


def transition(
    state: InteractionState, event: InputEvent, ranker: Ranker = rank
) -> tuple[InteractionState, PlayRequest | None]:
    if state.phase is Phase.EXITED:
        return state, None

    # Expire a lapsed confirmation before looking at the key, so a late
    # second press counts as a first press.
    if state.exit_armed_until is not None and event.at >= state.exit_armed_until:
        state = replace(state, exit_armed_until=None, notice=None)
    elif state.exit_armed_until is not None and event.key not in _PASSIVE_KEYS:
        state = replace(state, exit_armed_until=None, notice=None)

    if state.phase is not Phase.READY:
        if event.key in (Key.SOFT_CANCEL, Key.HARD_CANCEL, Key.CONFIRM):
            return replace(state, phase=Phase.EXITED), None
        return state, None

    key = event.key
    count = len(state.matches)

    if key is Key.CHAR:
        return _with_query(state, state.query + event.char, ranker), None

    if key is Key.BACKSPACE:
        if not state.query:
            return state, None
        return _with_query(state, state.query[:-1], ranker), None

    if key in _STEPS:
        index = clamp_index(state.selected_index + _STEPS[key], count)
        return replace(state, selected_index=index), None

    if key is Key.FIRST:
        return replace(state, selected_index=0), None

    if key is Key.LAST:
        return replace(state, selected_index=clamp_index(count - 1, count)), None

    if key is Key.CONFIRM:
        sound = state.selected
        if sound is None:
            return state, None
        return (
            replace(state, last_played=sound, playing=True, error=None),
            PlayRequest(sound),
        )

    if key is Key.SOFT_CANCEL:
        return _soft_cancel(state, event, ranker), None

    if key is Key.HARD_CANCEL:
        if state.query:
            return _with_query(state, "", ranker), None
        return replace(state, phase=Phase.EXITED), None

    return state, None


class InteractionLoop:
    """Owns the interaction state and performs the side effects it asks for."""

    def __init__(
        self,
        client: CatalogClient,
        ranker: Ranker = rank,
        clock: Callable[[], float] = time.monotonic,
        on_change: Callable[[InteractionState], None] | None = None,
    ) -> None:
        self.logger = get_logger("interaction")
        self._client = client
        self._ranker = ranker
        self._clock = clock
        self._on_change = on_change
        self.state = InteractionState()
        self.load_error: str | None = None

    @property
    def running(self) -> bool:
        return self.state.phase is not Phase.EXITED

    def _set(self, state: InteractionState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change(state)

    def load(self, initial_query: str = "") -> InteractionState:
        self.load_error = None
        self._set(InteractionState(phase=Phase.LOADING))
        try:
            sounds = self._client.fetch_sounds()
            self._set(ready_state(sounds, initial_query, self._ranker))
        except Exception as e:
            self.logger.error(f"Failed to load sounds: {e}")
            self.load_error = str(e)
            self._set(InteractionState(phase=Phase.FAILED, error=self.load_error))
        return self.state

    def event(self, key: Key, char: str = "") -> InputEvent:
        return InputEvent(key=key, char=char, at=self._clock())

    def handle(self, event: InputEvent) -> InteractionState:
        try:
            state, effect = transition(self.state, event, self._ranker)
        except Exception as e:
            self.logger.exception(f"Error handling {event.key.value}: {e}")
            self._set(replace(self.state, error=str(e)))
            return self.state

        self._set(state)
        if effect is not None:
            self._play(effect.sound)
        return self.state

    def _play(self, sound: Sound) -> None:
        error = None
        try:
            self._client.play_sound(sound.id)
        except SoundboredError as e:
            self.logger.error(f"Failed to play {sound.id}: {e}")
            error = str(e)
        except Exception as e:
            self.logger.exception(f"Unexpected error playing {sound.id}: {e}")
            error = f"Failed to play sound: {e}"
        finally:
            self._set(replace(self.state, playing=False, error=error))

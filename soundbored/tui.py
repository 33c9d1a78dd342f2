"""Curses front end for the interactive sound search."""

from __future__ import annotations

import curses
import locale

from soundbored.catalog_service import Sound
from soundbored.interaction import (
    WINDOW_SIZE,
    InteractionLoop,
    InteractionState,
    Key,
    Phase,
    visible_window,
)

# Ensure the locale supports UTF-8 box-drawing characters.
locale.setlocale(locale.LC_ALL, "")

POLL_MS = 100


# ── Color palette ────────────────────────────────────────────────────────────

_SLOT_BORDER = 1
_SLOT_TITLE = 2
_SLOT_PROMPT = 3
_SLOT_SELECTED = 4
_SLOT_PLAYING = 5
_SLOT_TAGS = 6
_SLOT_DIM = 7
_SLOT_ERROR = 8
_SLOT_STATUSBAR = 9
_SLOT_NOTICE = 10

_PALETTE_256: dict[int, tuple[int, int]] = {
    _SLOT_BORDER:    (243, -1),
    _SLOT_TITLE:     (110, -1),
    _SLOT_PROMPT:    (179, -1),
    _SLOT_SELECTED:  (117, -1),
    _SLOT_PLAYING:   (108, -1),
    _SLOT_TAGS:      (67, -1),
    _SLOT_DIM:       (243, -1),
    _SLOT_ERROR:     (167, -1),
    _SLOT_STATUSBAR: (249, 236),
    _SLOT_NOTICE:    (179, 236),
}

_PALETTE_16: dict[int, tuple[int, int]] = {
    _SLOT_BORDER:    (curses.COLOR_WHITE,  -1),
    _SLOT_TITLE:     (curses.COLOR_CYAN,   -1),
    _SLOT_PROMPT:    (curses.COLOR_YELLOW, -1),
    _SLOT_SELECTED:  (curses.COLOR_CYAN,   -1),
    _SLOT_PLAYING:   (curses.COLOR_GREEN,  -1),
    _SLOT_TAGS:      (curses.COLOR_BLUE,   -1),
    _SLOT_DIM:       (curses.COLOR_WHITE,  -1),
    _SLOT_ERROR:     (curses.COLOR_RED,    -1),
    _SLOT_STATUSBAR: (curses.COLOR_WHITE,  curses.COLOR_BLACK),
    _SLOT_NOTICE:    (curses.COLOR_YELLOW, curses.COLOR_BLACK),
}

_KEY_HINTS = "↑↓ Nav • ⇧↑↓ ±5 • PgUp/Dn ±10 • Home/End • Enter Play • Ctrl+C Clear • Esc Exit"

_SPECIAL_KEYS: dict[int, Key] = {
    curses.KEY_UP: Key.UP,
    curses.KEY_DOWN: Key.DOWN,
    curses.KEY_SR: Key.FAST_UP,
    curses.KEY_SF: Key.FAST_DOWN,
    curses.KEY_PPAGE: Key.PAGE_UP,
    curses.KEY_NPAGE: Key.PAGE_DOWN,
    curses.KEY_HOME: Key.FIRST,
    curses.KEY_END: Key.LAST,
    curses.KEY_ENTER: Key.CONFIRM,
    curses.KEY_BACKSPACE: Key.BACKSPACE,
    curses.KEY_RESIZE: Key.RESIZE,
}

_CONTROL_CHARS: dict[str, Key] = {
    "\x03": Key.SOFT_CANCEL,
    "\x1b": Key.HARD_CANCEL,
    "\n": Key.CONFIRM,
    "\r": Key.CONFIRM,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
}


def translate_key(ch: int | str) -> tuple[Key, str] | None:
    """Map a ``get_wch`` result to an input key, or None for keys we ignore."""
    if isinstance(ch, int):
        key = _SPECIAL_KEYS.get(ch)
        return (key, "") if key is not None else None
    if ch in _CONTROL_CHARS:
        return _CONTROL_CHARS[ch], ""
    if ch.isprintable():
        return Key.CHAR, ch
    return None


def _init_palette() -> None:
    palette = _PALETTE_256 if curses.COLORS >= 256 else _PALETTE_16
    for slot, (fg, bg) in palette.items():
        curses.init_pair(slot, fg, bg)


def _cp(slot: int) -> int:
    return curses.color_pair(slot)


def _format_tags(sound: Sound) -> str:
    return f" [{', '.join(sound.tags)}]" if sound.tags else ""


class CursesTUI:
    def __init__(self) -> None:
        self._stdscr: curses.window | None = None
        self._state = InteractionState()

    def _init_curses(self) -> curses.window:
        stdscr = curses.initscr()
        curses.noecho()
        # raw, not cbreak: Ctrl+C must reach us as a key instead of SIGINT
        curses.raw()
        curses.set_escdelay(25)
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.keypad(True)
        stdscr.timeout(POLL_MS)

        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            _init_palette()

        self._stdscr = stdscr
        return stdscr

    def _dims(self) -> tuple[int, int]:
        assert self._stdscr is not None
        return self._stdscr.getmaxyx()

    def _put(self, row: int, col: int, text: str, attr: int = 0) -> None:
        scr = self._stdscr
        assert scr is not None
        h, w = self._dims()
        if row < 0 or row >= h or col >= w:
            return
        try:
            scr.addnstr(row, col, text, w - col, attr)
        except curses.error:
            pass

    def _hline(self, row: int, col: int, length: int, attr: int) -> None:
        scr = self._stdscr
        assert scr is not None
        h, w = self._dims()
        if row < 0 or row >= h:
            return
        n = min(length, w - col)
        if n <= 0:
            return
        try:
            scr.hline(row, col, curses.ACS_HLINE | attr, n)
        except curses.error:
            pass

    def _vline(self, col: int, row_start: int, row_end: int, attr: int) -> None:
        scr = self._stdscr
        assert scr is not None
        h, w = self._dims()
        if col < 0 or col >= w:
            return
        for r in range(max(0, row_start), min(row_end, h)):
            try:
                scr.addch(r, col, curses.ACS_VLINE, attr)
            except curses.error:
                pass

    def _addch(self, row: int, col: int, ch: int, attr: int = 0) -> None:
        scr = self._stdscr
        assert scr is not None
        h, w = self._dims()
        if row < 0 or row >= h or col < 0 or col >= w:
            return
        try:
            scr.addch(row, col, ch, attr)
        except curses.error:
            pass

    def _separator(self, row: int, w: int, attr: int) -> None:
        self._addch(row, 0, curses.ACS_LTEE, attr)
        self._hline(row, 1, w - 2, attr)
        self._addch(row, w - 1, curses.ACS_RTEE, attr)

    # ── Layout ────────────────────────────────────────────────────────────────

    def render(self, state: InteractionState) -> None:
        self._state = state
        if self._stdscr is not None:
            self._draw()

    def _draw(self) -> None:
        scr = self._stdscr
        assert scr is not None
        h, w = self._dims()
        scr.erase()
        if h < 8 or w < 30:
            self._put(0, 0, "Terminal too small")
            scr.refresh()
            return

        state = self._state
        ba = _cp(_SLOT_BORDER)

        self._addch(0, 0, curses.ACS_ULCORNER, ba)
        self._addch(0, w - 1, curses.ACS_URCORNER, ba)
        self._addch(h - 1, 0, curses.ACS_LLCORNER, ba)
        self._addch(h - 1, w - 1, curses.ACS_LRCORNER, ba)
        self._hline(0, 1, w - 2, ba)
        self._hline(h - 1, 1, w - 2, ba)
        self._vline(0, 1, h - 1, ba)
        self._vline(w - 1, 1, h - 1, ba)

        self._put(0, 3, " soundbored ", _cp(_SLOT_TITLE) | curses.A_BOLD)
        if state.phase is Phase.READY:
            loaded = f" {len(state.catalog)} sounds loaded "
            self._put(0, w - len(loaded) - 3, loaded, _cp(_SLOT_DIM))

        self._separator(2, w, ba)
        self._separator(h - 3, w, ba)

        if state.phase is Phase.LOADING:
            self._put(1, 2, "Loading sounds...", _cp(_SLOT_PLAYING))
        elif state.phase is Phase.FAILED:
            self._put(1, 2, f"Error: {state.error}", _cp(_SLOT_ERROR) | curses.A_BOLD)
            self._put(3, 2, "Press Esc to exit.", _cp(_SLOT_DIM))
        else:
            self._draw_search(w)
            self._draw_list(h, w)

        self._draw_status(h, w)
        scr.refresh()

    def _draw_search(self, w: int) -> None:
        state = self._state
        self._put(1, 2, "›", _cp(_SLOT_PROMPT) | curses.A_BOLD)
        if state.query:
            self._put(1, 4, state.query)
            self._put(1, 4 + len(state.query), " ", curses.A_REVERSE)
        else:
            self._put(1, 4, " ", curses.A_REVERSE)
            self._put(1, 5, "Search sounds... (Ctrl+C to clear, Esc to exit)", _cp(_SLOT_DIM))

    def _draw_list(self, h: int, w: int) -> None:
        state = self._state
        x0 = 2
        body_top = 3
        body_end = h - 4
        if state.error:
            self._put(body_end, x0, f"Error: {state.error}", _cp(_SLOT_ERROR))
            body_end -= 1

        if not state.matches:
            self._put(body_top, x0, "No sounds found", _cp(_SLOT_DIM))
            return

        # Two rows reserved for the "more" markers.
        size = max(1, min(WINDOW_SIZE, body_end - body_top - 1))
        count = len(state.matches)
        start, end = visible_window(count, state.selected_index, size)

        row = body_top
        if start > 0:
            self._put(row, x0, f"↑ {start} more...", _cp(_SLOT_DIM))
        row += 1

        playing_id = state.last_played.id if state.playing and state.last_played else None
        for index in range(start, end):
            sound = state.matches[index]
            selected = index == state.selected_index
            if sound.id == playing_id:
                marker, attr = "▶ ", _cp(_SLOT_PLAYING) | curses.A_BOLD
            elif selected:
                marker, attr = "→ ", _cp(_SLOT_SELECTED) | curses.A_BOLD
            else:
                marker, attr = "  ", 0
            self._put(row, x0, marker, attr)
            self._put(row, x0 + 2, sound.filename, attr)
            tags = _format_tags(sound)
            if tags:
                tag_attr = _cp(_SLOT_TAGS) | (0 if selected else curses.A_DIM)
                self._put(row, x0 + 2 + len(sound.filename), tags, tag_attr)
            row += 1

        if end < count:
            self._put(row, x0, f"↓ {count - end} more...", _cp(_SLOT_DIM))

    def _draw_status(self, h: int, w: int) -> None:
        state = self._state
        row = h - 2
        sba = _cp(_SLOT_STATUSBAR)

        self._put(row, 1, " " * (w - 2), sba)

        left = f" {len(state.matches)}/{len(state.catalog)} sounds "
        self._put(row, 2, left, sba)
        if state.playing and state.last_played is not None:
            playing = f"• Playing: {state.last_played.filename} "
            self._put(row, 2 + len(left), playing, _cp(_SLOT_PLAYING) | curses.A_BOLD)

        if state.notice:
            right = f" {state.notice} "
            attr = _cp(_SLOT_NOTICE) | curses.A_BOLD
        else:
            right = f" {_KEY_HINTS} "
            attr = sba
        col = max(2 + len(left), w - len(right) - 2)
        self._put(row, col, right, attr)

    # ── Run loop ──────────────────────────────────────────────────────────────

    def run(self, loop: InteractionLoop, initial_query: str = "") -> None:
        scr = self._init_curses()
        try:
            self._draw()
            loop.load(initial_query)
            while loop.running:
                try:
                    ch = scr.get_wch()
                except curses.error:
                    # Poll timeout; lets an unconfirmed exit prompt expire.
                    if loop.state.exit_armed:
                        loop.handle(loop.event(Key.TICK))
                    continue

                translated = translate_key(ch)
                if translated is None:
                    continue
                key, char = translated
                if key is Key.RESIZE:
                    self._draw()
                    continue
                loop.handle(loop.event(key, char))
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        if self._stdscr is not None:
            curses.noraw()
            self._stdscr.keypad(False)
            curses.echo()
            curses.endwin()
            self._stdscr = None

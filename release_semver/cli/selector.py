from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

Key = Literal["up", "down", "enter", "cancel", "other"]


@dataclass(frozen=True, slots=True)
class SelectorOption(Generic[T]):
    value: T
    label: str
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class SelectorResult(Generic[T]):
    action: Literal["select", "cancel"]
    value: T | None
    index: int


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _color_enabled() -> bool:
    if not is_interactive_terminal():
        return False
    if os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _paint(text: str, *codes: str) -> str:
    if not _color_enabled() or not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _read_key() -> Key:
    if os.name == "nt":
        import msvcrt

        ch = msvcrt.getwch()
        if ch in ("\r", "\n"):
            return "enter"
        if ch in ("q", "Q", "\x1b", "\x03"):
            return "cancel"
        if ch in ("\x00", "\xe0"):
            ch2 = msvcrt.getwch()
            if ch2 == "H":
                return "up"
            if ch2 == "P":
                return "down"
        return "other"

    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        if ch in ("\r", "\n"):
            return "enter"
        if ch in ("q", "Q", "\x03"):
            return "cancel"
        if ch in ("k", "K"):
            return "up"
        if ch in ("j", "J"):
            return "down"
        if ch == "\x1b":
            if sys.stdin.read(1) == "[":
                c3 = sys.stdin.read(1)
                if c3 == "A":
                    return "up"
                if c3 == "B":
                    return "down"
            return "cancel"
        return "other"
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _cols() -> int:
    return max(60, min(120, shutil.get_terminal_size((100, 30)).columns))


def render_lines(*, title: str, options: list[SelectorOption[object]], index: int) -> list[str]:
    """Lines of one selector frame (without terminal control codes)."""
    width = _cols() - 4
    lines = [title, ""]
    for i, opt in enumerate(options):
        marker = ">" if i == index else " "
        text = f"{marker} {opt.label}"
        if opt.detail:
            text += f"  ({opt.detail})"
        lines.append(text[:width])
    lines.append("")
    lines.append("Up/Down + Enter to select, q to cancel")
    return lines


def _render(*, title: str, options: list[SelectorOption[object]], index: int, first: bool) -> None:
    frame = render_lines(title=title, options=options, index=index)
    if not first:
        # redraw in place: move the cursor back over the previous frame
        sys.stdout.write(f"\x1b[{len(frame)}F")
    for n, line in enumerate(frame):
        if n == 0:
            line = _paint(line, "1", "96")
        elif line.startswith(">"):
            line = _paint(line, "1", "30", "46")
        elif n == len(frame) - 1:
            line = _paint(line, "2", "37")
        sys.stdout.write("\x1b[2K" + line + "\n")
    sys.stdout.flush()


def select_one(
    *,
    title: str,
    options: list[SelectorOption[T]],
    initial_index: int = 0,
) -> SelectorResult[T]:
    if not options:
        raise ValueError("selector requires at least one option")
    if not is_interactive_terminal():
        raise RuntimeError("interactive selector requires a TTY")

    idx = max(0, min(initial_index, len(options) - 1))
    casted: list[SelectorOption[object]] = [
        SelectorOption(value=o.value, label=o.label, detail=o.detail) for o in options
    ]
    first = True

    while True:
        _render(title=title, options=casted, index=idx, first=first)
        first = False
        key = _read_key()

        if key == "up":
            idx = (idx - 1) % len(options)
        elif key == "down":
            idx = (idx + 1) % len(options)
        elif key == "enter":
            return SelectorResult(action="select", value=options[idx].value, index=idx)
        elif key == "cancel":
            return SelectorResult(action="cancel", value=None, index=idx)

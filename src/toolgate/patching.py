from __future__ import annotations

from pathlib import Path
from typing import Sequence


def apply_line_replacement(
    lines: Sequence[str],
    from_line: int,
    to_line: int,
    new_lines: Sequence[str],
) -> list[str]:
    """Return a copy of ``lines`` with a 1-indexed inclusive range replaced.

    When ``to_line < from_line`` nothing is removed and ``new_lines`` are
    inserted immediately before ``from_line``. An empty ``new_lines`` in
    replace mode deletes the range.
    """
    head = list(lines[: max(from_line - 1, 0)])
    if to_line < from_line:
        tail = list(lines[max(from_line - 1, 0) :])
    else:
        tail = list(lines[to_line:])
    return head + list(new_lines) + tail


def split_text(text: str) -> list[str]:
    if text == "":
        return []
    if text.endswith("\n"):
        text = text[:-1]
    return text.split("\n")


def read_lines(path: Path) -> list[str]:
    return split_text(path.read_text(encoding="utf-8", errors="replace"))


def write_lines(path: Path, lines: Sequence[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # Encode first so a bad line never truncates the existing file.
    data = "".join(line + "\n" for line in lines).encode("utf-8")
    path.write_bytes(data)

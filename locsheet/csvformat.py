"""Reading and writing the CSV dialect used by localization sheets."""

from __future__ import annotations

import re

_UNQUOTED = re.compile(r"[^,\r\n]*")
_NEEDS_QUOTING = ('"', "\r", "\n", ",")


def _parse_cell(text: str, pos: int) -> tuple[str, int]:
    """Parse one cell starting at ``pos``; return it and the position after it."""
    if pos < len(text) and text[pos] == '"':
        pos += 1
        parts: list[str] = []
        while True:
            close = text.find('"', pos)
            if close < 0:
                parts.append(text[pos:])
                return "".join(parts), len(text)
            if text.startswith('""', close):
                parts.append(text[pos:close + 1])
                pos = close + 2
                continue
            parts.append(text[pos:close])
            pos = close + 1
            break
        # Anything between the closing quote and the delimiter is kept as-is.
        tail = _UNQUOTED.match(text, pos)
        parts.append(tail.group())
        return "".join(parts), tail.end()
    match = _UNQUOTED.match(text, pos)
    return match.group(), match.end()


def parse_csv(text: str) -> list[list[str]]:
    """Split CSV text into rows of cells.

    Quoted cells may hold commas and line breaks, and ``""`` stands for one
    quotation mark. Rows end at ``\\r\\n``, ``\\n`` or ``\\r``.
    """
    rows: list[list[str]] = []
    pos = 0
    end = len(text)
    while pos < end:
        row: list[str] = []
        while True:
            cell, pos = _parse_cell(text, pos)
            row.append(cell)
            if pos >= end:
                break
            if text[pos] == ",":
                pos += 1
                continue
            pos += 2 if text.startswith("\r\n", pos) else 1
            break
        rows.append(row)
    return rows


def lazy_wrap(text: str, force_wrap: bool = False) -> str:
    """Wrap ``text`` in quotation marks if forced or if it needs them; never wrap ''."""
    if text and (force_wrap or any(ch in text for ch in _NEEDS_QUOTING)):
        return f'"{text}"'
    return text


def escape_quotes(text: str) -> str:
    """Double every quotation mark, as CSV requires inside quoted cells."""
    return text.replace('"', '""')
"""Whitespace table used by ``trim`` and ``is_whitespace``."""

from __future__ import annotations

from .decoder import iter_letters
from .letters import Letter, TextLike

# Unicode White_Space plus the zero-width marks (U+180E, U+200B-U+200D,
# U+2060, U+FEFF) that callers expect to be trimmed alongside it.
WHITESPACE_CODEPOINTS = frozenset(
    (
        0x0009,
        0x000A,
        0x000B,
        0x000C,
        0x000D,
        0x0020,
        0x0085,
        0x00A0,
        0x1680,
        0x180E,
        *range(0x2000, 0x200E),
        0x2028,
        0x2029,
        0x202F,
        0x205F,
        0x2060,
        0x3000,
        0xFEFF,
    )
)

WHITESPACE_LETTERS = frozenset(
    Letter(chr(codepoint).encode("utf-8")) for codepoint in WHITESPACE_CODEPOINTS
)


def is_whitespace_letter(letter: bytes) -> bool:
    return letter in WHITESPACE_LETTERS


def is_whitespace(text: TextLike) -> bool:
    """Return ``True`` when ``text`` is non-empty and made only of whitespace letters."""

    seen = False
    for letter, _ in iter_letters(text):
        if letter not in WHITESPACE_LETTERS:
            return False
        seen = True
    return seen


__all__ = [
    "WHITESPACE_CODEPOINTS",
    "WHITESPACE_LETTERS",
    "is_whitespace",
    "is_whitespace_letter",
]

"""Lenient UTF-8 decoding into ``Letter`` units.

The lead byte alone decides how many bytes a letter spans; continuation
bytes are not validated, so malformed input still yields opaque letters
instead of raising.
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Tuple

from .letters import Letter, TextLike, to_bytes

Decoder = Callable[[bytes, int], Optional[Tuple[Letter, int]]]


def sequence_length(lead: int) -> int:
    """Number of bytes in the sequence introduced by ``lead``."""

    if lead < 0x80:
        return 1
    if lead < 0xE0:
        return 2
    if lead < 0xF0:
        return 3
    return 4


def decode_one(buffer: bytes, offset: int) -> Optional[Tuple[Letter, int]]:
    """Return the letter starting at ``offset`` and the offset after it.

    ``None`` signals that ``offset`` lies outside ``buffer``. A sequence cut
    short by the end of ``buffer`` is returned truncated.
    """

    if offset < 0 or offset >= len(buffer):
        return None
    size = sequence_length(buffer[offset])
    return Letter(buffer[offset : offset + size]), offset + size


def iter_letters(
    text: TextLike, offset: int = 0, decoder: Optional[Decoder] = None
) -> Iterator[Tuple[Letter, int]]:
    """Yield ``(letter, offset)`` pairs from ``offset`` until the input is exhausted.

    ``decoder`` replaces ``decode_one`` as the step function.
    """

    step = decoder or decode_one
    buffer = to_bytes(text)
    while (decoded := step(buffer, offset)) is not None:
        letter, next_offset = decoded
        yield letter, offset
        offset = next_offset


def decode_all(text: TextLike, decoder: Optional[Decoder] = None) -> List[Letter]:
    return [letter for letter, _ in iter_letters(text, decoder=decoder)]


__all__ = ["Decoder", "decode_all", "decode_one", "iter_letters", "sequence_length"]

"""The ``Letter`` type and conversions between text, bytes and letters."""

from __future__ import annotations

from typing import Iterable, Union

TextLike = Union[str, bytes, bytearray, memoryview]


class Letter(bytes):
    """Raw bytes of exactly one UTF-8 sequence.

    Letters produced from malformed input are kept as-is; ``text`` decodes
    them with ``surrogateescape`` so joining and re-encoding is lossless.
    """

    __slots__ = ()

    @property
    def text(self) -> str:
        return self.decode("utf-8", "surrogateescape")

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Letter({bytes.__repr__(self)})"


def to_bytes(text: TextLike) -> bytes:
    """Return the UTF-8 bytes behind ``text``; bytes-like input is kept verbatim."""

    if isinstance(text, str):
        return text.encode("utf-8", "surrogateescape")
    if isinstance(text, (bytes, bytearray, memoryview)):
        return bytes(text)
    raise TypeError(f"Expected text or bytes, got {type(text).__name__}")


def join_letters(letters: Iterable[bytes]) -> str:
    return b"".join(letters).decode("utf-8", "surrogateescape")


__all__ = ["Letter", "TextLike", "join_letters", "to_bytes"]

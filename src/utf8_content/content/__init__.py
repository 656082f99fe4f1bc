"""UTF-8 letter decoding and the versioned content buffer."""

from .buffer import Insertable, LetterPattern, VersionedBuffer
from .decoder import Decoder, decode_all, decode_one, iter_letters, sequence_length
from .letters import Letter, TextLike, join_letters, to_bytes
from .version import EmptyBufferError, Version, VersionStack
from .whitespace import (
    WHITESPACE_CODEPOINTS,
    WHITESPACE_LETTERS,
    is_whitespace,
    is_whitespace_letter,
)

__all__ = [
    "VersionedBuffer",
    "Insertable",
    "LetterPattern",
    "Letter",
    "TextLike",
    "Version",
    "VersionStack",
    "EmptyBufferError",
    "Decoder",
    "decode_one",
    "decode_all",
    "iter_letters",
    "sequence_length",
    "join_letters",
    "to_bytes",
    "is_whitespace",
    "is_whitespace_letter",
    "WHITESPACE_CODEPOINTS",
    "WHITESPACE_LETTERS",
]

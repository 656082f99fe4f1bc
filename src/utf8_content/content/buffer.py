"""Letter-indexed content buffer backed by a stack of decoded versions."""

from __future__ import annotations

import re
from typing import (
    Callable,
    ContextManager,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Union,
)

from utf8_content.runtime import telemetry
from utf8_content.runtime.telemetry import SpanHandle

from .decoder import Decoder, decode_all, decode_one
from .letters import Letter, TextLike, join_letters
from .version import EmptyBufferError, Version, VersionStack
from .whitespace import is_whitespace_letter

Insertable = Union[TextLike, Iterable[bytes]]
LetterPattern = Union[None, str, re.Pattern, Callable[[Letter], bool]]


class VersionedBuffer:
    """Random access to the letters of UTF-8 text.

    Every query and mutation works on the current version, the top of the
    version stack. Ranges follow array-slice rules: a negative ``start``
    counts from the end, a negative ``length`` stops that many letters
    before the end, and out-of-range values are clamped instead of raising.

    ``decoder`` splits incoming text into letters one step at a time and
    defaults to ``decode_one``; buffers cut from this one inherit it.
    """

    def __init__(
        self,
        text: TextLike = "",
        *,
        name: str = "default",
        logger_name: str | None = None,
        decoder: Decoder = decode_one,
    ) -> None:
        self.name = name
        self._logger_name = logger_name
        self._decoder = decoder
        self._stack = VersionStack()
        self.push_text(text)

    @classmethod
    def from_letters(
        cls,
        letters: Iterable[bytes],
        *,
        name: str = "default",
        logger_name: str | None = None,
        decoder: Decoder = decode_one,
    ) -> "VersionedBuffer":
        buffer = cls(name=name, logger_name=logger_name, decoder=decoder)
        return buffer.push_letters(letters, clear_all=True)

    # -- version stack -------------------------------------------------

    @property
    def pointer(self) -> int:
        return self._stack.pointer

    @property
    def version_count(self) -> int:
        return len(self._stack)

    def push_text(
        self, text: TextLike, clear_all: bool = False, replace: bool = False
    ) -> "VersionedBuffer":
        """Decode ``text`` into a new current version.

        ``clear_all`` drops every older version first. ``replace`` overwrites
        the current version instead of pushing and takes precedence.
        """

        with self._span("push_text") as handle:
            version = Version.from_letters(self._decode(text))
            handle.add_metadata("size", version.size)
            self._store(version, clear_all=clear_all, replace=replace)
        return self

    def replace_current(self, text: TextLike) -> "VersionedBuffer":
        return self.push_text(text, replace=True)

    def push_letters(
        self, letters: Iterable[bytes], clear_all: bool = False, replace: bool = False
    ) -> "VersionedBuffer":
        """Same as ``push_text`` for letters that are already decoded."""

        with self._span("push_letters") as handle:
            version = Version.from_letters(self._as_letters(letters))
            handle.add_metadata("size", version.size)
            self._store(version, clear_all=clear_all, replace=replace)
        return self

    def pop_version(self) -> "VersionedBuffer":
        """Drop the current version and fall back to the previous one.

        Popping an empty stack leaves the pointer at ``-1``.
        """

        with self._span("pop_version") as handle:
            if self._stack.pop() is None:
                handle.add_metadata("underflow", True)
                telemetry.record_event(
                    "content.underflow",
                    level="warning",
                    data={"buffer": self.name},
                    logger_name=self._logger_name,
                )
        return self

    def clear(self) -> "VersionedBuffer":
        with self._span("clear"):
            self._stack.clear()
        return self

    def _store(self, version: Version, *, clear_all: bool, replace: bool) -> None:
        if replace:
            self._stack.replace(version)
            return
        if clear_all:
            self._stack.clear()
        self._stack.push(version)

    # -- whole-version access ----------------------------------------

    def current_text(self) -> str:
        return join_letters(self._current("export text").letters)

    def to_bytes(self) -> bytes:
        return b"".join(self._current("export bytes").letters)

    def letters(self) -> Tuple[Letter, ...]:
        return tuple(self._current("read letters").letters)

    def length(self) -> int:
        return self._current("measure length").size

    def resize(self) -> int:
        return self._current("resize").resize()

    def letter_at(self, index: int) -> Optional[Letter]:
        """Return the letter at ``index`` or ``None`` outside ``[0, length)``."""

        version = self._current("read letter")
        if 0 <= index < version.size:
            return version.letters[index]
        return None

    def prepend_letters(self, letters: Insertable) -> "VersionedBuffer":
        with self._span("prepend_letters"):
            version = self._current("prepend letters")
            version.letters = self._resolve_letters(letters) + version.letters
            version.resize()
        return self

    def append_letters(self, letters: Insertable) -> "VersionedBuffer":
        with self._span("append_letters"):
            version = self._current("append letters")
            version.letters = version.letters + self._resolve_letters(letters)
            version.resize()
        return self

    # -- slicing -------------------------------------------------------

    def cut_to_letters(self, start: int, length: int | None = None) -> List[Letter]:
        version = self._current("cut letters")
        lo, hi = _slice_bounds(version.size, start, length)
        return version.letters[lo:hi]

    def cut_to_letters_by_range(self, start: int, end: int) -> List[Letter]:
        return self.cut_to_letters(start, end + 1 - start)

    def substring(self, start: int, length: int | None = None) -> str:
        return join_letters(self.cut_to_letters(start, length))

    def substring_by_range(self, start: int, end: int) -> str:
        return join_letters(self.cut_to_letters_by_range(start, end))

    def cut_to_buffer(self, start: int, length: int | None = None) -> "VersionedBuffer":
        return self._spawn(self.cut_to_letters(start, length))

    def cut_to_buffer_by_range(self, start: int, end: int) -> "VersionedBuffer":
        return self._spawn(self.cut_to_letters_by_range(start, end))

    def _spawn(self, letters: List[Letter]) -> "VersionedBuffer":
        return type(self).from_letters(
            letters,
            name=self.name,
            logger_name=self._logger_name,
            decoder=self._decoder,
        )

    # -- mutation ------------------------------------------------------

    def splice(
        self, start: int, delete_count: int | None = 1, insert: Insertable = ()
    ) -> "VersionedBuffer":
        """Replace ``delete_count`` letters at ``start`` with ``insert``.

        ``insert`` is text (decoded first) or a sequence of letters. A
        ``delete_count`` of ``None`` removes everything from ``start`` on.
        """

        with self._span("splice") as handle:
            version = self._current("splice")
            items = self._resolve_letters(insert)
            lo, hi = _slice_bounds(version.size, start, delete_count)
            handle.add_metadata("range", (lo, hi))
            version.letters[lo:hi] = items
            version.resize()
        return self

    def splice_by_range(
        self, start: int, end: int, insert: Insertable = ()
    ) -> "VersionedBuffer":
        return self.splice(start, end + 1 - start, insert)

    def reverse(self) -> "VersionedBuffer":
        with self._span("reverse"):
            version = self._current("reverse")
            self._stack.replace(Version.from_letters(reversed(version.letters)))
        return self

    # -- search ----------------------------------------------------------

    def find(self, needle: TextLike, start: int = 0) -> Optional[int]:
        """Return the index of the *last* letter of the first match of ``needle``.

        Matching starts at letter ``start``. ``None`` means no match, and an
        empty needle never matches.
        """

        version = self._current("find")
        wanted = self._decode(needle)
        count = len(wanted)
        if not count:
            return None
        letters = version.letters
        first, _ = _slice_bounds(version.size, start, None)
        for index in range(first, version.size - count + 1):
            if letters[index : index + count] == wanted:
                return index + count - 1
        return None

    def trim(self, pattern: LetterPattern = None) -> "VersionedBuffer":
        """Return a new buffer without leading and trailing ``pattern`` letters.

        ``pattern`` is a regular expression searched in each letter, a
        predicate over letters, or ``None`` for the whitespace table. When
        every letter matches, nothing is trimmed.
        """

        matches = _letter_matcher(pattern)
        version = self._current("trim")
        letters = version.letters
        first, last = 0, version.size - 1
        for index, letter in enumerate(letters):
            if not matches(letter):
                first = index
                break
        for index in range(version.size - 1, -1, -1):
            if not matches(letters[index]):
                last = index
                break
        return self.cut_to_buffer_by_range(first, last)

    # -- protocol ------------------------------------------------------

    def __str__(self) -> str:
        return self.current_text()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return self.length()

    def __bool__(self) -> bool:
        return not self._stack.is_empty()

    def __iter__(self) -> Iterator[Letter]:
        return iter(self.letters())

    # -- internals -----------------------------------------------------

    def _current(self, operation: str) -> Version:
        try:
            return self._stack.current(operation)
        except EmptyBufferError:
            telemetry.record_event(
                "content.empty",
                level="error",
                data={"buffer": self.name, "operation": operation},
                logger_name=self._logger_name,
            )
            raise

    def _span(self, operation: str) -> ContextManager[SpanHandle]:
        return telemetry.span(
            f"content::{operation}",
            logger_name=self._logger_name,
            component="content",
            metadata={"buffer": self.name, "pointer": self._stack.pointer},
        )

    def _decode(self, text: TextLike) -> List[Letter]:
        return decode_all(text, decoder=self._decoder)

    def _as_letters(self, items: Iterable[bytes]) -> List[Letter]:
        """Accept ready letters, each of which must decode as a single letter."""

        letters: List[Letter] = []
        for item in items:
            if not isinstance(item, (bytes, bytearray)):
                raise TypeError(
                    f"Expected letters as bytes, got {type(item).__name__}"
                )
            decoded = self._decoder(bytes(item), 0)
            if decoded is None or decoded[1] < len(item):
                raise ValueError(f"{bytes(item)!r} is not a single letter")
            letters.append(item if isinstance(item, Letter) else Letter(item))
        return letters

    def _resolve_letters(self, items: Insertable) -> List[Letter]:
        if _is_text(items):
            return self._decode(items)  # type: ignore[arg-type]
        return self._as_letters(items)  # type: ignore[arg-type]


def _is_text(value: object) -> bool:
    return isinstance(value, (str, bytes, bytearray, memoryview))


def _letter_matcher(pattern: LetterPattern) -> Callable[[Letter], bool]:
    if pattern is None:
        return is_whitespace_letter
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if isinstance(pattern, re.Pattern):
        compiled = pattern
        return lambda letter: compiled.search(letter.text) is not None
    if callable(pattern):
        return pattern
    raise TypeError(f"Unsupported trim pattern {pattern!r}")


def _slice_bounds(size: int, start: int, length: int | None) -> Tuple[int, int]:
    if start < 0:
        start = max(size + start, 0)
    else:
        start = min(start, size)
    if length is None:
        end = size
    elif length < 0:
        end = max(size + length, start)
    else:
        end = min(start + length, size)
    return start, end


__all__ = ["Insertable", "LetterPattern", "VersionedBuffer"]

"""Version records and the stack that owns them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .letters import Letter


class EmptyBufferError(RuntimeError):
    """Raised when an operation needs a current version but the stack is empty."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: no content version is active")
        self.operation = operation


@dataclass(slots=True)
class Version:
    """One decoded snapshot: its letters and their cached count."""

    letters: List[Letter] = field(default_factory=list)
    size: int = 0

    @classmethod
    def from_letters(cls, letters: Iterable[Letter]) -> "Version":
        items = list(letters)
        return cls(letters=items, size=len(items))

    def resize(self) -> int:
        self.size = len(self.letters)
        return self.size


class VersionStack:
    """Stack of versions addressed by a pointer; ``-1`` means empty.

    Versions below the pointer stay decoded so a ``pop`` restores the
    previous content without decoding it again.
    """

    def __init__(self) -> None:
        self._versions: List[Version] = []
        self._pointer: int = -1

    @property
    def pointer(self) -> int:
        return self._pointer

    def __len__(self) -> int:
        return len(self._versions)

    def is_empty(self) -> bool:
        return self._pointer < 0

    def current(self, operation: str = "read content") -> Version:
        if self._pointer < 0:
            raise EmptyBufferError(operation)
        return self._versions[self._pointer]

    def push(self, version: Version) -> Version:
        self._versions.append(version)
        self._pointer = len(self._versions) - 1
        return version

    def replace(self, version: Version) -> Version:
        """Overwrite the current version; pushes when the stack is empty."""

        if self._pointer < 0:
            return self.push(version)
        self._versions[self._pointer] = version
        return version

    def pop(self) -> Optional[Version]:
        if self._pointer < 0:
            return None
        version = self._versions.pop(self._pointer)
        self._pointer -= 1
        return version

    def clear(self) -> None:
        self._versions = []
        self._pointer = -1


__all__ = ["EmptyBufferError", "Version", "VersionStack"]

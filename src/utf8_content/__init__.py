"""Letter-indexed navigation and editing of UTF-8 text."""

__all__ = [
    "content",
    "runtime",
]

__version__ = "0.1.0"

"""Telelog wiring for the content layer.

Buffers only need three things from here: a cached logger, one-off
structured events (``record_event``) and profiled spans around mutations
(``span``). The logger configuration is read once from ``UTF8_CONTENT_*``
environment variables; ``configure`` rebuilds it or adopts an explicit
``telelog.Config``.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "UTF8_CONTENT_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "utf8_content")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _resolve_level() -> str:
    return (_env("LOG_LEVEL") or "WARNING").upper()


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def build_config() -> Any:
    """Build a ``telelog.Config`` from the environment.

    ``LOG_LEVEL`` (default ``WARNING``), ``LOG_FILE``, ``LOG_JSON``,
    ``DISABLE_CONSOLE`` and ``NO_COLOR`` are honoured. Profiling is always on
    so spans report their duration.
    """

    config = tl.Config()
    config.with_min_level(_resolve_level())
    console = not _env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _env_flag("NO_COLOR", False))
    if _env_flag("LOG_JSON", False):
        config.with_json_format(True)
    log_file = _env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    config.with_profiling(True)
    return config


def configure(config: Optional[Any] = None) -> Any:
    """Adopt ``config`` (or a fresh environment config) and drop cached loggers."""

    global _ACTIVE_CONFIG
    _ACTIVE_CONFIG = config if config is not None else build_config()
    _LOGGER_CACHE.clear()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger``."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        if _ACTIVE_CONFIG is None:
            configure()
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ACTIVE_CONFIG
        )
    return _LOGGER_CACHE[logger_name]


def _level_method(logger: Any, level: str) -> Callable[..., Any]:
    method = getattr(logger, f"{level.lower()}_with", None)
    if method is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return method


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    pairs = [(str(key), _stringify(value)) for key, value in payload.items()]
    _level_method(logger, level)(message, pairs)


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    payload = {"event": name, **(data or {})}
    _emit(get_logger(logger_name), level, f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Metadata collected while a span is open."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, tracking it under ``component`` when given.

    ``metadata`` is attached as logger context while the block runs. An
    exception escaping the block is logged as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    handle = SpanHandle(logger=log, span_name=name, component_name=component)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)
        log.add_context(key, handle.metadata[key])
    context_keys = list(handle.metadata)

    with ExitStack() as stack:
        if component:
            stack.enter_context(log.track_component(component))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            for key in context_keys:
                log.remove_context(key)


__all__ = [
    "SpanHandle",
    "build_config",
    "configure",
    "get_logger",
    "record_event",
    "span",
]

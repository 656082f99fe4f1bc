from __future__ import annotations

from contextlib import contextmanager
from types import SimpleNamespace
from typing import Any, Dict, Iterator, List, Tuple

import pytest

from utf8_content.content import EmptyBufferError, VersionedBuffer
from utf8_content.runtime import telemetry


class RecordingConfig:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("with_"):
            raise AttributeError(name)
        return lambda value: self.calls.append((name, value))


class RecordingLogger:
    def __init__(self, name: str, config: Any) -> None:
        self.name = name
        self.config = config
        self.entries: List[Tuple[str, str, Dict[str, str]]] = []
        self.profiles: List[str] = []
        self.components: List[str] = []
        self.context: Dict[str, str] = {}

    @classmethod
    def with_config(cls, name: str, config: Any) -> "RecordingLogger":
        return cls(name, config)

    def _record(self, level: str):
        return lambda message, pairs: self.entries.append(
            (level, message, dict(pairs))
        )

    def __getattr__(self, name: str) -> Any:
        if name.endswith("_with"):
            return self._record(name[: -len("_with")])
        raise AttributeError(name)

    def add_context(self, key: str, value: str) -> None:
        self.context[key] = value

    def remove_context(self, key: str) -> None:
        self.context.pop(key, None)

    @contextmanager
    def profile(self, name: str) -> Iterator[None]:
        self.profiles.append(name)
        yield

    @contextmanager
    def track_component(self, name: str) -> Iterator[None]:
        self.components.append(name)
        yield


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> Iterator[RecordingLogger]:
    fake = SimpleNamespace(Config=RecordingConfig, Logger=RecordingLogger)
    monkeypatch.setattr(telemetry, "tl", fake)
    telemetry.configure()
    yield telemetry.get_logger()
    monkeypatch.undo()
    telemetry.configure()


def test_build_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(telemetry, "tl", SimpleNamespace(Config=RecordingConfig))
    for name in ("LOG_LEVEL", "LOG_FILE", "LOG_JSON", "DISABLE_CONSOLE", "NO_COLOR"):
        monkeypatch.delenv(f"UTF8_CONTENT_{name}", raising=False)

    config = telemetry.build_config()

    assert config.calls == [
        ("with_min_level", "WARNING"),
        ("with_console_output", True),
        ("with_colored_output", True),
        ("with_profiling", True),
    ]


def test_build_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(telemetry, "tl", SimpleNamespace(Config=RecordingConfig))
    monkeypatch.setenv("UTF8_CONTENT_LOG_LEVEL", "debug")
    monkeypatch.setenv("UTF8_CONTENT_DISABLE_CONSOLE", "yes")
    monkeypatch.setenv("UTF8_CONTENT_LOG_JSON", "1")
    monkeypatch.setenv("UTF8_CONTENT_LOG_FILE", "content.log")

    config = telemetry.build_config()

    assert config.calls == [
        ("with_min_level", "DEBUG"),
        ("with_console_output", False),
        ("with_json_format", True),
        ("with_file_output", "content.log"),
        ("with_profiling", True),
    ]


def test_get_logger_is_cached(recorder: RecordingLogger) -> None:
    assert telemetry.get_logger() is recorder
    assert telemetry.get_logger("other") is telemetry.get_logger("other")
    assert telemetry.get_logger("other") is not recorder


def test_record_event_logs_pairs(recorder: RecordingLogger) -> None:
    telemetry.record_event("demo", level="warning", data={"size": 3})

    assert recorder.entries == [
        ("warning", "event::demo", {"event": "demo", "size": "3"})
    ]


def test_span_profiles_and_clears_context(recorder: RecordingLogger) -> None:
    with telemetry.span(
        "tests::ok", component="tests", metadata={"buffer": "demo"}
    ) as handle:
        assert recorder.context == {"buffer": "demo"}
        handle.add_metadata("range", (1, 2))

    assert recorder.profiles == ["tests::ok"]
    assert recorder.components == ["tests"]
    assert recorder.context == {}
    assert handle.metadata == {"buffer": "demo", "range": "(1, 2)"}


def test_span_logs_and_reraises_failures(recorder: RecordingLogger) -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("tests::failing", component="tests"):
            raise RuntimeError("boom")

    level, message, payload = recorder.entries[-1]
    assert (level, message) == ("error", "span::fail")
    assert payload["reason"] == "boom"
    assert payload["component"] == "tests"


def test_buffer_mutations_run_in_content_spans(recorder: RecordingLogger) -> None:
    buffer = VersionedBuffer("Foo #error Bar", name="spans")
    buffer.splice(4, 6, "and").reverse().pop_version()

    assert recorder.profiles == [
        "content::push_text",
        "content::splice",
        "content::reverse",
        "content::pop_version",
    ]
    assert set(recorder.components) == {"content"}


def test_pop_on_empty_buffer_records_underflow(recorder: RecordingLogger) -> None:
    buffer = VersionedBuffer("a", name="under")
    buffer.pop_version().pop_version()

    assert buffer.pointer == -1
    assert recorder.entries == [
        (
            "warning",
            "event::content.underflow",
            {"event": "content.underflow", "buffer": "under"},
        )
    ]


def test_access_to_empty_buffer_records_event(recorder: RecordingLogger) -> None:
    buffer = VersionedBuffer("a", name="gone").pop_version()

    with pytest.raises(EmptyBufferError):
        buffer.current_text()

    assert recorder.entries == [
        (
            "error",
            "event::content.empty",
            {"event": "content.empty", "buffer": "gone", "operation": "export text"},
        )
    ]

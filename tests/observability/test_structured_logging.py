from __future__ import annotations

import contextlib
import json
import logging
from pathlib import Path

import pytest

from bookshelf import logging_manager as log_mgr
from bookshelf import observability
from bookshelf.observability import catalog_operation


def make_record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bookshelf.catalog",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Scanned %d series",
        args=(2,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_renders_known_and_extra_fields() -> None:
    record = make_record(event="catalog.scan.completed", library_id=7, series_added=2)

    payload = json.loads(log_mgr.JSONLogFormatter().format(record))

    assert payload["message"] == "Scanned 2 series"
    assert payload["level"] == "INFO"
    assert payload["event"] == "catalog.scan.completed"
    assert payload["library_id"] == 7
    assert payload["extra"] == {"series_added": 2}


def test_context_filter_adds_values_without_overwriting() -> None:
    record = make_record(library_id=1)

    with log_mgr.log_context(library_id=2, book_id=3):
        log_mgr.LogContextFilter().filter(record)

    assert record.library_id == 1
    assert record.book_id == 3


def test_log_context_is_restored_after_block() -> None:
    with log_mgr.log_context(library_id=9):
        with log_mgr.log_context(book_id=4, stage=None):
            assert log_mgr.get_log_context() == {"library_id": 9, "book_id": 4}
        assert log_mgr.get_log_context() == {"library_id": 9}

    assert log_mgr.get_log_context() == {}


class _Collector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def collected():
    logger = log_mgr.get_logger()
    handler = _Collector()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


def test_catalog_operation_logs_completion(collected) -> None:
    with catalog_operation("library.scan", attributes={"library_id": 1}):
        pass

    events = [getattr(record, "event", None) for record in collected]
    assert "catalog.operation.start" in events
    assert "catalog.operation.complete" in events


def test_catalog_operation_logs_and_reraises_failures(collected) -> None:
    with pytest.raises(RuntimeError):
        with catalog_operation("library.scan"):
            raise RuntimeError("boom")

    failed = [r for r in collected if getattr(r, "event", None) == "catalog.operation.failed"]
    assert len(failed) == 1
    assert failed[0].levelno == logging.WARNING


class _RecordingHistogram:
    def __init__(self) -> None:
        self.values: list[tuple[float, dict]] = []

    def record(self, value: float, attributes=None) -> None:
        self.values.append((value, dict(attributes or {})))


class _RecordingTracer:
    def __init__(self) -> None:
        self.spans: list[tuple[str, dict]] = []

    @contextlib.contextmanager
    def start_as_current_span(self, name: str, attributes=None):
        self.spans.append((name, dict(attributes or {})))
        yield None


@pytest.fixture
def telemetry(monkeypatch: pytest.MonkeyPatch):
    histogram = _RecordingHistogram()
    tracer = _RecordingTracer()
    monkeypatch.setattr(observability, "_tracer", tracer)
    monkeypatch.setattr(observability, "_get_histogram", lambda name: histogram)
    return tracer, histogram


def test_catalog_operation_opens_a_span_and_records_duration(telemetry) -> None:
    tracer, histogram = telemetry

    with catalog_operation("library.scan", attributes={"library_id": 3, "root": Path("/lib")}):
        pass

    assert tracer.spans == [("catalog.operation.library.scan", {"library_id": 3, "root": "/lib"})]
    ((value, attributes),) = histogram.values
    assert value >= 0
    assert attributes["operation"] == "library.scan"
    assert attributes["outcome"] == "completed"


def test_failed_operation_records_failed_outcome(telemetry) -> None:
    _, histogram = telemetry

    with pytest.raises(ValueError):
        with catalog_operation("library.scan"):
            raise ValueError("bad snapshot")

    assert [attributes["outcome"] for _, attributes in histogram.values] == ["failed"]


def test_record_metric_works_with_the_default_meter() -> None:
    observability.record_metric("catalog.test.value", 1.5, {"library_id": 1})

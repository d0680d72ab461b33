"""Tracing, metrics and structured log records for catalog operations."""

from __future__ import annotations

import contextlib
import time
from typing import Dict, Iterator, Mapping, Optional

from opentelemetry import metrics, trace

from . import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("observability")

_tracer = trace.get_tracer("bookshelf.catalog")
_meter = metrics.get_meter("bookshelf.catalog")
_histograms: Dict[str, metrics.Histogram] = {}

_ATTRIBUTE_TYPES = (str, bool, int, float)


def _get_histogram(name: str) -> metrics.Histogram:
    histogram = _histograms.get(name)
    if histogram is None:
        histogram = _meter.create_histogram(name, unit="ms")
        _histograms[name] = histogram
    return histogram


def _otel_attributes(attributes: Mapping[str, object]) -> Dict[str, object]:
    return {
        key: value if isinstance(value, _ATTRIBUTE_TYPES) else str(value)
        for key, value in attributes.items()
        if value is not None
    }


def record_metric(
    name: str,
    value: float,
    attributes: Optional[Mapping[str, object]] = None,
) -> None:
    """Record a numeric observation on an OpenTelemetry histogram."""

    attrs = dict(attributes or {})
    _get_histogram(name).record(value, attributes=_otel_attributes(attrs))
    logger.debug(
        "Metric recorded",
        extra={
            "event": "observability.metric_recorded",
            "metric": name,
            "value": value,
            "attributes": attrs,
        },
    )


@contextlib.contextmanager
def catalog_operation(
    name: str,
    *,
    attributes: Optional[Mapping[str, object]] = None,
) -> Iterator[None]:
    """Context manager that traces, times and logs a catalog operation."""

    attrs = dict(attributes or {})
    with log_mgr.log_context(stage=name, **attrs):
        start = time.perf_counter()
        logger.debug(
            "Operation started",
            extra={"event": "catalog.operation.start", "stage": name},
        )
        with _tracer.start_as_current_span(
            f"catalog.operation.{name}", attributes=_otel_attributes(attrs)
        ):
            try:
                yield
            except Exception:
                duration_ms = (time.perf_counter() - start) * 1000.0
                record_metric(
                    "catalog.operation.duration",
                    duration_ms,
                    {**attrs, "operation": name, "outcome": "failed"},
                )
                logger.warning(
                    "Operation failed",
                    extra={
                        "event": "catalog.operation.failed",
                        "stage": name,
                        "duration_ms": round(duration_ms, 2),
                    },
                )
                raise
        duration_ms = (time.perf_counter() - start) * 1000.0
        record_metric(
            "catalog.operation.duration",
            duration_ms,
            {**attrs, "operation": name, "outcome": "completed"},
        )
        logger.debug(
            "Operation completed",
            extra={
                "event": "catalog.operation.complete",
                "stage": name,
                "duration_ms": round(duration_ms, 2),
            },
        )


__all__ = ["catalog_operation", "record_metric"]

"""Failure reporting -- the client's one-way observability channel.

Every failed attempt is handed to an :class:`ErrorReporter` as a
:class:`~steadyhttp.models.FailureReport` before the retry decision is made,
so transient failures that later succeed are still visible.

:class:`LoggingErrorReporter` is the default implementation: it keeps a
bounded in-memory log of :class:`ErrorRecord` items and writes each one to
the ``steadyhttp.reporting`` logger with secrets masked.

Any object with a ``report(report)`` method satisfies :class:`ErrorReporter`.

:class:`MetricsRecorder` is the timing counterpart: the client records the
duration of every attempt under :data:`API_RESPONSE_TIME` or
:data:`API_ERROR_TIME`, labelled with the target URL.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from steadyhttp.models import FailureKind, FailureReport
from steadyhttp.security import mask_sensitive_data

logger = logging.getLogger(__name__)

API_TIMEOUT = "API_TIMEOUT"
"""Error code recorded for attempts that exceeded their deadline."""

API_ERROR = "API_ERROR"
"""Error code recorded for every other failed attempt."""

API_RESPONSE_TIME = "API_RESPONSE_TIME"
"""Metric name for the duration of a successful attempt."""

API_ERROR_TIME = "API_ERROR_TIME"
"""Metric name for the duration of a failed attempt."""


@runtime_checkable
class ErrorReporter(Protocol):
    """Receiver of per-attempt failure reports.

    Implementations must not block and must not expect their return value
    or exceptions to influence the request; the client ignores both.
    """

    def report(self, report: FailureReport) -> None:
        ...


@dataclass
class ErrorRecord:
    """One entry in :class:`LoggingErrorReporter`'s log.

    Attributes:
        code: Short error code (e.g. ``API_TIMEOUT``).
        message: Human-readable description.
        details: Extra structured context, already masked.
        timestamp: Epoch seconds when the record was created.
    """

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


class LoggingErrorReporter:
    """Default :class:`ErrorReporter`: in-memory log plus :mod:`logging`.

    Args:
        max_records: Oldest records are dropped once this many are held.
    """

    def __init__(self, max_records: int = 500) -> None:
        self._records: deque[ErrorRecord] = deque(maxlen=max_records)

    def report(self, report: FailureReport) -> None:
        """Record a failed attempt."""
        if report.kind == FailureKind.TIMEOUT:
            self.log_error(
                API_TIMEOUT,
                f"Request timeout: {report.target_url}",
                {"attempt": report.attempt_index},
            )
        else:
            self.log_error(
                API_ERROR,
                f"Request failed: {report.target_url}",
                {"attempt": report.attempt_index, "error": report.message},
            )

    def log_error(self, code: str, message: str, details: Optional[dict[str, Any]] = None) -> ErrorRecord:
        """Append a record and emit it at WARNING level.

        Args:
            code: Short error code.
            message: Description; secrets are masked before storing.
            details: Optional structured context; masked before storing.

        Returns:
            The stored :class:`ErrorRecord`.
        """
        record = ErrorRecord(
            code=code,
            message=mask_sensitive_data(message),
            details=mask_sensitive_data(details or {}),
        )
        self._records.append(record)
        logger.warning("[%s] %s %s", record.code, record.message, record.details)
        return record

    def get_error_log(self) -> list[ErrorRecord]:
        """Return a copy of the stored records, oldest first."""
        return list(self._records)

    def clear_error_log(self) -> None:
        """Discard all stored records."""
        self._records.clear()


@dataclass
class PerformanceMetric:
    """One timing sample held by :class:`MetricsRecorder`."""

    name: str
    value: float
    unit: str = "ms"
    label: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


class MetricsRecorder:
    """Bounded in-memory store of :class:`PerformanceMetric` samples.

    Args:
        max_metrics: Oldest samples are dropped once this many are held.
    """

    def __init__(self, max_metrics: int = 1000) -> None:
        self._metrics: deque[PerformanceMetric] = deque(maxlen=max_metrics)

    def record(self, name: str, value: float, unit: str = "ms", label: Optional[str] = None) -> PerformanceMetric:
        """Store a sample and return it."""
        metric = PerformanceMetric(name=name, value=value, unit=unit, label=label)
        self._metrics.append(metric)
        logger.debug("%s%s: %.2f%s", name, f" ({label})" if label else "", value, unit)
        return metric

    def get_metrics(self) -> list[PerformanceMetric]:
        """Return a copy of the stored samples, oldest first."""
        return list(self._metrics)

    def get_metrics_by_name(self, name: str) -> list[PerformanceMetric]:
        return [m for m in self._metrics if m.name == name]

    def get_average_metric(self, name: str) -> float:
        """Mean value of the samples named *name*, or ``0.0`` if there are none."""
        values = [m.value for m in self._metrics if m.name == name]
        if not values:
            return 0.0
        return sum(values) / len(values)

    def clear(self) -> None:
        self._metrics.clear()


def format_error_message(error: Any) -> str:
    """Extract a display message from *error*.

    Accepts plain strings, exceptions, and response-like dicts of the shape
    ``{"response": {"data": {"message": ...}}}``.
    """
    if isinstance(error, str):
        return error
    if isinstance(error, BaseException) and str(error):
        return str(error)
    if isinstance(error, dict):
        if error.get("message"):
            return str(error["message"])
        data = (error.get("response") or {}).get("data") or {}
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
    return "An unexpected error occurred"

"""Tracing spans, metrics and start/finish logs around each reaction run."""

from __future__ import annotations

import contextlib
import functools
import time
from typing import Any, Dict, Iterator, Mapping, Optional

from opentelemetry import metrics, trace
from opentelemetry.trace import Status, StatusCode

from . import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("observability")

_tracer = trace.get_tracer("content_reactor.reactions")


@functools.lru_cache(maxsize=None)
def _instruments() -> tuple[Any, Any]:
    meter = metrics.get_meter("content_reactor.reactions")
    runs = meter.create_counter(
        "reactions.runs", description="Reaction runs by pipeline and status"
    )
    duration = meter.create_histogram(
        "reactions.duration", unit="ms", description="Wall time of reaction runs"
    )
    return runs, duration


def _metric_attributes(name: str, status: str, attributes: Mapping[str, object]) -> Dict[str, str]:
    labels = {key: str(value) for key, value in attributes.items() if value is not None}
    labels.update(reaction=name, status=status)
    return labels


def record_reaction(
    name: str,
    status: str,
    duration_ms: float,
    attributes: Optional[Mapping[str, object]] = None,
) -> None:
    """Count one finished reaction run and record its duration."""

    labels = _metric_attributes(name, status, attributes or {})
    runs, duration = _instruments()
    try:  # pragma: no cover - depends on the installed OTEL SDK
        runs.add(1, attributes=labels)
        duration.record(duration_ms, attributes=labels)
    except Exception as exc:  # pragma: no cover - exporter errors never fail a reaction
        logger.debug(
            "Metric export failed",
            extra={"event": "observability.metric_error", "error": str(exc)},
        )


@contextlib.contextmanager
def reaction_operation(
    name: str,
    *,
    attributes: Optional[Mapping[str, object]] = None,
) -> Iterator[None]:
    """Trace and log one run of the ``name`` reaction.

    Emits ``reaction.start`` and then ``reaction.complete`` or
    ``reaction.error`` with ``duration_ms``. The span is marked as failed when
    the block raises; the exception itself propagates unchanged.
    """

    attrs = dict(attributes or {})
    with log_mgr.log_context(reaction=name, correlation_id=attrs.get("correlation_id")):
        logger.info("Reaction started", extra={"event": "reaction.start", "attributes": attrs})
        started = time.perf_counter()
        status = "complete"
        with _tracer.start_as_current_span(
            f"reaction.{name}",
            record_exception=False,
            set_status_on_exception=False,
            attributes={key: str(value) for key, value in attrs.items() if value is not None},
        ) as span:
            try:
                yield
            except Exception as exc:
                status = "error"
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                raise
            finally:
                duration_ms = round((time.perf_counter() - started) * 1000.0, 2)
                record_reaction(name, status, duration_ms, attrs)
                logger.info(
                    "Reaction finished",
                    extra={
                        "event": f"reaction.{status}",
                        "duration_ms": duration_ms,
                        "attributes": attrs,
                    },
                )


__all__ = ["reaction_operation", "record_reaction"]

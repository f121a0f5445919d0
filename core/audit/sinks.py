"""
VELO Core Audit - Sinks
=======================
Audit delivery is fire-and-forget: a failing sink must never change
an access decision, so callers go through record_safely().
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from core.audit.models import AuditEvent

logger = logging.getLogger("velo.audit")


class AuditSink(Protocol):
    def record(self, event: AuditEvent) -> None:
        ...


class InMemoryAuditSink:
    """Collects events in order. Used by tests and local wiring."""

    def __init__(self) -> None:
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    def record(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> tuple[AuditEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def of_kind(self, kind: str) -> tuple[AuditEvent, ...]:
        return tuple(e for e in self.events if e.kind == kind)


class LoggingAuditSink:
    """Writes each event as one structured log line."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def record(self, event: AuditEvent) -> None:
        self._log.info(
            f"audit kind={event.kind} actor={event.actor_id} "
            f"tenant={event.target_tenant_id} path={event.path} "
            f"outcome={event.outcome}"
        )


def record_safely(sink: AuditSink | None, event: AuditEvent) -> bool:
    """
    Deliver event to sink. Returns False when delivery failed.

    Sink errors are logged with traceback and not re-raised.
    """
    if sink is None:
        return False
    try:
        sink.record(event)
    except Exception:
        logger.exception(
            f"Audit sink {type(sink).__name__} failed to record {event.kind} "
            f"for actor {event.actor_id}."
        )
        return False
    return True

"""Outbound notification channel for governance events.

Delivery is best-effort: a subscriber that raises is logged and skipped so that a
committed membership change is never undone by an observer failing.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Iterator, List, Union

from meshgov.events import GovernanceEvent, event_from_payload, to_payload

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[GovernanceEvent], None]


class EventBus:
    """Fan governance events out to registered subscribers."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* and return a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: GovernanceEvent) -> int:
        """Deliver *event* to every subscriber and return how many accepted it."""
        with self._lock:
            subscribers = list(self._subscribers)
        delivered = 0
        for callback in subscribers:
            try:
                callback(event)
            except Exception:  # noqa: BLE001 – one observer must not starve the others
                LOGGER.exception("Subscriber %r failed to handle %s", callback, event.event_type.value)
                continue
            delivered += 1
        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


class AuditLog:
    """Append-only JSON-lines record of governance events."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def __call__(self, event: GovernanceEvent) -> None:
        line = json.dumps(to_payload(event), sort_keys=True, separators=(",", ":"))
        with self._lock, self.path.open("a", encoding="utf-8") as fp:
            fp.write(line + "\n")

    def attach(self, bus: EventBus) -> Callable[[], None]:
        """Subscribe this log to *bus*."""
        return bus.subscribe(self)

    def __iter__(self) -> Iterator[GovernanceEvent]:
        return read_audit_log(self.path)


def read_audit_log(path: Union[str, Path]) -> Iterator[GovernanceEvent]:
    """Yield the events recorded in the audit log at *path*, oldest first."""
    log_path = Path(path)
    if not log_path.exists():
        return
    with log_path.open("r", encoding="utf-8") as fp:
        for line in fp:
            line = line.strip()
            if line:
                yield event_from_payload(json.loads(line))


__all__ = ["EventBus", "AuditLog", "Subscriber", "read_audit_log"]

from __future__ import annotations

from typing import Iterable, List, Union

from pkgretire.application.audit import AuditEvent
from pkgretire.application.ports.event_log_port import EventLogPort


class InMemoryEventLog(EventLogPort):
    """Simple in-memory event log (useful for tests)."""

    def __init__(self) -> None:
        self.events: List[dict] = []

    def append(self, event: Union[AuditEvent, dict]) -> None:
        if isinstance(event, AuditEvent):
            self.events.append(event.to_dict())
        else:
            self.events.append(dict(event))

    def stream(self, subject: str) -> Iterable[dict]:
        return (e for e in self.events if e.get("subject") == subject)

    def close(self) -> None:
        return None

from __future__ import annotations

from typing import Iterable, Protocol, Union, runtime_checkable

from pkgretire.application.audit import AuditEvent


@runtime_checkable
class EventLogPort(Protocol):
    """
    Minimal audit event log port.

    Implementations may log to stdout, keep events in memory, or persist them.
    """

    def append(self, event: Union[AuditEvent, dict]) -> None:
        """Append an event."""

    def stream(self, subject: str) -> Iterable[dict]:
        """Stream events about one subject (package name); may be empty."""

    def close(self) -> None:
        """Close underlying resources (optional)."""

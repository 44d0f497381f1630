from __future__ import annotations

import json
import logging
from typing import Iterable, Optional, Union

from pkgretire.application.audit import AuditEvent
from pkgretire.application.ports.event_log_port import EventLogPort


class LoggingEventLog(EventLogPort):
    """
    Emit audit events as JSON lines to the Python logger.

    Log shippers pick these up without a dedicated audit table.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self._logger = logger or logging.getLogger("pkgretire.eventlog")
        self._level = level

    def append(self, event: Union[AuditEvent, dict]) -> None:
        if isinstance(event, AuditEvent):
            payload = event.to_json()
        else:
            payload = json.dumps(dict(event), ensure_ascii=False, default=str)
        self._logger.log(self._level, payload)

    def stream(self, subject: str) -> Iterable[dict]:
        # Logging backend cannot stream retrospectively.
        return iter(())

    def close(self) -> None:
        return None

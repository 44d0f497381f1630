from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_request_id() -> str:
    return uuid.uuid4().hex


@dataclass
class AuditEvent:
    """
    One audit record per retirement attempt.

    `subject` is the package name; `type` is the outcome
    (retired/denied/forbidden/not_found/failed).
    """

    request_id: str
    subject: str
    type: str
    actor: str = ""
    workflow: str = "retire_package"
    payload: Dict[str, Any] = field(default_factory=dict)
    ts: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "subject": self.subject,
            "type": self.type,
            "actor": self.actor,
            "workflow": self.workflow,
            "payload": self.payload,
            "ts": self.ts.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))


def make_event(
    *,
    subject: str,
    type: str,
    actor: str = "",
    request_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> AuditEvent:
    return AuditEvent(
        request_id=request_id or new_request_id(),
        subject=subject,
        type=type,
        actor=actor,
        payload=payload or {},
    )

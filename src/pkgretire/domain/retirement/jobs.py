"""
Follow-up work scheduled by a successful retirement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class JobKind(Enum):
    SYNC_TO_GIT_INDEX = "sync_to_git_index"
    SYNC_TO_SPARSE_INDEX = "sync_to_sparse_index"
    DELETE_CRATE_FROM_STORAGE = "delete_crate_from_storage"


@dataclass(frozen=True)
class RetirementJob:
    kind: JobKind
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "payload": dict(self.payload)}


def retirement_jobs(name: str) -> List[RetirementJob]:
    """The three jobs that propagate the removal of `name` downstream."""
    return [
        RetirementJob(JobKind.SYNC_TO_GIT_INDEX, {"name": name}),
        RetirementJob(JobKind.SYNC_TO_SPARSE_INDEX, {"name": name}),
        RetirementJob(JobKind.DELETE_CRATE_FROM_STORAGE, {"name": name}),
    ]

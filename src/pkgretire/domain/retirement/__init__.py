from .jobs import JobKind, RetirementJob, retirement_jobs
from .eligibility import (
    DOWNLOAD_LIMIT_REASON,
    REVERSE_DEPENDENCY_REASON,
    SINGLE_OWNER_REASON,
    Decision,
    OwnerCountPolicy,
    Rule,
    evaluate,
)

__all__ = [
    "JobKind",
    "RetirementJob",
    "retirement_jobs",
    "DOWNLOAD_LIMIT_REASON",
    "REVERSE_DEPENDENCY_REASON",
    "SINGLE_OWNER_REASON",
    "Decision",
    "OwnerCountPolicy",
    "Rule",
    "evaluate",
]

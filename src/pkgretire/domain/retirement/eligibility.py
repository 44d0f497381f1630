"""
Deletion eligibility rules.

A package may always be deleted within 72 hours of being created. After
that, all of the following must hold:

- it has a single owner,
- it has been downloaded less than 100 times for each (started) month it
  has been published,
- no other package depends on it.

`evaluate` is pure: callers read the inputs inside the transaction that
will perform the delete and pass them in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from pkgretire.domain.package import Owner, Package

NEW_PACKAGE_WINDOW = timedelta(hours=72)
DOWNLOADS_PER_MONTH_LIMIT = 100
DAYS_PER_MONTH = 30
U64_MAX = 2**64 - 1
_MICROS_PER_DAY = 86_400 * 1_000_000

SINGLE_OWNER_REASON = "only crates with a single owner can be deleted after 72 hours"
DOWNLOAD_LIMIT_REASON = "only crates with less than 100 downloads per month can be deleted after 72 hours"
REVERSE_DEPENDENCY_REASON = "only crates without reverse dependencies can be deleted after 72 hours"


class OwnerCountPolicy(Enum):
    """Which owners count toward the single-owner rule."""

    INDIVIDUALS_ONLY = "individuals_only"
    ALL_OWNERS = "all_owners"


class Rule(Enum):
    AGE = "age"
    SINGLE_OWNER = "single_owner"
    DOWNLOAD_LIMIT = "download_limit"
    REVERSE_DEPENDENCY = "reverse_dependency"
    PASSED = "passed"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: Rule
    reason: str = ""

    @classmethod
    def allow(cls, rule: Rule) -> "Decision":
        return cls(allowed=True, rule=rule)

    @classmethod
    def deny(cls, rule: Rule, reason: str) -> "Decision":
        return cls(allowed=False, rule=rule, reason=reason)


def saturate_u64(value: int) -> int:
    """Clamp to the unsigned 64-bit range; negative counters saturate high."""
    if value < 0 or value > U64_MAX:
        return U64_MAX
    return value


def _ceil_div(n: int, d: int) -> int:
    return -(-n // d)


def age_in_days(created_at: datetime, now: datetime) -> int:
    """Whole days since creation, any started day counting as one."""
    micros = (now - created_at) // timedelta(microseconds=1)
    return max(0, _ceil_div(micros, _MICROS_PER_DAY))


def download_limit(created_at: datetime, now: datetime) -> int:
    months = max(1, _ceil_div(age_in_days(created_at, now), DAYS_PER_MONTH))
    return min(U64_MAX, DOWNLOADS_PER_MONTH_LIMIT * months)


def is_new(package: Package, now: datetime) -> bool:
    return now - package.created_at <= NEW_PACKAGE_WINDOW


def count_owners(owners: Iterable[Owner], policy: OwnerCountPolicy) -> int:
    if policy is OwnerCountPolicy.ALL_OWNERS:
        return sum(1 for _ in owners)
    return sum(1 for o in owners if o.is_individual)


def evaluate(
    package: Package,
    owners: Iterable[Owner],
    download_total: int,
    has_reverse_dependency: bool,
    now: datetime,
    *,
    owner_count_policy: OwnerCountPolicy = OwnerCountPolicy.INDIVIDUALS_ONLY,
) -> Decision:
    if is_new(package, now):
        return Decision.allow(Rule.AGE)

    if count_owners(owners, owner_count_policy) != 1:
        return Decision.deny(Rule.SINGLE_OWNER, SINGLE_OWNER_REASON)

    if saturate_u64(download_total) > download_limit(package.created_at, now):
        return Decision.deny(Rule.DOWNLOAD_LIMIT, DOWNLOAD_LIMIT_REASON)

    if has_reverse_dependency:
        return Decision.deny(Rule.REVERSE_DEPENDENCY, REVERSE_DEPENDENCY_REASON)

    return Decision.allow(Rule.PASSED)

"""
Package, owner and requester models used by the retirement workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class OwnerKind(Enum):
    USER = "user"
    TEAM = "team"


class Rights(Enum):
    """Caller's effective permission level on a package."""

    NONE = "none"
    PUBLISH = "publish"  # member of an owning team
    FULL = "full"        # individual owner


@dataclass(frozen=True)
class Owner:
    id: int
    kind: OwnerKind
    login: str = ""

    @property
    def is_individual(self) -> bool:
        return self.kind is OwnerKind.USER


@dataclass(frozen=True)
class Package:
    """A published package ("crate"). Immutable apart from retirement."""

    id: int
    name: str
    created_at: datetime

    def __post_init__(self):
        if not self.name:
            raise ValueError("Package name cannot be empty")
        # Naive timestamps from the store are UTC.
        if self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.replace(tzinfo=timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }


class AuthMethod(Enum):
    COOKIE = "cookie"
    TOKEN = "token"


@dataclass(frozen=True)
class Requester:
    """Authenticated caller as handed over by the authentication layer."""

    user_id: int
    login: str
    auth_method: AuthMethod = AuthMethod.COOKIE

    @property
    def via_session(self) -> bool:
        return self.auth_method is AuthMethod.COOKIE


@dataclass
class PackageLookup:
    """Read model returned by the existence lookup endpoint."""

    package: Package
    downloads: int = 0
    owners: Optional[list] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crate": {
                **self.package.to_dict(),
                "downloads": self.downloads,
            },
            "owners": [
                {"id": o.id, "kind": o.kind.value, "login": o.login} for o in (self.owners or [])
            ],
        }

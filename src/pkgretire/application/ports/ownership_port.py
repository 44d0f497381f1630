from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from pkgretire.domain.package import Owner, Requester, Rights


@runtime_checkable
class OwnershipResolverPort(Protocol):
    """Owners of a package and a caller's rights over it."""

    def resolve_owners(self, session: Session, package_id: int) -> List[Owner]:
        """Current owners; raises NotFoundError if the package is gone."""

    def effective_rights(self, session: Session, requester: Requester, owners: List[Owner]) -> Rights:
        """FULL for an individual owner, PUBLISH for an owning team member, else NONE."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from pkgretire.domain.package import Package, PackageLookup
from pkgretire.infrastructure.stores.models import (
    Base,
    CrateDownloadsModel,
    CrateModel,
    DependencyModel,
)
from pkgretire.infrastructure.stores.ownership import SqlAlchemyOwnershipResolver
from pkgretire.infrastructure.stores.sqlalchemy_db import SessionProvider, get_db_url

logger = logging.getLogger(__name__)


def _to_package(row: CrateModel) -> Package:
    return Package(id=row.id, name=row.name, created_at=row.created_at)


class SqlAlchemyCrateStore:
    """
    Crate reads and the retirement delete.

    Methods taking a `session` run inside the caller's transaction so the
    eligibility inputs and the delete share one snapshot.
    """

    def __init__(
        self,
        db_url: Optional[str] = None,
        *,
        provider: Optional[SessionProvider] = None,
        auto_create_schema: bool = True,
    ):
        self.db_url = db_url or get_db_url()
        self._provider = provider or SessionProvider(self.db_url)
        if auto_create_schema:
            # Safety net for local dev/tests. In production, prefer Alembic migrations.
            Base.metadata.create_all(self._provider.engine)

    @property
    def provider(self) -> SessionProvider:
        return self._provider

    def find_by_name(self, session: Session, name: str, *, for_update: bool = False) -> Optional[Package]:
        stmt = select(CrateModel).where(CrateModel.name == name)
        if for_update:
            # Row lock on engines that support it; SQLite ignores it and
            # relies on the delete rowcount check instead.
            stmt = stmt.with_for_update()
        row = session.execute(stmt).scalar_one_or_none()
        return _to_package(row) if row else None

    def download_total(self, session: Session, crate_id: int) -> int:
        value = session.execute(
            select(CrateDownloadsModel.downloads).where(CrateDownloadsModel.crate_id == crate_id)
        ).scalar_one_or_none()
        return int(value or 0)

    def has_reverse_dependency(self, session: Session, crate_id: int) -> bool:
        first = session.execute(
            select(DependencyModel.id).where(DependencyModel.crate_id == crate_id).limit(1)
        ).scalar_one_or_none()
        return first is not None

    def delete(self, session: Session, crate_id: int) -> bool:
        """Hard-delete the crate row; dependent rows go with it via ON DELETE CASCADE."""
        result = session.execute(delete(CrateModel).where(CrateModel.id == crate_id))
        return result.rowcount == 1

    def lookup(self, name: str) -> Optional[PackageLookup]:
        with self._provider.session() as session:
            package = self.find_by_name(session, name)
            if package is None:
                return None
            owners = SqlAlchemyOwnershipResolver().resolve_owners(session, package.id)
            return PackageLookup(
                package=package,
                downloads=self.download_total(session, package.id),
                owners=owners,
            )

    def close(self) -> None:
        self._provider.dispose()

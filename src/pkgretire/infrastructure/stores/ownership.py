from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from pkgretire.application.ports.ownership_port import OwnershipResolverPort
from pkgretire.core.errors import NotFoundError
from pkgretire.domain.package import Owner, OwnerKind, Requester, Rights
from pkgretire.infrastructure.stores.models import (
    CrateModel,
    CrateOwnerModel,
    TeamMemberModel,
    TeamModel,
    UserModel,
)


class SqlAlchemyOwnershipResolver(OwnershipResolverPort):
    """Owner links (users and teams) and team membership from the registry tables."""

    def resolve_owners(self, session: Session, package_id: int) -> List[Owner]:
        exists = session.execute(select(CrateModel.id).where(CrateModel.id == package_id)).scalar_one_or_none()
        if exists is None:
            raise NotFoundError(message=f"crate #{package_id} does not exist", context={"package_id": package_id})

        owners: List[Owner] = []
        user_rows = session.execute(
            select(UserModel.id, UserModel.login)
            .join(CrateOwnerModel, CrateOwnerModel.owner_id == UserModel.id)
            .where(CrateOwnerModel.crate_id == package_id, CrateOwnerModel.owner_kind == OwnerKind.USER.value)
            .order_by(UserModel.id)
        ).all()
        owners.extend(Owner(id=uid, kind=OwnerKind.USER, login=login) for uid, login in user_rows)

        team_rows = session.execute(
            select(TeamModel.id, TeamModel.login)
            .join(CrateOwnerModel, CrateOwnerModel.owner_id == TeamModel.id)
            .where(CrateOwnerModel.crate_id == package_id, CrateOwnerModel.owner_kind == OwnerKind.TEAM.value)
            .order_by(TeamModel.id)
        ).all()
        owners.extend(Owner(id=tid, kind=OwnerKind.TEAM, login=login) for tid, login in team_rows)
        return owners

    def effective_rights(self, session: Session, requester: Requester, owners: List[Owner]) -> Rights:
        if any(o.kind is OwnerKind.USER and o.id == requester.user_id for o in owners):
            return Rights.FULL

        team_ids = [o.id for o in owners if o.kind is OwnerKind.TEAM]
        if not team_ids:
            return Rights.NONE
        member = session.execute(
            select(TeamMemberModel.id)
            .where(TeamMemberModel.team_id.in_(team_ids), TeamMemberModel.user_id == requester.user_id)
            .limit(1)
        ).scalar_one_or_none()
        return Rights.PUBLISH if member is not None else Rights.NONE

    def user_id_for(self, session: Session, login: str) -> Optional[int]:
        return session.execute(select(UserModel.id).where(UserModel.login == login)).scalar_one_or_none()

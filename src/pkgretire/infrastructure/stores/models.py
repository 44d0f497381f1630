from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(128), unique=True, index=True)


class TeamModel(Base):
    """GitHub-style team owner, login formatted as `github:<org>:<team>`."""
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(256), unique=True, index=True)

    members = relationship("TeamMemberModel", back_populates="team", passive_deletes=True)


class TeamMemberModel(Base):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    team = relationship("TeamModel", back_populates="members")


class CrateModel(Base):
    __tablename__ = "crates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    # Child rows are removed by ON DELETE CASCADE, not by the ORM.
    owners = relationship("CrateOwnerModel", back_populates="crate", passive_deletes=True)
    versions = relationship("VersionModel", back_populates="crate", passive_deletes=True)
    downloads = relationship("CrateDownloadsModel", uselist=False, passive_deletes=True)


class CrateOwnerModel(Base):
    __tablename__ = "crate_owners"
    __table_args__ = (UniqueConstraint("crate_id", "owner_id", "owner_kind", name="uq_crate_owners"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    crate_id: Mapped[int] = mapped_column(Integer, ForeignKey("crates.id", ondelete="CASCADE"), index=True)
    owner_id: Mapped[int] = mapped_column(Integer, index=True)
    owner_kind: Mapped[str] = mapped_column(String(16), default="user")  # user/team

    crate = relationship("CrateModel", back_populates="owners")


class CrateDownloadsModel(Base):
    __tablename__ = "crate_downloads"

    crate_id: Mapped[int] = mapped_column(Integer, ForeignKey("crates.id", ondelete="CASCADE"), primary_key=True)
    downloads: Mapped[int] = mapped_column(BigInteger, default=0)


class VersionModel(Base):
    __tablename__ = "versions"
    __table_args__ = (UniqueConstraint("crate_id", "num", name="uq_versions_crate_num"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    crate_id: Mapped[int] = mapped_column(Integer, ForeignKey("crates.id", ondelete="CASCADE"), index=True)
    num: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    crate = relationship("CrateModel", back_populates="versions")


class DependencyModel(Base):
    """Edge from a dependent version to the crate it depends on."""
    __tablename__ = "dependencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(Integer, ForeignKey("versions.id", ondelete="CASCADE"), index=True)
    crate_id: Mapped[int] = mapped_column(Integer, ForeignKey("crates.id", ondelete="CASCADE"), index=True)
    req: Mapped[str] = mapped_column(String(128), default="*")


class BackgroundJobModel(Base):
    """
    Outbox of follow-up jobs.

    Rows are inserted in the same transaction as the data change that
    produced them, and removed by the dispatcher once handed to the queue.
    `job_key` is unique over the table's whole history (row ids can be
    reused once rows are deleted) and names the queued job.
    """
    __tablename__ = "background_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_key: Mapped[str] = mapped_column(String(32), unique=True, default=lambda: uuid.uuid4().hex)
    job_type: Mapped[str] = mapped_column(String(64), index=True)
    data_json: Mapped[str] = mapped_column(Text, default="{}")
    priority: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    def set_data(self, data: Dict[str, Any]) -> None:
        self.data_json = json.dumps(data or {}, ensure_ascii=False)

    def get_data(self) -> Dict[str, Any]:
        try:
            return json.loads(self.data_json or "{}")
        except ValueError:
            return {}

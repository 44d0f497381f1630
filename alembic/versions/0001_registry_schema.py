"""registry schema

Revision ID: 0001_registry_schema
Revises: None
Create Date: 2026-10-12

Crates, owners, teams, download counters, versions/dependencies and the
background job outbox. Foreign keys from crate-owned rows cascade so a
single `DELETE FROM crates` removes everything attached to the crate.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_registry_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("login", sa.String(length=128), nullable=False),
    )
    op.create_index("ix_users_login", "users", ["login"], unique=True)

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("login", sa.String(length=256), nullable=False),
    )
    op.create_index("ix_teams_login", "teams", ["login"], unique=True)

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )
    op.create_index("ix_team_members_team_id", "team_members", ["team_id"])
    op.create_index("ix_team_members_user_id", "team_members", ["user_id"])

    op.create_table(
        "crates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_crates_name", "crates", ["name"], unique=True)
    op.create_index("ix_crates_created_at", "crates", ["created_at"])

    op.create_table(
        "crate_owners",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("crate_id", sa.Integer(), sa.ForeignKey("crates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("owner_kind", sa.String(length=16), server_default="user", nullable=False),
        sa.UniqueConstraint("crate_id", "owner_id", "owner_kind", name="uq_crate_owners"),
    )
    op.create_index("ix_crate_owners_crate_id", "crate_owners", ["crate_id"])
    op.create_index("ix_crate_owners_owner_id", "crate_owners", ["owner_id"])

    op.create_table(
        "crate_downloads",
        sa.Column(
            "crate_id",
            sa.Integer(),
            sa.ForeignKey("crates.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("downloads", sa.BigInteger(), server_default="0", nullable=False),
    )

    op.create_table(
        "versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("crate_id", sa.Integer(), sa.ForeignKey("crates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("num", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("crate_id", "num", name="uq_versions_crate_num"),
    )
    op.create_index("ix_versions_crate_id", "versions", ["crate_id"])

    op.create_table(
        "dependencies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("version_id", sa.Integer(), sa.ForeignKey("versions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("crate_id", sa.Integer(), sa.ForeignKey("crates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("req", sa.String(length=128), server_default="*", nullable=False),
    )
    op.create_index("ix_dependencies_version_id", "dependencies", ["version_id"])
    op.create_index("ix_dependencies_crate_id", "dependencies", ["crate_id"])

    op.create_table(
        "background_jobs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_key", sa.String(length=32), nullable=False),
        sa.Column("job_type", sa.String(length=64), nullable=False),
        sa.Column("data_json", sa.Text(), server_default="{}", nullable=False),
        sa.Column("priority", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_background_jobs_job_key", "background_jobs", ["job_key"], unique=True)
    op.create_index("ix_background_jobs_job_type", "background_jobs", ["job_type"])
    op.create_index("ix_background_jobs_created_at", "background_jobs", ["created_at"])


def downgrade() -> None:
    op.drop_table("background_jobs")
    op.drop_table("dependencies")
    op.drop_table("versions")
    op.drop_table("crate_downloads")
    op.drop_table("crate_owners")
    op.drop_table("crates")
    op.drop_table("team_members")
    op.drop_table("teams")
    op.drop_table("users")

# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds src/ to sys.path so `import pkgretire` works without installing.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

import pytest

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pkgretire.application.workflows.retire_package import RetirementExecutor  # noqa: E402
from pkgretire.config.settings import Settings, reset_settings  # noqa: E402
from pkgretire.core.di.container import Container  # noqa: E402
from pkgretire.infrastructure.event_log.memory_event_log import InMemoryEventLog  # noqa: E402
from pkgretire.infrastructure.queue.outbox import SqlAlchemyJobOutbox  # noqa: E402
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore  # noqa: E402
from pkgretire.infrastructure.stores.models import (  # noqa: E402
    CrateDownloadsModel,
    CrateModel,
    CrateOwnerModel,
    DependencyModel,
    TeamMemberModel,
    TeamModel,
    UserModel,
    VersionModel,
)
from pkgretire.infrastructure.stores.ownership import SqlAlchemyOwnershipResolver  # noqa: E402
from pkgretire.infrastructure.stores.sqlalchemy_db import SessionProvider  # noqa: E402

# Fixed "now" for workflow tests that inject a clock.
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class RegistrySeed:
    """Writes users, teams and crates straight into the registry tables."""

    def __init__(self, provider: SessionProvider, now: datetime = NOW):
        self.provider = provider
        self.now = now

    def user(self, login: str) -> int:
        with self.provider.transaction() as s:
            row = UserModel(login=login)
            s.add(row)
            s.flush()
            return row.id

    def team(self, login: str, members: Iterable[int] = ()) -> int:
        with self.provider.transaction() as s:
            row = TeamModel(login=login)
            s.add(row)
            s.flush()
            for user_id in members:
                s.add(TeamMemberModel(team_id=row.id, user_id=user_id))
            return row.id

    def crate(
        self,
        name: str,
        *,
        age: timedelta = timedelta(hours=1),
        users: Iterable[int] = (),
        teams: Iterable[int] = (),
        downloads: Optional[int] = None,
        versions: Iterable[str] = ("1.0.0",),
    ) -> int:
        with self.provider.transaction() as s:
            row = CrateModel(name=name, created_at=self.now - age)
            s.add(row)
            s.flush()
            for user_id in users:
                s.add(CrateOwnerModel(crate_id=row.id, owner_id=user_id, owner_kind="user"))
            for team_id in teams:
                s.add(CrateOwnerModel(crate_id=row.id, owner_id=team_id, owner_kind="team"))
            if downloads is not None:
                s.add(CrateDownloadsModel(crate_id=row.id, downloads=downloads))
            for num in versions:
                s.add(VersionModel(crate_id=row.id, num=num, created_at=self.now - age))
            return row.id

    def depend(self, dependent_crate_id: int, target_crate_id: int, req: str = "^1") -> int:
        """Make the first version of `dependent_crate_id` depend on `target_crate_id`."""
        with self.provider.transaction() as s:
            version_id = s.query(VersionModel.id).filter(VersionModel.crate_id == dependent_crate_id).first()[0]
            row = DependencyModel(version_id=version_id, crate_id=target_crate_id, req=req)
            s.add(row)
            s.flush()
            return row.id

    def count(self, model) -> int:
        with self.provider.session() as s:
            return s.query(model).count()


@pytest.fixture(autouse=True)
def _reset_process_state():
    Container._instance = None
    reset_settings()
    yield
    Container._instance = None
    reset_settings()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'pkgretire_test.db'}"


@pytest.fixture
def store(db_url):
    store = SqlAlchemyCrateStore(db_url, provider=SessionProvider(db_url, timeout=5.0))
    yield store
    store.close()


@pytest.fixture
def seed(store) -> RegistrySeed:
    return RegistrySeed(store.provider)


@pytest.fixture
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture
def executor(store, event_log) -> RetirementExecutor:
    return RetirementExecutor(
        store,
        SqlAlchemyOwnershipResolver(),
        SqlAlchemyJobOutbox(),
        event_log=event_log,
        clock=lambda: NOW,
    )


@pytest.fixture
def settings(tmp_path, db_url) -> Settings:
    s = Settings()
    s.database.url = db_url
    s.storage.root = str(tmp_path / "storage")
    s.storage.git_index_root = str(tmp_path / "git-index")
    s.audit_enabled = False
    return s


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def seed_factory():
    """RegistrySeed bound to any provider; pass `now=` when the code under test uses the real clock."""
    return RegistrySeed

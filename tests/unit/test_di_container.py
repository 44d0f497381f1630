"""
DI container and bootstrap unit tests
"""

import pytest

from pkgretire.application.ports.event_log_port import EventLogPort
from pkgretire.application.workflows.retire_package import RetirementExecutor
from pkgretire.config.settings import Settings
from pkgretire.core.di import Container, GitIndex, SparseIndex, bootstrap_dependencies
from pkgretire.domain.retirement.eligibility import OwnerCountPolicy
from pkgretire.infrastructure.downstream.storage import LocalFileStorage
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore


class TestContainer:
    def setup_method(self):
        Container._instance = None

    def test_singleton_instance(self):
        assert Container.instance() is Container.instance()

    def test_register_and_resolve(self):
        container = Container.instance()

        class MyService:
            pass

        container.register(MyService, lambda: MyService())
        assert isinstance(container.resolve(MyService), MyService)

    def test_singleton_returns_same_instance(self):
        container = Container.instance()

        class MySingleton:
            pass

        container.register(MySingleton, lambda: MySingleton(), singleton=True)
        assert container.resolve(MySingleton) is container.resolve(MySingleton)

    def test_non_singleton_returns_new_instance(self):
        container = Container.instance()

        class MyService:
            pass

        container.register(MyService, lambda: MyService())
        assert container.resolve(MyService) is not container.resolve(MyService)

    def test_reregister_drops_cached_singleton(self):
        container = Container.instance()
        container.register(str, lambda: "first", singleton=True)
        assert container.resolve(str) == "first"
        container.register(str, lambda: "second", singleton=True)
        assert container.resolve(str) == "second"

    def test_register_instance(self):
        container = Container.instance()
        obj = object()
        container.register_instance(object, obj)
        assert container.resolve(object) is obj

    def test_resolve_unregistered_raises(self):
        with pytest.raises(ValueError):
            Container.instance().resolve(int)

    def test_instance_is_process_wide(self):
        assert Container.instance() is Container.instance()


class TestBootstrap:
    def test_wires_executor_and_downstream_adapters(self, settings: Settings, tmp_path):
        container = bootstrap_dependencies(settings, container=Container())

        executor = container.resolve(RetirementExecutor)
        assert executor.store is container.resolve(SqlAlchemyCrateStore)
        assert executor.owner_count_policy is OwnerCountPolicy.INDIVIDUALS_ONLY
        assert executor.deadline_seconds == settings.retirement.timeout_seconds

        assert container.resolve(GitIndex).root == tmp_path / "git-index"
        assert container.resolve(SparseIndex).root == tmp_path / "storage" / "index"
        assert container.resolve(LocalFileStorage).root == tmp_path / "storage"
        container.resolve(SqlAlchemyCrateStore).close()

    def test_audit_switch(self, settings: Settings):
        settings.audit_enabled = False
        container = bootstrap_dependencies(settings, container=Container())
        assert container.resolve(RetirementExecutor).event_log is None

        settings.audit_enabled = True
        container = bootstrap_dependencies(settings, container=Container())
        assert container.resolve(RetirementExecutor).event_log is container.resolve(EventLogPort)

    def test_owner_count_policy_from_settings(self, settings: Settings):
        settings.retirement.owner_count_policy = "all_owners"
        container = bootstrap_dependencies(settings, container=Container())
        assert container.resolve(RetirementExecutor).owner_count_policy is OwnerCountPolicy.ALL_OWNERS

    def test_defaults_to_process_container(self, settings: Settings):
        container = bootstrap_dependencies(settings)
        assert container is Container.instance()
        assert container.resolve(Settings) is settings

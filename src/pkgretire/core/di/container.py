"""
Lightweight DI container so the API, worker and CLI share one wiring.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, NamedTuple, Type, TypeVar

T = TypeVar("T")


class _Registration(NamedTuple):
    factory: Callable[[], Any]
    singleton: bool


class Container:
    _instance: "Container" | None = None

    def __init__(self) -> None:
        self._registrations: Dict[Type[Any], _Registration] = {}
        self._singletons: Dict[Type[Any], Any] = {}

    @classmethod
    def instance(cls) -> "Container":
        """Process-wide container used when callers do not pass their own."""
        if cls._instance is None:
            cls._instance = Container()
        return cls._instance

    def register(self, interface: Type[T], factory: Callable[[], T], singleton: bool = False) -> None:
        """Register a factory; re-registering replaces any cached singleton."""
        self._registrations[interface] = _Registration(factory, singleton)
        self._singletons.pop(interface, None)

    def register_instance(self, interface: Type[T], instance: T) -> None:
        self._registrations[interface] = _Registration(lambda: instance, True)
        self._singletons[interface] = instance

    def resolve(self, interface: Type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        registration = self._registrations.get(interface)
        if registration is None:
            raise ValueError(f"No factory registered for {interface}")

        instance = registration.factory()
        if registration.singleton:
            self._singletons[interface] = instance
        return instance

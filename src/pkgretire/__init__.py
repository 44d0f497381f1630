# pkgretire/__init__.py
"""
pkgretire - crate retirement for a package registry

Lets the sole owner of a young, rarely-downloaded crate with no dependents
delete it, and schedules the downstream cleanup:
- eligibility evaluation (age, owners, downloads, reverse dependencies)
- transactional delete + background job outbox
- ARQ workers for the git index, sparse index and file storage
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "pkgretire maintainers"


# Lazy imports keep `import pkgretire` cheap and avoid cycles
def __getattr__(name: str):
    if name == "Container":
        from pkgretire.core.di import Container
        return Container
    if name == "bootstrap_dependencies":
        from pkgretire.core.di import bootstrap_dependencies
        return bootstrap_dependencies
    if name == "RetirementExecutor":
        from pkgretire.application.workflows import RetirementExecutor
        return RetirementExecutor
    if name == "evaluate":
        from pkgretire.domain.retirement import evaluate
        return evaluate
    if name == "Settings":
        from pkgretire.config import Settings
        return Settings

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "Container",
    "bootstrap_dependencies",
    "RetirementExecutor",
    "evaluate",
    "Settings",
]

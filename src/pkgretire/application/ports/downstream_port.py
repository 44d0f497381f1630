from __future__ import annotations

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class IndexPort(Protocol):
    """One representation of the package index (git-style or sparse)."""

    def remove(self, name: str) -> bool:
        """Drop the index entry for `name`; False if there was none."""


@runtime_checkable
class StoragePort(Protocol):
    """Blob storage holding package archives and feeds."""

    def delete_all_crate_files(self, name: str) -> List[str]:
        """Remove every stored file belonging to `name`; returns removed keys."""

from __future__ import annotations

import logging
from pathlib import Path

from pkgretire.application.ports.downstream_port import IndexPort

logger = logging.getLogger(__name__)


def index_file_path(name: str) -> str:
    """Relative path of a crate's index file (cargo registry layout)."""
    name = name.lower()
    if len(name) == 1:
        return f"1/{name}"
    if len(name) == 2:
        return f"2/{name}"
    if len(name) == 3:
        return f"3/{name[0]}/{name}"
    return f"{name[0:2]}/{name[2:4]}/{name}"


class LocalIndex(IndexPort):
    """Index files laid out under a directory (a git checkout or the sparse index root)."""

    def __init__(self, root: str | Path, *, label: str = "index"):
        self.root = Path(root)
        self.label = label

    def path_for(self, name: str) -> Path:
        return self.root / index_file_path(name)

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def remove(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.is_file():
            logger.info("%s: no entry for %s, nothing to remove", self.label, name)
            return False
        path.unlink()
        logger.info("%s: removed %s", self.label, path)
        return True

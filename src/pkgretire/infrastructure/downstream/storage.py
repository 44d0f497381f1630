from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from pkgretire.application.ports.downstream_port import StoragePort

logger = logging.getLogger(__name__)


class LocalFileStorage(StoragePort):
    """
    Filesystem stand-in for the blob store.

    Keys mirror the bucket layout: `crates/<name>/<name>-<version>.crate`,
    `readmes/<name>/...` and the per-crate feed `rss/crates/<name>.xml`.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def list_files(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())

    def delete_all_crate_files(self, name: str) -> List[str]:
        removed: List[str] = []
        for prefix in ("crates", "readmes"):
            folder = self.root / prefix / name
            if folder.is_dir():
                removed.extend(
                    sorted(p.relative_to(self.root).as_posix() for p in folder.rglob("*") if p.is_file())
                )
                shutil.rmtree(folder)

        feed = self.root / "rss" / "crates" / f"{name}.xml"
        if feed.is_file():
            feed.unlink()
            removed.append(feed.relative_to(self.root).as_posix())

        logger.info("storage: removed %d file(s) for %s", len(removed), name)
        return removed

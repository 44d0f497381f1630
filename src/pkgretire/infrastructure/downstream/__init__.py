from .index import LocalIndex, index_file_path
from .storage import LocalFileStorage

__all__ = ["LocalIndex", "LocalFileStorage", "index_file_path"]

"""API Routes"""

from . import crates

__all__ = ["crates"]

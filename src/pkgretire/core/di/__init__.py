"""
Dependency injection.
"""

from .container import Container
from .bootstrap import GitIndex, SparseIndex, bootstrap_dependencies

__all__ = ["Container", "GitIndex", "SparseIndex", "bootstrap_dependencies"]

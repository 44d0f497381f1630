"""
Domain layer: packages, owners, and the deletion eligibility rules.
"""

from .package import AuthMethod, Owner, OwnerKind, Package, Requester, Rights

__all__ = [
    "AuthMethod",
    "Owner",
    "OwnerKind",
    "Package",
    "Requester",
    "Rights",
]

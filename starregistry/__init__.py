# starregistry/__init__.py
"""
Star Registry — an append-only, hash-linked ledger of star claims.
Each star is admitted only after its owner signs a short-lived challenge with an Ed25519 wallet key.
"""

from starregistry.core.types import Block, OwnedStar, ValidationResult, Violation, ViolationKind
from starregistry.crypto.keys import WalletKeyPair
from starregistry.registry import StarRegistry

__version__ = "0.1.0"

__all__ = [
    "Block",
    "OwnedStar",
    "StarRegistry",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    "WalletKeyPair",
]

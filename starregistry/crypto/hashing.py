# starregistry/crypto/hashing.py
import hashlib
from abc import ABC, abstractmethod
from typing import Any, Dict

from starregistry.core.canon import canonical_json


class HashLinker(ABC):
    """Computes the content digest that links one block to the next."""

    @abstractmethod
    def digest(self, fields: Dict[str, Any]) -> str:
        """Digest over a block's fields. The caller must leave the hash field out."""


class Sha256Linker(HashLinker):
    """SHA-256 over the RFC 8785 canonical JSON of the fields, lowercase hex."""

    def digest(self, fields: Dict[str, Any]) -> str:
        if "hash" in fields:
            raise ValueError("hash field must be excluded from the digest input")
        return hashlib.sha256(canonical_json(fields)).hexdigest()


DEFAULT_LINKER = Sha256Linker()


def block_hash(block) -> str:
    """Recomputed digest of a block (ignores whatever is stored in block.hash)."""
    return block.compute_hash()

# starregistry/core/types.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from starregistry.core.codec import DEFAULT_CODEC, PayloadCodec
from starregistry.crypto.hashing import DEFAULT_LINKER, HashLinker

GENESIS_PAYLOAD = "Genesis Block"


@runtime_checkable
class Record(Protocol):
    """Capabilities the chain needs from a block, whatever its hash/payload scheme."""

    height: int
    hash: str
    previous_hash: Optional[str]

    def compute_hash(self) -> str: ...

    def validate(self) -> bool: ...

    def decode(self) -> Any: ...


@dataclass(frozen=True)
class Block:
    """Single committed entry of the star ledger. Immutable once built."""
    height: int
    timestamp: int                      # unix seconds, sub-second precision dropped
    previous_hash: Optional[str]        # None only for the genesis block
    payload: str                        # codec-encoded, opaque to the chain
    hash: str = ""                      # filled in by ChainStore.append
    linker: HashLinker = field(default=DEFAULT_LINKER, repr=False, compare=False)
    codec: PayloadCodec = field(default=DEFAULT_CODEC, repr=False, compare=False)

    def content(self) -> Dict[str, Any]:
        """Every hashed field, i.e. everything except `hash` itself."""
        return {
            "height": self.height,
            "timestamp": self.timestamp,
            "previous_hash": self.previous_hash,
            "payload": self.payload,
        }

    def to_dict(self) -> dict:
        d = self.content()
        d["hash"] = self.hash
        return d

    def compute_hash(self) -> str:
        return self.linker.digest(self.content())

    def validate(self) -> bool:
        """Recompute the digest from the current fields and compare with the stored hash."""
        return self.compute_hash() == self.hash

    def decode(self) -> Any:
        return self.codec.decode(self.payload)

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        linker: HashLinker = DEFAULT_LINKER,
        codec: PayloadCodec = DEFAULT_CODEC,
    ) -> "Block":
        return cls(
            height=data["height"],
            timestamp=data["timestamp"],
            previous_hash=data.get("previous_hash"),
            payload=data["payload"],
            hash=data["hash"],
            linker=linker,
            codec=codec,
        )


class ViolationKind(str, Enum):
    BROKEN_LINK = "broken_link"
    SELF_HASH_MISMATCH = "self_hash_mismatch"


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    height: int
    message: str = ""


@dataclass
class ValidationResult:
    """Either valid (no violations) or invalid with every violation found."""
    violations: List[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def message(self) -> str:
        if self.is_valid:
            return "The chain is valid, no error occurred"
        return f"Failed with {len(self.violations)} issues"

    @property
    def first_violation(self) -> Optional[Violation]:
        return self.violations[0] if self.violations else None

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Validation FAILED ({len(self.violations)} issues):"]
        for v in self.violations:
            lines.append(f"  • [{v.height}] {v.kind.value}: {v.message}")
        return "\n".join(lines)


@dataclass(frozen=True)
class OwnedStar:
    owner: str
    star: Dict[str, Any]

    def to_dict(self) -> dict:
        return {"owner": self.owner, "star": self.star}

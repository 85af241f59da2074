# starregistry/verify/validator.py
from typing import List, Sequence

from starregistry.core.types import Record, ValidationResult, Violation, ViolationKind
from starregistry.crypto.hashing import block_hash


class ChainValidator:
    """
    Walks a ledger checking link continuity and per-block self-consistency.
    Reports every violation found, not only the first.
    """

    def find_violations(self, chain: Sequence[Record]) -> List[Violation]:
        violations: List[Violation] = []

        for i, block in enumerate(chain):
            if block.height != i:
                violations.append(Violation(
                    ViolationKind.BROKEN_LINK, i,
                    f"Height mismatch: expected {i}, got {block.height}",
                ))

            if i > 0:
                expected_prev = block_hash(chain[i - 1])
                if block.previous_hash != expected_prev:
                    violations.append(Violation(
                        ViolationKind.BROKEN_LINK, i,
                        f"The chain is broken at this height: {i}",
                    ))
            elif block.previous_hash is not None:
                violations.append(Violation(
                    ViolationKind.BROKEN_LINK, i,
                    "Genesis block must not reference a previous hash",
                ))

            if not block.validate():
                violations.append(Violation(
                    ViolationKind.SELF_HASH_MISMATCH, i,
                    f"The block is not valid at height: {i}",
                ))

        return violations

    def validate(self, chain: Sequence[Record]) -> ValidationResult:
        return ValidationResult(self.find_violations(chain))

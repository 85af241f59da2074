# starregistry/core/errors.py
from typing import List

from starregistry.core.types import Violation


class RegistryError(Exception):
    """Base class for every failure the registry surfaces to callers."""


class ChallengeExpired(RegistryError):
    def __init__(self, elapsed: int, window: int):
        self.elapsed = elapsed
        self.window = window
        super().__init__(
            f"The time for validating the signature has expired ({elapsed}s >= {window}s), "
            "request a new verification message"
        )


class MalformedChallenge(RegistryError):
    """The signed message does not carry a readable issue timestamp."""


class InvalidSignature(RegistryError):
    """Signature verification returned false."""


class MalformedSignature(RegistryError):
    """The verification primitive could not process the address or signature."""


class ChainIntegrityViolation(RegistryError):
    def __init__(self, violations: List[Violation]):
        self.violations = list(violations)
        heights = sorted({v.height for v in self.violations})
        super().__init__(f"Chain integrity violated at heights {heights}")


class BlockNotFound(RegistryError, LookupError):
    pass


class NoStarsFound(RegistryError, LookupError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address {address!r} owns no stars")

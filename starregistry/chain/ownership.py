# starregistry/chain/ownership.py
import logging
from typing import Any, Dict, Optional

from starregistry.chain.store import ChainStore
from starregistry.config import DEFAULT_CHALLENGE_WINDOW
from starregistry.core.errors import (
    ChallengeExpired,
    InvalidSignature,
    MalformedChallenge,
    MalformedSignature,
)
from starregistry.core.types import Block
from starregistry.crypto.keys import Ed25519MessageVerifier, MessageVerifier

logger = logging.getLogger(__name__)

CHALLENGE_SUFFIX = "starRegistry"


def parse_challenge_timestamp(message: str) -> int:
    """Issue time embedded in a challenge, i.e. its second colon-delimited field."""
    parts = message.split(":")
    if len(parts) < 2:
        raise MalformedChallenge(f"Challenge has no timestamp field: {message!r}")
    try:
        return int(parts[1])
    except ValueError:
        raise MalformedChallenge(f"Challenge timestamp is not an integer: {parts[1]!r}") from None


class OwnershipVerifier:
    """
    Issues stateless challenges and admits a star only when the returned challenge
    is fresh and signed by the claimed address.
    """

    def __init__(
        self,
        store: ChainStore,
        verifier: Optional[MessageVerifier] = None,
        window: int = DEFAULT_CHALLENGE_WINDOW,
    ):
        self.store = store
        self.verifier = verifier or Ed25519MessageVerifier()
        self.window = window

    def challenge(self, address: str) -> str:
        return f"{address}:{self.store.clock()}:{CHALLENGE_SUFFIX}"

    def submit(self, address: str, message: str, signature: str, star: Dict[str, Any]) -> Block:
        issued_at = parse_challenge_timestamp(message)
        elapsed = self.store.clock() - issued_at
        if elapsed >= self.window:
            raise ChallengeExpired(elapsed, self.window)

        try:
            verified = self.verifier.verify(message, address, signature)
        except Exception as e:
            raise MalformedSignature(f"Could not verify signature: {e}") from e
        if not verified:
            raise InvalidSignature("The message validation failed, check the address and signature")

        block = self.store.append({"address": address, "message": message, "star": star})
        logger.info("Star registered for %s at height %d", address, block.height)
        return block

# starregistry/chain/store.py
import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Optional, Tuple, Union

from starregistry.core.codec import DEFAULT_CODEC, PayloadCodec
from starregistry.core.errors import ChainIntegrityViolation
from starregistry.core.types import GENESIS_PAYLOAD, Block, ValidationResult
from starregistry.crypto.hashing import DEFAULT_LINKER, HashLinker, block_hash
from starregistry.storage import StorageBackend, create_storage
from starregistry.verify.validator import ChainValidator

logger = logging.getLogger(__name__)


def unix_now() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


class ChainStore:
    """
    Owns the ordered sequence of committed blocks.

    Appends are serialized by a single writer lock. The committed sequence is an
    immutable tuple swapped in one assignment, so lock-free readers see either the
    previous state or the new fully validated one, never a block being rolled back.
    """

    def __init__(
        self,
        storage: Optional[Union[StorageBackend, str]] = None,
        linker: HashLinker = DEFAULT_LINKER,
        codec: PayloadCodec = DEFAULT_CODEC,
        clock: Callable[[], int] = unix_now,
        validator: Optional[ChainValidator] = None,
    ):
        if isinstance(storage, str):
            stripped = storage.strip()
            if stripped.startswith("sqlite://"):
                storage = create_storage(stripped)
            elif stripped:
                storage = create_storage(f"sqlite://{stripped}")
            else:
                storage = None

        self.storage: Optional[StorageBackend] = storage
        self.linker = linker
        self.codec = codec
        self.clock = clock
        self.validator = validator or ChainValidator()
        self._lock = threading.Lock()
        self._blocks: Tuple[Block, ...] = ()

        if self.storage is not None:
            try:
                self._load()
            except Exception:
                self.storage.close()
                raise
        if not self._blocks:
            self.append(GENESIS_PAYLOAD)
            logger.info("Genesis block created: %s", self._blocks[0].hash)

    def _load(self) -> None:
        loaded = tuple(
            replace(b, linker=self.linker, codec=self.codec)
            for b in self.storage.load_blocks()
        )
        if not loaded:
            return
        violations = self.validator.find_violations(loaded)
        if violations:
            raise ChainIntegrityViolation(violations)
        self._blocks = loaded
        logger.info("Loaded %d blocks from storage", len(loaded))

    @property
    def height(self) -> int:
        """Height of the newest committed block; -1 only before genesis exists."""
        return len(self._blocks) - 1

    def get_chain(self) -> Tuple[Block, ...]:
        """Snapshot of the committed chain."""
        return self._blocks

    def last_block(self) -> Optional[Block]:
        blocks = self._blocks
        return blocks[-1] if blocks else None

    def append(self, payload: Any) -> Block:
        """
        Seal `payload` into a new block: assign height/timestamp/previous_hash, hash,
        tentatively commit, validate the whole chain, then publish or roll back.
        Raises ChainIntegrityViolation if the new block breaks the chain.
        """
        with self._lock:
            committed = self._blocks
            height = len(committed)
            previous_hash = block_hash(committed[-1]) if committed else None

            draft = Block(
                height=height,
                timestamp=self.clock(),
                previous_hash=previous_hash,
                payload=self.codec.encode(payload),
                linker=self.linker,
                codec=self.codec,
            )
            block = replace(draft, hash=draft.compute_hash())

            candidate = committed + (block,)
            violations = self.validator.find_violations(candidate)
            own = [v for v in violations if v.height == height]
            if own:
                logger.warning("Rolled back block at height %d: %d violations", height, len(own))
                raise ChainIntegrityViolation(own)
            if violations:
                logger.warning(
                    "Pre-existing chain corruption at heights %s",
                    sorted({v.height for v in violations}),
                )

            if self.storage is not None:
                self.storage.append(block)
            self._blocks = candidate
            return block

    def validate(self) -> ValidationResult:
        return self.validator.validate(self._blocks)

    def close(self) -> None:
        if self.storage is not None:
            self.storage.close()
            self.storage = None

# starregistry/registry.py
from typing import Any, Dict, List, Optional, Union

from starregistry.chain.ownership import OwnershipVerifier
from starregistry.chain.query import QueryIndex
from starregistry.chain.store import ChainStore
from starregistry.config import RegistrySettings
from starregistry.core.types import Block, OwnedStar, ValidationResult
from starregistry.crypto.keys import MessageVerifier
from starregistry.storage import StorageBackend


class StarRegistry:
    """
    Public face of the star ledger: challenge, submit, look up, validate.
    In-memory unless a storage backend (or sqlite path/URI) is given.
    """

    def __init__(
        self,
        storage: Optional[Union[StorageBackend, str]] = None,
        verifier: Optional[MessageVerifier] = None,
        settings: Optional[RegistrySettings] = None,
        **store_options: Any,
    ):
        self.settings = settings or RegistrySettings.from_env()
        self.store = ChainStore(storage=storage, **store_options)
        self.ownership = OwnershipVerifier(self.store, verifier, window=self.settings.challenge_window)
        self.index = QueryIndex(self.store, workers=self.settings.decode_workers)

    @classmethod
    def open(cls, settings: Optional[RegistrySettings] = None, **kwargs: Any) -> "StarRegistry":
        """Registry backed by the SQLite file named in settings."""
        settings = settings or RegistrySettings.from_env()
        return cls(storage=f"sqlite://{settings.db_path}", settings=settings, **kwargs)

    def get_chain_height(self) -> int:
        return self.store.height

    def request_message_ownership_verification(self, address: str) -> str:
        return self.ownership.challenge(address)

    def submit_star(self, address: str, message: str, signature: str, star: Dict[str, Any]) -> Block:
        return self.ownership.submit(address, message, signature, star)

    def get_block_by_hash(self, block_hash: str) -> Block:
        return self.index.find_by_hash(block_hash)

    def get_block_by_height(self, height: int) -> Block:
        return self.index.find_by_height(height)

    def get_stars_by_wallet_address(self, address: str) -> List[OwnedStar]:
        return self.index.stars_by_owner(address)

    def validate_chain(self) -> ValidationResult:
        return self.store.validate()

    def close(self) -> None:
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

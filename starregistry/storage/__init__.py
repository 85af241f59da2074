# starregistry/storage/__init__.py
"""
Storage backends for persisting committed blocks.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from starregistry.core.types import Block


class StorageBackend(ABC):
    """Abstract base for all persistent storage implementations."""

    @abstractmethod
    def append(self, block: Block) -> None:
        pass

    @abstractmethod
    def load_blocks(self) -> List[Block]:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


def create_storage(uri: str) -> StorageBackend:
    if uri.startswith("sqlite://"):
        from .sqlite import SQLiteStorage
        raw_path = uri[len("sqlite://"):]
        if not raw_path:
            raise ValueError(f"Missing database path in storage URI: {uri}")
        return SQLiteStorage(Path(raw_path).resolve())
    raise ValueError(f"Unsupported storage URI: {uri}")


from .sqlite import SQLiteStorage  # noqa: E402

__all__ = ["StorageBackend", "create_storage", "SQLiteStorage"]

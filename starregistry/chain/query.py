# starregistry/chain/query.py
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from starregistry.chain.store import ChainStore
from starregistry.config import DEFAULT_DECODE_WORKERS
from starregistry.core.errors import BlockNotFound, NoStarsFound
from starregistry.core.types import Block, OwnedStar


def _owned_star(block: Block) -> Optional[OwnedStar]:
    data = block.decode()
    if not isinstance(data, dict) or "address" not in data:
        return None
    return OwnedStar(owner=data["address"], star=data.get("star"))


class QueryIndex:
    """Read-only lookups over a snapshot of the committed chain."""

    def __init__(self, store: ChainStore, workers: int = DEFAULT_DECODE_WORKERS):
        self.store = store
        self.workers = workers

    def find_by_hash(self, block_hash: str) -> Block:
        for block in self.store.get_chain():
            if block.hash == block_hash:
                return block
        raise BlockNotFound(f"There's no block with this hash: {block_hash}")

    def find_by_height(self, height: int) -> Block:
        for block in self.store.get_chain():
            if block.height == height:
                return block
        raise BlockNotFound(f"No block at this height: {height}")

    def stars_by_owner(self, address: str, workers: Optional[int] = None) -> List[OwnedStar]:
        star_blocks = [b for b in self.store.get_chain() if b.height > 0]

        # map() yields in submission order, so the filter always sees the full chain-ordered set
        with ThreadPoolExecutor(max_workers=workers or self.workers) as pool:
            collected = list(pool.map(_owned_star, star_blocks))

        owned = [s for s in collected if s is not None and s.owner == address]
        if not owned:
            raise NoStarsFound(address)
        return owned

"""
Local model of Sudoswap pool quotes owned by a single strategy.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolQuote:
    """What a pool pays right now for one NFT of its collection (all wei)."""

    price: int
    protocol_fee: int = 0
    spot_price: int = 0
    delta: int = 0
    fee: int = 0


@dataclass(frozen=True)
class QuoteUpdate:
    """Freshly fetched quote for one pool; ``quote`` is None when unusable."""

    address: str
    nft_collection: Optional[str] = None
    quote: Optional[PoolQuote] = None


@dataclass
class PoolState:
    address: str
    nft_collection: Optional[str] = None
    current_bid: Optional[PoolQuote] = None
    last_synced_block: int = 0

    @property
    def has_quote(self) -> bool:
        return self.current_bid is not None


class MarketSnapshot:
    """
    Pool address -> PoolState map plus the highest ingested block.

    Invariants:
        * keys are unique lowercase addresses
        * ``last_synced_block`` never decreases for a pool
        * every pool has ``last_synced_block <= head_block``
    """

    def __init__(self, head_block: int = 0):
        self.head_block = head_block
        self._pools: Dict[str, PoolState] = {}
        self._by_collection: Dict[str, Set[str]] = defaultdict(set)

    @property
    def pools(self) -> Mapping[str, PoolState]:
        """Read-only view of the pool map."""
        return MappingProxyType(self._pools)

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, address: str) -> bool:
        return address.lower() in self._pools

    def get(self, address: str) -> Optional[PoolState]:
        return self._pools.get(address.lower())

    def quoted_pools(self, nft_collection: str) -> Iterable[PoolState]:
        """Pools trading ``nft_collection`` that currently have a usable quote."""
        for address in self._by_collection.get(nft_collection.lower(), ()):
            pool = self._pools[address]
            if pool.current_bid is not None:
                yield pool

    def best_bid(self, nft_collection: str) -> Optional[PoolState]:
        """
        Highest bidding pool for a collection.

        Ties go to the pool with the larger ``last_synced_block``, then to the
        lower address so the choice is deterministic.
        """
        best = None
        for pool in self.quoted_pools(nft_collection):
            if best is None:
                best = pool
                continue
            rank = (pool.current_bid.price, pool.last_synced_block)
            best_rank = (best.current_bid.price, best.last_synced_block)
            if rank > best_rank or (rank == best_rank and pool.address < best.address):
                best = pool
        return best

    def advance_head(self, block_number: int) -> None:
        if block_number < self.head_block:
            raise ValueError(
                f"Head block cannot move backwards ({self.head_block} -> {block_number})"
            )
        self.head_block = block_number

    def add_pool(self, address: str, block_number: int) -> PoolState:
        """Create an unquoted entry for a newly observed pool (no-op if known)."""
        self._check_block(block_number)
        key = address.lower()
        pool = self._pools.get(key)
        if pool is None:
            pool = PoolState(address=key, last_synced_block=block_number)
            self._pools[key] = pool
        return pool

    def apply_quote(self, update: QuoteUpdate, block_number: int) -> bool:
        """
        Write a refreshed quote observed at ``block_number``.

        An unusable quote removes the pool. Updates older than what the pool
        already reflects are ignored.

        Returns:
            True if the snapshot changed
        """
        self._check_block(block_number)
        key = update.address.lower()
        existing = self._pools.get(key)

        if existing is not None and block_number < existing.last_synced_block:
            logger.debug(
                f"Ignoring stale quote for {key} at block {block_number} "
                f"(pool synced at {existing.last_synced_block})"
            )
            return False

        if update.quote is None or update.nft_collection is None:
            return self.remove(key)

        collection = update.nft_collection.lower()
        if existing is None:
            existing = PoolState(address=key)
            self._pools[key] = existing
        elif existing.nft_collection and existing.nft_collection != collection:
            self._unindex(key, existing.nft_collection)

        existing.nft_collection = collection
        existing.current_bid = update.quote
        existing.last_synced_block = block_number
        self._by_collection[collection].add(key)
        return True

    def remove(self, address: str) -> bool:
        key = address.lower()
        pool = self._pools.pop(key, None)
        if pool is None:
            return False
        if pool.nft_collection:
            self._unindex(key, pool.nft_collection)
        return True

    def _unindex(self, key: str, collection: str) -> None:
        members = self._by_collection.get(collection)
        if members is None:
            return
        members.discard(key)
        if not members:
            del self._by_collection[collection]

    def _check_block(self, block_number: int) -> None:
        if block_number > self.head_block:
            raise ValueError(
                f"Cannot record state at block {block_number} beyond head {self.head_block}"
            )

    def to_dict(self) -> Dict[str, object]:
        return {
            "head_block": self.head_block,
            "pools": len(self._pools),
            "quoted_pools": sum(1 for p in self._pools.values() if p.current_bid is not None),
            "collections": len(self._by_collection),
        }

"""
Tests for the pool snapshot: head monotonicity, staleness and bid selection.
"""

import pytest

from ..market import MarketSnapshot, PoolQuote, QuoteUpdate

NFT = "0x" + "aa" * 20
OTHER_NFT = "0x" + "bb" * 20
POOL_A = "0x" + "01" * 20
POOL_B = "0x" + "02" * 20
POOL_C = "0x" + "03" * 20


def quote(address, price, nft=NFT):
    return QuoteUpdate(address=address, nft_collection=nft, quote=PoolQuote(price=price))


class TestMarketSnapshot:
    """Test snapshot mutation rules."""

    def test_head_cannot_move_backwards(self):
        snapshot = MarketSnapshot(head_block=100)
        snapshot.advance_head(100)
        snapshot.advance_head(105)

        with pytest.raises(ValueError):
            snapshot.advance_head(104)
        assert snapshot.head_block == 105

    def test_state_beyond_head_rejected(self):
        snapshot = MarketSnapshot(head_block=10)

        with pytest.raises(ValueError):
            snapshot.apply_quote(quote(POOL_A, 1), 11)
        with pytest.raises(ValueError):
            snapshot.add_pool(POOL_A, 11)
        assert len(snapshot) == 0

    def test_add_pool_is_idempotent_and_case_insensitive(self):
        snapshot = MarketSnapshot(head_block=10)
        mixed_case = "0x" + "Ab" * 20
        first = snapshot.add_pool(mixed_case, 5)
        second = snapshot.add_pool(mixed_case.lower(), 10)

        assert first is second
        assert len(snapshot) == 1
        assert first.address == mixed_case.lower()
        assert first.last_synced_block == 5
        assert not first.has_quote

    def test_apply_quote_indexes_collection(self):
        snapshot = MarketSnapshot(head_block=10)
        assert snapshot.apply_quote(quote(POOL_A, 100), 10) is True

        pool = snapshot.best_bid(NFT)
        assert pool.address == POOL_A
        assert pool.current_bid.price == 100
        assert pool.last_synced_block == 10
        assert snapshot.best_bid(OTHER_NFT) is None

    def test_unusable_quote_removes_pool(self):
        snapshot = MarketSnapshot(head_block=10)
        snapshot.apply_quote(quote(POOL_A, 100), 5)

        assert snapshot.apply_quote(QuoteUpdate(address=POOL_A), 10) is True
        assert POOL_A not in snapshot
        assert snapshot.best_bid(NFT) is None

    def test_stale_quote_ignored(self):
        snapshot = MarketSnapshot(head_block=10)
        snapshot.apply_quote(quote(POOL_A, 100), 10)

        assert snapshot.apply_quote(quote(POOL_A, 500), 9) is False
        assert snapshot.get(POOL_A).current_bid.price == 100
        assert snapshot.get(POOL_A).last_synced_block == 10

    def test_unquoted_pool_never_selected(self):
        snapshot = MarketSnapshot(head_block=10)
        snapshot.add_pool(POOL_A, 10)

        assert snapshot.best_bid(NFT) is None
        assert list(snapshot.quoted_pools(NFT)) == []

    def test_best_bid_prefers_highest_price(self):
        snapshot = MarketSnapshot(head_block=10)
        snapshot.apply_quote(quote(POOL_A, 100), 10)
        snapshot.apply_quote(quote(POOL_B, 300), 10)
        snapshot.apply_quote(quote(POOL_C, 200), 10)

        assert snapshot.best_bid(NFT).address == POOL_B

    def test_tie_goes_to_fresher_pool(self):
        snapshot = MarketSnapshot(head_block=20)
        snapshot.apply_quote(quote(POOL_A, 100), 20)
        snapshot.apply_quote(quote(POOL_B, 100), 15)

        assert snapshot.best_bid(NFT).address == POOL_A

    def test_full_tie_goes_to_lower_address(self):
        snapshot = MarketSnapshot(head_block=20)
        snapshot.apply_quote(quote(POOL_B, 100), 20)
        snapshot.apply_quote(quote(POOL_A, 100), 20)

        assert snapshot.best_bid(NFT).address == POOL_A

    def test_collection_change_reindexes(self):
        snapshot = MarketSnapshot(head_block=10)
        snapshot.apply_quote(quote(POOL_A, 100), 5)
        snapshot.apply_quote(quote(POOL_A, 100, nft=OTHER_NFT), 10)

        assert snapshot.best_bid(NFT) is None
        assert snapshot.best_bid(OTHER_NFT).address == POOL_A
        assert snapshot.to_dict()["collections"] == 1

    def test_every_pool_within_head(self):
        snapshot = MarketSnapshot(head_block=50)
        snapshot.apply_quote(quote(POOL_A, 1), 40)
        snapshot.add_pool(POOL_B, 50)
        snapshot.advance_head(60)

        assert all(p.last_synced_block <= snapshot.head_block for p in snapshot.pools.values())
        assert snapshot.to_dict() == {"head_block": 60, "pools": 2, "quoted_pools": 1, "collections": 1}

    def test_pools_view_is_read_only(self):
        snapshot = MarketSnapshot(head_block=1)
        with pytest.raises(TypeError):
            snapshot.pools[POOL_A] = None

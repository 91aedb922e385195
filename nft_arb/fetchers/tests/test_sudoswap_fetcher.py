"""
Tests for block range chunking and Sudoswap log parsing.
"""

import pytest

from ..base import FetchError, block_ranges
from ..sudoswap_fetcher import PoolActivity, SudoswapFetcher
from .conftest import new_pair_log, pair_event_log

POOL_A = "0x" + "01" * 20
POOL_B = "0x" + "02" * 20
STRANGER = "0x" + "ee" * 20


class TestBlockRanges:
    """Test inclusive range splitting."""

    def test_exact_multiple(self):
        assert list(block_ranges(0, 399, 200)) == [(0, 199), (200, 399)]

    def test_remainder(self):
        assert list(block_ranges(10, 15, 4)) == [(10, 13), (14, 15)]

    def test_single_block(self):
        assert list(block_ranges(7, 7, 200)) == [(7, 7)]

    def test_empty_range(self):
        assert list(block_ranges(8, 7, 200)) == []

    def test_invalid_chunk(self):
        with pytest.raises(ValueError):
            list(block_ranges(0, 10, 0))


class TestPoolActivity:
    def test_merge_keeps_creation_order(self):
        first = PoolActivity(0, 9, new_pools=["a", "b"], touched_pools={"x"})
        second = PoolActivity(10, 19, new_pools=["b", "c"], touched_pools={"y"})

        merged = first.merge(second)

        assert merged.new_pools == ["a", "b", "c"]
        assert merged.touched_pools == {"x", "y"}
        assert (merged.start_block, merged.end_block) == (0, 19)


class TestSudoswapFetcher:
    """Test log parsing and chunked scans."""

    def test_parse_logs(self, mock_web3, protocol_config):
        fetcher = SudoswapFetcher(mock_web3, protocol_config)
        logs = [
            new_pair_log(protocol_config, POOL_A),
            new_pair_log(protocol_config, POOL_A),
            new_pair_log(protocol_config, POOL_B, emitter=STRANGER),
            pair_event_log(protocol_config, POOL_B, "SpotPriceUpdate(uint128)"),
            pair_event_log(protocol_config, POOL_A, "TokenDeposit(uint256)"),
            {"address": POOL_A, "topics": [], "data": "0x"},
        ]

        activity = fetcher.parse_logs(logs, 100, 100)

        assert activity.new_pools == [POOL_A]
        assert activity.touched_pools == {POOL_A, POOL_B}

    def test_validate_config(self, mock_web3, protocol_config):
        fetcher = SudoswapFetcher(mock_web3, protocol_config)
        assert fetcher.validate_config() is True
        assert fetcher.get_identifier() == "ethereum_fetcher"

    @pytest.mark.asyncio
    async def test_scan_pool_activity_chunks_requests(self, mock_web3, protocol_config):
        protocol_config.BLOCK_CHUNK_SIZE = 100
        mock_web3.eth.get_logs.side_effect = [
            [new_pair_log(protocol_config, POOL_A, block=50)],
            [pair_event_log(protocol_config, POOL_B, block=150)],
            [],
        ]
        fetcher = SudoswapFetcher(mock_web3, protocol_config)

        activity = await fetcher.scan_pool_activity(0, 250)

        ranges = [
            (call.args[0]["fromBlock"], call.args[0]["toBlock"])
            for call in mock_web3.eth.get_logs.await_args_list
        ]
        assert ranges == [(0, 99), (100, 199), (200, 250)]
        assert activity.new_pools == [POOL_A]
        assert activity.touched_pools == {POOL_B}

    @pytest.mark.asyncio
    async def test_new_pool_scan_filters_by_factory(self, mock_web3, protocol_config):
        fetcher = SudoswapFetcher(mock_web3, protocol_config)

        await fetcher.get_new_pools(0, 10)

        params = mock_web3.eth.get_logs.await_args.args[0]
        assert params["topics"] == [protocol_config.new_pair_topic.lower()]
        assert [a.lower() for a in params["address"]] == [protocol_config.SUDOSWAP_FACTORY_ADDRESS.lower()]

    @pytest.mark.asyncio
    async def test_failed_chunk_raises(self, mock_web3, protocol_config):
        mock_web3.eth.get_logs.side_effect = ConnectionError("connection refused")
        fetcher = SudoswapFetcher(mock_web3, protocol_config)

        with pytest.raises(FetchError):
            await fetcher.scan_pool_activity(0, 10)
        assert mock_web3.eth.get_logs.await_count == protocol_config.MAX_RETRY_ATTEMPTS

    @pytest.mark.asyncio
    async def test_fetch_logs_reports_failure(self, mock_web3, protocol_config):
        mock_web3.eth.get_logs.side_effect = ConnectionError("connection refused")
        fetcher = SudoswapFetcher(mock_web3, protocol_config)

        result = await fetcher.fetch_logs(0, 10)

        assert result.failed
        assert "connection refused" in result.error

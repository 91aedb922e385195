"""
Tests for the strategy lifecycle state machine.
"""

import asyncio

import pytest

from ..errors import ProcessingFailure, StrategyStateError, SyncFailure
from ..strategy import Strategy, StrategyState, SyncResult
from ..types import BlockEvent
from .conftest import RecordingStrategy


class SlowStrategy(Strategy):
    """Blocks inside _handle_event until released."""

    def __init__(self):
        super().__init__("slow")
        self.release = asyncio.Event()

    async def _sync(self):
        return SyncResult(success=True, head_block=1)

    async def _handle_event(self, event):
        await self.release.wait()
        return None


class TestStrategyStateMachine:
    """Test state transitions and refusals."""

    @pytest.mark.asyncio
    async def test_unsynced_strategy_refuses_events(self, recording_strategy):
        assert recording_strategy.state is StrategyState.UNINITIALIZED

        with pytest.raises(StrategyStateError):
            await recording_strategy.process_event(BlockEvent(block_number=1))
        assert recording_strategy.seen == []

    @pytest.mark.asyncio
    async def test_successful_sync(self, recording_strategy):
        result = await recording_strategy.sync_state()

        assert result.success is True
        assert result.end_time is not None
        assert recording_strategy.state is StrategyState.SYNCED
        assert recording_strategy.last_sync is result

    @pytest.mark.asyncio
    async def test_failed_sync_leaves_strategy_failed(self):
        strategy = RecordingStrategy(fail_sync=True)

        with pytest.raises(SyncFailure) as exc_info:
            await strategy.sync_state()

        assert "ConnectionError" in str(exc_info.value)
        assert strategy.state is StrategyState.FAILED
        with pytest.raises(StrategyStateError):
            await strategy.process_event(BlockEvent(block_number=1))

    @pytest.mark.asyncio
    async def test_processing_failure_returns_to_synced(self):
        strategy = RecordingStrategy(fail_on=3)
        await strategy.sync_state()

        with pytest.raises(ProcessingFailure) as exc_info:
            await strategy.process_event(BlockEvent(block_number=3))

        assert exc_info.value.event_kind == "new_block"
        assert strategy.state is StrategyState.SYNCED
        assert await strategy.process_event(BlockEvent(block_number=5)) is None
        assert strategy.seen == [5]

    @pytest.mark.asyncio
    async def test_concurrent_processing_refused(self):
        strategy = SlowStrategy()
        await strategy.sync_state()

        first = asyncio.create_task(strategy.process_event(BlockEvent(block_number=2)))
        await asyncio.sleep(0)
        assert strategy.state is StrategyState.PROCESSING

        with pytest.raises(StrategyStateError):
            await strategy.process_event(BlockEvent(block_number=3))
        with pytest.raises(StrategyStateError):
            await strategy.sync_state()

        strategy.release.set()
        await first
        assert strategy.state is StrategyState.SYNCED

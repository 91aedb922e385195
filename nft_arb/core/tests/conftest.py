"""Test fixtures and fakes for the engine core."""
import asyncio
from typing import Any, List, Optional

import pytest

from ..collector import Collector
from ..executor import ExecutionResult, Executor
from ..strategy import Strategy, SyncResult
from ..types import ActionKind, BlockEvent, SubmitTransactionAction


class ScriptedCollector(Collector):
    """Emits a fixed list of payloads, then idles until cancelled."""

    def __init__(self, payloads: List[Any], name: str = "scripted", **kwargs):
        super().__init__(name, **kwargs)
        self.payloads = list(payloads)

    async def subscribe(self, channel):
        while self.payloads:
            await self.emit(channel, self.payloads.pop(0))
        await asyncio.Event().wait()

    def normalize(self, payload):
        if isinstance(payload, int):
            return BlockEvent(block_number=payload)
        return None


class RecordingStrategy(Strategy):
    """Records events; returns an action for every even block."""

    action_kinds = (ActionKind.SUBMIT_TRANSACTION,)

    def __init__(self, name: Optional[str] = None, fail_sync: bool = False, fail_on: Optional[int] = None):
        super().__init__(name)
        self.fail_sync = fail_sync
        self.fail_on = fail_on
        self.seen: List[int] = []

    async def _sync(self) -> SyncResult:
        if self.fail_sync:
            raise ConnectionError("rpc unreachable")
        return SyncResult(success=True, head_block=0)

    async def _handle_event(self, event):
        if event.block_number == self.fail_on:
            raise RuntimeError("boom")
        self.seen.append(event.block_number)
        if event.block_number % 2 == 0:
            return SubmitTransactionAction(
                to="0x" + "11" * 20, data="0x", value=event.block_number, deadline_block=event.block_number + 2
            )
        return None


class GatedStrategy(RecordingStrategy):
    """Sync blocks until ``gate`` is set; records whether sync had finished per event."""

    def __init__(self, name: Optional[str] = None):
        super().__init__(name)
        self.gate = asyncio.Event()
        self.sync_started = asyncio.Event()
        self.sync_finished = False
        self.calls_before_sync: List[Any] = []

    async def _sync(self) -> SyncResult:
        self.sync_started.set()
        await self.gate.wait()
        self.sync_finished = True
        return SyncResult(success=True, head_block=0)

    async def process_event(self, event):
        if not self.sync_finished:
            self.calls_before_sync.append(event)
        return await super().process_event(event)


class RecordingExecutor(Executor):
    """Collects executed actions and signals once ``expected`` have arrived."""

    action_kind = ActionKind.SUBMIT_TRANSACTION

    def __init__(self, expected: int = 1):
        super().__init__()
        self.actions: List[SubmitTransactionAction] = []
        self.expected = expected
        self.done = asyncio.Event()

    async def execute(self, action) -> ExecutionResult:
        self.actions.append(action)
        if len(self.actions) >= self.expected:
            self.done.set()
        return self.succeeded(action)


@pytest.fixture
def recording_strategy():
    return RecordingStrategy()


@pytest.fixture
def recording_executor():
    return RecordingExecutor()

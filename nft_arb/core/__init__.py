"""
Event-driven core: collectors feed a bounded channel, the engine fans events
out to strategies, and actions are routed to executors.

Usage:
    from nft_arb.core import Engine

    engine = Engine(channel_capacity=512)
    engine.add_collector(collector)
    engine.add_strategy(strategy)
    engine.add_executor(executor)
    await engine.run()
"""

from .channel import EventChannel, OverflowPolicy
from .collector import Collector
from .engine import Engine
from .errors import (
    CollectorFailure,
    EngineConfigError,
    EngineError,
    ExecutionFailure,
    ProcessingFailure,
    StrategyStateError,
    SyncFailure,
)
from .executor import ExecutionResult, Executor
from .market import MarketSnapshot, PoolQuote, PoolState, QuoteUpdate
from .strategy import Strategy, StrategyState, SyncResult
from .types import (
    Action,
    ActionKind,
    BlockEvent,
    Event,
    EventKind,
    ListingEvent,
    SubmitTransactionAction,
)

__all__ = [
    "EventChannel",
    "OverflowPolicy",
    "Collector",
    "Engine",
    "CollectorFailure",
    "EngineConfigError",
    "EngineError",
    "ExecutionFailure",
    "ProcessingFailure",
    "StrategyStateError",
    "SyncFailure",
    "ExecutionResult",
    "Executor",
    "MarketSnapshot",
    "PoolQuote",
    "PoolState",
    "QuoteUpdate",
    "Strategy",
    "StrategyState",
    "SyncResult",
    "Action",
    "ActionKind",
    "BlockEvent",
    "Event",
    "EventKind",
    "ListingEvent",
    "SubmitTransactionAction",
]

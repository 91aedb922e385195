"""
Failure taxonomy for the engine.

Every failure except ``SyncFailure`` is handled at the smallest enclosing
boundary (one subscription, one event, one action) and never stops the engine.
"""

from typing import Optional


class EngineError(Exception):
    """Base exception for engine errors."""
    pass


class EngineConfigError(EngineError):
    """Raised at startup when the engine wiring is inconsistent."""
    pass


class CollectorFailure(EngineError):
    """A collector lost its source (disconnect, auth hiccup); it resubscribes."""

    def __init__(self, collector: str, message: str):
        super().__init__(f"{collector}: {message}")
        self.collector = collector


class SyncFailure(EngineError):
    """State sync exhausted its retry budget; the strategy must not trade."""

    def __init__(self, strategy: str, message: str):
        super().__init__(f"{strategy}: {message}")
        self.strategy = strategy


class ProcessingFailure(EngineError):
    """Handling of a single event failed; the snapshot was left untouched."""

    def __init__(self, strategy: str, event_kind: str, message: str):
        super().__init__(f"{strategy} [{event_kind}]: {message}")
        self.strategy = strategy
        self.event_kind = event_kind


class StrategyStateError(EngineError):
    """An event was offered to a strategy that cannot accept it right now."""
    pass


class ExecutionFailure(EngineError):
    """
    Structured executor failure.

    Executors return (not raise) these for expected business failures so the
    engine can log them and carry on.
    """

    def __init__(self, executor: str, reason: str, detail: Optional[str] = None):
        message = f"{executor}: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.executor = executor
        self.reason = reason
        self.detail = detail

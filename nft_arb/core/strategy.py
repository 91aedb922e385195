"""
Strategy contract and lifecycle state machine.

    UNINITIALIZED -> SYNCING -> SYNCED -> PROCESSING -> SYNCED -> ...
                         +-> FAILED

Subclasses implement ``_sync`` and ``_handle_event``; the public
``sync_state`` / ``process_event`` wrappers enforce the transitions and the
failure taxonomy.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import ProcessingFailure, StrategyStateError, SyncFailure
from .types import Action, Event

logger = logging.getLogger(__name__)


class StrategyState(Enum):
    """Strategy lifecycle state."""
    UNINITIALIZED = "uninitialized"
    SYNCING = "syncing"
    SYNCED = "synced"
    PROCESSING = "processing"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of a full state sync."""
    success: bool
    head_block: Optional[int] = None
    pool_count: int = 0
    batches: int = 0
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> Optional[timedelta]:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None


class Strategy(ABC):
    """
    Abstract base class for strategies.

    A strategy owns its market state exclusively. The engine never calls
    ``process_event`` concurrently on one instance; the state machine refuses
    it anyway.
    """

    #: Action kinds this strategy may return; each needs a registered executor
    action_kinds: Tuple[str, ...] = ()

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._state = StrategyState.UNINITIALIZED
        self.last_sync: Optional[SyncResult] = None

    @property
    def state(self) -> StrategyState:
        return self._state

    @property
    def is_synced(self) -> bool:
        return self._state in (StrategyState.SYNCED, StrategyState.PROCESSING)

    async def sync_state(self) -> SyncResult:
        """
        Rebuild the strategy's market state from chain history.

        Raises:
            SyncFailure: If the rebuild could not complete; the strategy is
                left FAILED and must not receive live events
        """
        if self._state in (StrategyState.SYNCING, StrategyState.PROCESSING):
            raise StrategyStateError(f"{self.name}: cannot sync while {self._state.value}")

        self._state = StrategyState.SYNCING
        self.logger.info(f"{self.name}: syncing state")

        try:
            result = await self._sync()
        except SyncFailure:
            self._state = StrategyState.FAILED
            raise
        except Exception as e:
            self._state = StrategyState.FAILED
            raise SyncFailure(self.name, f"{type(e).__name__}: {e}") from e

        result.end_time = result.end_time or datetime.now(timezone.utc)
        self.last_sync = result
        self._state = StrategyState.SYNCED
        self.logger.info(
            f"{self.name}: synced {result.pool_count} pools up to block {result.head_block} "
            f"in {result.batches} batches"
        )
        return result

    async def process_event(self, event: Event) -> Optional[Action]:
        """
        Handle one event and return at most one action.

        Raises:
            StrategyStateError: If the strategy is not synced or is busy
            ProcessingFailure: If handling failed; state is unchanged
        """
        if self._state is StrategyState.PROCESSING:
            raise StrategyStateError(f"{self.name}: already processing an event")
        if self._state is not StrategyState.SYNCED:
            raise StrategyStateError(f"{self.name}: not synced ({self._state.value})")

        self._state = StrategyState.PROCESSING
        try:
            return await self._handle_event(event)
        except ProcessingFailure:
            raise
        except Exception as e:
            raise ProcessingFailure(
                self.name, getattr(event, "kind", type(event).__name__), f"{type(e).__name__}: {e}"
            ) from e
        finally:
            self._state = StrategyState.SYNCED

    @abstractmethod
    async def _sync(self) -> SyncResult:
        pass

    @abstractmethod
    async def _handle_event(self, event: Event) -> Optional[Action]:
        pass

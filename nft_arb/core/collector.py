"""
Collector contract: adapt one external push source into engine events.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .channel import EventChannel
from .errors import CollectorFailure
from .types import Event

logger = logging.getLogger(__name__)


class Collector(ABC):
    """
    Abstract base class for event collectors.

    Subclasses implement ``subscribe`` (read the source and call ``emit`` for
    every payload) and ``normalize`` (payload -> Event). ``run`` keeps the
    subscription alive, resubscribing with capped exponential backoff after
    each ``CollectorFailure``.
    """

    def __init__(
        self,
        name: str,
        retry_delay: float = 1.0,
        max_retry_delay: float = 60.0,
        max_consecutive_failures: Optional[int] = None,
    ):
        self.name = name
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.max_consecutive_failures = max_consecutive_failures
        self.running = False
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

        self._current_delay = retry_delay
        self._consecutive_failures = 0
        self.stats: Dict[str, int] = {
            "emitted": 0,
            "rejected": 0,
            "dropped": 0,
            "failures": 0,
            "resubscribes": 0,
        }

    @abstractmethod
    async def subscribe(self, channel: EventChannel) -> None:
        """
        Read from the source until it ends, emitting each payload.

        Raises:
            CollectorFailure: When the source disconnects or errors
        """
        pass

    @abstractmethod
    def normalize(self, payload: Any) -> Optional[Event]:
        """Convert a source payload into an Event, or None to skip it."""
        pass

    async def emit(self, channel: EventChannel, payload: Any) -> bool:
        """
        Normalize a payload and publish it onto the shared channel.

        Returns:
            True if an event was queued
        """
        event = self.normalize(payload)
        if event is None:
            self.stats["rejected"] += 1
            return False

        # A delivered payload means the subscription is healthy again
        self._current_delay = self.retry_delay
        self._consecutive_failures = 0

        queued = await channel.publish(event)
        if queued:
            self.stats["emitted"] += 1
        else:
            self.stats["dropped"] += 1
        return queued

    async def run(self, channel: EventChannel) -> None:
        """Subscribe and keep resubscribing until ``stop`` is called."""
        self.running = True
        self.logger.info(f"Starting collector {self.name}")

        while self.running:
            try:
                await self.subscribe(channel)
                if not self.running:
                    break
                failure = CollectorFailure(self.name, "source stream ended")
            except CollectorFailure as e:
                failure = e
            except Exception as e:
                failure = CollectorFailure(self.name, f"{type(e).__name__}: {e}")

            if not self.running:
                break
            await self._handle_failure(failure)

        self.logger.info(f"Collector {self.name} stopped")

    async def _handle_failure(self, failure: CollectorFailure) -> None:
        self.stats["failures"] += 1
        self._consecutive_failures += 1

        if (
            self.max_consecutive_failures is not None
            and self._consecutive_failures >= self.max_consecutive_failures
        ):
            self.logger.error(
                f"{failure}; giving up after {self._consecutive_failures} consecutive failures"
            )
            self.running = False
            raise failure

        delay = self._current_delay
        self.logger.warning(
            f"{failure}; resubscribing in {delay:.1f}s "
            f"(failure {self._consecutive_failures}, total {self.stats['failures']})"
        )
        await asyncio.sleep(delay)
        self._current_delay = min(self._current_delay * 2, self.max_retry_delay)
        self.stats["resubscribes"] += 1

    def stop(self) -> None:
        """Ask ``run`` to return after the current subscription."""
        self.running = False

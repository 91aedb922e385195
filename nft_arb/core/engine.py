"""
Engine: the single point of event ordering and lifecycle control.

Collectors publish into one shared channel. The engine is its only reader
and forwards every event, in arrival order, to a bounded inbox per admitted
strategy. Each strategy has one worker that finishes ``process_event``
before taking its next event; different strategies run concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from .channel import EventChannel, OverflowPolicy
from .collector import Collector
from .errors import (
    CollectorFailure,
    EngineConfigError,
    ProcessingFailure,
    StrategyStateError,
    SyncFailure,
)
from .executor import ExecutionResult, Executor
from .strategy import Strategy, SyncResult
from .types import Action

logger = logging.getLogger(__name__)


@dataclass
class _Route:
    strategy: Strategy
    inbox: EventChannel
    open: bool = True


class Engine:
    """
    Wires collectors, strategies and executors together.

    Usage:
        engine = Engine()
        engine.add_collector(NewBlockCollector(...))
        engine.add_strategy(OpenseaSudoswapArb(...))
        engine.add_executor(TransactionExecutor(...))
        await engine.run()
    """

    def __init__(
        self,
        channel_capacity: int = 512,
        overflow_policy: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
        inbox_capacity: Optional[int] = None,
    ):
        self.collectors: List[Collector] = []
        self.strategies: List[Strategy] = []
        self.executors: Dict[str, Executor] = {}
        self.channel: EventChannel = EventChannel(channel_capacity, overflow_policy, name="events")
        self.inbox_capacity = inbox_capacity or channel_capacity

        self.sync_results: Dict[str, SyncResult] = {}
        self.running = False
        self.stats: Dict[str, int] = {
            "events_received": 0,
            "events_dispatched": 0,
            "actions": 0,
            "processing_failures": 0,
            "execution_failures": 0,
            "sync_failures": 0,
            "collector_failures": 0,
        }

        self._routes: List[_Route] = []
        self._tasks: List[asyncio.Task] = []
        self._collector_tasks: List[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None
        self._execution_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config) -> "Engine":
        """Build an engine from an ``EngineConfig``."""
        return cls(
            channel_capacity=config.CHANNEL_CAPACITY,
            overflow_policy=OverflowPolicy(config.OVERFLOW_POLICY),
        )

    def add_collector(self, collector: Collector) -> None:
        self.collectors.append(collector)
        logger.info(f"Added collector: {collector.name}")

    def add_strategy(self, strategy: Strategy) -> None:
        if any(s.name == strategy.name for s in self.strategies):
            raise EngineConfigError(f"Duplicate strategy name: {strategy.name}")
        self.strategies.append(strategy)
        logger.info(f"Added strategy: {strategy.name}")

    def add_executor(self, executor: Executor) -> None:
        if not executor.action_kind:
            raise EngineConfigError(f"Executor {executor.name} declares no action kind")
        if executor.action_kind in self.executors:
            raise EngineConfigError(f"Executor already registered for: {executor.action_kind}")
        self.executors[executor.action_kind] = executor
        logger.info(f"Added executor for: {executor.action_kind}")

    def validate(self) -> None:
        """
        Check the wiring before anything starts.

        Raises:
            EngineConfigError: If there is nothing to run or an action kind a
                strategy may emit has no executor
        """
        if not self.strategies:
            raise EngineConfigError("No strategies registered")
        if not self.collectors:
            raise EngineConfigError("No collectors registered")
        for strategy in self.strategies:
            missing = [kind for kind in strategy.action_kinds if kind not in self.executors]
            if missing:
                raise EngineConfigError(
                    f"Strategy {strategy.name} emits {missing} but no executor is registered"
                )

    async def run(self) -> None:
        """
        Start collectors, sync strategies, then dispatch until stopped.

        Raises:
            EngineConfigError: On invalid wiring
            SyncFailure: If no strategy could be synced
        """
        self.validate()
        self.running = True

        # Inboxes exist before sync so events arriving meanwhile keep their order
        self._routes = [
            _Route(s, EventChannel(self.inbox_capacity, OverflowPolicy.BLOCK, name=f"{s.name}-inbox"))
            for s in self.strategies
        ]

        self._stop_event = asyncio.Event()

        try:
            for collector in self.collectors:
                self._collector_tasks.append(asyncio.create_task(self._run_collector(collector)))
            self._tasks.append(asyncio.create_task(self._dispatch_loop()))

            admitted = await self._sync_strategies()
            if not admitted:
                raise SyncFailure("engine", "no strategy completed state sync")

            self._tasks.extend(
                asyncio.create_task(self._strategy_worker(route)) for route in admitted
            )
            logger.info(f"Engine live with {len(admitted)}/{len(self.strategies)} strategies")

            # Dispatcher and workers loop forever; finishing early means a crash
            stop_waiter = asyncio.create_task(self._stop_event.wait())
            done, _ = await asyncio.wait(
                [stop_waiter, *self._tasks], return_when=asyncio.FIRST_COMPLETED
            )
            stop_waiter.cancel()
            for task in done:
                if task is not stop_waiter and not task.cancelled() and task.exception():
                    raise task.exception()
        finally:
            await self.shutdown()

    async def _sync_strategies(self) -> List[_Route]:
        results = await asyncio.gather(
            *(self._sync_strategy(route) for route in self._routes)
        )
        return [route for route, ok in zip(self._routes, results) if ok]

    async def _sync_strategy(self, route: _Route) -> bool:
        strategy = route.strategy
        try:
            self.sync_results[strategy.name] = await strategy.sync_state()
            return True
        except SyncFailure as e:
            self.stats["sync_failures"] += 1
            logger.error(f"Sync failed, excluding strategy from live dispatch: {e}")
            route.open = False
            dropped = route.inbox.drain()
            if dropped:
                logger.info(f"Discarded {dropped} queued events for {strategy.name}")
            return False

    async def _run_collector(self, collector: Collector) -> None:
        try:
            await collector.run(self.channel)
        except CollectorFailure as e:
            self.stats["collector_failures"] += 1
            logger.error(f"Collector {collector.name} gave up: {e}")

    async def _dispatch_loop(self) -> None:
        while self.running:
            event = await self.channel.get()
            self.stats["events_received"] += 1
            for route in self._routes:
                if route.open:
                    await route.inbox.publish(event)

    async def _strategy_worker(self, route: _Route) -> None:
        strategy = route.strategy
        while self.running:
            event = await route.inbox.get()
            self.stats["events_dispatched"] += 1
            try:
                action = await strategy.process_event(event)
            except (ProcessingFailure, StrategyStateError) as e:
                self.stats["processing_failures"] += 1
                logger.error(f"Event processing failed: {e}")
                continue

            if action is not None:
                self._route_action(strategy, action)

    def _route_action(self, strategy: Strategy, action: Action) -> None:
        executor = self.executors.get(action.kind)
        if executor is None:
            self.stats["execution_failures"] += 1
            logger.error(f"{strategy.name} emitted {action.kind} with no executor; dropped")
            return

        self.stats["actions"] += 1
        task = asyncio.create_task(self._execute(executor, action))
        self._execution_tasks.add(task)
        task.add_done_callback(self._execution_tasks.discard)

    async def _execute(self, executor: Executor, action: Action) -> Optional[ExecutionResult]:
        try:
            result = await executor.execute(action)
        except Exception as e:
            self.stats["execution_failures"] += 1
            logger.exception(f"Executor {executor.name} raised: {e}")
            return None

        if result.failed:
            self.stats["execution_failures"] += 1
            logger.warning(f"Execution failed: {result.error}")
        else:
            logger.info(f"Executed {action.kind} via {executor.name}")
        return result

    def stop(self) -> None:
        """Ask ``run`` to return; it shuts everything down on the way out."""
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def shutdown(self) -> None:
        """Cancel collectors and workers; in-flight executions are awaited."""
        self.running = False
        for collector in self.collectors:
            collector.stop()
        tasks = self._collector_tasks + self._tasks
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._collector_tasks = []
        self._tasks = []
        if self._execution_tasks:
            await asyncio.gather(*list(self._execution_tasks), return_exceptions=True)

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            "events_dropped": self.channel.stats["dropped"],
            "strategies": {s.name: s.state.value for s in self.strategies},
        }

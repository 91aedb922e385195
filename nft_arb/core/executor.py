"""
Executor contract: perform one kind of side effect for one action kind.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .errors import ExecutionFailure
from .types import Action

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of executing one action."""

    success: bool
    action_kind: str
    failure: Optional[ExecutionFailure] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def failed(self) -> bool:
        return not self.success

    @property
    def error(self) -> Optional[str]:
        return str(self.failure) if self.failure else None


class Executor(ABC):
    """
    Abstract base class for executors.

    ``execute`` must not raise for expected business failures; it returns an
    ``ExecutionResult`` carrying an ``ExecutionFailure`` instead. The engine
    may deliver the same action more than once.
    """

    #: Action kind this executor consumes
    action_kind: str = ""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def execute(self, action: Action) -> ExecutionResult:
        """Perform the side effect for one action."""
        pass

    def succeeded(self, action: Action, **metadata: Any) -> ExecutionResult:
        return ExecutionResult(success=True, action_kind=action.kind, metadata=metadata)

    def failed(self, action: Action, reason: str, detail: Optional[str] = None, **metadata: Any) -> ExecutionResult:
        return ExecutionResult(
            success=False,
            action_kind=action.kind,
            failure=ExecutionFailure(self.name, reason, detail),
            metadata=metadata,
        )

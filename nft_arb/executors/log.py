"""
Executor that only logs actions (dry-run mode).
"""

import logging
from typing import Optional

from ..core.executor import ExecutionResult, Executor
from ..core.types import ActionKind, SubmitTransactionAction


class LogExecutor(Executor):
    """Log each transaction the strategy would have submitted."""

    action_kind = ActionKind.SUBMIT_TRANSACTION

    def __init__(self, name: Optional[str] = None, level: int = logging.INFO):
        super().__init__(name)
        self.level = level
        self.executed = 0

    async def execute(self, action: SubmitTransactionAction) -> ExecutionResult:
        self.executed += 1
        self.logger.log(
            self.level,
            f"[dry-run] tx to={action.to} value={action.value} "
            f"deadline_block={action.deadline_block} data={action.data[:74]}...",
        )
        return self.succeeded(action, dry_run=True)

"""
Executor that signs and submits transactions with EIP-1559 fees.
"""

import asyncio
from typing import Any, Dict, Optional

from web3 import AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from ..core.executor import ExecutionResult, Executor
from ..core.types import ActionKind, SubmitTransactionAction

# Substrings of node error messages mapped to failure reasons
KNOWN_FAILURES = (
    ("underpriced", "underpriced"),
    ("nonce too low", "nonce_too_low"),
    ("already known", "already_known"),
    ("insufficient funds", "insufficient_funds"),
)

# Node rejected the nonce as used; the local counter is stale
NONCE_FAILURES = ("nonce_too_low", "already_known")


def classify_submission_error(error: Exception) -> str:
    message = str(error).lower()
    for needle, reason in KNOWN_FAILURES:
        if needle in message:
            return reason
    return "rpc_error"


class TransactionExecutor(Executor):
    """
    Submit ``SubmitTransactionAction`` from a single hot key.

    Actions whose deadline block has already been reached are refused
    without touching the node, since the contract would revert anyway.

    Nonces are tracked locally: the pending count is read once, then
    incremented per accepted submission. Submissions from one instance are
    serialized so concurrent actions never share a nonce. A nonce rejected
    by the node as used forces a re-read on the next submission.
    """

    action_kind = ActionKind.SUBMIT_TRANSACTION

    def __init__(
        self,
        web3: AsyncWeb3,
        private_key: str,
        chain_id: int,
        gas_limit: int = 500_000,
        priority_fee_gwei: float = 2.0,
        name: Optional[str] = None,
    ):
        super().__init__(name)
        self.web3 = web3
        self.account = web3.eth.account.from_key(private_key)
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.priority_fee = Web3.to_wei(priority_fee_gwei, "gwei")
        self._nonce: Optional[int] = None
        self._nonce_lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return self.account.address

    async def _fee_fields(self) -> Dict[str, int]:
        latest = await self.web3.eth.get_block("latest")
        base_fee = latest["baseFeePerGas"]
        return {
            "maxPriorityFeePerGas": self.priority_fee,
            "maxFeePerGas": base_fee * 2 + self.priority_fee,
        }

    async def build_transaction(
        self, action: SubmitTransactionAction, nonce: Optional[int] = None
    ) -> Dict[str, Any]:
        if nonce is None:
            nonce = await self.web3.eth.get_transaction_count(self.address, "pending")
        return {
            "type": 2,
            "chainId": self.chain_id,
            "from": self.address,
            "to": Web3.to_checksum_address(action.to),
            "data": action.data,
            "value": action.value,
            "nonce": nonce,
            "gas": self.gas_limit,
            **(await self._fee_fields()),
        }

    async def execute(self, action: SubmitTransactionAction) -> ExecutionResult:
        try:
            current_block = await self.web3.eth.block_number
            if current_block >= action.deadline_block:
                return self.failed(
                    action,
                    "expired_deadline",
                    f"block {current_block} reached deadline {action.deadline_block}",
                )

            async with self._nonce_lock:
                if self._nonce is None:
                    self._nonce = await self.web3.eth.get_transaction_count(self.address, "pending")
                tx = await self.build_transaction(action, self._nonce)
                signed = self.account.sign_transaction(tx)
                try:
                    tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
                except (ValueError, Web3Exception) as e:
                    if classify_submission_error(e) in NONCE_FAILURES:
                        self._nonce = None
                    raise
                self._nonce += 1
        except (ValueError, Web3Exception) as e:
            reason = classify_submission_error(e)
            self.logger.warning(f"Submission to {action.to} failed ({reason}): {e}")
            return self.failed(action, reason, str(e))

        tx_hex = Web3.to_hex(tx_hash)
        self.logger.info(f"Submitted {tx_hex} (nonce {tx['nonce']}, deadline {action.deadline_block})")
        return self.succeeded(action, tx_hash=tx_hex, nonce=tx["nonce"])

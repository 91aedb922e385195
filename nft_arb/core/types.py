"""
Event and action values exchanged between collectors, strategies and executors.

Events and actions are frozen dataclasses tagged with a ``kind`` so the
engine can route them without knowing the concrete classes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Union


class EventKind:
    NEW_BLOCK = "new_block"
    LISTING = "listing"


class ActionKind:
    SUBMIT_TRANSACTION = "submit_transaction"


@dataclass(frozen=True)
class BlockEvent:
    """A newly observed block with the Sudoswap pools it created or touched."""

    block_number: int
    new_pool_addresses: FrozenSet[str] = frozenset()
    touched_pool_addresses: FrozenSet[str] = frozenset()

    kind = EventKind.NEW_BLOCK


@dataclass(frozen=True)
class ListingEvent:
    """A newly observed marketplace listing, normalized from the stream payload."""

    nft_collection: str
    token_id: int
    payment_token: str
    price: int
    chain: str
    raw_order_reference: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    kind = EventKind.LISTING


@dataclass(frozen=True)
class SubmitTransactionAction:
    """Transaction to submit; reverts on-chain once ``deadline_block`` has passed."""

    to: str
    data: str
    value: int
    deadline_block: int

    kind = ActionKind.SUBMIT_TRANSACTION


Event = Union[BlockEvent, ListingEvent]
Action = SubmitTransactionAction

"""
Marketplace (OpenSea / Seaport) helpers.
"""

from .opensea import FulfillmentData, MarketplaceError, OpenseaClient
from .seaport import UnsupportedOrderError, encode_basic_order_call, is_basic_order

__all__ = [
    "FulfillmentData",
    "MarketplaceError",
    "OpenseaClient",
    "UnsupportedOrderError",
    "encode_basic_order_call",
    "is_basic_order",
]

"""
Collectors: external sources adapted into engine events.
"""

from .block import NewBlockCollector
from .opensea_listing import OpenseaListingCollector, parse_item_listed

__all__ = ["NewBlockCollector", "OpenseaListingCollector", "parse_item_listed"]

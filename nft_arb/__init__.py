"""
nft_arb: event-driven OpenSea -> Sudoswap NFT arbitrage engine.

Collectors turn blocks and marketplace listings into events, a strategy
keeps a snapshot of Sudoswap pool bids and matches listings against it,
and executors submit the resulting transactions.
"""

__version__ = "0.1.0"

#!/usr/bin/env python3
"""
Command-line entry point for the OpenSea -> Sudoswap arbitrage engine.

Usage:
    nft-arb                 # dry run: log transactions instead of sending them
    nft-arb --live          # sign and submit with PRIVATE_KEY
    nft-arb --collection boredapeyachtclub
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from web3 import AsyncWeb3

from .batchers.base import BatchConfig
from .batchers.sudoswap_quotes import SudoswapQuoteBatcher
from .collectors.block import NewBlockCollector
from .collectors.opensea_listing import OpenseaListingCollector
from .config import ConfigError, ConfigManager, get_config
from .core.engine import Engine
from .core.errors import EngineConfigError, SyncFailure
from .executors.log import LogExecutor
from .executors.transaction import TransactionExecutor
from .fetchers.sudoswap_fetcher import SudoswapFetcher
from .marketplace.opensea import OpenseaClient
from .strategies.opensea_sudoswap_arb import OpenseaSudoswapArb

logger = logging.getLogger(__name__)


def build_engine(config: ConfigManager, order_client: OpenseaClient, dry_run: bool = True) -> Engine:
    """Wire collectors, the arbitrage strategy and an executor into an Engine."""
    chains, protocols = config.chains, config.protocols
    web3 = AsyncWeb3(
        AsyncWeb3.AsyncHTTPProvider(chains.rpc_url, request_kwargs={"timeout": chains.RPC_TIMEOUT})
    )

    fetcher = SudoswapFetcher(web3, protocols, chain=chains.CHAIN_NAME)
    quoter = SudoswapQuoteBatcher(
        web3,
        protocols.SUDOSWAP_FACTORY_ADDRESS,
        BatchConfig(
            batch_size=protocols.POOL_CHUNK_SIZE,
            max_retries=protocols.MAX_RETRY_ATTEMPTS,
            retry_delay=protocols.RETRY_DELAY_SECONDS,
            timeout=chains.RPC_TIMEOUT,
        ),
    )

    engine = Engine.from_config(config.engine)
    engine.add_collector(
        NewBlockCollector(
            fetcher,
            poll_interval=chains.BLOCK_POLL_INTERVAL,
            retry_delay=config.engine.COLLECTOR_RETRY_DELAY,
            max_retry_delay=config.engine.COLLECTOR_MAX_RETRY_DELAY,
        )
    )
    engine.add_collector(OpenseaListingCollector.from_config(config.marketplace))
    engine.add_strategy(
        OpenseaSudoswapArb(
            fetcher,
            quoter,
            order_client,
            chain_config=chains,
            protocol_config=protocols,
            marketplace_config=config.marketplace,
            engine_config=config.engine,
        )
    )

    if dry_run:
        engine.add_executor(LogExecutor())
    else:
        engine.add_executor(
            TransactionExecutor(
                web3,
                config.engine.PRIVATE_KEY,
                chain_id=chains.chain_id,
                gas_limit=int(config.engine.ARB_GAS_UNITS * 1.5),
                priority_fee_gwei=config.engine.PRIORITY_FEE_GWEI,
            )
        )
    return engine


async def run(args) -> bool:
    """Run the engine until interrupted. Returns False on a startup failure."""
    config = get_config(environment=args.environment)
    if args.collection:
        config.marketplace.OPENSEA_COLLECTION = args.collection
    dry_run = args.dry_run or (not args.live and config.engine.DRY_RUN)
    config.validate_configuration(require_execution=not dry_run)

    logger.info(f"Starting nft-arb on {config.chains.CHAIN_NAME} ({'dry run' if dry_run else 'LIVE'})")

    async with OpenseaClient.from_config(config.marketplace) as order_client:
        engine = build_engine(config, order_client, dry_run=dry_run)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, engine.stop)
            except NotImplementedError:
                pass

        try:
            await engine.run()
        except (EngineConfigError, SyncFailure) as e:
            logger.error(f"Engine stopped: {e}")
            return False
        finally:
            logger.info(f"Engine stats: {engine.get_stats()}")

    return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="OpenSea -> Sudoswap NFT arbitrage engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Log profitable transactions without sending them
  nft-arb --dry-run

  # Submit transactions (requires PRIVATE_KEY and ARB_CONTRACT_ADDRESS)
  nft-arb --live

  # Only watch one collection's listings
  nft-arb --collection boredapeyachtclub
        """,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Log actions instead of submitting (default)")
    mode.add_argument("--live", action="store_true", help="Sign and submit transactions")
    parser.add_argument("--collection", help="OpenSea collection slug to stream (default: all)")
    parser.add_argument("--environment", help="Override ENVIRONMENT")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    args = parse_args(argv)
    try:
        success = asyncio.run(run(args))
        sys.exit(0 if success else 1)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()

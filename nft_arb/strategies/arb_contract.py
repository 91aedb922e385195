"""
Calldata for the arbitrage contract.

The contract is called with the listing price as ``msg.value``. It fills the
Seaport order, sells the NFT into the Sudoswap pair for at least
``minOutput`` and reverts once ``block.number > deadlineBlock``.
"""

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

EXECUTE_ARB_SIGNATURE = "executeArb(address,bytes,address,address,uint256,uint256,uint256)"
EXECUTE_ARB_TYPES = ["address", "bytes", "address", "address", "uint256", "uint256", "uint256"]
EXECUTE_ARB_SELECTOR = function_signature_to_4byte_selector(EXECUTE_ARB_SIGNATURE)


def encode_execute_arb(
    seaport: str,
    seaport_calldata: bytes,
    pool: str,
    nft_collection: str,
    token_id: int,
    min_output: int,
    deadline_block: int,
) -> str:
    """Encode ``executeArb`` and return 0x-prefixed calldata."""
    args = encode(
        EXECUTE_ARB_TYPES,
        [
            Web3.to_checksum_address(seaport),
            seaport_calldata,
            Web3.to_checksum_address(pool),
            Web3.to_checksum_address(nft_collection),
            token_id,
            min_output,
            deadline_block,
        ],
    )
    return Web3.to_hex(EXECUTE_ARB_SELECTOR + args)

"""
Seaport basic-order calldata encoding.
"""

from typing import Any, Dict

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3 import Web3

BASIC_ORDER_PARAMETERS = (
    "(address,uint256,uint256,address,address,address,uint256,uint256,uint8,"
    "uint256,uint256,bytes32,uint256,bytes32,bytes32,uint256,(uint256,address)[],bytes)"
)

# Function names OpenSea returns for basic orders, all taking BasicOrderParameters
BASIC_ORDER_FUNCTIONS = (
    "fulfillBasicOrder_efficient_6GL6yc",
    "fulfillBasicOrder",
)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class UnsupportedOrderError(ValueError):
    """The fulfillment call is not a Seaport basic order."""
    pass


def function_name(function: str) -> str:
    return function.split("(", 1)[0]


def is_basic_order(function: str) -> bool:
    return function_name(function) in BASIC_ORDER_FUNCTIONS


def _bytes32(value: Any) -> bytes:
    raw = bytes(HexBytes(value))
    return raw.rjust(32, b"\0")


def basic_order_tuple(parameters: Dict[str, Any]) -> tuple:
    """Convert OpenSea's JSON BasicOrderParameters into an ABI tuple."""
    return (
        Web3.to_checksum_address(parameters["considerationToken"]),
        int(parameters["considerationIdentifier"]),
        int(parameters["considerationAmount"]),
        Web3.to_checksum_address(parameters["offerer"]),
        Web3.to_checksum_address(parameters["zone"]),
        Web3.to_checksum_address(parameters["offerToken"]),
        int(parameters["offerIdentifier"]),
        int(parameters["offerAmount"]),
        int(parameters["basicOrderType"]),
        int(parameters["startTime"]),
        int(parameters["endTime"]),
        _bytes32(parameters["zoneHash"]),
        int(parameters["salt"]),
        _bytes32(parameters["offererConduitKey"]),
        _bytes32(parameters["fulfillerConduitKey"]),
        int(parameters["totalOriginalAdditionalRecipients"]),
        [
            (int(r["amount"]), Web3.to_checksum_address(r["recipient"]))
            for r in parameters.get("additionalRecipients", [])
        ],
        bytes(HexBytes(parameters["signature"])),
    )


def encode_basic_order_call(function: str, parameters: Dict[str, Any]) -> bytes:
    """
    ABI-encode a Seaport basic order fulfillment call.

    Raises:
        UnsupportedOrderError: If ``function`` is not a basic order function
    """
    if not is_basic_order(function):
        raise UnsupportedOrderError(f"Unsupported Seaport function: {function}")
    signature = f"{function_name(function)}({BASIC_ORDER_PARAMETERS})"
    selector = function_signature_to_4byte_selector(signature)
    return selector + encode([BASIC_ORDER_PARAMETERS], [basic_order_tuple(parameters)])

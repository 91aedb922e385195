"""Test fixtures for collectors."""
import pytest

NFT = "0x" + "aa" * 20


@pytest.fixture
def item_listed_payload():
    """An item_listed payload as delivered by the OpenSea stream."""
    return {
        "event_type": "item_listed",
        "sent_at": "2024-01-01T00:00:00.000000+00:00",
        "payload": {
            "item": {
                "chain": {"name": "ethereum"},
                "nft_id": f"ethereum/{NFT}/1234",
                "permalink": f"https://opensea.io/assets/ethereum/{NFT}/1234",
            },
            "collection": {"slug": "test-collection"},
            "base_price": "1500000000000000000",
            "payment_token": {
                "address": "0x0000000000000000000000000000000000000000",
                "symbol": "ETH",
                "decimals": 18,
            },
            "order_hash": "0x" + "cd" * 32,
            "protocol_address": "0x0000000000000068F116a894984e2DB1123eB395",
            "maker": {"address": "0x" + "12" * 20},
            "expiration_date": "2030-01-01T00:00:00.000000+00:00",
            "listing_date": "2024-01-01T00:00:00.000000+00:00",
            "is_private": False,
            "quantity": 1,
        },
    }

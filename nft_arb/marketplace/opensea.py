"""
OpenSea v2 API client.

Resolves a streamed listing into the full signed order and the Seaport
fulfillment call needed to buy it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Transient marketplace API failure (network, 5xx, rate limit)."""
    pass


@dataclass
class FulfillmentData:
    """Seaport call that fills one listing, as returned by OpenSea."""

    function: str
    to: str
    value: int
    parameters: Dict[str, Any]
    protocol: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "FulfillmentData":
        transaction = response["fulfillment_data"]["transaction"]
        return cls(
            function=transaction["function"],
            to=transaction["to"],
            value=int(transaction.get("value") or 0),
            parameters=transaction["input_data"]["parameters"],
            protocol=response.get("protocol", ""),
            raw=response,
        )


class OpenseaClient:
    """
    Minimal async client for the OpenSea v2 REST API.

    A rejected order (4xx other than 429) means the listing can no longer be
    filled and yields None; anything transient raises MarketplaceError.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.opensea.io/api/v2", timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config) -> "OpenseaClient":
        """Build a client from a ``MarketplaceConfig``."""
        return cls(config.OPENSEA_API_KEY, config.OPENSEA_API_URL, config.API_TIMEOUT)

    async def __aenter__(self) -> "OpenseaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"x-api-key": self.api_key, "accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def get_fulfillment_data(
        self,
        order_hash: str,
        protocol_address: str,
        fulfiller: str,
        chain: str = "ethereum",
    ) -> Optional[FulfillmentData]:
        """
        Fetch the Seaport fulfillment call for a listing.

        Returns:
            FulfillmentData, or None if OpenSea rejects the order

        Raises:
            MarketplaceError: On network errors, rate limits or 5xx responses
        """
        url = f"{self.base_url}/listings/fulfillment_data"
        body = {
            "listing": {
                "hash": order_hash,
                "chain": chain,
                "protocol_address": protocol_address,
            },
            "fulfiller": {"address": fulfiller},
        }

        try:
            async with self._get_session().post(url, json=body) as response:
                if response.status == 429 or response.status >= 500:
                    raise MarketplaceError(
                        f"Fulfillment request for {order_hash} failed: HTTP {response.status}"
                    )
                if response.status >= 400:
                    detail = await response.text()
                    logger.info(
                        f"Order {order_hash} rejected by OpenSea (HTTP {response.status}): {detail[:200]}"
                    )
                    return None
                payload = await response.json()
        except aiohttp.ClientError as e:
            raise MarketplaceError(f"Fulfillment request for {order_hash} failed: {e}") from e

        try:
            return FulfillmentData.from_response(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected fulfillment payload for {order_hash}: {e}")
            return None

"""
OpenSea listing collector.

Speaks the Phoenix channel protocol of the OpenSea Stream API over a raw
websocket: join ``collection:<slug>``, heartbeat on the ``phoenix`` topic,
and emit every ``item_listed`` message as a ListingEvent.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ..core.channel import EventChannel
from ..core.collector import Collector
from ..core.errors import CollectorFailure
from ..core.types import ListingEvent

logger = logging.getLogger(__name__)

ITEM_LISTED = "item_listed"


def _parse_timestamp(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


def parse_item_listed(payload: Dict[str, Any]) -> Optional[ListingEvent]:
    """
    Convert an ``item_listed`` payload into a ListingEvent.

    ``nft_id`` has the form ``<chain>/<contract>/<token id>``. Payloads that
    are missing any field needed to act on the listing are skipped.
    """
    try:
        item = payload["item"]
        chain = item["chain"]["name"]
        _, contract, token_id = item["nft_id"].split("/")
        nft_collection = contract.lower()
        token_id = int(token_id)
        price = int(payload["base_price"])
        payment_token = payload["payment_token"]["address"].lower()
        reference = {
            "order_hash": payload["order_hash"],
            "protocol_address": payload.get("protocol_address"),
            "maker": (payload.get("maker") or {}).get("address"),
            "expiration_date": _parse_timestamp(payload.get("expiration_date")),
            "collection_slug": (payload.get("collection") or {}).get("slug"),
        }
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.debug(f"Skipping malformed listing payload: {e}")
        return None

    return ListingEvent(
        nft_collection=nft_collection,
        token_id=token_id,
        payment_token=payment_token,
        price=price,
        chain=chain,
        raw_order_reference=reference,
    )


class OpenseaListingCollector(Collector):
    """Collector for new OpenSea listings from the stream API."""

    def __init__(
        self,
        api_key: str,
        stream_url: str = "wss://stream.openseabeta.com/socket/websocket",
        collection: str = "*",
        heartbeat_interval: float = 30.0,
        retry_delay: float = 1.0,
        max_retry_delay: float = 60.0,
    ):
        super().__init__("OpenseaListing", retry_delay, max_retry_delay)
        self.api_key = api_key
        self.stream_url = stream_url
        self.collection = collection
        self.heartbeat_interval = heartbeat_interval
        self._ref = 0

    @classmethod
    def from_config(cls, marketplace_config) -> "OpenseaListingCollector":
        return cls(
            api_key=marketplace_config.OPENSEA_API_KEY,
            stream_url=marketplace_config.OPENSEA_STREAM_URL,
            collection=marketplace_config.OPENSEA_COLLECTION,
            heartbeat_interval=marketplace_config.HEARTBEAT_INTERVAL,
            retry_delay=marketplace_config.RECONNECT_DELAY,
            max_retry_delay=marketplace_config.MAX_RECONNECT_DELAY,
        )

    @property
    def topic(self) -> str:
        return f"collection:{self.collection}"

    @property
    def url(self) -> str:
        return f"{self.stream_url}?token={self.api_key}"

    def _message(self, topic: str, event: str, payload: Optional[Dict[str, Any]] = None) -> str:
        self._ref += 1
        return json.dumps({"topic": topic, "event": event, "payload": payload or {}, "ref": str(self._ref)})

    async def subscribe(self, channel: EventChannel) -> None:
        try:
            async with websockets.connect(self.url) as ws:
                await ws.send(self._message(self.topic, "phx_join"))
                self.logger.info(f"Joined OpenSea stream topic {self.topic}")

                heartbeat = asyncio.create_task(self._heartbeat(ws))
                try:
                    async for raw in ws:
                        if not self.running:
                            return
                        await self._handle_message(channel, raw)
                finally:
                    heartbeat.cancel()
        except ConnectionClosed as e:
            raise CollectorFailure(self.name, f"stream closed: {e}") from e
        except OSError as e:
            raise CollectorFailure(self.name, f"stream connection failed: {e}") from e

    async def _heartbeat(self, ws) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            await ws.send(self._message("phoenix", "heartbeat"))

    async def _handle_message(self, channel: EventChannel, raw: Any) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            self.logger.debug("Ignoring non-JSON stream frame")
            return
        if not isinstance(message, dict):
            self.logger.debug(f"Ignoring non-object stream frame: {type(message).__name__}")
            return

        event = message.get("event")
        if event == "phx_reply":
            status = (message.get("payload") or {}).get("status")
            if status != "ok" and message.get("topic") == self.topic:
                raise CollectorFailure(self.name, f"join rejected: {message.get('payload')}")
            return
        if event in ("phx_error", "phx_close") and message.get("topic") == self.topic:
            raise CollectorFailure(self.name, f"channel {event}")
        if event == ITEM_LISTED:
            await self.emit(channel, message.get("payload") or {})

    def normalize(self, payload: Any) -> Optional[ListingEvent]:
        if not isinstance(payload, dict):
            return None
        # Stream messages nest the listing under payload.payload
        inner = payload.get("payload", payload)
        if not isinstance(inner, dict):
            return None
        return parse_item_listed(inner)

"""Program log subscription over the Solana websocket API."""
from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Callable

import websockets

from ...models import PoolEvent

logger = logging.getLogger(__name__)


def build_subscribe_request(program_id: str, commitment: str = "processed") -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "logsSubscribe",
        "params": [
            {"mentions": [program_id]},
            {"commitment": commitment},
        ],
    }


def parse_log_notification(raw: str | bytes) -> PoolEvent | None:
    """Turn one websocket frame into a PoolEvent.

    Subscription acks, failed transactions and frames without a signature
    yield None.
    """
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Discarding undecodable websocket frame: %s", e)
        return None

    if "result" in message and "id" in message:
        logger.debug("Subscription confirmed (id %s)", message["result"])
        return None

    value = message.get("params", {}).get("result", {}).get("value")
    if not value or value.get("err") is not None:
        return None

    signature = value.get("signature")
    if not signature:
        return None

    return PoolEvent(signature=signature, log_lines=tuple(value.get("logs") or ()))


class SolanaLogsSource:
    """Yields program log batches from a single ``logsSubscribe`` connection."""

    def __init__(self, wss_uri: str, commitment: str = "processed") -> None:
        self.uri = wss_uri
        self.commitment = commitment

    async def subscribe(
        self, program_id: str, on_subscribed: Callable[[], None] | None = None
    ) -> AsyncIterator[PoolEvent]:
        """Connect, subscribe and yield events until the socket closes.

        Connection errors propagate to the caller, which owns reconnects.
        """
        async with websockets.connect(
            self.uri,
            ping_interval=20,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            await ws.send(json.dumps(build_subscribe_request(program_id, self.commitment)))
            logger.info("WebSocket is open and listening for %s logs", program_id)
            if on_subscribed is not None:
                on_subscribed()

            async for raw in ws:
                event = parse_log_notification(raw)
                if event is not None:
                    yield event

"""Unit tests for log-subscription frames."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from poolsniper.chains.solana.logs import (
    SolanaLogsSource,
    build_subscribe_request,
    parse_log_notification,
)
from poolsniper.config import RAYDIUM_AMM_PROGRAM_ID
from poolsniper.models import PoolEvent


def _notification(signature="sig1", err=None, logs=("Program log: initialize2: InitializeInstruction2",)):
    return json.dumps(
        {
            "jsonrpc": "2.0",
            "method": "logsNotification",
            "params": {
                "result": {
                    "context": {"slot": 1},
                    "value": {"signature": signature, "err": err, "logs": list(logs)},
                },
                "subscription": 7,
            },
        }
    )


class TestBuildSubscribeRequest:
    def test_mentions_program(self) -> None:
        request = build_subscribe_request(RAYDIUM_AMM_PROGRAM_ID)
        assert request["method"] == "logsSubscribe"
        assert request["params"][0] == {"mentions": [RAYDIUM_AMM_PROGRAM_ID]}
        assert request["params"][1] == {"commitment": "processed"}


class TestParseLogNotification:
    def test_notification(self) -> None:
        event = parse_log_notification(_notification())
        assert event == PoolEvent(
            signature="sig1",
            log_lines=("Program log: initialize2: InitializeInstruction2",),
        )

    def test_subscription_ack_ignored(self) -> None:
        assert parse_log_notification('{"jsonrpc":"2.0","result":7,"id":1}') is None

    def test_failed_transaction_ignored(self) -> None:
        assert parse_log_notification(_notification(err={"InstructionError": [0, "x"]})) is None

    def test_missing_signature_ignored(self) -> None:
        assert parse_log_notification(_notification(signature="")) is None

    def test_garbage_ignored(self) -> None:
        assert parse_log_notification("not json") is None


class FakeSocket:
    def __init__(self, frames) -> None:
        self.frames = list(frames)
        self.send = AsyncMock()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.frames:
            raise StopAsyncIteration
        return self.frames.pop(0)


class TestSolanaLogsSource:
    @pytest.mark.asyncio
    async def test_subscribes_then_yields_events(self) -> None:
        ws = FakeSocket([json.dumps({"jsonrpc": "2.0", "result": 7, "id": 1}), _notification()])
        connection = MagicMock()
        connection.__aenter__ = AsyncMock(return_value=ws)
        connection.__aexit__ = AsyncMock(return_value=False)
        on_subscribed = MagicMock()

        source = SolanaLogsSource("wss://rpc.example")
        with patch("poolsniper.chains.solana.logs.websockets.connect", return_value=connection):
            events = [
                e async for e in source.subscribe(RAYDIUM_AMM_PROGRAM_ID, on_subscribed=on_subscribed)
            ]

        on_subscribed.assert_called_once_with()
        sent = json.loads(ws.send.await_args.args[0])
        assert sent["params"][0] == {"mentions": [RAYDIUM_AMM_PROGRAM_ID]}
        assert [e.signature for e in events] == ["sig1"]

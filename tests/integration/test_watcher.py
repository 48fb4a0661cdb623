"""Integration tests for the watcher: admission control and reconnects."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from poolsniper.config import LiquidityPoolConfig
from poolsniper.models import PoolEvent
from poolsniper.services.gate import ConcurrencyGate
from poolsniper.services.watcher import EventWatcher, WatcherState

INIT_LOGS = ("Program log: initialize2: InitializeInstruction2 { nonce: 254 }",)


class ScriptedSource:
    """Event source that replays one scripted list per connection."""

    def __init__(self, connections) -> None:
        self._connections = list(connections)
        self.subscribe_calls = 0

    async def subscribe(self, program_id: str, on_subscribed=None):
        self.subscribe_calls += 1
        if not self._connections:
            raise asyncio.CancelledError
        script = self._connections.pop(0)
        if isinstance(script, Exception):
            raise script
        if on_subscribed is not None:
            on_subscribed()
        for event in script:
            yield event


class QuietSource:
    """Event source that subscribes and then yields nothing until closed."""

    def __init__(self) -> None:
        self.close = asyncio.Event()

    async def subscribe(self, program_id: str, on_subscribed=None):
        if on_subscribed is not None:
            on_subscribed()
        await self.close.wait()
        return
        yield


class BlockingPipeline:
    """Pipeline whose runs stay in flight until released."""

    def __init__(self, gate: ConcurrencyGate) -> None:
        self.gate = gate
        self.release = asyncio.Event()
        self.started: list[str] = []
        self.max_seen_in_flight = 0

    async def process(self, signature: str) -> None:
        self.started.append(signature)
        self.max_seen_in_flight = max(self.max_seen_in_flight, self.gate.in_flight)
        await self.release.wait()


def _watcher(source, gate, pipeline, sleep=None) -> EventWatcher:
    return EventWatcher(
        source=source,
        gate=gate,
        pipeline=pipeline,
        pool_config=LiquidityPoolConfig(),
        reconnect_delay=5.0,
        sleep=sleep or AsyncMock(),
    )


class TestDispatch:
    @pytest.mark.asyncio
    async def test_non_pool_logs_ignored(self) -> None:
        gate = ConcurrencyGate(1)
        pipeline = AsyncMock()
        watcher = _watcher(ScriptedSource([]), gate, pipeline)

        assert watcher.dispatch(PoolEvent("sig", ("Program log: swap",))) is None
        assert gate.in_flight == 0

    @pytest.mark.asyncio
    async def test_gate_never_exceeds_limit(self) -> None:
        gate = ConcurrencyGate(2)
        pipeline = BlockingPipeline(gate)
        watcher = _watcher(ScriptedSource([]), gate, pipeline)

        tasks = [watcher.dispatch(PoolEvent(f"sig{i}", INIT_LOGS)) for i in range(5)]
        await asyncio.sleep(0)

        assert sum(t is not None for t in tasks) == 2
        assert watcher.dropped == 3
        assert gate.in_flight == 2
        assert pipeline.started == ["sig0", "sig1"]

        pipeline.release.set()
        await asyncio.gather(*(t for t in tasks if t is not None))

        assert gate.in_flight == 0
        assert pipeline.max_seen_in_flight <= gate.limit

    @pytest.mark.asyncio
    async def test_permit_released_when_pipeline_raises(self) -> None:
        gate = ConcurrencyGate(1)
        pipeline = AsyncMock()
        pipeline.process.side_effect = RuntimeError("boom")
        watcher = _watcher(ScriptedSource([]), gate, pipeline)

        task = watcher.dispatch(PoolEvent("sig", INIT_LOGS))
        with pytest.raises(RuntimeError):
            await task

        assert gate.in_flight == 0


class TestRunLoop:
    @pytest.mark.asyncio
    async def test_run_once_dispatches_and_disconnects(self) -> None:
        gate = ConcurrencyGate(1)
        pipeline = AsyncMock()
        source = ScriptedSource([[PoolEvent("sig1", INIT_LOGS)]])
        watcher = _watcher(source, gate, pipeline)

        await watcher.run_once()
        await asyncio.sleep(0)

        assert watcher.state is WatcherState.DISCONNECTED
        pipeline.process.assert_awaited_once_with("sig1")

    @pytest.mark.asyncio
    async def test_reconnects_after_error_and_close(self) -> None:
        gate = ConcurrencyGate(1)
        pipeline = AsyncMock()
        sleep = AsyncMock()
        source = ScriptedSource(
            [
                ConnectionError("refused"),
                [PoolEvent("sig1", INIT_LOGS)],
            ]
        )
        watcher = _watcher(source, gate, pipeline, sleep)

        with pytest.raises(asyncio.CancelledError):
            await watcher.run_forever()
        await asyncio.sleep(0)

        assert source.subscribe_calls == 3
        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 5.0]
        assert watcher.state is WatcherState.DISCONNECTED
        pipeline.process.assert_awaited_once_with("sig1")

    @pytest.mark.asyncio
    async def test_quiet_subscription_reports_subscribed(self) -> None:
        source = QuietSource()
        watcher = _watcher(source, ConcurrencyGate(1), AsyncMock())

        task = asyncio.create_task(watcher.run_once())
        await asyncio.sleep(0)

        assert watcher.state is WatcherState.SUBSCRIBED

        source.close.set()
        await task
        assert watcher.state is WatcherState.DISCONNECTED

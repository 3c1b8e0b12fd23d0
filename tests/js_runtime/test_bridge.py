"""Tests for the JS runtime bridge (no subprocess is started)."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from assetvault.js_runtime.bridge import (
    DEFAULT_SERVICES_PATH,
    ENTRY_POINT,
    JSRuntimeBridge,
    RuntimeConfig,
    RuntimeState,
)
from assetvault.js_runtime.protocol import JSONRPCError, JSONRPCErrorCode, JSRuntimeMethods


def _ready_bridge(responder) -> JSRuntimeBridge:
    """A bridge marked ready whose requests are answered by ``responder``.

    ``responder`` maps a request dict to a response payload (the part after
    ``jsonrpc``/``id``), or None to leave the request unanswered.
    """
    bridge = JSRuntimeBridge(RuntimeConfig(request_timeout=1.0))
    bridge._state = RuntimeState.READY

    async def send(request):
        payload = responder(request.to_dict())
        if payload is not None:
            message = {"jsonrpc": "2.0", "id": request.id, **payload}
            await bridge._handle_message(json.dumps(message))

    bridge._send_request = AsyncMock(side_effect=send)
    return bridge


class TestBridgeState:
    """Tests for state tracking."""

    def test_initial_state(self):
        bridge = JSRuntimeBridge()
        assert bridge.state == RuntimeState.NOT_STARTED
        assert bridge.is_ready is False
        assert bridge.pending_request_count == 0

    @pytest.mark.asyncio
    async def test_call_when_not_ready(self):
        bridge = JSRuntimeBridge()
        with pytest.raises(RuntimeError, match="not ready"):
            await bridge.call("ping")

    @pytest.mark.asyncio
    async def test_stop_when_not_started_is_noop(self):
        bridge = JSRuntimeBridge()
        await bridge.stop()
        assert bridge.state == RuntimeState.NOT_STARTED


class TestBridgeCall:
    """Tests for request/response matching."""

    @pytest.mark.asyncio
    async def test_call_returns_result(self):
        bridge = _ready_bridge(lambda request: {"result": {"echo": request["params"]}})

        result = await bridge.call("lit.connect", {"network": "datil-dev"})

        assert result == {"echo": {"network": "datil-dev"}}
        assert bridge.pending_request_count == 0

    @pytest.mark.asyncio
    async def test_call_raises_error(self):
        bridge = _ready_bridge(
            lambda request: {"error": {"code": -32003, "message": "Lit node error"}}
        )

        with pytest.raises(JSONRPCError) as exc_info:
            await bridge.call("lit.encryptFile", {})

        assert exc_info.value.code == JSONRPCErrorCode.SDK_ERROR
        assert bridge.pending_request_count == 0

    @pytest.mark.asyncio
    async def test_call_timeout(self):
        bridge = _ready_bridge(lambda request: None)

        with pytest.raises(JSONRPCError) as exc_info:
            await bridge.call("ping", timeout=0.05)

        assert exc_info.value.code == JSONRPCErrorCode.TIMEOUT_ERROR
        assert bridge.pending_request_count == 0

    @pytest.mark.asyncio
    async def test_ping(self):
        bridge = _ready_bridge(lambda request: {"result": "pong"})
        assert await bridge.ping() is True

    @pytest.mark.asyncio
    async def test_ping_failure(self):
        bridge = _ready_bridge(lambda request: {"error": {"code": -32000, "message": "down"}})
        assert await bridge.ping() is False

    @pytest.mark.asyncio
    async def test_get_status(self):
        bridge = _ready_bridge(lambda request: {"result": {
            "version": "0.1.0",
            "uptimeSeconds": 12.5,
            "litConnected": True,
            "litNetwork": "datil-dev",
        }})

        status = await bridge.get_status()

        assert status.state == RuntimeState.READY
        assert status.version == "0.1.0"
        assert status.uptime_seconds == 12.5
        assert status.lit_connected is True
        assert status.lit_network == "datil-dev"
        assert bridge._send_request.call_args.args[0].method == JSRuntimeMethods.GET_STATUS

    @pytest.mark.asyncio
    async def test_get_status_not_ready(self):
        status = await JSRuntimeBridge().get_status()
        assert status.state == RuntimeState.NOT_STARTED
        assert status.lit_connected is False


class TestBridgeMessages:
    """Tests for incoming message dispatch."""

    @pytest.mark.asyncio
    async def test_ready_notification(self):
        bridge = JSRuntimeBridge()
        await bridge._handle_message('{"jsonrpc": "2.0", "method": "ready"}')
        assert bridge._ready_event.is_set()

    @pytest.mark.asyncio
    async def test_notification_handlers(self):
        bridge = JSRuntimeBridge()
        received = []
        unregister = bridge.on_notification("log", received.append)

        await bridge._handle_message('{"jsonrpc": "2.0", "method": "log", "params": {"msg": "hi"}}')
        unregister()
        await bridge._handle_message('{"jsonrpc": "2.0", "method": "log", "params": {"msg": "again"}}')

        assert received == [{"msg": "hi"}]

    @pytest.mark.asyncio
    async def test_non_json_output_ignored(self):
        bridge = JSRuntimeBridge()
        await bridge._handle_message("Lit SDK: connecting to nodes...")
        await bridge._handle_message("")
        assert not bridge._ready_event.is_set()


class TestBridgeReadLoop:
    """Tests for the stdout reader."""

    @pytest.mark.asyncio
    async def test_malformed_response_does_not_stop_reader(self):
        bridge = JSRuntimeBridge()
        bridge._state = RuntimeState.READY
        stdout = asyncio.StreamReader()
        bridge._process = MagicMock(stdout=stdout)

        future = asyncio.get_running_loop().create_future()
        bridge._pending_futures["1"] = future

        stdout.feed_data(b'{"jsonrpc": "2.0", "id": "x", "error": "oops"}\n')
        stdout.feed_data(b'{"jsonrpc": "2.0", "id": "1", "result": "pong"}\n')
        stdout.feed_eof()

        await bridge._read_loop()

        assert future.result().result == "pong"
        assert bridge.state == RuntimeState.READY


class TestBridgeStart:
    """Tests for startup failures."""

    @pytest.mark.asyncio
    async def test_missing_entry_point(self, tmp_path):
        bridge = JSRuntimeBridge(RuntimeConfig(
            services_path=tmp_path,
            runtime_executable="/usr/bin/node",
        ))

        with pytest.raises(RuntimeError, match="ASSETVAULT_JS_SERVICES_PATH"):
            await bridge.start()

        assert bridge.state == RuntimeState.ERROR

    def test_default_services_inside_package(self):
        import assetvault

        package_dir = Path(assetvault.__file__).parent
        assert DEFAULT_SERVICES_PATH == package_dir / "js_services"
        assert (DEFAULT_SERVICES_PATH / ENTRY_POINT).is_file()

    @pytest.mark.asyncio
    async def test_startup_timeout(self, tmp_path):
        bridge = JSRuntimeBridge(RuntimeConfig(startup_timeout=0.05))

        with patch.object(bridge, "_spawn_process", AsyncMock()):
            with pytest.raises(TimeoutError):
                await bridge.start()

        assert bridge.state == RuntimeState.ERROR

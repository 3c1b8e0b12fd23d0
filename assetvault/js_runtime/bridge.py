"""
JS Runtime Bridge.

Runs the Lit Protocol JavaScript SDK in a subprocess and talks to it with
JSON-RPC over stdio.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from importlib.resources import files
from pathlib import Path
from typing import Any, Callable, Optional

from .protocol import (
    JSONRPCError,
    JSONRPCProtocol,
    JSONRPCRequest,
    JSONRPCResponse,
    JSRuntimeMethods,
    Params,
)

logger = logging.getLogger(__name__)

# Shipped as package data next to the Python modules
DEFAULT_SERVICES_PATH = Path(str(files("assetvault") / "js_services"))
ENTRY_POINT = "main.mjs"


class RuntimeState(Enum):
    """State of the JS runtime subprocess."""

    NOT_STARTED = auto()
    STARTING = auto()
    READY = auto()
    ERROR = auto()
    SHUTTING_DOWN = auto()
    STOPPED = auto()


@dataclass
class RuntimeConfig:
    """Configuration for one bridge subprocess."""

    services_path: Optional[Path] = None
    runtime_executable: Optional[str] = None
    startup_timeout: float = 30.0
    request_timeout: float = 60.0
    env_vars: dict[str, str] = field(default_factory=dict)
    debug: bool = False


@dataclass
class RuntimeStatus:
    """Status information reported by the JS runtime."""

    state: RuntimeState
    version: Optional[str] = None
    uptime_seconds: float = 0.0
    pending_requests: int = 0
    lit_connected: bool = False
    lit_network: Optional[str] = None
    error_message: Optional[str] = None


class JSRuntimeBridge:
    """
    Bridge to the JavaScript runtime subprocess.

    Example:
        async with JSRuntimeBridge(config) as bridge:
            await bridge.call("lit.connect", {"network": "datil-dev"})
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        self._config = config or RuntimeConfig()
        self._protocol = JSONRPCProtocol()
        self._state = RuntimeState.NOT_STARTED
        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._pending_futures: dict[str, asyncio.Future] = {}
        self._notification_handlers: dict[str, list[Callable]] = {}
        self._lock = asyncio.Lock()
        self._ready_event = asyncio.Event()
        self._error_message: Optional[str] = None

    @property
    def state(self) -> RuntimeState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == RuntimeState.READY

    @property
    def pending_request_count(self) -> int:
        return len(self._pending_futures)

    async def start(self) -> None:
        """
        Start the subprocess and wait for its ``ready`` notification.

        Raises:
            RuntimeError: If the runtime fails to start
            TimeoutError: If startup times out
        """
        async with self._lock:
            if self._state not in (RuntimeState.NOT_STARTED, RuntimeState.STOPPED):
                raise RuntimeError(f"Cannot start runtime in state: {self._state}")

            self._state = RuntimeState.STARTING
            self._ready_event.clear()

            try:
                await self._spawn_process()
                await asyncio.wait_for(
                    self._ready_event.wait(),
                    timeout=self._config.startup_timeout
                )
            except asyncio.TimeoutError:
                self._state = RuntimeState.ERROR
                self._error_message = "Startup timeout"
                await self._cleanup()
                raise TimeoutError(
                    f"JS runtime failed to start within {self._config.startup_timeout}s"
                )
            except Exception as e:
                self._state = RuntimeState.ERROR
                self._error_message = str(e)
                await self._cleanup()
                raise RuntimeError(f"Failed to start JS runtime: {e}") from e

            self._state = RuntimeState.READY
            logger.info("JS runtime started")

    async def stop(self) -> None:
        """Ask the subprocess to shut down, then reap it."""
        async with self._lock:
            if self._state in (RuntimeState.NOT_STARTED, RuntimeState.STOPPED):
                return

            self._state = RuntimeState.SHUTTING_DOWN
            try:
                if self._process and self._process.returncode is None:
                    try:
                        await asyncio.wait_for(
                            self._send_request(
                                self._protocol.create_request(
                                    JSRuntimeMethods.SHUTDOWN, notification=True
                                )
                            ),
                            timeout=5.0
                        )
                    except (OSError, RuntimeError, asyncio.TimeoutError) as e:
                        logger.debug(f"Shutdown notification not delivered: {e}")
                await self._cleanup()
            finally:
                self._state = RuntimeState.STOPPED
                logger.info("JS runtime stopped")

    async def call(
        self,
        method: str,
        params: Params = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Call a method on the JS runtime and wait for its result.

        Raises:
            JSONRPCError: If the runtime returns an error or the call times out
            RuntimeError: If the runtime is not ready
        """
        if not self.is_ready:
            raise RuntimeError(f"Runtime not ready (state: {self._state})")

        request = self._protocol.create_request(method, params)
        timeout = timeout or self._config.request_timeout

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending_futures[request.id] = future

        try:
            await self._send_request(request)
            response: JSONRPCResponse = await asyncio.wait_for(future, timeout=timeout)
            response.raise_for_error()
            return response.result
        except asyncio.TimeoutError:
            raise JSONRPCError.timeout_error(timeout)
        finally:
            self._protocol.cancel_request(request.id)
            self._pending_futures.pop(request.id, None)

    def on_notification(
        self,
        method: str,
        handler: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        """Register a notification handler; returns an unregister function."""
        self._notification_handlers.setdefault(method, []).append(handler)

        def unregister():
            self._notification_handlers[method].remove(handler)

        return unregister

    async def get_status(self) -> RuntimeStatus:
        """Get the current status of the JS runtime."""
        if not self.is_ready:
            return RuntimeStatus(state=self._state, error_message=self._error_message)

        try:
            result = await self.call(JSRuntimeMethods.GET_STATUS, timeout=5.0)
        except (JSONRPCError, RuntimeError) as e:
            return RuntimeStatus(
                state=self._state,
                pending_requests=self.pending_request_count,
                error_message=str(e)
            )

        return RuntimeStatus(
            state=self._state,
            version=result.get("version"),
            uptime_seconds=result.get("uptimeSeconds", 0),
            pending_requests=self.pending_request_count,
            lit_connected=result.get("litConnected", False),
            lit_network=result.get("litNetwork"),
        )

    async def ping(self) -> bool:
        """Check the runtime answers ``ping`` with ``pong``."""
        try:
            return await self.call(JSRuntimeMethods.PING, timeout=5.0) == "pong"
        except (JSONRPCError, RuntimeError):
            return False

    async def __aenter__(self) -> "JSRuntimeBridge":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # Private methods

    async def _spawn_process(self) -> None:
        """Spawn the JS runtime subprocess and start reading its output."""
        from .discovery import discover_runtime, get_runtime_args

        runtime = self._config.runtime_executable or await discover_runtime()
        services_path = self._config.services_path or DEFAULT_SERVICES_PATH
        entry_point = services_path / ENTRY_POINT

        if not entry_point.exists():
            raise FileNotFoundError(
                f"JS services entry point not found: {entry_point} "
                "(set ASSETVAULT_JS_SERVICES_PATH to the directory holding main.mjs)"
            )

        args = get_runtime_args(runtime, entry_point, self._config.debug)

        env = dict(self._config.env_vars)
        if self._config.debug:
            env["DEBUG"] = "1"

        logger.debug(f"Starting JS runtime: {' '.join(args)}")

        self._process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(services_path),
            env=env or None
        )
        self._reader_task = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        """Dispatch each stdout line until the subprocess closes it."""
        if not self._process or not self._process.stdout:
            return

        try:
            while True:
                line = await self._process.stdout.readline()
                if not line:
                    break
                try:
                    await self._handle_message(line.decode().strip())
                except (KeyError, TypeError, AttributeError, ValueError) as e:
                    logger.error(f"Dropping malformed message from JS runtime: {e}")
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Read loop error: {e}")
            self._state = RuntimeState.ERROR
            self._error_message = str(e)

    async def _handle_message(self, message: str) -> None:
        if not message:
            return

        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            # SDK log output
            logger.debug(f"JS runtime: {message}")
            return

        if "id" in data and ("result" in data or "error" in data):
            self._handle_response(JSONRPCResponse.from_dict(data))
        elif "method" in data:
            self._handle_notification(data)

    def _handle_response(self, response: JSONRPCResponse) -> None:
        future = self._pending_futures.get(response.id) if response.id else None
        if future is not None and not future.done():
            future.set_result(response)

    def _handle_notification(self, data: dict[str, Any]) -> None:
        method = data.get("method", "")
        if method == "ready":
            self._ready_event.set()
            return

        for handler in self._notification_handlers.get(method, []):
            try:
                handler(data.get("params", {}))
            except Exception as e:
                logger.error(f"Notification handler error: {e}")

    async def _send_request(self, request: JSONRPCRequest) -> None:
        if not self._process or not self._process.stdin:
            raise RuntimeError("Process not running")

        self._process.stdin.write((request.to_json() + "\n").encode())
        await self._process.stdin.drain()

    async def _cleanup(self) -> None:
        """Release the reader task, the subprocess and any waiting callers."""
        if self._reader_task:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None

        if self._process:
            if self._process.returncode is None:
                self._process.terminate()
                try:
                    await asyncio.wait_for(self._process.wait(), timeout=5.0)
                except asyncio.TimeoutError:
                    self._process.kill()
                    await self._process.wait()
            self._process = None

        for future in self._pending_futures.values():
            if not future.done():
                future.set_exception(RuntimeError("Runtime stopped"))
        self._pending_futures.clear()
        self._protocol.clear_pending()

"""JS Runtime Bridge Manager.

Keeps a single bridge subprocess per process so that repeated encrypt and
decrypt calls reuse one connected Lit client.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Optional

from assetvault.config import JSRuntimeConfig

from .bridge import JSRuntimeBridge, RuntimeConfig, RuntimeState
from .protocol import Params

logger = logging.getLogger(__name__)

# Environment forwarded to the subprocess
_PASSTHROUGH_PREFIXES = ("ASSETVAULT_", "LIT_")
_PASSTHROUGH_KEYS = ("PATH", "HOME", "USER", "DEBUG", "LOG_LEVEL", "NODE_PATH", "DENO_DIR")


def _passthrough_env() -> dict[str, str]:
    return {
        key: value
        for key, value in os.environ.items()
        if key.startswith(_PASSTHROUGH_PREFIXES) or key in _PASSTHROUGH_KEYS
    }


class JSBridgeManager:
    """Owns the process-wide JS runtime bridge.

    Example:
        manager = JSBridgeManager.get_instance()
        bridge = await manager.get_bridge()
        await bridge.call("lit.connect", {"network": "datil-dev"})
        ...
        await manager.shutdown()
    """

    _instance: Optional["JSBridgeManager"] = None

    def __init__(self):
        self._bridge: Optional[JSRuntimeBridge] = None
        self._bridge_lock = asyncio.Lock()
        self._config: Optional[RuntimeConfig] = None
        self._last_error: Optional[Exception] = None
        self._call_count = 0

    @classmethod
    def get_instance(cls) -> "JSBridgeManager":
        """Get the singleton instance of the bridge manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return self._config is not None

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (tests only; does not stop a running bridge)."""
        cls._instance = None

    def configure(
        self,
        services_path: Optional[Path] = None,
        startup_timeout: float = 30.0,
        request_timeout: float = 60.0,
        runtime_executable: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        """Configure the bridge before first use.

        Raises:
            RuntimeError: If a bridge is already running
        """
        if self._bridge is not None and self._bridge.is_ready:
            raise RuntimeError("Cannot configure while bridge is running. Call shutdown() first.")

        self._config = RuntimeConfig(
            services_path=services_path,
            runtime_executable=runtime_executable,
            startup_timeout=startup_timeout,
            request_timeout=request_timeout,
            env_vars=_passthrough_env(),
            debug=debug,
        )

    def configure_from(self, js_config: JSRuntimeConfig) -> None:
        """Configure from the ``[js_runtime]`` section of the app config."""
        self.configure(
            services_path=js_config.services_path,
            startup_timeout=js_config.startup_timeout,
            request_timeout=js_config.request_timeout,
            runtime_executable=js_config.runtime,
            debug=js_config.debug,
        )

    async def get_bridge(self) -> JSRuntimeBridge:
        """Get the running bridge, starting one if needed.

        Raises:
            RuntimeError: If the bridge fails to start
        """
        async with self._bridge_lock:
            if self._bridge is None or not self._bridge.is_ready:
                self._bridge = await self._create_bridge()
            return self._bridge

    async def _create_bridge(self) -> JSRuntimeBridge:
        config = self._config or RuntimeConfig(env_vars=_passthrough_env())
        bridge = JSRuntimeBridge(config)

        try:
            await bridge.start()
        except (RuntimeError, TimeoutError) as e:
            logger.error(f"Failed to start JS Runtime Bridge: {e}")
            self._last_error = e
            raise RuntimeError(f"Failed to start JS Runtime Bridge: {e}") from e

        self._last_error = None
        return bridge

    async def call(
        self,
        method: str,
        params: Params = None,
        timeout: Optional[float] = None
    ) -> Any:
        """Get the bridge and call ``method`` on it."""
        bridge = await self.get_bridge()
        self._call_count += 1
        return await bridge.call(method, params, timeout)

    async def shutdown(self) -> None:
        """Stop the bridge subprocess if one is running."""
        async with self._bridge_lock:
            if self._bridge is None:
                return
            try:
                await self._bridge.stop()
            except RuntimeError as e:
                logger.warning(f"Error during bridge shutdown: {e}")
            finally:
                self._bridge = None
        logger.debug("JS Bridge Manager shutdown complete")

    def get_status(self) -> dict[str, Any]:
        """Summarize the manager state."""
        bridge_state = self._bridge.state if self._bridge else RuntimeState.NOT_STARTED
        return {
            "bridge_state": bridge_state.name,
            "is_ready": bool(self._bridge and self._bridge.is_ready),
            "call_count": self._call_count,
            "last_error": str(self._last_error) if self._last_error else None,
        }


async def get_bridge() -> JSRuntimeBridge:
    """Get the singleton bridge instance."""
    return await JSBridgeManager.get_instance().get_bridge()


async def js_call(method: str, params: Params = None, timeout: Optional[float] = None) -> Any:
    """Call a JS runtime method through the singleton manager.

    Example:
        result = await js_call("lit.connect", {"network": "datil-dev"})
    """
    return await JSBridgeManager.get_instance().call(method, params, timeout)

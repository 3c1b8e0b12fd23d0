"""JS Runtime Bridge for the Lit Protocol SDK.

The Lit SDK only ships for JavaScript, so it runs in a Node/Deno/Bun
subprocess and Python talks to it with JSON-RPC over stdio.
"""

from assetvault.js_runtime.bridge import JSRuntimeBridge, RuntimeConfig, RuntimeState
from assetvault.js_runtime.discovery import (
    RuntimeInfo,
    RuntimeType,
    discover_runtime,
    check_runtime_available,
)
from assetvault.js_runtime.protocol import JSONRPCError, JSONRPCProtocol, JSRuntimeMethods
from assetvault.js_runtime.manager import JSBridgeManager, get_bridge, js_call

__all__ = [
    # Bridge
    "JSRuntimeBridge",
    "RuntimeConfig",
    "RuntimeState",
    # Protocol
    "JSONRPCError",
    "JSONRPCProtocol",
    "JSRuntimeMethods",
    # Discovery
    "RuntimeInfo",
    "RuntimeType",
    "discover_runtime",
    "check_runtime_available",
    # Manager
    "JSBridgeManager",
    "get_bridge",
    "js_call",
]

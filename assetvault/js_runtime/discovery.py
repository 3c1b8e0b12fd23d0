"""
JS Runtime Discovery.

Finds an installed JavaScript runtime (Deno, Bun or Node.js) and builds the
command line that starts the Lit services entry point with it.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class RuntimeType(Enum):
    """Supported JavaScript runtime types."""

    DENO = auto()
    NODE = auto()
    BUN = auto()


@dataclass
class RuntimeInfo:
    """Information about a discovered runtime."""

    type: RuntimeType
    executable: str
    version: Optional[str] = None

    @property
    def display_name(self) -> str:
        version_str = f" v{self.version}" if self.version else ""
        return f"{self.type.name.title()}{version_str}"


# Detection order, preferred first
RUNTIME_PREFERENCE = [
    RuntimeType.NODE,
    RuntimeType.DENO,
    RuntimeType.BUN,
]

RUNTIME_EXECUTABLES = {
    RuntimeType.DENO: ["deno"],
    RuntimeType.NODE: ["node", "nodejs"],
    RuntimeType.BUN: ["bun"],
}


async def discover_runtime(preferred: Optional[RuntimeType] = None) -> str:
    """
    Discover an available JavaScript runtime.

    Args:
        preferred: Runtime type to try first

    Returns:
        Path to the runtime executable

    Raises:
        RuntimeError: If no runtime is installed
    """
    search_order = list(RUNTIME_PREFERENCE)
    if preferred is not None:
        search_order.remove(preferred)
        search_order.insert(0, preferred)

    for runtime_type in search_order:
        info = await _detect_runtime(runtime_type)
        if info:
            logger.info(f"Discovered runtime: {info.display_name}")
            return info.executable

    raise RuntimeError(
        "No JavaScript runtime found. Please install Node.js, Deno, or Bun "
        "to use Lit Protocol encryption."
    )


async def _detect_runtime(runtime_type: RuntimeType) -> Optional[RuntimeInfo]:
    """Detect a specific runtime type on PATH."""
    for executable in RUNTIME_EXECUTABLES.get(runtime_type, []):
        path = shutil.which(executable)
        if path:
            return RuntimeInfo(
                type=runtime_type,
                executable=path,
                version=await _get_version(path),
            )
    return None


async def _get_version(executable: str) -> Optional[str]:
    """Get the version reported by ``<executable> --version``."""
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "--version",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=5.0)
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug(f"Failed to get version for {executable}: {e}")
        return None

    # "v20.1.0" (node), "deno 1.40.0 (...)" (deno), "1.0.25" (bun)
    first_line = stdout.decode().strip().split("\n")[0]
    if not first_line:
        return None
    token = first_line.split()[1] if first_line.startswith("deno") else first_line.split()[0]
    return token.lstrip("v")


def get_runtime_args(
    executable: str,
    entry_point: Path,
    debug: bool = False
) -> list[str]:
    """
    Get command-line arguments for running the JS services.

    Args:
        executable: Path to the runtime executable
        entry_point: Path to the entry point script
        debug: Enable the runtime inspector

    Returns:
        List of command-line arguments
    """
    exe_name = Path(executable).name.lower()

    if "deno" in exe_name:
        args = [
            executable,
            "run",
            "--allow-read",
            "--allow-net",
            "--allow-env",
        ]
    elif "bun" in exe_name:
        args = [executable, "run"]
    else:
        args = [executable]

    if debug:
        args.append("--inspect")

    args.append(str(entry_point))
    return args


def check_runtime_available() -> bool:
    """Check if any JavaScript runtime is available."""
    try:
        asyncio.run(discover_runtime())
        return True
    except RuntimeError:
        return False

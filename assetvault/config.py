"""
AssetVault Configuration Management.

Handles loading, saving, and validating configuration from various sources:
- Default values
- Configuration file (TOML)
- Environment variables
- Programmatic initialization via init()
"""

from __future__ import annotations

import json
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, List

import yaml


# Configuration directory and file constants
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "assetvault"
DEFAULT_CONFIG_FILE = "config.toml"

DEFAULT_PINATA_ROOT = "https://api.pinata.cloud"
DEFAULT_PINATA_GATEWAY = "https://gateway.pinata.cloud"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class ValidationError:
    """Validation error for configuration."""
    field: str
    message: str
    severity: str  # "error" or "warning"

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.field}: {self.message}"


@dataclass
class ChainConfig:
    """Configuration for the chain used by access control and signing.

    The contract address is the on-chain authority consulted by the
    default access-control conditions; the private key signs the
    sign-in-with-Ethereum auth message sent with every Lit request.
    """

    stage: str = "testnet"
    chain: str = "ethereum"
    chain_id: int = 1
    rpc_url: str = ""
    contract_address: str = ""
    private_key: Optional[str] = None

    # How long a signed auth message stays valid
    wallet_expiry_days: int = 1


@dataclass
class LitConfig:
    """Configuration for the Lit Protocol client."""

    network: str = "datil-dev"

    # SIWE message fields
    siwe_domain: str = "localhost"
    siwe_uri: str = "http://localhost/login"
    siwe_statement: str = "authsign generated by an identity on assetvault"


@dataclass
class PinataConfig:
    """Configuration for the Pinata pinning API.

    Keys left empty fall back to the PINATA_KEY and PINATA_SECRET
    environment variables at request time.
    """

    api_key: Optional[str] = None
    secret_api_key: Optional[str] = None
    api_root: str = DEFAULT_PINATA_ROOT
    gateway_url: str = DEFAULT_PINATA_GATEWAY
    timeout: float = 60.0


@dataclass
class JSRuntimeConfig:
    """Configuration for the JavaScript runtime bridge."""

    # Runtime settings
    runtime: Optional[str] = None  # Auto-detect if None
    services_path: Optional[Path] = None

    # Timeouts
    startup_timeout: float = 30.0
    request_timeout: float = 60.0

    # Debug
    debug: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT
    file: Optional[Path] = None


@dataclass
class AssetVaultConfig:
    """Main configuration container for AssetVault."""

    config_dir: Path = DEFAULT_CONFIG_DIR

    # Sub-configurations
    chain: ChainConfig = field(default_factory=ChainConfig)
    lit: LitConfig = field(default_factory=LitConfig)
    pinata: PinataConfig = field(default_factory=PinataConfig)
    js_runtime: JSRuntimeConfig = field(default_factory=JSRuntimeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = ("chain", "lit", "pinata", "js_runtime", "logging")


def load_config(
    config_path: Optional[Path] = None,
    env_prefix: str = "ASSETVAULT_"
) -> AssetVaultConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Default values

    Args:
        config_path: Path to config file (default: ~/.config/assetvault/config.toml)
        env_prefix: Prefix for environment variables

    Returns:
        Loaded configuration
    """
    config = AssetVaultConfig()

    if config_path is None:
        env_config_dir = os.environ.get(f"{env_prefix}CONFIG_DIR")
        if env_config_dir:
            config_path = Path(env_config_dir) / DEFAULT_CONFIG_FILE
        else:
            config_path = DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE

    if config_path.exists():
        config = _load_from_file(config_path, config)

    return _load_from_env(config, env_prefix)


def _load_from_file(path: Path, config: AssetVaultConfig) -> AssetVaultConfig:
    """Load configuration from a TOML file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Warning: Failed to load config from {path}: {e}")
        return config

    for section in _SECTIONS:
        section_obj = getattr(config, section)
        for key, value in data.get(section, {}).items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)

    if isinstance(config.js_runtime.services_path, str):
        config.js_runtime.services_path = Path(config.js_runtime.services_path)
    if isinstance(config.logging.file, str):
        config.logging.file = Path(config.logging.file)

    if "config_dir" in data:
        config.config_dir = Path(data["config_dir"])

    return config


def _load_from_env(config: AssetVaultConfig, prefix: str) -> AssetVaultConfig:
    """Load configuration from environment variables."""

    # Chain settings
    if env_val := os.environ.get(f"{prefix}STAGE"):
        config.chain.stage = env_val
    if env_val := os.environ.get(f"{prefix}CHAIN"):
        config.chain.chain = env_val
    if env_val := os.environ.get(f"{prefix}CHAIN_ID"):
        config.chain.chain_id = int(env_val)
    if env_val := os.environ.get(f"{prefix}RPC_URL"):
        config.chain.rpc_url = env_val
    if env_val := os.environ.get(f"{prefix}CONTRACT_ADDRESS"):
        config.chain.contract_address = env_val
    if env_val := os.environ.get(f"{prefix}PRIVATE_KEY"):
        config.chain.private_key = env_val
    if env_val := os.environ.get(f"{prefix}WALLET_EXPIRY_DAYS"):
        config.chain.wallet_expiry_days = int(env_val)

    # Lit settings
    if env_val := os.environ.get(f"{prefix}LIT_NETWORK"):
        config.lit.network = env_val

    # Pinata settings (the bare PINATA_* fallbacks are resolved per request)
    if env_val := os.environ.get(f"{prefix}PINATA_KEY"):
        config.pinata.api_key = env_val
    if env_val := os.environ.get(f"{prefix}PINATA_SECRET"):
        config.pinata.secret_api_key = env_val
    if env_val := os.environ.get(f"{prefix}PINATA_API_ROOT"):
        config.pinata.api_root = env_val
    if env_val := os.environ.get(f"{prefix}PINATA_GATEWAY"):
        config.pinata.gateway_url = env_val

    # JS Runtime settings
    if env_val := os.environ.get(f"{prefix}JS_RUNTIME"):
        config.js_runtime.runtime = env_val
    if env_val := os.environ.get(f"{prefix}JS_SERVICES_PATH"):
        config.js_runtime.services_path = Path(env_val)
    if env_val := os.environ.get(f"{prefix}JS_DEBUG"):
        config.js_runtime.debug = env_val.lower() in ("true", "1", "yes")

    # Logging settings
    if env_val := os.environ.get(f"{prefix}LOG_LEVEL"):
        config.logging.level = env_val.upper()
    if env_val := os.environ.get(f"{prefix}LOG_FORMAT"):
        config.logging.format = env_val

    if env_val := os.environ.get(f"{prefix}CONFIG_DIR"):
        config.config_dir = Path(env_val)

    return config


def save_config(config: AssetVaultConfig, path: Optional[Path] = None) -> None:
    """
    Save configuration to a TOML file.

    The private key is never written; supply it through the
    ASSETVAULT_PRIVATE_KEY environment variable instead.

    Args:
        config: Configuration to save
        path: Path to save to (default: config.config_dir / config.toml)
    """
    if path is None:
        path = config.config_dir / DEFAULT_CONFIG_FILE

    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "# AssetVault Configuration",
        "# Generated automatically - edit with care",
        "",
        f'config_dir = "{config.config_dir}"',
        "",
        "[chain]",
        f'stage = "{config.chain.stage}"',
        f'chain = "{config.chain.chain}"',
        f"chain_id = {config.chain.chain_id}",
        f'rpc_url = "{config.chain.rpc_url}"',
        f'contract_address = "{config.chain.contract_address}"',
        f"wallet_expiry_days = {config.chain.wallet_expiry_days}",
        "",
        "[lit]",
        f'network = "{config.lit.network}"',
        f'siwe_domain = "{config.lit.siwe_domain}"',
        f'siwe_uri = "{config.lit.siwe_uri}"',
        f'siwe_statement = "{config.lit.siwe_statement}"',
        "",
        "[pinata]",
        f'api_key = "{config.pinata.api_key or ""}"',
        f'secret_api_key = "{config.pinata.secret_api_key or ""}"',
        f'api_root = "{config.pinata.api_root}"',
        f'gateway_url = "{config.pinata.gateway_url}"',
        f"timeout = {config.pinata.timeout}",
        "",
        "[js_runtime]",
        f"startup_timeout = {config.js_runtime.startup_timeout}",
        f"request_timeout = {config.js_runtime.request_timeout}",
        f"debug = {str(config.js_runtime.debug).lower()}",
    ]

    if config.js_runtime.runtime:
        lines.append(f'runtime = "{config.js_runtime.runtime}"')
    if config.js_runtime.services_path:
        lines.append(f'services_path = "{config.js_runtime.services_path}"')

    lines.extend([
        "",
        "[logging]",
        f'level = "{config.logging.level}"',
    ])

    if config.logging.format != DEFAULT_LOG_FORMAT:
        lines.append(f"format = '{config.logging.format}'")

    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")


def get_default_config() -> AssetVaultConfig:
    """Get the default configuration."""
    return AssetVaultConfig()


# Global configuration instance (lazy-loaded)
_global_config: Optional[AssetVaultConfig] = None


def get_config() -> AssetVaultConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def set_config(config: AssetVaultConfig) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def clear_config_cache() -> None:
    """Clear the global configuration cache."""
    global _global_config
    _global_config = None


def init(
    stage: str = "testnet",
    pvt_key: Optional[str] = None,
    rpc_url: str = "",
    chain_id: int = 1,
    chain: str = "ethereum",
    wallet_expiry_days: int = 1,
    contract_address: str = "",
    lit_network: Optional[str] = None,
    pinata_key: Optional[str] = None,
    pinata_secret: Optional[str] = None,
) -> AssetVaultConfig:
    """Build a configuration from explicit values and install it globally.

    This is the programmatic entry point for applications embedding the
    helpers: anything not passed keeps its default, and the private key
    falls back to ASSETVAULT_PRIVATE_KEY when empty.

    Returns:
        The installed configuration
    """
    config = AssetVaultConfig()
    config.chain = ChainConfig(
        stage=stage,
        chain=chain,
        chain_id=chain_id,
        rpc_url=rpc_url,
        contract_address=contract_address,
        private_key=pvt_key or os.environ.get("ASSETVAULT_PRIVATE_KEY"),
        wallet_expiry_days=wallet_expiry_days,
    )
    if lit_network:
        config.lit.network = lit_network
    config.pinata.api_key = pinata_key
    config.pinata.secret_api_key = pinata_secret

    set_config(config)
    return config


def _validate_url(url: str) -> bool:
    """Validate a URL format."""
    url_pattern = r"^https?://[^\s/$.?#].[^\s]*$"
    return bool(re.match(url_pattern, url))


def _validate_address(address: str) -> bool:
    """Validate an EVM address format (hex, 20 bytes)."""
    return bool(re.match(r"^0x[0-9a-fA-F]{40}$", address))


def validate_config(config: Optional[AssetVaultConfig] = None) -> List[ValidationError]:
    """
    Validate configuration and return list of errors.

    Args:
        config: Configuration to validate (default: loaded from file)

    Returns:
        List of validation errors (empty if valid)
    """
    if config is None:
        config = load_config()

    errors: List[ValidationError] = []

    if not config.chain.private_key:
        errors.append(ValidationError(
            field="chain.private_key",
            message="Private key not set. Auth messages cannot be signed.",
            severity="warning"
        ))

    if not config.chain.contract_address:
        errors.append(ValidationError(
            field="chain.contract_address",
            message="Contract address not set. Access conditions will check an empty contract address.",
            severity="warning"
        ))
    elif not _validate_address(config.chain.contract_address):
        errors.append(ValidationError(
            field="chain.contract_address",
            message=f"Invalid address format: {config.chain.contract_address}",
            severity="error"
        ))

    if config.chain.wallet_expiry_days < 1:
        errors.append(ValidationError(
            field="chain.wallet_expiry_days",
            message="Wallet expiry must be at least one day.",
            severity="error"
        ))

    if config.chain.rpc_url and not _validate_url(config.chain.rpc_url):
        errors.append(ValidationError(
            field="chain.rpc_url",
            message=f"Invalid URL format: {config.chain.rpc_url}",
            severity="error"
        ))

    for name in ("api_root", "gateway_url"):
        url = getattr(config.pinata, name)
        if not _validate_url(url):
            errors.append(ValidationError(
                field=f"pinata.{name}",
                message=f"Invalid URL format: {url}",
                severity="error"
            ))

    if not (config.pinata.api_key or os.environ.get("PINATA_KEY")):
        errors.append(ValidationError(
            field="pinata.api_key",
            message="Pinata API key not set (config or PINATA_KEY).",
            severity="warning"
        ))
    if not (config.pinata.secret_api_key or os.environ.get("PINATA_SECRET")):
        errors.append(ValidationError(
            field="pinata.secret_api_key",
            message="Pinata secret not set (config or PINATA_SECRET).",
            severity="warning"
        ))

    return errors


def _config_to_dict(config: AssetVaultConfig, mask_secrets: bool = True) -> dict[str, Any]:
    """
    Convert configuration to dictionary.

    Args:
        config: Configuration to convert
        mask_secrets: If True, mask sensitive values like API keys

    Returns:
        Dictionary representation of config
    """
    def mask_value(key: str, value: Any) -> Any:
        """Mask sensitive values."""
        if not mask_secrets:
            return value
        sensitive_keys = {"api_key", "private_key", "secret"}
        if value and any(sk in key.lower() for sk in sensitive_keys):
            if isinstance(value, str) and len(value) > 4:
                return value[:4] + "****"
            return "****"
        return value

    return {
        "config_dir": str(config.config_dir),
        "chain": {
            "stage": config.chain.stage,
            "chain": config.chain.chain,
            "chain_id": config.chain.chain_id,
            "rpc_url": config.chain.rpc_url,
            "contract_address": config.chain.contract_address,
            "private_key": mask_value("private_key", config.chain.private_key),
            "wallet_expiry_days": config.chain.wallet_expiry_days,
        },
        "lit": {
            "network": config.lit.network,
            "siwe_domain": config.lit.siwe_domain,
            "siwe_uri": config.lit.siwe_uri,
            "siwe_statement": config.lit.siwe_statement,
        },
        "pinata": {
            "api_key": mask_value("api_key", config.pinata.api_key),
            "secret_api_key": mask_value("secret_api_key", config.pinata.secret_api_key),
            "api_root": config.pinata.api_root,
            "gateway_url": config.pinata.gateway_url,
            "timeout": config.pinata.timeout,
        },
        "js_runtime": {
            "runtime": config.js_runtime.runtime,
            "services_path": str(config.js_runtime.services_path) if config.js_runtime.services_path else None,
            "startup_timeout": config.js_runtime.startup_timeout,
            "request_timeout": config.js_runtime.request_timeout,
            "debug": config.js_runtime.debug,
        },
        "logging": {
            "level": config.logging.level,
            "format": config.logging.format,
            "file": str(config.logging.file) if config.logging.file else None,
        },
    }


def export_config_yaml(config: AssetVaultConfig, mask_secrets: bool = True) -> str:
    """Export configuration as YAML string."""
    config_dict = _config_to_dict(config, mask_secrets)
    return yaml.dump(config_dict, default_flow_style=False, sort_keys=False, allow_unicode=True)


def export_config_json(config: AssetVaultConfig, mask_secrets: bool = True) -> str:
    """Export configuration as JSON string."""
    config_dict = _config_to_dict(config, mask_secrets)
    return json.dumps(config_dict, indent=2)

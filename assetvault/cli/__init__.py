"""CLI command groups for AssetVault."""

from assetvault.cli import config, encryption, storage

__all__ = ["config", "encryption", "storage"]

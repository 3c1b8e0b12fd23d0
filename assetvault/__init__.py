"""AssetVault - Lit Protocol encryption and Pinata/IPFS storage helpers."""

__app_name__ = "assetvault"
__version__ = "0.1.0"

__all__ = ["__app_name__", "__version__"]

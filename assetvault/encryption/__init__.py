"""Lit Protocol encryption helpers.

Encrypts and decrypts binary assets with access-control conditions keyed
on a content hash and the asset contract.
"""

from assetvault.encryption.access import get_default_auth
from assetvault.encryption.auth import generate_siwe_message, sign_auth_message
from assetvault.encryption.lit import (
    EncryptedAsset,
    LitClient,
    decrypt_asset,
    encrypt_asset,
    get_lit_client,
)
from assetvault.encryption.metadata import (
    EncryptionMetadata,
    delete_encryption_metadata,
    get_encryption_metadata_path,
    load_encryption_metadata,
    save_encryption_metadata,
)

__all__ = [
    "EncryptedAsset",
    "EncryptionMetadata",
    "LitClient",
    "decrypt_asset",
    "delete_encryption_metadata",
    "encrypt_asset",
    "generate_siwe_message",
    "get_default_auth",
    "get_encryption_metadata_path",
    "get_lit_client",
    "load_encryption_metadata",
    "save_encryption_metadata",
    "sign_auth_message",
]

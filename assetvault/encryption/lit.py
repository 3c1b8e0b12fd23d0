"""Lit Protocol encryption and decryption of binary assets.

The Lit SDK runs behind the JS runtime bridge; this module signs the auth
message, computes access-control conditions from the content hash and the
configured contract, and hands both to the SDK's ``encryptFile`` and
``decryptToFile`` calls.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from assetvault.config import AssetVaultConfig, get_config
from assetvault.encryption.access import get_default_auth
from assetvault.encryption.auth import sign_auth_message
from assetvault.js_runtime.bridge import JSRuntimeBridge
from assetvault.js_runtime.manager import JSBridgeManager
from assetvault.js_runtime.protocol import JSRuntimeMethods

logger = logging.getLogger(__name__)


@dataclass
class EncryptedAsset:
    """Result of encrypting an asset."""

    ciphertext: str
    data_to_encrypt_hash: str


class LitClient:
    """Lit node client living in the JS runtime.

    Binary payloads cross the bridge base64-encoded.
    """

    def __init__(self, bridge: JSRuntimeBridge):
        self._bridge = bridge
        self.network: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.network is not None

    async def connect(self, network: str) -> None:
        """Connect the SDK client to a Lit network."""
        logger.debug(f"connect to lit network {network}")
        await self._bridge.call(JSRuntimeMethods.LIT_CONNECT, {"network": network})
        self.network = network

    async def encrypt_file(
        self,
        file: bytes,
        chain: str,
        auth_sig: Dict[str, Any],
        unified_access_control_conditions: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Call ``encryptFile``; returns ``ciphertext`` and ``dataToEncryptHash``."""
        return await self._bridge.call(JSRuntimeMethods.LIT_ENCRYPT_FILE, {
            "file": base64.b64encode(file).decode(),
            "chain": chain,
            "authSig": auth_sig,
            "unifiedAccessControlConditions": unified_access_control_conditions,
        })

    async def decrypt_to_file(
        self,
        ciphertext: str,
        data_to_encrypt_hash: str,
        chain: str,
        auth_sig: Dict[str, Any],
        unified_access_control_conditions: List[Dict[str, Any]],
    ) -> bytes:
        """Call ``decryptToFile`` and return the plaintext bytes."""
        result = await self._bridge.call(JSRuntimeMethods.LIT_DECRYPT_TO_FILE, {
            "ciphertext": ciphertext,
            "dataToEncryptHash": data_to_encrypt_hash,
            "authSig": auth_sig,
            "chain": chain,
            "unifiedAccessControlConditions": unified_access_control_conditions,
        })
        return base64.b64decode(result["decryptedFile"])


async def get_lit_client(config: Optional[AssetVaultConfig] = None) -> LitClient:
    """Get a connected LitClient on the shared bridge."""
    config = config or get_config()

    manager = JSBridgeManager.get_instance()
    if not manager.is_configured:
        manager.configure_from(config.js_runtime)

    client = LitClient(await manager.get_bridge())
    await client.connect(config.lit.network)
    return client


async def encrypt_asset(
    content: bytes,
    content_hash: str,
    config: Optional[AssetVaultConfig] = None,
    client: Optional[LitClient] = None,
) -> EncryptedAsset:
    """Encrypt ``content`` so only wallets authorized for ``content_hash`` can decrypt.

    Args:
        content: Plaintext asset bytes
        content_hash: Hash of the asset, checked by the access condition
        config: Configuration (default: global config)
        client: Connected client (default: one on the shared bridge)

    Returns:
        EncryptedAsset with the ciphertext and its data hash

    Raises:
        RuntimeError: Carrying the message of whatever failed
    """
    try:
        config = config or get_config()
        client = client or await get_lit_client(config)

        logger.debug("sign auth message")
        auth_sig = sign_auth_message(config)

        authorization = get_default_auth(
            content_hash,
            config.chain.chain,
            config.chain.contract_address,
        )

        logger.debug(f"encrypt asset on chain {config.chain.chain}")
        result = await client.encrypt_file(
            file=content,
            chain=config.chain.chain,
            auth_sig=auth_sig,
            unified_access_control_conditions=authorization,
        )

        return EncryptedAsset(
            ciphertext=result["ciphertext"],
            data_to_encrypt_hash=result["dataToEncryptHash"],
        )
    except Exception as e:
        raise RuntimeError(str(e)) from e


async def decrypt_asset(
    ciphertext: str,
    data_to_encrypt_hash: str,
    content_hash: str,
    config: Optional[AssetVaultConfig] = None,
    client: Optional[LitClient] = None,
    unified_access_control_conditions: Optional[List[Dict[str, Any]]] = None,
) -> bytes:
    """Decrypt an asset previously encrypted with :func:`encrypt_asset`.

    Pass the conditions stored at encryption time as
    ``unified_access_control_conditions``; without them they are rebuilt
    from ``content_hash`` and the configured contract.

    Raises:
        RuntimeError: Carrying the message of whatever failed
    """
    try:
        config = config or get_config()
        client = client or await get_lit_client(config)

        logger.debug("sign auth message")
        auth_sig = sign_auth_message(config)

        authorization = unified_access_control_conditions or get_default_auth(
            content_hash,
            config.chain.chain,
            config.chain.contract_address,
        )

        logger.debug(f"decrypt asset on chain {config.chain.chain}")
        return await client.decrypt_to_file(
            ciphertext=ciphertext,
            data_to_encrypt_hash=data_to_encrypt_hash,
            chain=config.chain.chain,
            auth_sig=auth_sig,
            unified_access_control_conditions=authorization,
        )
    except Exception as e:
        raise RuntimeError(str(e)) from e

"""Sign-in-with-Ethereum auth signatures for Lit Protocol requests.

Every encrypt/decrypt call carries an ``authSig``: an EIP-4361 message signed
with the configured wallet (EIP-191 personal sign) proving who is asking.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_hex
from siwe import SiweMessage, generate_nonce

from assetvault.config import AssetVaultConfig, get_config

logger = logging.getLogger(__name__)

DERIVED_VIA = "web3.eth.personal.sign"


def _iso_timestamp(moment: datetime) -> str:
    """Format a UTC datetime the way SIWE messages expect (RFC 3339, ms, Z)."""
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def generate_siwe_message(
    address: str,
    chain_id: int,
    expiry_days: int = 1,
    domain: str = "localhost",
    uri: str = "http://localhost/login",
    statement: str = "authsign generated by an identity on assetvault",
) -> SiweMessage:
    """Build a SIWE message for ``address``.

    Args:
        address: Checksummed wallet address
        chain_id: EIP-155 chain id
        expiry_days: Days until the message expires

    Returns:
        An unsigned SiweMessage
    """
    issued_at = datetime.now(timezone.utc)

    return SiweMessage(
        domain=domain,
        address=address,
        statement=statement,
        uri=uri,
        version="1",
        chain_id=chain_id,
        nonce=generate_nonce(),
        issued_at=_iso_timestamp(issued_at),
        expiration_time=_iso_timestamp(issued_at + timedelta(days=expiry_days)),
    )


def sign_auth_message(config: Optional[AssetVaultConfig] = None) -> Dict[str, Any]:
    """Sign a fresh SIWE message with the configured private key.

    Returns:
        Lit ``authSig`` dict with ``sig``, ``derivedVia``, ``signedMessage``
        and ``address``

    Raises:
        ValueError: If no private key is configured
    """
    config = config or get_config()
    private_key = config.chain.private_key
    if not private_key:
        raise ValueError(
            "private key required to sign auth messages. "
            "Set chain.private_key or ASSETVAULT_PRIVATE_KEY."
        )

    account = Account.from_key(private_key)
    logger.debug(f"generate SIWE message for {account.address}")

    message = generate_siwe_message(
        address=account.address,
        chain_id=config.chain.chain_id,
        expiry_days=config.chain.wallet_expiry_days,
        domain=config.lit.siwe_domain,
        uri=config.lit.siwe_uri,
        statement=config.lit.siwe_statement,
    )
    signed_message = message.prepare_message()

    signed = Account.sign_message(encode_defunct(text=signed_message), private_key=private_key)

    return {
        "sig": to_hex(signed.signature),
        "derivedVia": DERIVED_VIA,
        "signedMessage": signed_message,
        "address": account.address,
    }

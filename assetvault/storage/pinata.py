"""Pinata client for pinning assets and metadata to IPFS.

Asset metadata is pinned as a JSON document and binary assets as a
multipart file upload; both are read back through the public Pinata
gateway.
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, Optional, Union

import httpx

from assetvault.config import DEFAULT_PINATA_ROOT, PinataConfig
from assetvault.storage.cid import normalize_cid

logger = logging.getLogger(__name__)

PIN_JSON_PATH = "/pinning/pinJSONToIPFS"
PIN_FILE_PATH = "/pinning/pinFileToIPFS"
TEST_AUTH_PATH = "/data/testAuthentication"

PIN_OPTIONS = {"cidVersion": 1}

# Shared request settings; credentials are refreshed before every request
pinata_config: Dict[str, Any] = {
    "root": DEFAULT_PINATA_ROOT,
    "headers": {
        "pinata_api_key": "",
        "pinata_secret_api_key": "",
    },
}


class ContentType(str, Enum):
    """What an upload or fetch carries."""

    META = "meta"  # JSON metadata document
    ASSET = "asset"  # binary asset


@dataclass
class UploadData:
    """A named payload to pin."""

    name: str
    body: Union[bytes, Dict[str, Any]]


def _apply_config(config: PinataConfig) -> Dict[str, str]:
    """Load credentials into ``pinata_config`` and return the auth headers.

    Keys missing from ``config`` fall back to PINATA_KEY / PINATA_SECRET.
    """
    pinata_config["root"] = config.api_root.rstrip("/")
    pinata_config["headers"]["pinata_api_key"] = (
        config.api_key or os.environ.get("PINATA_KEY") or ""
    )
    pinata_config["headers"]["pinata_secret_api_key"] = (
        config.secret_api_key or os.environ.get("PINATA_SECRET") or ""
    )
    return dict(pinata_config["headers"])


@asynccontextmanager
async def _session(
    config: PinataConfig,
    client: Optional[httpx.AsyncClient],
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` if given, otherwise a short-lived one."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=config.timeout) as session:
        yield session


async def upload_to_ipfs(
    data: UploadData,
    config: PinataConfig,
    content_type: Union[ContentType, str] = ContentType.ASSET,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """Pin ``data`` to IPFS through the Pinata API.

    ``meta`` payloads go to pinJSONToIPFS as a JSON body; anything else is
    sent to pinFileToIPFS as a multipart file named ``data.name``. Both pin
    with CID version 1.

    Args:
        data: Name and body to pin
        config: Pinata settings and credentials
        content_type: ``meta`` or ``asset``
        client: Optional HTTP client to reuse

    Returns:
        The Pinata pin response, unmodified (``IpfsHash``, ``PinSize``,
        ``Timestamp``, ...)

    Raises:
        RuntimeError: Carrying the message of whatever failed
    """
    try:
        logger.debug("read pinata config")
        name, body = data.name, data.body

        logger.debug("prep api request")
        headers = _apply_config(config)

        async with _session(config, client) as http:
            if content_type == ContentType.META:
                request_body = {
                    "pinataContent": body,
                    "pinataMetadata": {"name": name},
                    "pinataOptions": PIN_OPTIONS,
                }
                endpoint = f"{pinata_config['root']}{PIN_JSON_PATH}"

                logger.debug(f"upload asset meta to {endpoint}")
                response = await http.post(
                    endpoint,
                    headers={"Content-Type": "application/json", **headers},
                    content=json.dumps(request_body),
                )
            else:
                if not isinstance(body, (bytes, bytearray, memoryview)):
                    raise TypeError(
                        f"asset body must be bytes, got {type(body).__name__}"
                    )
                endpoint = f"{pinata_config['root']}{PIN_FILE_PATH}"

                logger.debug(f"prep formdata to upload asset to {endpoint}")
                files = {"file": (name, bytes(body))}
                form = {
                    "pinataMetadata": json.dumps({"name": name}),
                    "pinataOptions": json.dumps(PIN_OPTIONS),
                }

                logger.debug("upload asset to pinata")
                response = await http.post(endpoint, headers=headers, data=form, files=files)

            return response.json()
    except Exception as e:
        raise RuntimeError(str(e)) from e


async def test_pinata_connection(
    config: PinataConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Check the configured credentials against Pinata.

    Returns:
        ``"success"`` when Pinata accepts the keys

    Raises:
        RuntimeError: If the request fails or the keys are rejected
    """
    try:
        headers = _apply_config(config)
        url = f"{pinata_config['root']}{TEST_AUTH_PATH}"

        async with _session(config, client) as http:
            response = await http.get(url, headers=headers)
            response.raise_for_status()
            response.json()
    except Exception as e:
        raise RuntimeError(str(e)) from e

    return "success"


test_pinata_connection.__test__ = False  # not a pytest test


async def fetch_from_ipfs(
    cid: str,
    content_type: Union[ContentType, str],
    config: PinataConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> Union[Dict[str, Any], bytes]:
    """Fetch pinned content through the Pinata gateway.

    Args:
        cid: CID, with or without an ``ipfs://`` prefix
        content_type: ``meta`` to parse JSON, anything else for raw bytes
        config: Pinata settings and credentials

    Returns:
        The metadata document or the asset bytes

    Raises:
        RuntimeError: Carrying the message of whatever failed
    """
    _cid = normalize_cid(cid)
    logger.debug(f"fetch asset from IPFS via Pinata {_cid}")
    url = f"{config.gateway_url.rstrip('/')}/ipfs/{_cid}"

    try:
        logger.debug("prep api request")
        headers = _apply_config(config)

        logger.debug(f"fetch asset from {url}")
        async with _session(config, client) as http:
            response = await http.get(url, headers=headers)
            response.raise_for_status()

            if content_type == ContentType.META:
                logger.debug("parse asset meta")
                return response.json()

            logger.debug("parse asset binary data")
            return response.content
    except Exception as e:
        raise RuntimeError(str(e)) from e

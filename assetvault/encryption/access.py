"""Access-control conditions for Lit Protocol encryption.

Lit evaluates these "unified access control conditions" when a decryption
key is requested. The default condition asks the asset contract whether the
requesting wallet is authorized for a given content hash.
"""

from typing import Any, Dict, List

# ABI fragment of the contract view consulted by the default condition
CHECK_AUTH_ABI: Dict[str, Any] = {
    "inputs": [
        {"internalType": "string", "name": "contentHash", "type": "string"},
        {"internalType": "address", "name": "requestedBy", "type": "address"},
    ],
    "name": "checkAuth",
    "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
    "stateMutability": "view",
    "type": "function",
}


def get_default_auth(
    content_hash: str,
    chain: str,
    contract_address: str,
) -> List[Dict[str, Any]]:
    """Build the default access-control condition list.

    Decryption is allowed when ``checkAuth(content_hash, :userAddress)`` on
    ``contract_address`` returns true.

    Args:
        content_hash: Hash of the plaintext asset
        chain: Lit chain name the contract lives on
        contract_address: Address of the authorization contract

    Returns:
        A one-element unified access control condition list
    """
    return [
        {
            "conditionType": "evmContract",
            "contractAddress": contract_address,
            "functionName": "checkAuth",
            "functionParams": [content_hash, ":userAddress"],
            "functionAbi": CHECK_AUTH_ABI,
            "chain": chain,
            "returnValueTest": {
                "key": "",
                "comparator": "=",
                "value": "true",
            },
        }
    ]

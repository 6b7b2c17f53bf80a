"""
In-process signing with eth_account.

Produces the same result shape as the external signer tool, so it can be
injected into ``TransferSigner`` in its place.
"""

import asyncio
from typing import Any, Dict

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from ..errors import SigningProtocolError, SigningUnavailable


class LocalSigner:
    """Signs the payload bytes as an EIP-191 personal message."""

    name = "eth_account"

    def _sign(self, payload_hex: str, private_key: str) -> Dict[str, Any]:
        try:
            message = encode_defunct(hexstr=payload_hex)
        except (TypeError, ValueError):
            raise SigningProtocolError("Payload is not valid hex", tool=self.name) from None

        try:
            account = Account.from_key(private_key)
            signed = account.sign_message(message)
        except (TypeError, ValueError):
            # eth_account echoes the key in some of its error messages
            raise SigningUnavailable("Private key rejected by signer", tool=self.name) from None

        return {
            "signature": Web3.to_hex(signed.signature),
            "r": Web3.to_hex(signed.r),
            "s": Web3.to_hex(signed.s),
            "v": signed.v,
            "signer": account.address,
        }

    async def __call__(self, payload_hex: str, private_key: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._sign, payload_hex, private_key)

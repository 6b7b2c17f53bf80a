"""
Unit tests for the in-process eth_account signer.
"""

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from crossbridge.errors import SigningProtocolError, SigningUnavailable
from crossbridge.signing import LocalSigner, TransferSigner
from crossbridge.transfer import TransferIntent

KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ADDRESS = Account.from_key(KEY).address
PAYLOAD = "0x" + "01" * 140


class TestLocalSigner:
    """Test LocalSigner functionality."""

    @pytest.mark.asyncio
    async def test_signature_recovers_signer(self):
        """Test the signature verifies against the signing key."""
        result = await LocalSigner()(PAYLOAD, KEY)

        recovered = Account.recover_message(
            encode_defunct(hexstr=PAYLOAD), signature=result["signature"]
        )
        assert recovered == ADDRESS
        assert result["signer"] == ADDRESS

    @pytest.mark.asyncio
    async def test_result_shape(self):
        """Test the output matches the signer tool's result object."""
        result = await LocalSigner()(PAYLOAD, KEY)

        assert result["signature"].startswith("0x")
        assert len(result["signature"]) == 2 + 65 * 2
        assert result["v"] in (27, 28)
        assert result["r"].startswith("0x")
        assert result["s"].startswith("0x")

    @pytest.mark.asyncio
    async def test_deterministic(self):
        """Test the same payload and key give the same signature."""
        signer = LocalSigner()

        first = await signer(PAYLOAD, KEY)
        second = await signer(PAYLOAD, KEY)

        assert first["signature"] == second["signature"]

    @pytest.mark.asyncio
    async def test_invalid_key(self):
        """Test a malformed private key."""
        with pytest.raises(SigningUnavailable) as exc_info:
            await LocalSigner()(PAYLOAD, "0x1234")

        assert "0x1234" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        """Test a payload that is not hex."""
        with pytest.raises(SigningProtocolError):
            await LocalSigner()("0xnothex", KEY)

    @pytest.mark.asyncio
    async def test_as_transfer_signer_primitive(self):
        """Test LocalSigner plugs into TransferSigner."""
        signer = TransferSigner(LocalSigner())
        intent = TransferIntent(
            sender=ADDRESS, source_network=1, destination_network=56, token=0, amount="1"
        )

        signed = await signer.authorize(intent, KEY)

        assert signed.aux["signer"] == ADDRESS
        recovered = Account.recover_message(
            encode_defunct(hexstr=signed.data), signature=signed.signature
        )
        assert recovered == ADDRESS

"""
Unit tests for TransferSigner.
"""

from unittest.mock import AsyncMock

import pytest

from crossbridge.errors import SigningProtocolError, SigningUnavailable
from crossbridge.signing import SignedTransfer, TransferSigner, parse_signing_result
from crossbridge.transfer import NonceGenerator, TransferCodec, TransferIntent

SENDER = "0x52908400098527886E0F7030069857D2E4169EE7"
KEY = "0x" + "11" * 32


@pytest.fixture
def codec():
    return TransferCodec(NonceGenerator(clock=lambda: 1, random_bytes=lambda n: b"\x00" * n))


@pytest.fixture
def intent():
    return TransferIntent(
        sender=SENDER, source_network=1, destination_network=56, token=0, amount="100.5"
    )


class TestParseSigningResult:
    """Test primitive output parsing."""

    def test_splits_signature_and_aux(self):
        """Test the signature is separated from auxiliary fields."""
        signature, aux = parse_signing_result({"signature": "0xabc", "v": 27})

        assert signature == "0xabc"
        assert dict(aux) == {"v": 27}

    def test_aux_is_read_only(self):
        """Test the auxiliary mapping cannot be modified."""
        _, aux = parse_signing_result({"signature": "0xabc", "v": 27})

        with pytest.raises(TypeError):
            aux["v"] = 28

    @pytest.mark.parametrize("result", [None, "0xabc", ["0xabc"], {}, {"signature": ""}, {"sig": "0x"}])
    def test_missing_signature(self, result):
        """Test output without a usable signature."""
        with pytest.raises(SigningProtocolError):
            parse_signing_result(result, tool="SignerTool")


class TestTransferSigner:
    """Test TransferSigner functionality."""

    @pytest.mark.asyncio
    async def test_sign_payload(self, codec, intent):
        """Test signing an encoded payload."""
        primitive = AsyncMock(return_value={"signature": "0xsig", "r": "0x01"})
        signer = TransferSigner(primitive, codec=codec)
        payload = codec.encode(intent)

        signed = await signer.sign(payload, KEY)

        primitive.assert_awaited_once_with(payload.data, KEY)
        assert isinstance(signed, SignedTransfer)
        assert signed.signature == "0xsig"
        assert signed.payload is payload
        assert signed.data == payload.data
        assert signed.aux["r"] == "0x01"

    @pytest.mark.asyncio
    async def test_sign_hex_string(self):
        """Test signing a bare payload hex string."""
        primitive = AsyncMock(return_value={"signature": "0xsig", "v": 28})
        signer = TransferSigner(primitive)

        result = await signer.sign("0xdeadbeef", KEY)

        assert dict(result) == {"signature": "0xsig", "v": 28}
        with pytest.raises(TypeError):
            result["signature"] = "0xother"

    @pytest.mark.asyncio
    async def test_authorize_encodes_then_signs(self, codec, intent):
        """Test authorize builds the payload with the codec."""
        primitive = AsyncMock(return_value={"signature": "0xsig"})
        signer = TransferSigner(primitive, codec=codec)

        signed = await signer.authorize(intent, KEY)

        assert signed.payload.data == codec.encode(intent).data
        data = signed.to_dict()
        assert data["signature"] == "0xsig"
        assert data["amount"] == "100.5"
        assert data["sourceNetwork"] == 1

    @pytest.mark.asyncio
    async def test_aux_cannot_overwrite_payload_fields(self, codec, intent):
        """Test primitive output keys that clash with payload fields stay in aux."""
        primitive = AsyncMock(
            return_value={"signature": "0xsig", "data": "0xforged", "amount": "999", "v": 27}
        )
        signer = TransferSigner(primitive, codec=codec)

        signed = await signer.authorize(intent, KEY)
        data = signed.to_dict()

        assert data["data"] == signed.payload.data
        assert data["amount"] == "100.5"
        assert data["aux"] == {"data": "0xforged", "amount": "999", "v": 27}

    @pytest.mark.asyncio
    async def test_primitive_failure_propagates(self, codec, intent):
        """Test primitive errors surface unchanged and leave the payload intact."""
        primitive = AsyncMock(side_effect=SigningUnavailable("tool exited 1", exit_code=1))
        signer = TransferSigner(primitive, codec=codec)
        payload = codec.encode(intent)
        before = payload.data

        with pytest.raises(SigningUnavailable) as exc_info:
            await signer.sign(payload, KEY)

        assert exc_info.value.exit_code == 1
        assert payload.data == before

    @pytest.mark.asyncio
    async def test_malformed_primitive_output(self, codec, intent):
        """Test output without a signature."""
        signer = TransferSigner(AsyncMock(return_value={"status": "ok"}), codec=codec)

        with pytest.raises(SigningProtocolError):
            await signer.authorize(intent, KEY)

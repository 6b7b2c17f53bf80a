"""
Transfer authorization.

``TransferSigner`` hands an encoded payload and a private key to a signing
primitive and wraps the result. The primitive is an injected async callable
``(payload_hex, private_key) -> mapping``; the codec knows nothing about it,
so an external tool and an in-process signer are interchangeable.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..errors import SigningProtocolError
from ..logging import get_logger
from ..transfer.codec import TransferCodec, TransferIntent, TransferPayload

logger = get_logger(__name__)

SigningPrimitive = Callable[[str, str], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True)
class SignedTransfer:
    """An encoded payload and the signing primitive's output."""

    payload: TransferPayload
    signature: str
    aux: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def data(self) -> str:
        return self.payload.data

    def to_dict(self) -> dict:
        """Payload fields and signature, with primitive output nested under ``aux``."""
        result = self.payload.to_dict()
        result["signature"] = self.signature
        result["aux"] = dict(self.aux)
        return result


def parse_signing_result(result: Any, tool: Optional[str] = None) -> tuple:
    """Split primitive output into ``(signature, aux)``.

    Raises:
        SigningProtocolError: the output is not a mapping with a non-empty
            ``signature`` entry.
    """
    if not isinstance(result, Mapping):
        raise SigningProtocolError(
            f"Signing primitive returned {type(result).__name__}, expected an object",
            tool=tool,
        )

    signature = result.get("signature")
    if not signature:
        raise SigningProtocolError("Signing primitive output has no signature", tool=tool)
    if not isinstance(signature, str):
        signature = str(signature)

    aux = MappingProxyType({k: v for k, v in result.items() if k != "signature"})
    return signature, aux


class TransferSigner:
    """Signs transfer payloads through an injected signing primitive."""

    def __init__(self, primitive: SigningPrimitive, codec: Optional[TransferCodec] = None):
        self.primitive = primitive
        self.codec = codec or TransferCodec()

    async def sign(
        self, payload: Union[TransferPayload, str], private_key: str
    ) -> Union[SignedTransfer, Mapping[str, Any]]:
        """Sign an encoded payload.

        A ``TransferPayload`` yields a ``SignedTransfer``; a bare payload hex
        string yields the primitive's parsed output as a read-only mapping.
        Primitive failures propagate unchanged and the payload is untouched.
        """
        payload_hex = payload.data if isinstance(payload, TransferPayload) else payload
        tool = getattr(self.primitive, "name", None)

        result = await self.primitive(payload_hex, private_key)
        signature, aux = parse_signing_result(result, tool=tool)

        if not isinstance(payload, TransferPayload):
            return MappingProxyType({"signature": signature, **aux})

        logger.info(
            "Signed transfer",
            extra={
                "sender": payload.sender[-40:],
                "source_network": payload.source_network,
                "destination_network": payload.destination_network,
                "token": payload.token,
            },
        )
        return SignedTransfer(payload=payload, signature=signature, aux=aux)

    async def authorize(self, intent: TransferIntent, private_key: str) -> SignedTransfer:
        """Encode ``intent`` and sign the resulting payload."""
        payload = self.codec.encode(intent)
        return await self.sign(payload, private_key)

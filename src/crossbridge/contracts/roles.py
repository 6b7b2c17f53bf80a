"""
Access-control role identifiers and contract value types.

Role ids are fixed 32-byte constants shared verbatim by every deployment on
both sides of a bridge pair.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"


class Role(Enum):
    """Access-control roles on the bridge and token contracts."""

    ADMIN = "0xae6c2fc584631af4c9385b8a55683f1a75c813747e27efef5afece31c6b230d3"
    MINT = "0x8c66330d9d4f6aba064f25ef2a307366ea6d917616f44c075aa60fa15e5cb1cb"
    MINT_TO = "0x7d800f56a05adcb6245df540492a560d0e668aac15ee6c7dd40668064913da33"
    BURN = "0x9edfad36e7d4d9da54b4f78f22bf97cb5b58bb7998294a4288da41c15c647c45"
    BURN_FROM = "0xc8a3befa5973ff6e159afc769978d92f26bae29c51a73d11c9112a05b68d25e6"
    DEPOSIT = "0x587067af7acf278357651084bc3b5223d9fae81a768c4f25238b853ff2756ada"
    STAKING = "0x7308377bbcfee4c643b62e55a600f0c1ee294f1d8949667b05bfef816828e284"
    BRIDGE_TX = "0x8c07325f686988417936836fa712928a5e8319c01e2032f132d3f5bc3de91a47"

    @property
    def label(self) -> str:
        """camelCase name used in deployment files."""
        head, *rest = self.name.lower().split("_")
        return head + "".join(part.title() for part in rest)

    @property
    def id_bytes(self) -> bytes:
        return bytes.fromhex(self.value[2:])

    @classmethod
    def from_name(cls, name: str) -> "Role":
        """Look up a role by enum name (``MINT_TO``) or label (``mintTo``)."""
        for role in cls:
            if name in (role.name, role.label):
                return role
        raise KeyError(f"Unknown role: {name}")

    def __str__(self) -> str:
        return self.label


ROLES: Mapping[str, str] = MappingProxyType({role.label: role.value for role in Role})


@dataclass(frozen=True)
class RoleGrant:
    """A role held, or to be held, by an address."""

    role: Role
    subject: str


@dataclass(frozen=True)
class TokenRegistration:
    """A bridge's registration record for one token id."""

    id: int
    token_address: str = NULL_ADDRESS
    is_wrapped: bool = False
    decimals: int = 0
    can_withdraw: bool = False
    can_deposit: bool = False

    @property
    def is_registered(self) -> bool:
        return int(self.token_address, 16) != 0

"""Bridge and token contract access: role constants, collaborator protocols, web3 adapters."""

from .abi import BRIDGE_ABI, TOKEN_ABI
from .client import ChainClient, ChainConfig
from .contracts import BridgeContract, ContractInfo, TokenContract
from .interfaces import AccessControlled, BridgeCollaborator, TokenCollaborator
from .roles import NULL_ADDRESS, ROLES, Role, RoleGrant, TokenRegistration

__all__ = [
    # Roles and value types
    "NULL_ADDRESS",
    "ROLES",
    "Role",
    "RoleGrant",
    "TokenRegistration",
    # Protocols
    "AccessControlled",
    "BridgeCollaborator",
    "TokenCollaborator",
    # web3
    "BRIDGE_ABI",
    "TOKEN_ABI",
    "ChainClient",
    "ChainConfig",
    "BridgeContract",
    "ContractInfo",
    "TokenContract",
]

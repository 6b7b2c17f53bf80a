"""
Collaborator interfaces for the deployed bridge and token contracts.

Every method is a remote call and therefore a suspension point. Mutating
calls return an implementation-specific receipt that callers ignore; a
failed call raises.
"""

from typing import Any, Protocol, runtime_checkable

from .roles import TokenRegistration


@runtime_checkable
class AccessControlled(Protocol):
    """A contract with role-based access control."""

    address: str

    async def has_role(self, role_id: str, address: str) -> bool:
        ...

    async def grant_role(self, role_id: str, address: str) -> Any:
        ...


@runtime_checkable
class BridgeCollaborator(AccessControlled, Protocol):
    """The bridge contract."""

    async def query_token(self, token_id: int) -> TokenRegistration:
        ...

    async def add_token(
        self, token_id: int, is_wrapped: bool, decimals: int, address: str
    ) -> Any:
        ...

    async def set_token_can_withdraw(self, token_id: int, flag: bool) -> Any:
        ...

    async def set_token_can_deposit(self, token_id: int, flag: bool) -> Any:
        ...


@runtime_checkable
class TokenCollaborator(AccessControlled, Protocol):
    """A token contract the bridge mints and burns."""

    async def set_paused(self, flag: bool) -> Any:
        ...

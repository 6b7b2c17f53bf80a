"""
web3-backed bridge and token contract adapters.

Both adapters implement the collaborator protocols. Blocking web3 calls run
in a worker thread so each one is a suspension point for the caller. Any
failure surfaces as ``CollaboratorCallFailed``, except a revert caused by
the token being paused, which surfaces as ``PrecheckFailed``.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError

from ..errors import CrossBridgeError, PrecheckFailed, create_collaborator_error
from ..logging import get_logger
from .abi import BRIDGE_ABI, TOKEN_ABI, record_field_names
from .client import ChainClient
from .roles import Role, TokenRegistration

logger = get_logger(__name__)


@dataclass
class ContractInfo:
    """Smart contract information."""

    address: str
    abi: List[Dict[str, Any]] = field(default_factory=list)
    name: Optional[str] = None


def _role_bytes(role_id: Any) -> bytes:
    if isinstance(role_id, Role):
        return role_id.id_bytes
    if isinstance(role_id, (bytes, bytearray)):
        return bytes(role_id)
    return bytes.fromhex(role_id[2:] if role_id[:2].lower() == "0x" else role_id)


class _Web3Contract:
    """Shared plumbing for the contract adapters."""

    default_abi: List[Dict[str, Any]] = []

    def __init__(self, client: ChainClient, contract_info: ContractInfo):
        self.client = client
        self.contract_info = contract_info
        self.address = Web3.to_checksum_address(contract_info.address)
        self.contract = client.contract(self.address, contract_info.abi or self.default_abi)

    def _translate(self, operation: str, error: Exception) -> CrossBridgeError:
        if isinstance(error, ContractLogicError) and "paused" in str(error).lower():
            return PrecheckFailed(
                f"'{operation}' on {self.address} rejected while paused: {error}",
                step=operation,
                precondition="unpaused",
                address=self.address,
                cause=error,
            )
        return create_collaborator_error(operation, self.address, error)

    async def _run(self, operation: str, func: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(func)
        except CrossBridgeError:
            raise
        except Exception as e:
            raise self._translate(operation, e) from e

    async def _query(self, operation: str, build: Callable[[], Any]) -> Any:
        return await self._run(operation, lambda: self.client.call(build()))

    async def _transact(self, operation: str, build: Callable[[], Any]) -> Any:
        logger.debug("Submitting transaction", extra={"operation": operation, "contract": self.address})
        return await self._run(operation, lambda: self.client.transact(build(), operation))

    async def has_role(self, role_id: Any, address: str) -> bool:
        account = Web3.to_checksum_address(address)
        return bool(
            await self._query(
                "hasRole",
                lambda: self.contract.functions.hasRole(_role_bytes(role_id), account),
            )
        )

    async def grant_role(self, role_id: Any, address: str) -> Any:
        account = Web3.to_checksum_address(address)
        return await self._transact(
            "grantRole",
            lambda: self.contract.functions.grantRole(_role_bytes(role_id), account),
        )


class BridgeContract(_Web3Contract):
    """Bridge contract adapter."""

    default_abi = BRIDGE_ABI

    def __init__(self, client: ChainClient, contract_info: ContractInfo):
        super().__init__(client, contract_info)
        self._record_fields = record_field_names(contract_info.abi or BRIDGE_ABI)

    def _to_registration(self, token_id: int, result: Any) -> TokenRegistration:
        if isinstance(result, Mapping):
            record = dict(result)
        else:
            record = dict(zip(self._record_fields, result))

        return TokenRegistration(
            id=token_id,
            token_address=Web3.to_checksum_address(record.get("token") or "0x" + "00" * 20),
            is_wrapped=bool(record.get("isWrapped", False)),
            decimals=int(record.get("decimals", 0)),
            can_withdraw=bool(record.get("canWithdraw", False)),
            can_deposit=bool(record.get("canDeposit", False)),
        )

    async def query_token(self, token_id: int) -> TokenRegistration:
        result = await self._query(
            "queryToken", lambda: self.contract.functions.queryToken(token_id)
        )
        return self._to_registration(token_id, result)

    async def add_token(self, token_id: int, is_wrapped: bool, decimals: int, address: str) -> Any:
        token = Web3.to_checksum_address(address)
        return await self._transact(
            "addToken",
            lambda: self.contract.functions.addToken(token_id, is_wrapped, decimals, token),
        )

    async def set_token_can_withdraw(self, token_id: int, flag: bool) -> Any:
        return await self._transact(
            "setTokenCanWithdraw",
            lambda: self.contract.functions.setTokenCanWithdraw(token_id, flag),
        )

    async def set_token_can_deposit(self, token_id: int, flag: bool) -> Any:
        return await self._transact(
            "setTokenCanDeposit",
            lambda: self.contract.functions.setTokenCanDeposit(token_id, flag),
        )


class TokenContract(_Web3Contract):
    """Token contract adapter."""

    default_abi = TOKEN_ABI

    async def set_paused(self, flag: bool) -> Any:
        return await self._transact(
            "setPaused", lambda: self.contract.functions.setPaused(flag)
        )

    async def paused(self) -> bool:
        return bool(await self._query("paused", lambda: self.contract.functions.paused()))

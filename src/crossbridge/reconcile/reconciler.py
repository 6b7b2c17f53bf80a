"""
Configuration reconciler for a bridge/token contract pair.

Each pass reads current state, plans the minimal mutations and executes
them in order. Every write is preceded by a fresh read in the same pass, so
a pass that fails part way can simply be rerun.

Within one process, passes over the same bridge (validators), the same
bridge token id, or the same token contract are serialised. Nothing here
excludes other processes; callers that reconcile from several processes
must coordinate themselves.
"""

import asyncio
import weakref
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Hashable, Iterable, List, Optional, Tuple

from ..contracts.interfaces import AccessControlled, BridgeCollaborator, TokenCollaborator
from ..contracts.roles import Role
from ..errors import CollaboratorCallFailed, CrossBridgeError, create_collaborator_error
from ..logging import get_logger
from ..transfer.codec import normalize_address
from ..transfer.units import to_hex32
from .plan import (
    OWNER_ROLES,
    Mutation,
    MutationKind,
    MutationTarget,
    TokenState,
    TokenTarget,
    plan_registration,
    plan_token,
    plan_token_bootstrap,
    plan_validators,
    required_token_roles,
)

logger = get_logger(__name__)


class _LockRegistry:
    """asyncio locks keyed per event loop, shared by all reconcilers.

    Locks are held weakly: one lives only while a pass holds or awaits it,
    so the registry does not grow with every key ever reconciled.
    """

    def __init__(self):
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, weakref.WeakValueDictionary]" = (
            weakref.WeakKeyDictionary()
        )

    def _for_loop(self) -> "weakref.WeakValueDictionary[Hashable, asyncio.Lock]":
        loop = asyncio.get_running_loop()
        locks = self._locks.get(loop)
        if locks is None:
            locks = self._locks[loop] = weakref.WeakValueDictionary()
        return locks

    def get(self, key: Hashable) -> asyncio.Lock:
        locks = self._for_loop()
        lock = locks.get(key)
        if lock is None:
            lock = locks[key] = asyncio.Lock()
        return lock

    def live_keys(self) -> List[Hashable]:
        """Keys whose lock is currently held or awaited on the running loop."""
        return list(self._for_loop().keys())


_locks = _LockRegistry()


def _token_contract_key(token: AccessControlled) -> Tuple[str, str]:
    return ("token-contract", token.address.lower())


@dataclass
class ReconcileReport:
    """What a reconciliation pass did."""

    subject: str
    executed: List[Mutation] = field(default_factory=list)
    satisfied: List[str] = field(default_factory=list)

    @property
    def writes(self) -> int:
        return len(self.executed)


async def _guarded(
    step: str,
    operation: str,
    address: Optional[str],
    awaitable: Awaitable[Any],
    token_id: Optional[int] = None,
) -> Any:
    """Await one collaborator call, tagging failures with the step."""
    try:
        return await awaitable
    except CollaboratorCallFailed as e:
        if e.step is None:
            e.step = step
        if e.token_id is None:
            e.token_id = token_id
        logger.error(f"Step failed: {step}", extra={"operation": operation, "error": e.message})
        raise
    except CrossBridgeError as e:
        logger.error(f"Step failed: {step}", extra={"operation": operation, "error": e.message})
        raise
    except Exception as e:
        logger.error(f"Step failed: {step}", extra={"operation": operation, "error": str(e)})
        raise create_collaborator_error(
            operation, address, e, step=step, token_id=token_id
        ) from e


async def _apply(contract: Any, mutation: Mutation, token_id: Optional[int] = None) -> None:
    kind = mutation.kind

    if kind is MutationKind.GRANT_ROLE:
        role, subject = mutation.args
        call = contract.grant_role(role.value, subject)
    elif kind is MutationKind.ADD_TOKEN:
        call = contract.add_token(*mutation.args)
    elif kind is MutationKind.SET_CAN_WITHDRAW:
        call = contract.set_token_can_withdraw(*mutation.args)
    elif kind is MutationKind.SET_CAN_DEPOSIT:
        call = contract.set_token_can_deposit(*mutation.args)
    elif kind is MutationKind.SET_PAUSED:
        call = contract.set_paused(*mutation.args)
    else:
        raise ValueError(f"Unsupported mutation: {kind}")

    log = logger if token_id is None else logger.bind(token_id=token_id)
    log.info(mutation.step[0].upper() + mutation.step[1:])
    await _guarded(mutation.step, kind.value, contract.address, call, token_id=token_id)


class ConfigurationReconciler:
    """Drives a bridge and its tokens to the required configuration."""

    def __init__(self, bridge: BridgeCollaborator):
        self.bridge = bridge

    async def _execute(
        self,
        mutation: Mutation,
        token: Optional[TokenCollaborator] = None,
        token_id: Optional[int] = None,
    ) -> None:
        contract = token if mutation.target is MutationTarget.TOKEN else self.bridge
        await _apply(contract, mutation, token_id=token_id)

    async def reconcile_validators(self, required_addresses: Iterable[str]) -> ReconcileReport:
        """Grant the deposit role to each required validator that lacks it."""
        addresses = [normalize_address(a) for a in required_addresses]
        report = ReconcileReport(subject=f"validators@{self.bridge.address}")

        async with _locks.get(("validators", self.bridge.address)):
            current: Dict[str, bool] = {}
            for address in addresses:
                if address in current:
                    continue
                current[address] = await _guarded(
                    f"check deposit role for validator {address}",
                    "hasRole",
                    self.bridge.address,
                    self.bridge.has_role(Role.DEPOSIT.value, address),
                )
                if current[address]:
                    logger.info(f"Validator {address} already registered")
                    report.satisfied.append(f"deposit role held by {address}")

            for mutation in plan_validators(current, addresses):
                await self._execute(mutation)
                report.executed.append(mutation)

        return report

    async def reconcile_token(
        self, token_id: int, is_wrapped: bool, token: TokenCollaborator
    ) -> ReconcileReport:
        """Register and configure one token on the bridge.

        Raises:
            FieldOverflow: ``token_id`` does not fit in 32 bits.
            CollaboratorCallFailed: a chain call failed; remaining steps
                were not attempted.
            PrecheckFailed: the token rejected a step while paused.
        """
        to_hex32(token_id, "token_id")
        target = TokenTarget(
            token_id=token_id,
            token_address=token.address,
            bridge_address=self.bridge.address,
            is_wrapped=is_wrapped,
        )
        report = ReconcileReport(subject=f"token {token_id}@{token.address}")

        # Id lock first, then contract lock, so every pass takes them in the same order.
        async with _locks.get(("token", self.bridge.address, token_id)), _locks.get(
            _token_contract_key(token)
        ):
            registration = await _guarded(
                f"query registration of token {token_id}",
                "queryToken",
                self.bridge.address,
                self.bridge.query_token(token_id),
                token_id=token_id,
            )

            registration_call = plan_registration(registration, target)
            if registration_call is None:
                logger.info(f"Token already registered at index {token_id}")
                report.satisfied.append(f"token {token_id} registered")
            else:
                await self._execute(registration_call, token_id=token_id)
                report.executed.append(registration_call)
                registration = await _guarded(
                    f"re-query registration of token {token_id}",
                    "queryToken",
                    self.bridge.address,
                    self.bridge.query_token(token_id),
                    token_id=token_id,
                )

            logger.bind(token_id=token_id).info(f"Configuring token @ {token.address}")

            roles: Dict[Role, bool] = {}
            for role in required_token_roles(is_wrapped):
                roles[role] = await _guarded(
                    f"check {role.label} role of bridge on token {token_id}",
                    "hasRole",
                    token.address,
                    token.has_role(role.value, self.bridge.address),
                    token_id=token_id,
                )
                if roles[role]:
                    report.satisfied.append(f"bridge holds {role.label}")

            if registration.can_withdraw:
                report.satisfied.append("canWithdraw set")
            if registration.can_deposit:
                report.satisfied.append("canDeposit set")

            for mutation in plan_token(TokenState(registration, roles), target):
                await self._execute(mutation, token=token, token_id=token_id)
                report.executed.append(mutation)

        return report

    async def reconcile_tokens(
        self,
        tokens: Iterable[Tuple[int, bool, TokenCollaborator]],
        concurrent: bool = False,
    ) -> List[ReconcileReport]:
        """Reconcile several ``(token_id, is_wrapped, token)`` entries.

        Sequential by default; with ``concurrent`` the passes run together and
        the first failure propagates.
        """
        entries = list(tokens)
        if concurrent:
            return list(
                await asyncio.gather(
                    *(self.reconcile_token(i, wrapped, token) for i, wrapped, token in entries)
                )
            )

        reports = []
        for token_id, is_wrapped, token in entries:
            reports.append(await self.reconcile_token(token_id, is_wrapped, token))
        return reports


async def reconcile_validators(
    bridge: BridgeCollaborator, required_addresses: Iterable[str]
) -> ReconcileReport:
    """Grant the deposit role on ``bridge`` to every required validator."""
    return await ConfigurationReconciler(bridge).reconcile_validators(required_addresses)


async def reconcile_token(
    bridge: BridgeCollaborator, token_id: int, is_wrapped: bool, token: TokenCollaborator
) -> ReconcileReport:
    """Register ``token`` at ``token_id`` and configure it for bridging."""
    return await ConfigurationReconciler(bridge).reconcile_token(token_id, is_wrapped, token)


async def reconcile_token_owner(token: TokenCollaborator, creator: str) -> ReconcileReport:
    """Give the creator of a deployed token its owner roles and unpause it.

    Serialised with ``reconcile_token`` passes over the same contract.

    Raises:
        InvalidAddress: ``creator`` is not a 20-byte address.
        CollaboratorCallFailed: a chain call failed; remaining steps
            were not attempted.
    """
    creator = normalize_address(creator)
    report = ReconcileReport(subject=f"owner {creator}@{token.address}")

    async with _locks.get(_token_contract_key(token)):
        held: Dict[Role, bool] = {}
        for role in OWNER_ROLES:
            held[role] = await _guarded(
                f"check {role.label} role of creator on token {token.address}",
                "hasRole",
                token.address,
                token.has_role(role.value, creator),
            )
            if held[role]:
                report.satisfied.append(f"creator holds {role.label}")

        for mutation in plan_token_bootstrap(held, creator):
            await _apply(token, mutation)
            report.executed.append(mutation)

    return report

"""
Pure planning for configuration reconciliation.

Given observed contract state and the desired configuration, these
functions return the minimal ordered list of mutations. They perform no
I/O, so idempotence can be checked without a chain: planning against a
state that already satisfies the target yields no role or flag writes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ..contracts.roles import Role, TokenRegistration

# Fixed protocol parameter passed to addToken, independent of the token's
# own decimals.
REGISTRATION_DECIMALS = 2


class MutationTarget(Enum):
    """Contract a mutation is sent to."""

    BRIDGE = "bridge"
    TOKEN = "token"


class MutationKind(Enum):
    """State-changing collaborator calls."""

    GRANT_ROLE = "grantRole"
    ADD_TOKEN = "addToken"
    SET_CAN_WITHDRAW = "setTokenCanWithdraw"
    SET_CAN_DEPOSIT = "setTokenCanDeposit"
    SET_PAUSED = "setPaused"


@dataclass(frozen=True)
class Mutation:
    """One planned state-changing call."""

    target: MutationTarget
    kind: MutationKind
    args: Tuple[Any, ...]
    step: str

    def __str__(self) -> str:
        return f"{self.target.value}.{self.kind.value}: {self.step}"


@dataclass(frozen=True)
class TokenTarget:
    """Desired configuration of one bridge token."""

    token_id: int
    token_address: str
    bridge_address: str
    is_wrapped: bool = False


@dataclass(frozen=True)
class TokenState:
    """Observed state of one bridge token.

    ``roles`` maps each checked role to whether the bridge holds it on the
    token contract; unchecked roles count as absent.
    """

    registration: TokenRegistration
    roles: Mapping[Role, bool] = field(default_factory=dict)


def required_token_roles(is_wrapped: bool) -> Tuple[Role, ...]:
    """Roles the bridge needs on a token, in the order they are granted."""
    roles = (Role.MINT_TO, Role.BURN_FROM)
    if is_wrapped:
        return (Role.BRIDGE_TX,) + roles
    return roles


def _unique(addresses: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for address in addresses:
        key = address.lower()
        if key not in seen:
            seen.add(key)
            result.append(address)
    return result


def plan_validators(current: Mapping[str, bool], required: Iterable[str]) -> List[Mutation]:
    """Deposit-role grants for required validators that do not hold it.

    ``current`` maps addresses to whether they already hold the deposit role
    on the bridge. Missing entries count as not holding it.
    """
    held = {address.lower(): bool(flag) for address, flag in current.items()}
    return [
        Mutation(
            target=MutationTarget.BRIDGE,
            kind=MutationKind.GRANT_ROLE,
            args=(Role.DEPOSIT, address),
            step=f"grant deposit to validator {address}",
        )
        for address in _unique(required)
        if not held.get(address.lower(), False)
    ]


def plan_registration(current: TokenRegistration, target: TokenTarget) -> Optional[Mutation]:
    """Registration call for an unbound id, or ``None`` if the id is bound.

    A bound id is never re-bound, even if its address or wrapped flag differ
    from the target.
    """
    if current.is_registered:
        return None

    return Mutation(
        target=MutationTarget.BRIDGE,
        kind=MutationKind.ADD_TOKEN,
        args=(target.token_id, target.is_wrapped, REGISTRATION_DECIMALS, target.token_address),
        step=f"register token {target.token_id} -> {target.token_address}",
    )


def plan_token(state: TokenState, target: TokenTarget) -> List[Mutation]:
    """Role grants and flag updates for a registered token, then unpause.

    Order: bridgeTx (wrapped tokens only), mintTo, burnFrom, canWithdraw,
    canDeposit, and finally an unconditional ``setPaused(False)``.
    """
    mutations = []

    for role in required_token_roles(target.is_wrapped):
        if not state.roles.get(role, False):
            mutations.append(
                Mutation(
                    target=MutationTarget.TOKEN,
                    kind=MutationKind.GRANT_ROLE,
                    args=(role, target.bridge_address),
                    step=f"grant {role.label} to bridge on token {target.token_id}",
                )
            )

    registration = state.registration
    if not registration.can_withdraw:
        mutations.append(
            Mutation(
                target=MutationTarget.BRIDGE,
                kind=MutationKind.SET_CAN_WITHDRAW,
                args=(target.token_id, True),
                step=f"enable withdraw for token {target.token_id}",
            )
        )
    if not registration.can_deposit:
        mutations.append(
            Mutation(
                target=MutationTarget.BRIDGE,
                kind=MutationKind.SET_CAN_DEPOSIT,
                args=(target.token_id, True),
                step=f"enable deposit for token {target.token_id}",
            )
        )

    mutations.append(
        Mutation(
            target=MutationTarget.TOKEN,
            kind=MutationKind.SET_PAUSED,
            args=(False,),
            step=f"unpause token {target.token_id}",
        )
    )
    return mutations


# Roles the deploying account keeps on a token it created.
OWNER_ROLES = (Role.ADMIN, Role.MINT_TO, Role.BURN_FROM)


def plan_token_bootstrap(roles: Mapping[Role, bool], creator: str) -> List[Mutation]:
    """Owner setup for a freshly deployed token.

    ``roles`` maps each of ``OWNER_ROLES`` to whether ``creator`` already
    holds it. The creator takes admin, the token is unpaused, then the
    creator takes mintTo and burnFrom. The unpause is unconditional, like
    the one that ends ``plan_token``.
    """

    def grant(role: Role) -> Mutation:
        return Mutation(
            target=MutationTarget.TOKEN,
            kind=MutationKind.GRANT_ROLE,
            args=(role, creator),
            step=f"grant {role.label} to creator {creator}",
        )

    mutations = []
    if not roles.get(Role.ADMIN, False):
        mutations.append(grant(Role.ADMIN))
    mutations.append(
        Mutation(
            target=MutationTarget.TOKEN,
            kind=MutationKind.SET_PAUSED,
            args=(False,),
            step="unpause token for creator",
        )
    )
    for role in (Role.MINT_TO, Role.BURN_FROM):
        if not roles.get(role, False):
            mutations.append(grant(role))
    return mutations

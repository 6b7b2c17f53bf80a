"""
Unit tests for reconciliation planning.
"""

from crossbridge.contracts import Role, TokenRegistration
from crossbridge.reconcile import (
    OWNER_ROLES,
    REGISTRATION_DECIMALS,
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

BRIDGE = "0x1000000000000000000000000000000000000001"
TOKEN = "0x2000000000000000000000000000000000000002"
OTHER = "0x3000000000000000000000000000000000000003"
V1 = "0x52908400098527886E0F7030069857D2E4169EE7"
V2 = "0x8617E340B3D01FA5F11F306F4090FD50E238070D"


def target(is_wrapped=False):
    return TokenTarget(token_id=5, token_address=TOKEN, bridge_address=BRIDGE, is_wrapped=is_wrapped)


def registered(**changes):
    fields = {"id": 5, "token_address": TOKEN, "decimals": REGISTRATION_DECIMALS}
    fields.update(changes)
    return TokenRegistration(**fields)


class TestPlanValidators:
    """Test validator planning."""

    def test_grants_missing(self):
        """Test only validators without the deposit role are granted."""
        plan = plan_validators({V1: True, V2: False}, [V1, V2])

        assert len(plan) == 1
        assert plan[0].target is MutationTarget.BRIDGE
        assert plan[0].kind is MutationKind.GRANT_ROLE
        assert plan[0].args == (Role.DEPOSIT, V2)

    def test_unknown_counts_as_missing(self):
        """Test addresses absent from the observed state."""
        plan = plan_validators({}, [V1])

        assert [m.args[1] for m in plan] == [V1]

    def test_all_held_is_empty(self):
        """Test a satisfied validator set plans nothing."""
        assert plan_validators({V1: True, V2: True}, [V1, V2]) == []

    def test_case_insensitive_duplicates(self):
        """Test the same address in two spellings is granted once."""
        plan = plan_validators({}, [V1, V1.lower()])

        assert len(plan) == 1

    def test_observed_state_case_insensitive(self):
        """Test held roles match regardless of address case."""
        assert plan_validators({V1.lower(): True}, [V1]) == []


class TestPlanRegistration:
    """Test registration planning."""

    def test_unregistered_id(self):
        """Test registering an unbound id."""
        mutation = plan_registration(TokenRegistration(id=5), target())

        assert mutation.kind is MutationKind.ADD_TOKEN
        assert mutation.args == (5, False, REGISTRATION_DECIMALS, TOKEN)

    def test_registration_decimals_fixed(self):
        """Test the registration decimals are the fixed protocol value."""
        mutation = plan_registration(TokenRegistration(id=5), target(is_wrapped=True))

        assert mutation.args[2] == 2
        assert mutation.args[1] is True

    def test_bound_id_never_rebound(self):
        """Test an id bound to another address is left alone."""
        assert plan_registration(registered(token_address=OTHER), target()) is None


class TestPlanToken:
    """Test token configuration planning."""

    def test_required_roles(self):
        """Test role order for native and wrapped tokens."""
        assert required_token_roles(False) == (Role.MINT_TO, Role.BURN_FROM)
        assert required_token_roles(True) == (Role.BRIDGE_TX, Role.MINT_TO, Role.BURN_FROM)

    def test_fresh_native_token(self):
        """Test the full mutation order for an unconfigured native token."""
        plan = plan_token(TokenState(registered()), target())

        assert [(m.target, m.kind) for m in plan] == [
            (MutationTarget.TOKEN, MutationKind.GRANT_ROLE),
            (MutationTarget.TOKEN, MutationKind.GRANT_ROLE),
            (MutationTarget.BRIDGE, MutationKind.SET_CAN_WITHDRAW),
            (MutationTarget.BRIDGE, MutationKind.SET_CAN_DEPOSIT),
            (MutationTarget.TOKEN, MutationKind.SET_PAUSED),
        ]
        assert [m.args[0] for m in plan[:2]] == [Role.MINT_TO, Role.BURN_FROM]
        assert plan[0].args[1] == BRIDGE
        assert plan[-1].args == (False,)

    def test_wrapped_token_grants_bridge_tx_first(self):
        """Test wrapped tokens also need the bridge transaction role."""
        plan = plan_token(TokenState(registered(is_wrapped=True)), target(is_wrapped=True))

        assert [m.args[0] for m in plan[:3]] == [Role.BRIDGE_TX, Role.MINT_TO, Role.BURN_FROM]

    def test_configured_token_only_unpauses(self):
        """Test a fully configured token still gets the unpause call."""
        state = TokenState(
            registered(can_withdraw=True, can_deposit=True),
            roles={Role.MINT_TO: True, Role.BURN_FROM: True},
        )

        plan = plan_token(state, target())

        assert [m.kind for m in plan] == [MutationKind.SET_PAUSED]

    def test_partial_state(self):
        """Test only the missing steps are planned."""
        state = TokenState(registered(can_withdraw=True), roles={Role.MINT_TO: True})

        plan = plan_token(state, target())

        assert [m.kind for m in plan] == [
            MutationKind.GRANT_ROLE,
            MutationKind.SET_CAN_DEPOSIT,
            MutationKind.SET_PAUSED,
        ]
        assert plan[0].args[0] is Role.BURN_FROM

    def test_mutation_str(self):
        """Test the readable form of a mutation."""
        plan = plan_token(TokenState(registered()), target())

        assert str(plan[-1]) == "token.setPaused: unpause token 5"


class TestPlanTokenBootstrap:
    """Test owner bootstrap planning for a deployed token."""

    def test_fresh_token(self):
        """Test admin first, then unpause, then mintTo and burnFrom."""
        plan = plan_token_bootstrap({}, V1)

        assert [(m.kind, m.args) for m in plan] == [
            (MutationKind.GRANT_ROLE, (Role.ADMIN, V1)),
            (MutationKind.SET_PAUSED, (False,)),
            (MutationKind.GRANT_ROLE, (Role.MINT_TO, V1)),
            (MutationKind.GRANT_ROLE, (Role.BURN_FROM, V1)),
        ]
        assert all(m.target is MutationTarget.TOKEN for m in plan)

    def test_owner_roles_held(self):
        """Test a bootstrapped token plans only the unpause."""
        plan = plan_token_bootstrap({role: True for role in OWNER_ROLES}, V1)

        assert [m.kind for m in plan] == [MutationKind.SET_PAUSED]

    def test_admin_held(self):
        """Test a creator that is already admin skips that grant."""
        plan = plan_token_bootstrap({Role.ADMIN: True, Role.BURN_FROM: True}, V1)

        assert [(m.kind, m.args) for m in plan] == [
            (MutationKind.SET_PAUSED, (False,)),
            (MutationKind.GRANT_ROLE, (Role.MINT_TO, V1)),
        ]

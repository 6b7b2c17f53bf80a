"""Idempotent reconciliation of bridge and token contract configuration."""

from .plan import (
    OWNER_ROLES,
    REGISTRATION_DECIMALS,
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
from .reconciler import (
    ConfigurationReconciler,
    ReconcileReport,
    reconcile_token,
    reconcile_token_owner,
    reconcile_validators,
)

__all__ = [
    # Planning
    "OWNER_ROLES",
    "REGISTRATION_DECIMALS",
    "Mutation",
    "MutationKind",
    "MutationTarget",
    "TokenState",
    "TokenTarget",
    "plan_registration",
    "plan_token",
    "plan_token_bootstrap",
    "plan_validators",
    "required_token_roles",
    # Execution
    "ConfigurationReconciler",
    "ReconcileReport",
    "reconcile_token",
    "reconcile_token_owner",
    "reconcile_validators",
]

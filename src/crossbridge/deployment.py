"""
Wiring from a ``BridgeConfig`` to live collaborators.

``connect`` builds the web3 bridge and token adapters for a deployment and
``configure`` runs a full reconciliation pass over them.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import BridgeConfig
from .contracts import BridgeContract, ChainClient, ChainConfig, ContractInfo, TokenContract
from .errors import ConfigurationError
from .logging import get_logger
from .reconcile import ConfigurationReconciler, ReconcileReport
from .signing import ExternalProcessSigner, LocalSigner, TransferSigner
from .transfer import NonceGenerator, TransferCodec

logger = get_logger(__name__)


@dataclass
class Deployment:
    """Connected bridge and token contracts for one network."""

    client: ChainClient
    bridge: BridgeContract
    tokens: List[Tuple[int, bool, TokenContract]] = field(default_factory=list)


def connect(config: BridgeConfig, client: Optional[ChainClient] = None) -> Deployment:
    """Create contract adapters for the bridge and every configured token."""
    if not config.bridge_address:
        raise ConfigurationError("bridge_address is required", config_key="bridge_address")

    if client is None:
        client = ChainClient(
            ChainConfig(rpc_url=config.rpc_url, chain_id=config.chain_id),
            private_key=config.private_key,
        )

    bridge = BridgeContract(client, ContractInfo(address=config.bridge_address, name="bridge"))
    tokens = [
        (spec.id, spec.is_wrapped, TokenContract(client, ContractInfo(address=spec.address)))
        for spec in config.tokens
    ]
    return Deployment(client=client, bridge=bridge, tokens=tokens)


async def configure(deployment: Deployment, config: BridgeConfig) -> List[ReconcileReport]:
    """Reconcile validators, then each token in configuration order."""
    reconciler = ConfigurationReconciler(deployment.bridge)

    reports = [await reconciler.reconcile_validators(config.validators)]
    reports.extend(await reconciler.reconcile_tokens(deployment.tokens))

    logger.info(
        "Reconciliation complete",
        extra={"writes": sum(r.writes for r in reports), "passes": len(reports)},
    )
    return reports


def build_signer(config: BridgeConfig, in_process: bool = False) -> TransferSigner:
    """Transfer signer using the configured signer tool or eth_account."""
    primitive = (
        LocalSigner()
        if in_process
        else ExternalProcessSigner(config.signer_tool, timeout=config.signer_timeout)
    )
    codec = TransferCodec(NonceGenerator(), decimals=config.decimals)
    return TransferSigner(primitive, codec=codec)

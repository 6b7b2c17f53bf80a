"""
web3 client used by the contract adapters.

This module provides:
- Chain connection configuration
- Read-only contract calls
- Transaction building, signing, submission and receipt checking
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from eth_account import Account
from web3 import Web3

from ..errors import CollaboratorCallFailed, ConfigurationError
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass
class ChainConfig:
    """Connection settings for one chain."""

    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: Optional[int] = None
    gas_limit: Optional[int] = None
    timeout: int = 30
    receipt_timeout: int = 120
    from_address: Optional[str] = None


class ChainClient:
    """Thin wrapper over ``web3.Web3`` for calls and signed transactions.

    With a private key, transactions are signed locally. Without one they are
    sent from ``config.from_address`` and the node must hold that account
    unlocked (development chains).
    """

    def __init__(
        self,
        config: ChainConfig,
        private_key: Optional[str] = None,
        web3: Optional[Web3] = None,
    ):
        self.config = config
        self.w3 = web3 or Web3(
            Web3.HTTPProvider(config.rpc_url, request_kwargs={"timeout": config.timeout})
        )
        self._account = Account.from_key(private_key) if private_key else None
        # Serialises nonce lookup and submission for this sender.
        self._send_lock = threading.Lock()

        if self._account is None and not config.from_address:
            logger.warning("No signing key or from_address configured; writes will fail")

    @property
    def sender(self) -> Optional[str]:
        if self._account is not None:
            return self._account.address
        if self.config.from_address:
            return Web3.to_checksum_address(self.config.from_address)
        return None

    def contract(self, address: str, abi: list) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def call(self, function_call: Any) -> Any:
        """Execute a read-only contract call."""
        return function_call.call()

    def transact(self, function_call: Any, operation: str = "transact") -> Dict[str, Any]:
        """Submit a state-changing call and wait for a successful receipt."""
        sender = self.sender
        if sender is None:
            raise ConfigurationError(
                "A private key or from_address is required to send transactions",
                config_key="private_key",
            )

        params: Dict[str, Any] = {"from": sender}
        if self.config.gas_limit:
            params["gas"] = self.config.gas_limit
        if self.config.chain_id is not None:
            params["chainId"] = self.config.chain_id

        with self._send_lock:
            if self._account is not None:
                params["nonce"] = self.w3.eth.get_transaction_count(sender, "pending")
                transaction = function_call.build_transaction(params)
                signed = self._account.sign_transaction(transaction)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = function_call.transact(params)

        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.config.receipt_timeout
        )
        if receipt.get("status") != 1:
            raise CollaboratorCallFailed(
                f"Transaction {Web3.to_hex(tx_hash)} for '{operation}' reverted",
                operation=operation,
                address=receipt.get("to"),
            )

        logger.debug(
            "Transaction mined",
            extra={"operation": operation, "tx_hash": Web3.to_hex(tx_hash)},
        )
        return receipt

"""
Deployment configuration for crossbridge.

Settings come from a JSON deployment file, from environment variables, or
both (environment wins). The private key is read from the environment only
and is excluded from ``repr``.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigurationError
from .transfer.units import DEFAULT_DECIMALS, UINT32_MAX

ENV_PREFIX = "CROSSBRIDGE_"


@dataclass(frozen=True)
class TokenSpec:
    """A token the bridge should carry."""

    id: int
    address: str
    is_wrapped: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenSpec":
        try:
            return cls(
                id=int(data["id"]),
                address=str(data["address"]),
                is_wrapped=bool(data.get("isWrapped", data.get("is_wrapped", False))),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid token entry {dict(data)!r}: {e}", config_key="tokens"
            ) from e


@dataclass
class BridgeConfig:
    """Bridge deployment configuration."""

    network: Optional[str] = None
    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: Optional[int] = None
    bridge_address: Optional[str] = None
    signer_tool: str = os.path.join(".", "tools", "SignerTool")
    signer_timeout: Optional[float] = None
    decimals: int = DEFAULT_DECIMALS
    validators: List[str] = field(default_factory=list)
    tokens: List[TokenSpec] = field(default_factory=list)
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def deployment_file(self) -> Optional[str]:
        """Conventional deployment file path for the selected network."""
        if not self.network:
            return None
        return os.path.join("deployments", f"{self.network}.json")

    def validate(self) -> "BridgeConfig":
        """Check value ranges; returns ``self`` for chaining."""
        if self.decimals < 0:
            raise ConfigurationError(
                "decimals must be non-negative", config_key="decimals", config_value=self.decimals
            )
        if self.signer_timeout is not None and self.signer_timeout <= 0:
            raise ConfigurationError(
                "signer_timeout must be positive",
                config_key="signer_timeout",
                config_value=self.signer_timeout,
            )
        seen = set()
        for token in self.tokens:
            if not 0 <= token.id <= UINT32_MAX:
                raise ConfigurationError(
                    f"Token id {token.id} does not fit in 32 bits", config_key="tokens", config_value=token.id
                )
            if token.id in seen:
                raise ConfigurationError(
                    f"Token id {token.id} listed twice", config_key="tokens", config_value=token.id
                )
            seen.add(token.id)
        return self

    def _merge(self, values: Dict[str, Any]) -> None:
        for key, value in values.items():
            if value is not None:
                setattr(self, key, value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BridgeConfig":
        """Build from a deployment mapping (camelCase or snake_case keys)."""

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return None

        config = cls()
        try:
            config._merge(
                {
                    "network": pick("network"),
                    "rpc_url": pick("rpcUrl", "rpc_url"),
                    "chain_id": _opt_int(pick("chainId", "chain_id")),
                    "bridge_address": pick("bridge", "bridgeAddress", "bridge_address"),
                    "signer_tool": pick("signerTool", "signer_tool"),
                    "signer_timeout": _opt_float(pick("signerTimeout", "signer_timeout")),
                    "decimals": _opt_int(pick("decimals")),
                }
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid deployment value: {e}") from e

        validators = pick("validators")
        if validators is not None:
            if isinstance(validators, Mapping):
                validators = validators.get("addresses", [])
            config.validators = [str(v) for v in validators]

        tokens = pick("tokens")
        if tokens is not None:
            config.tokens = [TokenSpec.from_dict(t) for t in tokens]

        return config

    @classmethod
    def from_file(cls, path: str) -> "BridgeConfig":
        """Load a JSON deployment file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read deployment file {path}: {e}", config_key="path") from e
        except ValueError as e:
            raise ConfigurationError(f"Deployment file {path} is not valid JSON: {e}", config_key="path") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Deployment file {path} must contain an object", config_key="path")
        return cls.from_dict(data)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
        base: Optional["BridgeConfig"] = None,
    ) -> "BridgeConfig":
        """Overlay environment variables on ``base`` (or defaults).

        Reads ``<prefix>RPC_URL``, ``CHAIN_ID``, ``BRIDGE_ADDRESS``,
        ``SIGNER_TOOL``, ``SIGNER_TIMEOUT``, ``DECIMALS``, ``VALIDATORS``
        (comma separated) and ``DEPLOYMENT_FILE``, plus the unprefixed
        ``NETWORK`` and ``PRIVATE_KEY``.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(prefix + name)
            return value if value not in (None, "") else None

        config = base
        if config is None:
            deployment_file = get("DEPLOYMENT_FILE")
            config = cls.from_file(deployment_file) if deployment_file else cls()

        try:
            config._merge(
                {
                    "network": env.get("NETWORK") or get("NETWORK"),
                    "rpc_url": get("RPC_URL"),
                    "chain_id": _opt_int(get("CHAIN_ID")),
                    "bridge_address": get("BRIDGE_ADDRESS"),
                    "signer_tool": get("SIGNER_TOOL"),
                    "signer_timeout": _opt_float(get("SIGNER_TIMEOUT")),
                    "decimals": _opt_int(get("DECIMALS")),
                    "private_key": env.get("PRIVATE_KEY") or get("PRIVATE_KEY"),
                }
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment value: {e}") from e

        validators = get("VALIDATORS")
        if validators:
            config.validators = [v.strip() for v in validators.split(",") if v.strip()]

        return config.validate()


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)

"""Minimal ABI fragments for the calls the reconciler makes."""

from typing import Any, Dict, List


def _function(name: str, inputs: List[tuple], outputs: List[Dict[str, Any]], mutability: str) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": outputs,
        "stateMutability": mutability,
    }


ACCESS_CONTROL_ABI: List[Dict[str, Any]] = [
    _function(
        "hasRole",
        [("role", "bytes32"), ("account", "address")],
        [{"name": "", "type": "bool"}],
        "view",
    ),
    _function("grantRole", [("role", "bytes32"), ("account", "address")], [], "nonpayable"),
]

TOKEN_RECORD_COMPONENTS: List[Dict[str, str]] = [
    {"name": "token", "type": "address"},
    {"name": "isWrapped", "type": "bool"},
    {"name": "decimals", "type": "uint8"},
    {"name": "canWithdraw", "type": "bool"},
    {"name": "canDeposit", "type": "bool"},
]

BRIDGE_ABI: List[Dict[str, Any]] = ACCESS_CONTROL_ABI + [
    _function(
        "queryToken",
        [("id", "uint32")],
        [{"name": "", "type": "tuple", "components": TOKEN_RECORD_COMPONENTS}],
        "view",
    ),
    _function(
        "addToken",
        [("id", "uint32"), ("isWrapped", "bool"), ("decimals", "uint8"), ("token", "address")],
        [],
        "nonpayable",
    ),
    _function("setTokenCanWithdraw", [("id", "uint32"), ("value", "bool")], [], "nonpayable"),
    _function("setTokenCanDeposit", [("id", "uint32"), ("value", "bool")], [], "nonpayable"),
]

TOKEN_ABI: List[Dict[str, Any]] = ACCESS_CONTROL_ABI + [
    _function("setPaused", [("value", "bool")], [], "nonpayable"),
    _function("paused", [], [{"name": "", "type": "bool"}], "view"),
]


def record_field_names(abi: List[Dict[str, Any]]) -> List[str]:
    """Component names of the ``queryToken`` result struct in ``abi``."""
    for item in abi:
        if item.get("type") == "function" and item.get("name") == "queryToken":
            outputs = item.get("outputs") or []
            if len(outputs) == 1 and outputs[0].get("components"):
                return [c["name"] for c in outputs[0]["components"]]
            return [o["name"] for o in outputs]
    return [c["name"] for c in TOKEN_RECORD_COMPONENTS]

"""
ERC-20 ABI fragments for the token calls the bridge makes: balance reads,
allowance checks against the engine vault and the pre-transfer approval.
"""

from typing import Any, Dict, List, Sequence, Tuple

Params = Sequence[Tuple[str, str]]


def _function_abi(name: str, inputs: Params, output_type: str, mutability: str) -> List[Dict[str, Any]]:
    return [{
        "name": name,
        "type": "function",
        "stateMutability": mutability,
        "inputs": [{"name": arg, "type": arg_type} for arg, arg_type in inputs],
        "outputs": [{"name": "", "type": output_type}],
    }]


def get_balance_abi() -> List[Dict[str, Any]]:
    """``balanceOf(account) -> uint256``"""
    return _function_abi("balanceOf", [("account", "address")], "uint256", "view")


def get_allowance_abi() -> List[Dict[str, Any]]:
    """``allowance(owner, spender) -> uint256``"""
    return _function_abi("allowance", [("owner", "address"), ("spender", "address")], "uint256", "view")


def get_approve_abi() -> List[Dict[str, Any]]:
    """``approve(spender, amount) -> bool``"""
    return _function_abi("approve", [("spender", "address"), ("amount", "uint256")], "bool", "nonpayable")

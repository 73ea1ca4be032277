"""Contract ABIs and call-data decoding.

The default swap ABI is the token swap contract surface:
createSwap, createSwapTarget, withdraw, refund, swaps, getBalance,
getTargetWallet and getSecret.
"""

from typing import Any, Union

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from atomicswap.units import strip_hex_prefix


def _fn(name: str, inputs: list, outputs: list = None, view: bool = False) -> dict:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view" if view else "nonpayable",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in (outputs or [])],
    }


SWAP_ABI = [
    _fn("createSwap", [
        ("_secretHash", "bytes32"),
        ("_participantAddress", "address"),
        ("_value", "uint256"),
        ("_token", "address"),
    ]),
    _fn("createSwapTarget", [
        ("_secretHash", "bytes32"),
        ("_participantAddress", "address"),
        ("_targetWallet", "address"),
        ("_value", "uint256"),
        ("_token", "address"),
    ]),
    _fn("withdraw", [("_secret", "bytes32"), ("_ownerAddress", "address")]),
    _fn("refund", [("_participantAddress", "address")]),
    _fn(
        "swaps",
        [("", "address"), ("", "address")],
        [
            ("token", "address"),
            ("targetWallet", "address"),
            ("secret", "bytes32"),
            ("secretHash", "bytes32"),
            ("createdAt", "uint256"),
            ("balance", "uint256"),
        ],
        view=True,
    ),
    _fn("getBalance", [("_ownerAddress", "address")], [("", "uint256")], view=True),
    _fn("getTargetWallet", [("tokenOwnerAddress", "address")], [("", "address")], view=True),
    _fn("getSecret", [("_participantAddress", "address")], [("", "bytes32")], view=True),
]

ERC20_ABI = [
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")]),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")], view=True),
]


def function_signature(entry: dict) -> str:
    types = ",".join(inp["type"] for inp in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def function_selector(entry: dict) -> bytes:
    """First 4 bytes of keccak256 of the canonical signature."""
    return function_signature_to_4byte_selector(function_signature(entry))


def output_index(abi: list, function_name: str, output_name: str) -> int:
    """Position of a named output in a function's return tuple."""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            for index, output in enumerate(entry.get("outputs", [])):
                if output.get("name") == output_name:
                    return index
            raise ValueError(f"{function_name} has no output named {output_name}")
    raise ValueError(f"Function {function_name} not found in ABI")


def decode_function_input(abi: list, data: Union[bytes, str]) -> tuple[str, dict[str, Any]]:
    """Decode transaction call data against an ABI.

    Returns:
        (function name, {argument name or position: value}) in ABI order

    Raises:
        ValueError: Unknown selector or malformed arguments
    """
    if isinstance(data, str):
        data = bytes.fromhex(strip_hex_prefix(data))
    data = bytes(data)

    if len(data) < 4:
        raise ValueError("Call data shorter than a selector")

    selector = data[:4]
    for entry in abi:
        if entry.get("type") != "function":
            continue
        if function_selector(entry) != selector:
            continue

        inputs = entry.get("inputs", [])
        try:
            values = decode([inp["type"] for inp in inputs], data[4:])
        except DecodingError as e:
            raise ValueError(f"Cannot decode {entry['name']} arguments: {e}")

        names = [inp.get("name") or str(i) for i, inp in enumerate(inputs)]
        return entry["name"], dict(zip(names, values))

    raise ValueError(f"Unknown function selector 0x{selector.hex()}")

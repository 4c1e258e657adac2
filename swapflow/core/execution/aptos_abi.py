"""
Turn the aggregator's JSON entry function payload into a BCS payload.

The aggregator returns ``{function, type_arguments, arguments}`` with every
argument as JSON. BCS needs each argument encoded by its Move type, so the
parameter types are read from the module ABI published on chain.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Serializer
from aptos_sdk.transactions import EntryFunction, TransactionArgument, TransactionPayload
from aptos_sdk.type_tag import StructTag, TypeTag

from ..recovery.errors import ProviderError

Encoder = Callable[[Serializer, Any], None]

SIGNER_PARAMS = ("signer", "&signer")


def split_function_id(function_id: str) -> tuple:
    """``0xabc::router::swap`` -> (``0xabc``, ``router``, ``swap``)."""
    parts = function_id.split("::")
    if len(parts) != 3:
        raise ProviderError(f"Malformed Aptos function id: {function_id}", provider="kana")
    return parts[0], parts[1], parts[2]


def parse_address(value: Any) -> AccountAddress:
    text = str(value).lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text or len(text) > 64:
        raise ValueError(f"Invalid Aptos address: {value}")
    return AccountAddress(bytes.fromhex(text.rjust(64, "0")))


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, list):
        return bytes(int(item) for item in value)
    text = str(value)
    return bytes.fromhex(text[2:] if text.startswith("0x") else text)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _generic_inner(move_type: str, prefix: str) -> str:
    return move_type[len(prefix):-1].strip()


def _integer(width: str) -> Encoder:
    return lambda serializer, value: getattr(serializer, width)(int(value))


def encoder_for(move_type: str) -> Encoder:
    """Return a BCS encoder for one Move parameter type."""
    move_type = move_type.strip()

    if move_type in ("u8", "u16", "u32", "u64", "u128", "u256"):
        return _integer(move_type)
    if move_type == "bool":
        return lambda serializer, value: serializer.bool(_to_bool(value))
    if move_type == "address":
        return lambda serializer, value: parse_address(value).serialize(serializer)
    if move_type == "0x1::string::String":
        return lambda serializer, value: serializer.str(str(value))
    if move_type.startswith("0x1::object::Object<"):
        return lambda serializer, value: parse_address(value).serialize(serializer)
    if move_type == "vector<u8>":
        return lambda serializer, value: serializer.to_bytes(_to_bytes(value))
    if move_type.startswith("vector<") and move_type.endswith(">"):
        inner = encoder_for(_generic_inner(move_type, "vector<"))
        return lambda serializer, value: serializer.sequence(list(value), inner)
    if move_type.startswith("0x1::option::Option<") and move_type.endswith(">"):
        inner = encoder_for(_generic_inner(move_type, "0x1::option::Option<"))
        return lambda serializer, value: serializer.sequence([] if value is None else [value], inner)

    raise ProviderError(f"Unsupported Move argument type: {move_type}", provider="kana")


def encode_arguments(params: Sequence[str], arguments: Sequence[Any]) -> List[TransactionArgument]:
    """Encode ``arguments`` against the non-signer entries of ``params``."""
    types = [param for param in params if param.strip() not in SIGNER_PARAMS]
    if len(types) != len(arguments):
        raise ProviderError(
            f"Entry function takes {len(types)} arguments, payload has {len(arguments)}",
            provider="kana",
        )
    return [TransactionArgument(value, encoder_for(move_type)) for move_type, value in zip(types, arguments)]


def parse_type_argument(type_argument: str) -> TypeTag:
    """Type arguments from the aggregator are struct tags (coin and asset types)."""
    if "::" not in type_argument:
        raise ProviderError(f"Unsupported Move type argument: {type_argument}", provider="kana")
    return TypeTag(StructTag.from_str(type_argument))


def entry_function_params(module_abi: Dict[str, Any], function: str) -> List[str]:
    for exposed in (module_abi.get("abi") or {}).get("exposed_functions", []):
        if exposed.get("name") == function:
            return list(exposed.get("params") or [])
    raise ProviderError(f"Function {function} not found in module ABI", provider="kana")


def build_entry_function(payload: Dict[str, Any], params: Sequence[str]) -> TransactionPayload:
    address, module, function = split_function_id(payload["function"])
    return TransactionPayload(
        EntryFunction.natural(
            f"{address}::{module}",
            function,
            [parse_type_argument(tag) for tag in payload.get("type_arguments") or []],
            encode_arguments(params, payload.get("arguments") or []),
        )
    )


__all__ = [
    "build_entry_function",
    "encode_arguments",
    "encoder_for",
    "entry_function_params",
    "parse_address",
    "parse_type_argument",
    "split_function_id",
]

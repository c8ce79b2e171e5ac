"""Decoding of Micheline (JSON) storage into named, tagged fields.

The RPC returns a contract script as Micheline JSON: a `code` sequence holding
`parameter`, `storage` and `code` sections, and a `storage` value. Contract
storage is almost always a (possibly nested) record of pairs whose leaves
carry field annotations (`%owner`, `%ledger`, ...). This module walks the
storage type and the storage value in lockstep and flattens the record into an
ordered `{field name: StorageValue}` mapping.

Leaf decoding:
    string-like types (string, address, key_hash, ...) -> TextValue
    bytes                                             -> BytesValue (hex)
    int / nat / mutez (and int-encoded timestamps)   -> NumberValue
    bool                                              -> BooleanValue
    big_map given by id                               -> BigMapRef
    anything else                                     -> OtherValue (raw Micheline)

Comb pairs are accepted in every encoding the node emits: binary nested
`Pair`, n-ary `Pair` and plain sequences. Unannotated leaves are named by
their position in the flattened record.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from .errors import MalformedScript
from .models.contract import (
    BigMapRef,
    BooleanValue,
    BytesValue,
    NumberValue,
    OtherValue,
    TextValue,
)

logger = logging.getLogger(__name__)

__all__ = ["storage_type_of", "decode_storage", "decode_value"]

_TEXT_TYPES = {
    "string",
    "address",
    "key",
    "key_hash",
    "signature",
    "chain_id",
    "contract",
    "timestamp",
}
_NUMBER_TYPES = {"int", "nat", "mutez", "timestamp"}


def storage_type_of(code: List[Any]) -> Any:
    """Return the storage type node from a script `code` sequence."""
    for section in code:
        if isinstance(section, dict) and section.get("prim") == "storage":
            args = section.get("args") or []
            if args:
                return args[0]
    raise MalformedScript("no storage section")


def _field_name(type_node: Any) -> str | None:
    if not isinstance(type_node, dict):
        return None
    for annot in type_node.get("annots") or []:
        if isinstance(annot, str) and annot.startswith("%") and len(annot) > 1:
            return annot[1:]
    return None


def _pair_values(value: Any) -> List[Any]:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict) and value.get("prim") == "Pair":
        return list(value.get("args") or [])
    raise MalformedScript(f"expected a pair value, got {value!r}")


def _align(types: List[Any], values: List[Any]) -> tuple[List[Any], List[Any]]:
    """Fold the longer side of a comb so both sides have the same arity."""
    if len(values) > len(types) >= 1:
        head = len(types) - 1
        values = values[:head] + [{"prim": "Pair", "args": values[head:]}]
    elif len(types) > len(values) >= 1:
        head = len(values) - 1
        types = types[:head] + [{"prim": "pair", "args": types[head:]}]
    return types, values


def _flatten(type_node: Dict[str, Any], value: Any, out: Dict[str, Any]) -> None:
    types, values = _align(list(type_node.get("args") or []), _pair_values(value))
    for t, v in zip(types, values):
        if isinstance(t, dict) and t.get("prim") == "pair" and not _field_name(t):
            _flatten(t, v, out)
            continue
        name = _field_name(t) or str(len(out))
        if name in out:
            name = f"{name}_{len(out)}"
        out[name] = decode_value(t, v)


def decode_value(type_node: Any, value: Any) -> Any:
    """Decode a single leaf into its `StorageValue` variant."""
    prim = type_node.get("prim") if isinstance(type_node, dict) else None
    if isinstance(value, dict):
        if prim == "big_map" and "int" in value:
            return BigMapRef(id=int(value["int"]))
        if prim in _TEXT_TYPES and "string" in value:
            return TextValue(value=value["string"])
        if prim == "bytes" and "bytes" in value:
            return BytesValue(value=str(value["bytes"]).lower())
        if prim in _NUMBER_TYPES and "int" in value:
            return NumberValue(value=int(value["int"]))
        if prim == "bool" and value.get("prim") in ("True", "False"):
            return BooleanValue(value=value["prim"] == "True")
    return OtherValue(value=value)


def decode_storage(storage_type: Any, value: Any) -> Dict[str, Any]:
    """Flatten a storage value into an ordered `{name: StorageValue}` mapping.

    A non-record storage yields a single field named after its annotation, or
    `storage` when it has none.
    """
    fields: Dict[str, Any] = {}
    if isinstance(storage_type, dict) and storage_type.get("prim") == "pair":
        _flatten(storage_type, value, fields)
    else:
        fields[_field_name(storage_type) or "storage"] = decode_value(storage_type, value)
    logger.debug("Decoded storage fields: %s", list(fields))
    return fields

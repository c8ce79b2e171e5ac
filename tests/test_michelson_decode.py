"""Decoding of Micheline storage into tagged, named fields."""
from __future__ import annotations

import pytest

from cloney.errors import MalformedScript, ValidationError
from cloney.michelson import decode_storage, decode_value, storage_type_of
from cloney.models.contract import (
    BigMapRef,
    BooleanValue,
    BytesValue,
    NumberValue,
    OtherValue,
    TextValue,
)


def test_storage_type_is_taken_from_storage_section(script):
    storage_type = storage_type_of(script["code"])
    assert storage_type["prim"] == "pair"
    assert len(storage_type["args"]) == 4


def test_missing_storage_section_rejected():
    with pytest.raises(MalformedScript):
        storage_type_of([{"prim": "parameter", "args": [{"prim": "unit"}]}])


def test_comb_type_with_nested_binary_value(script):
    fields = decode_storage(storage_type_of(script["code"]), script["storage"])
    assert list(fields) == ["owner", "count", "active", "ledger"]
    assert fields["owner"] == TextValue(value="A")
    assert fields["count"] == NumberValue(value=5)
    assert fields["active"] == BooleanValue(value=True)
    assert fields["ledger"] == BigMapRef(id=3)


def test_nested_binary_type_with_sequence_value():
    storage_type = {
        "prim": "pair",
        "args": [
            {
                "prim": "pair",
                "args": [
                    {"prim": "address", "annots": ["%administrator"]},
                    {"prim": "timestamp", "annots": ["%lastUpdate"]},
                ],
            },
            {
                "prim": "pair",
                "args": [
                    {"prim": "bool", "annots": ["%paused"]},
                    {"prim": "mutez", "annots": ["%totalSupply"]},
                ],
            },
        ],
    }
    value = [
        {"prim": "Pair", "args": [{"string": "tz1abc"}, {"string": "2021-11-02T10:00:00Z"}]},
        {"prim": "Pair", "args": [{"prim": "False"}, {"int": "1000000000000000000000"}]},
    ]
    fields = decode_storage(storage_type, value)
    assert list(fields) == ["administrator", "lastUpdate", "paused", "totalSupply"]
    assert fields["lastUpdate"] == TextValue(value="2021-11-02T10:00:00Z")
    assert fields["paused"] == BooleanValue(value=False)
    # big precision numbers survive as exact ints
    assert fields["totalSupply"].value == 10**21


def test_unannotated_leaves_named_by_position():
    storage_type = {"prim": "pair", "args": [{"prim": "nat"}, {"prim": "string"}]}
    value = {"prim": "Pair", "args": [{"int": "1"}, {"string": "x"}]}
    fields = decode_storage(storage_type, value)
    assert list(fields) == ["0", "1"]


def test_single_value_storage():
    fields = decode_storage({"prim": "nat", "annots": ["%counter"]}, {"int": "7"})
    assert fields == {"counter": NumberValue(value=7)}
    fields = decode_storage({"prim": "string"}, {"string": "hi"})
    assert fields == {"storage": TextValue(value="hi")}


def test_uninterpreted_values_kept_raw():
    list_type = {"prim": "list", "args": [{"prim": "nat"}]}
    raw = [{"int": "1"}, {"int": "2"}]
    assert decode_value(list_type, raw) == OtherValue(value=raw)
    # inline big map literal (not an id) is not a reference
    big_map_type = {"prim": "big_map", "args": [{"prim": "nat"}, {"prim": "nat"}]}
    assert decode_value(big_map_type, []).kind == "other"
    # bytes-encoded address
    assert decode_value({"prim": "address"}, {"bytes": "0000"}).kind == "other"


def test_bytes_leaf_decodes_to_hex():
    storage_type = {
        "prim": "pair",
        "args": [
            {"prim": "bytes", "annots": ["%meta"]},
            {"prim": "string", "annots": ["%name"]},
        ],
    }
    value = {"prim": "Pair", "args": [{"bytes": "DEADBEEF"}, {"string": "n"}]}
    fields = decode_storage(storage_type, value)
    assert fields["meta"] == BytesValue(value="deadbeef")
    assert fields["name"] == TextValue(value="n")


def test_record_value_that_is_not_a_pair_rejected():
    storage_type = {
        "prim": "pair",
        "args": [{"prim": "nat", "annots": ["%a"]}, {"prim": "nat", "annots": ["%b"]}],
    }
    with pytest.raises(MalformedScript) as exc:
        decode_storage(storage_type, {"int": "1"})
    assert isinstance(exc.value, ValidationError)

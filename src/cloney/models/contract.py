"""Pydantic models for contract snapshots, big maps and derived storage.

Storage fields are represented as a tagged variant (`StorageValue`), a
discriminated union on `kind`. The transformer matches on the tag instead of
probing runtime types. Plain caller values are tagged by their Python type;
dicts are never read as variants, so a record field that happens to hold a
`kind` key stays an opaque value.

Lifecycle:
    ContractSnapshot: built once per session by the loader, frozen afterwards.
    BigMapSnapshot: one per fetched big map id, joined to pointers at merge.
    NewStorageSpec: output of the transformer; big-map fields start empty.
    CloneResult: terminal output of a successful origination.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "StorageMode",
    "SigningMode",
    "SignerKind",
    "Signer",
    "TextValue",
    "BytesValue",
    "NumberValue",
    "BooleanValue",
    "BigMapRef",
    "MapValue",
    "OtherValue",
    "StorageValue",
    "coerce_storage_value",
    "ContractSnapshot",
    "BigMapPointer",
    "BigMapEntry",
    "BigMapSnapshot",
    "NewStorageSpec",
    "CloneResult",
]


class StorageMode(str, Enum):
    EMPTY = "EMPTY"
    CURRENT = "CURRENT"
    CUSTOM = "CUSTOM"


class SignerKind(str, Enum):
    """Declared nature of a signer handle (never inferred from its type)."""

    INTERACTIVE = "interactive"
    PREAUTHORIZED = "preauthorized"


class SigningMode(str, Enum):
    WALLET = "wallet"
    DIRECT = "direct"

    @property
    def required_signer_kind(self) -> SignerKind:
        if self is SigningMode.WALLET:
            return SignerKind.INTERACTIVE
        return SignerKind.PREAUTHORIZED


@dataclass(frozen=True)
class Signer:
    """Opaque signer handle carried alongside its declared kind.

    `handle` is whatever the target client needs to sign (a wallet session, an
    in-memory key, ...); cloney never inspects it.
    """

    kind: SignerKind
    handle: Any = None


# ---------------- Storage values -----------------


class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    value: str

    def to_python(self) -> Any:
        return self.value


class BytesValue(BaseModel):
    """Michelson bytes as lowercase hex, without the 0x prefix."""

    kind: Literal["bytes"] = "bytes"
    value: str = ""

    def to_python(self) -> Any:
        return self.value


class NumberValue(BaseModel):
    """Arbitrary precision integer (Michelson int / nat / mutez)."""

    kind: Literal["number"] = "number"
    value: int

    def to_python(self) -> Any:
        return self.value


class BooleanValue(BaseModel):
    kind: Literal["boolean"] = "boolean"
    value: bool

    def to_python(self) -> Any:
        return self.value


class BigMapRef(BaseModel):
    """Reference to an out-of-band big map by its network-assigned id."""

    kind: Literal["big_map"] = "big_map"
    id: int

    def to_python(self) -> Any:
        return {"big_map": self.id}


class BigMapEntry(BaseModel):
    key: Any
    value: Any


class MapValue(BaseModel):
    """Inline map literal; the shape every big-map field takes in new storage."""

    kind: Literal["map"] = "map"
    entries: List[BigMapEntry] = Field(default_factory=list)

    def put(self, key: Any, value: Any) -> None:
        """Insert or overwrite the entry for `key`."""
        for entry in self.entries:
            if entry.key == key:
                entry.value = value
                return
        self.entries.append(BigMapEntry(key=key, value=value))

    def to_python(self) -> Any:
        # Structured keys (pairs, records) are not hashable; use their JSON form.
        out: Dict[Any, Any] = {}
        for entry in self.entries:
            key = entry.key
            if not isinstance(key, (str, int)):
                key = json.dumps(key, sort_keys=True)
            out[key] = entry.value
        return out


class OtherValue(BaseModel):
    """Any value the pipeline does not interpret (lists, options, lambdas...)."""

    kind: Literal["other"] = "other"
    value: Any = None

    def to_python(self) -> Any:
        return self.value


StorageValue = Annotated[
    Union[TextValue, BytesValue, NumberValue, BooleanValue, BigMapRef, MapValue, OtherValue],
    Field(discriminator="kind"),
]

_VARIANTS = (TextValue, BytesValue, NumberValue, BooleanValue, BigMapRef, MapValue, OtherValue)


def coerce_storage_value(raw: Any) -> Any:
    """Convert a caller-supplied value into a `StorageValue` variant.

    Variants pass through as deep copies. Plain values are tagged by Python
    type (`bool` is checked before `int`, `bytes` becomes hex). Anything else,
    dicts included, becomes `OtherValue` unchanged.
    """
    if isinstance(raw, _VARIANTS):
        return raw.model_copy(deep=True)
    if isinstance(raw, bool):
        return BooleanValue(value=raw)
    if isinstance(raw, int):
        return NumberValue(value=raw)
    if isinstance(raw, Decimal) and raw == raw.to_integral_value():
        return NumberValue(value=int(raw))
    if isinstance(raw, str):
        return TextValue(value=raw)
    if isinstance(raw, (bytes, bytearray)):
        return BytesValue(value=bytes(raw).hex())
    return OtherValue(value=raw)


# ---------------- Snapshots -----------------


class ContractSnapshot(BaseModel):
    """Code and decoded storage of a source contract at load time."""

    model_config = ConfigDict(frozen=True)

    address: str
    code: List[Any]
    storage: Dict[str, StorageValue]
    storage_type: Optional[Any] = None


class BigMapPointer(BaseModel):
    name: str
    id: int


class BigMapSnapshot(BaseModel):
    """Active entries of one big map at fetch time."""

    id: int
    entries: List[BigMapEntry] = Field(default_factory=list)


class NewStorageSpec(BaseModel):
    storage: Dict[str, StorageValue]
    mode: StorageMode

    def to_python(self) -> Dict[str, Any]:
        return {name: value.to_python() for name, value in self.storage.items()}


@dataclass
class CloneResult:
    address: str
    handle: Any
    storage: NewStorageSpec

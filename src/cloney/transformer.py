"""Storage Transformer: derive the initial storage of the clone.

Per-field policy, keyed on the field's tag in the source snapshot:

    mode     text     bytes    number   boolean  big_map          other
    EMPTY    ""       empty    0        False    fresh empty map  unchanged
    CURRENT  copy     copy     copy     copy     fresh empty map  copy
    CUSTOM   caller   caller   caller   caller   fresh empty map  caller

Big maps always start empty: their content lives outside the storage value
and is restored by the orchestrator's merge step from indexer data. CURRENT
therefore means "current non-map fields, empty maps pending merge".

`derive_storage` is pure: it never touches the network nor mutates the
snapshot, and repeated calls give structurally equal results.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .errors import MissingCustomStorage, NoSnapshotLoaded, StorageShapeMismatch
from .models.contract import (
    BooleanValue,
    BytesValue,
    ContractSnapshot,
    MapValue,
    NewStorageSpec,
    NumberValue,
    StorageMode,
    TextValue,
    coerce_storage_value,
)

logger = logging.getLogger(__name__)

__all__ = ["derive_storage"]


def _empty_value(value: Any) -> Any:
    if value.kind == "text":
        return TextValue(value="")
    if value.kind == "bytes":
        return BytesValue()
    if value.kind == "number":
        return NumberValue(value=0)
    if value.kind == "boolean":
        return BooleanValue(value=False)
    if value.kind in ("big_map", "map"):
        return MapValue()
    return value.model_copy(deep=True)


def _check_shape(source: Mapping[str, Any], custom: Mapping[str, Any]) -> None:
    missing = set(source) - set(custom)
    unexpected = set(custom) - set(source)
    if missing or unexpected or len(source) != len(custom):
        raise StorageShapeMismatch(missing=missing, unexpected=unexpected)


def derive_storage(
    snapshot: Optional[ContractSnapshot],
    mode: StorageMode | str,
    custom_storage: Optional[Mapping[str, Any]] = None,
) -> NewStorageSpec:
    """Build the storage for the new contract from `snapshot`.

    Args:
        snapshot: Loaded source contract; None means nothing was loaded yet.
        mode: EMPTY, CURRENT or CUSTOM (enum or its string value).
        custom_storage: Caller record for CUSTOM mode. Values may be plain
            Python values or `StorageValue` variants; field names must match
            the source storage exactly (order irrelevant).

    Raises:
        NoSnapshotLoaded: `snapshot` is None.
        MissingCustomStorage: CUSTOM mode without `custom_storage`.
        StorageShapeMismatch: CUSTOM field names differ from the source.
    """
    if snapshot is None:
        raise NoSnapshotLoaded()
    mode = StorageMode(mode)
    if mode is StorageMode.CUSTOM:
        if custom_storage is None:
            raise MissingCustomStorage()
        _check_shape(snapshot.storage, custom_storage)

    custom_values: Mapping[str, Any] = custom_storage or {}
    storage: dict[str, Any] = {}
    for name, value in snapshot.storage.items():
        if value.kind == "big_map":
            storage[name] = MapValue()
        elif mode is StorageMode.EMPTY:
            storage[name] = _empty_value(value)
        elif mode is StorageMode.CURRENT:
            storage[name] = value.model_copy(deep=True)
        else:
            custom = coerce_storage_value(custom_values[name])
            storage[name] = MapValue() if custom.kind == "big_map" else custom
    logger.debug("Derived %s storage for %s: %s", mode.value, snapshot.address, list(storage))
    return NewStorageSpec(storage=storage, mode=mode)

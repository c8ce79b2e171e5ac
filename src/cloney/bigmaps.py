"""Big map reference resolution and merge into derived storage.

Public Functions:
    resolve_pointers: List `{name, id}` for every big-map field of a snapshot
    merge_big_maps: Write fetched entries into the matching empty maps

Merge joins fetched `BigMapSnapshot`s to pointers by id only. A snapshot whose
id matches no pointer is dropped without error; entries are never written
into a field that is not a map.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .models.contract import (
    BigMapPointer,
    BigMapSnapshot,
    ContractSnapshot,
    MapValue,
    NewStorageSpec,
)

logger = logging.getLogger(__name__)

__all__ = ["resolve_pointers", "merge_big_maps"]


def resolve_pointers(snapshot: ContractSnapshot) -> List[BigMapPointer]:
    """Return the big-map pointers of `snapshot` in storage field order."""
    return [
        BigMapPointer(name=name, id=value.id)
        for name, value in snapshot.storage.items()
        if value.kind == "big_map"
    ]


def merge_big_maps(
    spec: NewStorageSpec,
    big_maps: Iterable[BigMapSnapshot],
    pointers: Iterable[BigMapPointer],
) -> NewStorageSpec:
    """Return a copy of `spec` with big-map entries merged in.

    `spec` itself is left untouched so the derived storage can be merged again
    (e.g. after re-fetching) with the same result.
    """
    merged = spec.model_copy(deep=True)
    by_id: Dict[int, BigMapPointer] = {p.id: p for p in pointers}
    for big_map in big_maps:
        pointer = by_id.get(big_map.id)
        if pointer is None:
            logger.debug("Big map %s matches no storage field; skipped", big_map.id)
            continue
        target = merged.storage.get(pointer.name)
        if not isinstance(target, MapValue):
            logger.debug("Field %s is not a map in derived storage; skipped", pointer.name)
            continue
        for entry in big_map.entries:
            target.put(entry.key, entry.value)
        logger.info(
            "Merged %d entr(y/ies) of big map %s into %s",
            len(big_map.entries),
            big_map.id,
            pointer.name,
        )
    return merged

"""Origination Orchestrator: merge big maps into the new storage and submit.

Submission takes exactly one of two paths, chosen by the session's
`SigningMode` at construction and never inferred from the signer:

    WALLET  -> client.originate_via_wallet(code, storage, signer)
               (interactive approval through the signer's wallet)
    DIRECT  -> client.originate_direct(code, storage, signer)
               (pre-authorized key, no interaction)

Both return an operation handle whose `resolve()` waits for inclusion and
yields the new contract address and a handle to query its live storage.
`storage` is handed to the client as `{field name: StorageValue}`; encoding
it to Micheline is the client's business.

Any failure while submitting or resolving is wrapped in `OriginationFailed`
(cause chained). Nothing is retried: a retry could deploy twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .bigmaps import merge_big_maps
from .config import NetworkType
from .errors import (
    NoSigner,
    NoSnapshot,
    NoSourceNetwork,
    NoTargetClient,
    NoTargetNetwork,
    OriginationFailed,
    StorageNotDerived,
)
from .models.contract import (
    BigMapPointer,
    BigMapSnapshot,
    CloneResult,
    ContractSnapshot,
    NewStorageSpec,
    Signer,
    SigningMode,
)
from .protocols import TargetNetworkClient

logger = logging.getLogger(__name__)

__all__ = ["OriginationTarget", "originate"]


@dataclass
class OriginationTarget:
    source_network: Optional[NetworkType]
    target_network: Optional[NetworkType]
    client: Optional[TargetNetworkClient]
    signing_mode: SigningMode
    signer: Optional[Signer]


async def originate(
    snapshot: Optional[ContractSnapshot],
    spec: Optional[NewStorageSpec],
    big_maps: Iterable[BigMapSnapshot],
    pointers: Iterable[BigMapPointer],
    target: OriginationTarget,
) -> CloneResult:
    """Merge `big_maps` into `spec` and originate `snapshot.code` with it.

    Preconditions are checked in order, each with its own error:
    NoSourceNetwork, NoTargetNetwork, NoSnapshot, NoTargetClient, NoSigner,
    StorageNotDerived.

    Returns:
        CloneResult with the new address, the live storage handle and the
        storage that was actually submitted (big maps merged).

    Raises:
        OriginationFailed: the target network rejected or failed the operation.
    """
    if target.source_network is None:
        raise NoSourceNetwork()
    if target.target_network is None:
        raise NoTargetNetwork()
    if snapshot is None:
        raise NoSnapshot()
    if target.client is None:
        raise NoTargetClient()
    if target.signer is None:
        raise NoSigner(target.signing_mode.value)
    if spec is None:
        raise StorageNotDerived()

    merged = merge_big_maps(spec, big_maps, pointers)
    if target.signing_mode is SigningMode.WALLET:
        submit = target.client.originate_via_wallet
    else:
        submit = target.client.originate_direct
    logger.info(
        "Originating clone of %s on %s via %s API (%s storage)",
        snapshot.address,
        target.target_network.value,
        target.signing_mode.value,
        merged.mode.value,
    )
    try:
        operation = await submit(list(snapshot.code), dict(merged.storage), target.signer)
        address, handle = await operation.resolve()
    except Exception as e:
        raise OriginationFailed(str(e) or type(e).__name__) from e
    logger.info("Originated %s as %s on %s", snapshot.address, address, target.target_network.value)
    return CloneResult(address=address, handle=handle, storage=merged)

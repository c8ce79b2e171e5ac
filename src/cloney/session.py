"""Clone session: the public surface of cloney.

A `CloneSession` owns everything one clone needs (configuration, the loaded
snapshot, derived storage, fetched big maps, the target client) and walks a
small state machine:

    EMPTY -> SNAPSHOT_LOADED -> STORAGE_DERIVED -> BIG_MAPS_RESOLVED -> READY -> CLONED

`BIG_MAPS_RESOLVED` is optional (contracts without big maps, or callers who
want them empty, go straight to READY once a target client exists). The state
is recomputed after every operation; `clear()` returns to EMPTY keeping the
configuration. A CLONED session accepts no further mutation until cleared.

Configuration is validated at construction, before any I/O: unknown networks
raise `UnknownNetwork`, and a signer whose declared kind does not suit the
signing mode raises `SignerMismatch` (wallet needs an interactive signer,
direct a pre-authorized one).

Sessions share no state; run concurrent clones in separate sessions.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .bigmaps import merge_big_maps, resolve_pointers
from .config import DEFAULT_INDEXER_URLS, DEFAULT_RPC_URLS, NetworkType, Settings
from .errors import (
    ConfigurationError,
    InvalidTransition,
    NoSnapshotLoaded,
    SignerMismatch,
    StorageNotDerived,
    UnknownNetwork,
)
from .indexer import BigMapFetcher, TzktIndexerClient
from .loader import SnapshotLoader
from .models.contract import (
    BigMapPointer,
    BigMapSnapshot,
    CloneResult,
    ContractSnapshot,
    NewStorageSpec,
    Signer,
    SigningMode,
    StorageMode,
)
from .orchestrator import OriginationTarget, originate
from .protocols import BigMapSource, ContractReader, TargetNetworkClient
from .rpc import TezosRpcClient
from .transformer import derive_storage

logger = logging.getLogger(__name__)

__all__ = ["SessionState", "CloneSession", "TargetClientFactory"]

TargetClientFactory = Callable[[NetworkType, str], TargetNetworkClient]


class SessionState(str, Enum):
    EMPTY = "EMPTY"
    SNAPSHOT_LOADED = "SNAPSHOT_LOADED"
    STORAGE_DERIVED = "STORAGE_DERIVED"
    BIG_MAPS_RESOLVED = "BIG_MAPS_RESOLVED"
    READY = "READY"
    CLONED = "CLONED"


def _coerce_network(value: Any) -> NetworkType:
    if isinstance(value, NetworkType):
        return value
    try:
        return NetworkType(str(value).strip().upper())
    except ValueError:
        raise UnknownNetwork(value) from None


def _coerce_signing_mode(value: Any) -> SigningMode:
    if isinstance(value, SigningMode):
        return value
    try:
        return SigningMode(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown signing mode: {value!r}") from None


class CloneSession:
    """Clone one contract from a source network to a target network.

    Args:
        source_network: Network the source contract lives on.
        signing_mode: "wallet" or "direct"; fixed for the session lifetime.
        signer: Opaque signer with its declared kind. May be omitted for
            sessions that never originate (dry runs); `clone()` then fails.
        target_network: Network to originate on (or set later).
        source_rpc_url / target_rpc_url / indexer_url: Endpoint overrides;
            defaults come from the per-network tables in `cloney.config`.
        target_client_factory: Builds a target client from (network, rpc url).
            Without it no target client exists and `clone()` fails.
        reader / big_map_source: Replace the default httpx clients.
        page_size: Big map entries requested per id.
        timeout: HTTP timeout (seconds) of the default clients.
    """

    def __init__(
        self,
        *,
        source_network: NetworkType | str,
        signing_mode: SigningMode | str,
        signer: Optional[Signer] = None,
        target_network: Optional[NetworkType | str] = None,
        source_rpc_url: Optional[str] = None,
        target_rpc_url: Optional[str] = None,
        indexer_url: Optional[str] = None,
        target_client_factory: Optional[TargetClientFactory] = None,
        reader: Optional[ContractReader] = None,
        big_map_source: Optional[BigMapSource] = None,
        page_size: int = 10,
        timeout: float = 30.0,
    ):
        self.source_network = _coerce_network(source_network)
        self.signing_mode = _coerce_signing_mode(signing_mode)
        if signer is not None and signer.kind is not self.signing_mode.required_signer_kind:
            raise SignerMismatch(self.signing_mode.value, signer.kind.value)
        self.signer = signer

        self.source_rpc_url = source_rpc_url or DEFAULT_RPC_URLS[self.source_network]
        self.indexer_url = indexer_url or DEFAULT_INDEXER_URLS[self.source_network]
        self._timeout = timeout
        self._page_size = page_size
        self._loader = SnapshotLoader(
            reader or TezosRpcClient(self.source_rpc_url, timeout=timeout)
        )
        self._big_map_source = big_map_source
        self._fetcher: Optional[BigMapFetcher] = None

        self._target_client_factory = target_client_factory
        self.target_network: Optional[NetworkType] = None
        self.target_rpc_url: Optional[str] = None
        self._target_client: Optional[TargetNetworkClient] = None

        self._reset()
        if target_network is not None:
            self.set_target_network(target_network, target_rpc_url)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        signer: Optional[Signer] = None,
        target_client_factory: Optional[TargetClientFactory] = None,
        **kwargs: Any,
    ) -> "CloneSession":
        return cls(
            source_network=settings.SOURCE_NETWORK,
            signing_mode=settings.SIGNING_MODE,
            signer=signer,
            target_network=settings.TARGET_NETWORK,
            source_rpc_url=settings.SOURCE_RPC_URL,
            target_rpc_url=settings.TARGET_RPC_URL,
            indexer_url=settings.INDEXER_URL,
            target_client_factory=target_client_factory,
            page_size=settings.BIGMAP_PAGE_SIZE,
            timeout=settings.HTTP_TIMEOUT,
            **kwargs,
        )

    # ---------------- State -----------------

    def _reset(self) -> None:
        self._snapshot: Optional[ContractSnapshot] = None
        self._pointers: List[BigMapPointer] = []
        self._spec: Optional[NewStorageSpec] = None
        self._big_maps: Optional[List[BigMapSnapshot]] = None
        self._result: Optional[CloneResult] = None

    @property
    def state(self) -> SessionState:
        if self._result is not None:
            return SessionState.CLONED
        if self._snapshot is None:
            return SessionState.EMPTY
        if self._spec is None:
            return SessionState.SNAPSHOT_LOADED
        if self._target_client is not None and self.target_network is not None:
            return SessionState.READY
        if self._big_maps is not None:
            return SessionState.BIG_MAPS_RESOLVED
        return SessionState.STORAGE_DERIVED

    def _ensure_not_cloned(self, operation: str) -> None:
        if self._result is not None:
            raise InvalidTransition(operation, self.state.value)

    @property
    def snapshot(self) -> Optional[ContractSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)

    @property
    def result(self) -> Optional[CloneResult]:
        return self._result

    # ---------------- Operations -----------------

    async def load_contract(self, address: str) -> ContractSnapshot:
        """Load code and storage of `address` from the source network.

        Loading a new contract discards derived storage and fetched big maps.
        """
        self._ensure_not_cloned("load a contract")
        snapshot = await self._loader.load(address)
        self._reset()
        self._snapshot = snapshot
        self._pointers = resolve_pointers(snapshot)
        if self._pointers:
            logger.info(
                "Contract %s references big map(s): %s",
                address,
                ", ".join(f"{p.name}={p.id}" for p in self._pointers),
            )
        return snapshot.model_copy(deep=True)

    def derive_storage(
        self,
        mode: StorageMode | str,
        custom_storage: Optional[Mapping[str, Any]] = None,
    ) -> NewStorageSpec:
        self._ensure_not_cloned("derive storage")
        self._spec = derive_storage(self._snapshot, mode, custom_storage)
        return self._spec.model_copy(deep=True)

    def resolve_big_map_ids(self) -> List[BigMapPointer]:
        if self._snapshot is None:
            raise NoSnapshotLoaded()
        return [p.model_copy() for p in self._pointers]

    def _get_fetcher(self) -> BigMapFetcher:
        if self._fetcher is None:
            source = self._big_map_source or TzktIndexerClient(
                self.indexer_url, timeout=self._timeout
            )
            self._fetcher = BigMapFetcher(source, page_size=self._page_size)
        return self._fetcher

    async def copy_big_maps(self, ids: Optional[Iterable[int]] = None) -> List[BigMapSnapshot]:
        """Fetch active entries of the given big maps (all of them by default).

        On failure nothing fetched by this call is kept.
        """
        self._ensure_not_cloned("copy big maps")
        if self._snapshot is None:
            raise NoSnapshotLoaded()
        wanted = [p.id for p in self._pointers] if ids is None else list(ids)
        big_maps = await self._get_fetcher().fetch_entries(wanted)
        self._big_maps = big_maps
        return [b.model_copy(deep=True) for b in big_maps]

    def set_target_network(
        self, network: NetworkType | str, rpc_url: Optional[str] = None
    ) -> None:
        """Select the network to originate on and (re)build its client."""
        self._ensure_not_cloned("change the target network")
        target = _coerce_network(network)
        url = rpc_url or DEFAULT_RPC_URLS[target]
        self.target_network = target
        self.target_rpc_url = url
        self._target_client = None
        if self._target_client_factory is not None:
            if not url:
                raise ConfigurationError(
                    f"RPC URL is empty for target network {target.value}; pass one explicitly"
                )
            self._target_client = self._target_client_factory(target, url)
        logger.info("Target network set to %s (%s)", target.value, url or "no rpc url")

    def get_derived_storage(self) -> Optional[NewStorageSpec]:
        """Return the derived storage (big maps still empty), or None."""
        if self._spec is None:
            return None
        return self._spec.model_copy(deep=True)

    def preview_storage(self) -> NewStorageSpec:
        """Return the storage `clone()` would submit, big maps merged."""
        if self._spec is None:
            raise StorageNotDerived()
        return merge_big_maps(self._spec, self._big_maps or [], self._pointers)

    async def clone(self) -> CloneResult:
        """Originate the clone on the target network."""
        self._ensure_not_cloned("clone")
        target = OriginationTarget(
            source_network=self.source_network,
            target_network=self.target_network,
            client=self._target_client,
            signing_mode=self.signing_mode,
            signer=self.signer,
        )
        self._result = await originate(
            self._snapshot,
            self._spec,
            self._big_maps or [],
            self._pointers,
            target,
        )
        return self._result

    def clear(self) -> None:
        """Forget the loaded contract and everything derived from it."""
        self._reset()

"""Interfaces of the external services the pipeline consumes.

The chain RPC, the indexer and the target network are opaque collaborators.
cloney ships httpx-based implementations of the two read services
(`cloney.rpc.TezosRpcClient`, `cloney.indexer.TzktIndexerClient`); origination
clients are supplied by the caller since they own signing.
"""
from __future__ import annotations

from typing import Any, Dict, List, Protocol, Tuple

from .models.contract import Signer

__all__ = [
    "ContractReader",
    "BigMapSource",
    "OperationHandle",
    "TargetNetworkClient",
]


class ContractReader(Protocol):
    async def read_contract(self, address: str) -> Dict[str, Any]:
        """Return the raw script `{"code": [...], "storage": ...}` of `address`."""
        ...


class BigMapSource(Protocol):
    async def list_big_map_entries(self, big_map_id: int, limit: int) -> List[Dict[str, Any]]:
        """Return one page of `{key, value, active, ...}` records."""
        ...


class OperationHandle(Protocol):
    async def resolve(self) -> Tuple[str, Any]:
        """Wait for inclusion; return (contract address, live storage handle)."""
        ...


class TargetNetworkClient(Protocol):
    async def originate_via_wallet(
        self, code: List[Any], storage: Dict[str, Any], signer: Signer
    ) -> OperationHandle:
        ...

    async def originate_direct(
        self, code: List[Any], storage: Dict[str, Any], signer: Signer
    ) -> OperationHandle:
        ...

"""Source-network access through the Tezos node RPC.

`TezosRpcClient` reads a contract script (code + storage value) from a node.
Only the "not found" case is interpreted (HTTP 404 -> `ContractNotFound`);
every other HTTP or transport failure propagates as the httpx exception it
is, unmodified. No retries: callers decide whether to try again.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ConfigurationError, ContractNotFound

logger = logging.getLogger(__name__)

__all__ = ["TezosRpcClient"]


class TezosRpcClient:
    """Minimal async reader over a Tezos node RPC endpoint.

    Args:
        rpc_url: Node base URL (e.g. https://mainnet.api.tez.ie).
        timeout: Per-request timeout in seconds.
        chain: Chain alias used in RPC paths.
        block: Block alias contracts are read at.
        transport: Optional httpx transport (tests inject `httpx.MockTransport`).
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 30.0,
        chain: str = "main",
        block: str = "head",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not rpc_url:
            raise ConfigurationError("RPC URL is empty; set one explicitly for CUSTOM networks")
        self.base = rpc_url.rstrip("/")
        self.timeout = timeout
        self.chain = chain
        self.block = block
        self._transport = transport

    async def read_contract(self, address: str) -> Dict[str, Any]:
        url = (
            f"{self.base}/chains/{self.chain}/blocks/{self.block}"
            f"/context/contracts/{address}/script"
        )
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(url)
        if resp.status_code == 404:
            raise ContractNotFound(address)
        resp.raise_for_status()
        script = resp.json()
        logger.debug("Read script of %s from %s", address, self.base)
        return {"code": script.get("code") or [], "storage": script.get("storage")}

"""Contract Snapshot Loader: the "extract" step of a clone session.

Validates the address structurally before any I/O, reads the script through a
`ContractReader` and decodes the storage into tagged fields.
"""
from __future__ import annotations

import logging

from .address import is_contract_address
from .errors import InvalidAddress
from .michelson import decode_storage, storage_type_of
from .models.contract import ContractSnapshot
from .protocols import ContractReader

logger = logging.getLogger(__name__)

__all__ = ["SnapshotLoader"]


class SnapshotLoader:
    def __init__(self, reader: ContractReader):
        self._reader = reader

    async def load(self, address: str) -> ContractSnapshot:
        """Fetch code and storage of `address`.

        Raises:
            InvalidAddress: address fails the structural check (no I/O done).
            ContractNotFound: the node does not know the contract.
        """
        if not is_contract_address(address):
            raise InvalidAddress(address)
        raw = await self._reader.read_contract(address)
        code = list(raw.get("code") or [])
        storage_type = storage_type_of(code)
        storage = decode_storage(storage_type, raw.get("storage"))
        snapshot = ContractSnapshot(
            address=address,
            code=code,
            storage=storage,
            storage_type=storage_type,
        )
        logger.info(
            "Loaded contract %s: %d code section(s), storage fields=%s",
            address,
            len(code),
            list(storage),
        )
        return snapshot

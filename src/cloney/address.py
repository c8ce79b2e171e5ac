"""Structural validation of Tezos contract addresses.

The check is purely structural (prefix, length, base58 alphabet); it does not
verify the checksum nor that the contract exists.
"""
from __future__ import annotations

import re

__all__ = ["CONTRACT_PREFIX", "CONTRACT_ADDRESS_LENGTH", "is_contract_address"]

CONTRACT_PREFIX = "KT1"
CONTRACT_ADDRESS_LENGTH = 36

_BASE58 = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_CONTRACT_RE = re.compile(
    rf"{CONTRACT_PREFIX}[{_BASE58}]{{{CONTRACT_ADDRESS_LENGTH - len(CONTRACT_PREFIX)}}}"
)


def is_contract_address(address: object) -> bool:
    return isinstance(address, str) and _CONTRACT_RE.fullmatch(address) is not None

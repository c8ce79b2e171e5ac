"""Error taxonomy for the cloning pipeline.

Every failure raised by cloney derives from `CloneyError` and belongs to one
of the families below. Nothing is retried automatically: retrying an
origination could deploy the contract twice, so retry policy is left to the
caller.

Families:
    ConfigurationError: bad network / signer setup, raised before any I/O.
    ValidationError: caller input or an undecodable script rejected.
    SessionStateError: an operation invoked out of order.
    NotFoundError: remote lookup missed.
    FetchError: indexer batch failed (no partial results retained).
    SubmissionError: origination rejected by the target network.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

__all__ = [
    "CloneyError",
    "ConfigurationError",
    "UnknownNetwork",
    "SignerMismatch",
    "NoSourceNetwork",
    "NoTargetNetwork",
    "NoSigner",
    "FactoryImportError",
    "ValidationError",
    "InvalidAddress",
    "MissingCustomStorage",
    "StorageShapeMismatch",
    "MalformedScript",
    "SessionStateError",
    "NoSnapshotLoaded",
    "NoSnapshot",
    "NoTargetClient",
    "StorageNotDerived",
    "InvalidTransition",
    "NotFoundError",
    "ContractNotFound",
    "FetchError",
    "BigMapFetchFailed",
    "SubmissionError",
    "OriginationFailed",
]


class CloneyError(Exception):
    """Base class for all cloney errors."""


# ---------------- Configuration -----------------


class ConfigurationError(CloneyError):
    pass


class UnknownNetwork(ConfigurationError):
    def __init__(self, network: object):
        self.network = network
        super().__init__(f"Unknown network type: {network!r}")


class SignerMismatch(ConfigurationError):
    def __init__(self, signing_mode: object, signer_kind: object):
        self.signing_mode = signing_mode
        self.signer_kind = signer_kind
        super().__init__(
            f"The signer ({signer_kind}) doesn't match the selected signing mode ({signing_mode})"
        )


class NoSourceNetwork(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("No source network")


class NoTargetNetwork(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("No target network")


class NoSigner(ConfigurationError):
    def __init__(self, signing_mode: object):
        self.signing_mode = signing_mode
        super().__init__(f"No signer configured for the {signing_mode} signing mode")


class FactoryImportError(ConfigurationError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot load factory {path!r}: {reason}")


# ---------------- Validation -----------------


class ValidationError(CloneyError):
    pass


class InvalidAddress(ValidationError):
    def __init__(self, address: object):
        self.address = address
        super().__init__(f"Invalid contract address: {address!r}")


class MissingCustomStorage(ValidationError):
    def __init__(self) -> None:
        super().__init__("No custom storage provided")


class StorageShapeMismatch(ValidationError):
    """Custom storage field names differ from the source storage.

    `missing` lists source fields absent from the custom record, `unexpected`
    lists custom fields the source storage does not have.
    """

    def __init__(self, missing: Iterable[str], unexpected: Iterable[str]):
        self.missing: List[str] = sorted(missing)
        self.unexpected: List[str] = sorted(unexpected)
        super().__init__(
            "The provided storage keys don't match the original storage keys "
            f"(missing={self.missing}, unexpected={self.unexpected})"
        )


class MalformedScript(ValidationError):
    """The node returned a script whose storage cannot be decoded."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed contract script: {reason}")


# ---------------- Session state -----------------


class SessionStateError(CloneyError):
    pass


class NoSnapshotLoaded(SessionStateError):
    def __init__(self) -> None:
        super().__init__("Current storage has not been fetched")


class NoSnapshot(SessionStateError):
    def __init__(self) -> None:
        super().__init__("No contract to originate")


class NoTargetClient(SessionStateError):
    def __init__(self) -> None:
        super().__init__("Client missing for target network")


class StorageNotDerived(SessionStateError):
    def __init__(self) -> None:
        super().__init__("Storage for the new contract has not been derived")


class InvalidTransition(SessionStateError):
    def __init__(self, operation: str, state: object):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


# ---------------- Remote failures -----------------


class NotFoundError(CloneyError):
    pass


class ContractNotFound(NotFoundError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Not Found: contract {address}")


class FetchError(CloneyError):
    pass


class BigMapFetchFailed(FetchError):
    def __init__(self, big_map_id: int, reason: Optional[str] = None):
        self.big_map_id = big_map_id
        msg = f"Fetching big map {big_map_id} failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class SubmissionError(CloneyError):
    pass


class OriginationFailed(SubmissionError):
    """Origination rejected; `__cause__` holds the network diagnostic."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Origination failed: {reason}")

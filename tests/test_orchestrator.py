"""Origination: preconditions, merge and submission path selection."""
from __future__ import annotations

import asyncio

import pytest

from cloney.config import NetworkType
from cloney.errors import (
    NoSigner,
    NoSnapshot,
    NoSourceNetwork,
    NoTargetClient,
    NoTargetNetwork,
    OriginationFailed,
    StorageNotDerived,
)
from cloney.models.contract import (
    BigMapEntry,
    BigMapPointer,
    BigMapRef,
    BigMapSnapshot,
    ContractSnapshot,
    Signer,
    SignerKind,
    SigningMode,
    StorageMode,
    TextValue,
)
from cloney.orchestrator import OriginationTarget, originate
from cloney.transformer import derive_storage

from conftest import CLONE_ADDRESS, SOURCE_ADDRESS, FakeTargetClient

pytestmark = pytest.mark.asyncio

CODE = [{"prim": "parameter"}, {"prim": "storage"}, {"prim": "code"}]


def _snapshot() -> ContractSnapshot:
    return ContractSnapshot(
        address=SOURCE_ADDRESS,
        code=CODE,
        storage={"owner": TextValue(value="A"), "balances": BigMapRef(id=7)},
    )


def _target(*, client, mode=SigningMode.DIRECT, **overrides) -> OriginationTarget:
    kind = mode.required_signer_kind
    values = dict(
        source_network=NetworkType.MAINNET,
        target_network=NetworkType.HANGZHOUNET,
        client=client,
        signing_mode=mode,
        signer=Signer(kind=kind, handle="key"),
    )
    values.update(overrides)
    return OriginationTarget(**values)


async def test_direct_path_submits_merged_storage(target_client):
    snapshot = _snapshot()
    spec = derive_storage(snapshot, StorageMode.CURRENT)
    result = await originate(
        snapshot,
        spec,
        [BigMapSnapshot(id=7, entries=[BigMapEntry(key="k1", value="v1")])],
        [BigMapPointer(name="balances", id=7)],
        _target(client=target_client),
    )
    assert result.address == CLONE_ADDRESS
    path, code, storage, signer = target_client.calls[0]
    assert path == "direct"
    assert code == CODE
    assert storage["balances"].to_python() == {"k1": "v1"}
    assert signer.kind is SignerKind.PREAUTHORIZED
    # the live handle reflects what was submitted
    live = result.handle["live"]
    assert {k: v.to_python() for k, v in live.items()} == result.storage.to_python()
    # derived storage itself is not mutated by the merge
    assert spec.storage["balances"].entries == []


async def test_wallet_path_selected_by_signing_mode(target_client):
    snapshot = _snapshot()
    await originate(
        snapshot,
        derive_storage(snapshot, StorageMode.EMPTY),
        [],
        [],
        _target(client=target_client, mode=SigningMode.WALLET),
    )
    assert [c[0] for c in target_client.calls] == ["wallet"]


@pytest.mark.parametrize(
    "overrides, snapshot_present, error",
    [
        ({"source_network": None}, True, NoSourceNetwork),
        ({"target_network": None}, True, NoTargetNetwork),
        ({}, False, NoSnapshot),
        ({"client": None}, True, NoTargetClient),
        ({"signer": None}, True, NoSigner),
    ],
)
async def test_preconditions(target_client, overrides, snapshot_present, error):
    snapshot = _snapshot()
    spec = derive_storage(snapshot, StorageMode.EMPTY)
    with pytest.raises(error):
        await originate(
            snapshot if snapshot_present else None,
            spec,
            [],
            [],
            _target(**{"client": target_client, **overrides}),
        )
    assert target_client.calls == []


async def test_storage_must_be_derived(target_client):
    with pytest.raises(StorageNotDerived):
        await originate(_snapshot(), None, [], [], _target(client=target_client))


async def test_rejection_wrapped_and_not_retried():
    client = FakeTargetClient(submit_error=RuntimeError("balance_too_low"))
    snapshot = _snapshot()
    with pytest.raises(OriginationFailed, match="balance_too_low") as exc:
        await originate(snapshot, derive_storage(snapshot, "EMPTY"), [], [], _target(client=client))
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert len(client.calls) == 1


async def test_confirmation_timeout_is_origination_failure():
    client = FakeTargetClient(resolve_error=asyncio.TimeoutError())
    snapshot = _snapshot()
    with pytest.raises(OriginationFailed, match="TimeoutError"):
        await originate(snapshot, derive_storage(snapshot, "EMPTY"), [], [], _target(client=client))

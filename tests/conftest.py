import sys
from pathlib import Path
from typing import Any, Dict, List

import httpx
import pytest

# Ensure `src` is on sys.path for tests when not installed editable.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cloney.errors import ContractNotFound  # noqa: E402

SOURCE_ADDRESS = "KT1GRSvLoikDsXujKgZPsGLX8k8VvR2Tq95b"
CLONE_ADDRESS = "KT1HW2kH3RHzVnoH7DxrCPUhFqbTeFYdKjds"


def make_script() -> Dict[str, Any]:
    """Script with storage {owner: "A", count: 5, active: true, ledger: big_map 3}.

    The type is an n-ary comb while the value is nested binary pairs, as some
    nodes emit it.
    """
    storage_type = {
        "prim": "pair",
        "args": [
            {"prim": "address", "annots": ["%owner"]},
            {"prim": "nat", "annots": ["%count"]},
            {"prim": "bool", "annots": ["%active"]},
            {
                "prim": "big_map",
                "args": [{"prim": "string"}, {"prim": "nat"}],
                "annots": ["%ledger"],
            },
        ],
    }
    return {
        "code": [
            {"prim": "parameter", "args": [{"prim": "unit"}]},
            {"prim": "storage", "args": [storage_type]},
            {"prim": "code", "args": [[{"prim": "CDR"}, {"prim": "NIL", "args": [{"prim": "operation"}]}, {"prim": "PAIR"}]]},
        ],
        "storage": {
            "prim": "Pair",
            "args": [
                {"string": "A"},
                {"prim": "Pair", "args": [{"int": "5"}, {"prim": "Pair", "args": [{"prim": "True"}, {"int": "3"}]}]},
            ],
        },
    }


class FakeReader:
    def __init__(self, scripts: Dict[str, Dict[str, Any]]):
        self.scripts = scripts
        self.calls: List[str] = []

    async def read_contract(self, address: str) -> Dict[str, Any]:
        self.calls.append(address)
        if address not in self.scripts:
            raise ContractNotFound(address)
        return self.scripts[address]


class FakeBigMapSource:
    def __init__(self, pages: Dict[int, List[Dict[str, Any]]], fail_ids: tuple = ()):
        self.pages = pages
        self.fail_ids = set(fail_ids)
        self.calls: List[tuple] = []

    async def list_big_map_entries(self, big_map_id: int, limit: int) -> List[Dict[str, Any]]:
        self.calls.append((big_map_id, limit))
        if big_map_id in self.fail_ids:
            raise httpx.ConnectError("indexer unreachable")
        return self.pages.get(big_map_id, [])


class FakeOperation:
    def __init__(self, address: str, storage: Any, error: Exception | None = None):
        self.address = address
        self.storage = storage
        self.error = error

    async def resolve(self):
        if self.error is not None:
            raise self.error
        return self.address, {"live": self.storage}


class FakeTargetClient:
    def __init__(
        self,
        address: str = CLONE_ADDRESS,
        submit_error: Exception | None = None,
        resolve_error: Exception | None = None,
    ):
        self.address = address
        self.submit_error = submit_error
        self.resolve_error = resolve_error
        self.calls: List[tuple] = []

    async def _submit(self, path: str, code, storage, signer) -> FakeOperation:
        self.calls.append((path, code, storage, signer))
        if self.submit_error is not None:
            raise self.submit_error
        return FakeOperation(self.address, storage, self.resolve_error)

    async def originate_via_wallet(self, code, storage, signer):
        return await self._submit("wallet", code, storage, signer)

    async def originate_direct(self, code, storage, signer):
        return await self._submit("direct", code, storage, signer)


@pytest.fixture
def script() -> Dict[str, Any]:
    return make_script()


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader({SOURCE_ADDRESS: make_script()})


@pytest.fixture
def big_map_source() -> FakeBigMapSource:
    return FakeBigMapSource(
        {
            3: [
                {"id": 11, "active": True, "key": "x1", "value": 10},
                {"id": 12, "active": False, "key": "gone", "value": "1"},
            ]
        }
    )


@pytest.fixture
def target_client() -> FakeTargetClient:
    return FakeTargetClient()

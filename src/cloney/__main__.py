"""Main CLI entry point for cloney.

This module provides a command-line interface using Typer over
`cloney.session.CloneSession`:

1.  `inspect ADDRESS` loads a contract and prints its decoded storage and the
    big maps it references.
2.  `clone ADDRESS` runs the whole pipeline: load, derive storage, copy big
    maps, merge and (unless in dry-run) originate on the target network.

Origination needs a target client and a signer, which the caller provides as
import paths (`TARGET_CLIENT_FACTORY`, `SIGNER_FACTORY`). Without them only
dry runs are possible.
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from dotenv import find_dotenv, load_dotenv

from .config import get_settings
from .errors import CloneyError
from .models.contract import Signer, StorageMode
from .plugins import load_factory
from .session import CloneSession

# Load .env file if present (before any config access)
_env_file = find_dotenv(usecwd=True)
if _env_file:
    load_dotenv(_env_file)

app = typer.Typer(help="Clone Tezos contracts between networks")

logger = logging.getLogger(__name__)


def _dump(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _read_custom_storage(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise typer.BadParameter(f"cannot read custom storage {path}: {e}") from e
    if not isinstance(data, dict):
        raise typer.BadParameter("custom storage must be a JSON object")
    return data


@app.callback()
def main() -> None:  # pragma: no cover - simple callback
    """cloney CLI.

    Use a subcommand like 'inspect' or 'clone'.
    """
    pass


@app.command(help="Print the decoded storage and big map pointers of a contract.")
def inspect(
    address: str = typer.Argument(..., help="Contract address (KT1...)"),
    source_network: Optional[str] = typer.Option(
        None, help="Override SOURCE_NETWORK (MAINNET, HANGZHOUNET, ...)"
    ),
    source_rpc_url: Optional[str] = typer.Option(None, help="Override SOURCE_RPC_URL"),
) -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    async def _run() -> None:
        session = CloneSession(
            source_network=source_network or settings.SOURCE_NETWORK,
            signing_mode=settings.SIGNING_MODE,
            source_rpc_url=source_rpc_url or settings.SOURCE_RPC_URL,
            timeout=settings.HTTP_TIMEOUT,
        )
        snapshot = await session.load_contract(address)
        _dump(
            {
                "address": snapshot.address,
                "storage": {name: value.to_python() for name, value in snapshot.storage.items()},
                "big_maps": [p.model_dump() for p in session.resolve_big_map_ids()],
            }
        )

    try:
        asyncio.run(_run())
    except CloneyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command(help="Clone a contract (dry run by default, see DRY_RUN).")
def clone(
    address: str = typer.Argument(..., help="Contract address (KT1...)"),
    mode: StorageMode = typer.Option(
        StorageMode.CURRENT, "--mode", case_sensitive=False, help="Initial storage of the clone"
    ),
    custom_storage: Optional[Path] = typer.Option(
        None, help="JSON object with the storage to use in CUSTOM mode"
    ),
    big_map_id: Optional[List[int]] = typer.Option(
        None, "--big-map-id", help="Big map id to copy (repeatable)"
    ),
    all_big_maps: bool = typer.Option(
        False, "--all-big-maps", help="Copy every big map referenced by the storage"
    ),
    target_network: Optional[str] = typer.Option(None, help="Override TARGET_NETWORK"),
    target_rpc_url: Optional[str] = typer.Option(None, help="Override TARGET_RPC_URL"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Only print the storage that would be originated"
    ),
    execute: bool = typer.Option(
        False, "--execute", help="Originate even when DRY_RUN is enabled in config/env"
    ),
) -> None:
    """Load, derive, copy big maps and originate.

    Dry-run is effective when `--dry-run` is given, or when DRY_RUN is set
    and `--execute` is not.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    effective_dry_run = dry_run or (settings.DRY_RUN and not execute)
    custom = _read_custom_storage(custom_storage) if custom_storage is not None else None

    async def _run() -> None:
        signer: Optional[Signer] = None
        factory = None
        if not effective_dry_run:
            if settings.TARGET_CLIENT_FACTORY:
                factory = load_factory(settings.TARGET_CLIENT_FACTORY)
            if settings.SIGNER_FACTORY:
                signer = load_factory(settings.SIGNER_FACTORY)(settings.SIGNING_MODE)
        session = CloneSession.from_settings(
            settings, signer=signer, target_client_factory=factory
        )
        if target_network:
            session.set_target_network(target_network, target_rpc_url or settings.TARGET_RPC_URL)
        await session.load_contract(address)
        session.derive_storage(mode, custom)
        ids: Optional[List[int]] = None
        if all_big_maps:
            ids = [p.id for p in session.resolve_big_map_ids()]
        elif big_map_id:
            ids = list(big_map_id)
        if ids:
            await session.copy_big_maps(ids)

        if effective_dry_run:
            preview = session.preview_storage()
            _dump({"mode": preview.mode.value, "storage": preview.to_python()})
            typer.echo(f"Dry run: nothing originated (state={session.state.value})")
            return
        result = await session.clone()
        typer.echo(f"Originated {address} as {result.address}")

    try:
        asyncio.run(_run())
    except CloneyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()

import asyncio
import logging
import time
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.config import SyncConfig
from .core.errors import OfferindError
from .core.models import Found, Gone, NotFound, OfferEventModel
from .orchestration.blockchain import connect
from .storage import Checkpoint, EventJournal, setup_directories

console = Console()


def _floor(value: str | None) -> int | str | None:
    if value is None:
        return None
    return int(value) if value.isdigit() else value.lower()


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except OfferindError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        console.print("[yellow]interrupted[/]")


@click.group()
@click.option("--rpc", "rpc_url", required=True, envvar="OFFERIND_RPC_URL", help="HTTP RPC endpoint URL")
@click.option("--ws", "ws_url", default=None, envvar="OFFERIND_WS_URL", help="Websocket endpoint (live commands)")
@click.option("--registry", "registry_address", default=None, envvar="OFFERIND_REGISTRY", help="Only logs emitted by this address")
@click.option("--abi", "abi_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, envvar="OFFERIND_ABI", help="Offer contract ABI JSON")
@click.option("--out-root", type=click.Path(file_okay=False, path_type=Path), default=Path("./data"), show_default=True, envvar="OFFERIND_OUT_ROOT")
@click.option("--default-floor", default="genesis", show_default=True, envvar="OFFERIND_DEFAULT_FLOOR", help="Resync floor when none is given")
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="Per-request timeout (s)")
@click.option("--concurrency", type=int, default=16, show_default=True, help="Max parallel log queries")
@click.option("-v", "--verbose", count=True, help="-v info, -vv debug")
@click.pass_context
def cli(
    ctx: click.Context,
    rpc_url: str,
    ws_url: str | None,
    registry_address: str | None,
    abi_path: Path | None,
    out_root: Path,
    default_floor: str,
    timeout_s: int,
    concurrency: int,
    verbose: int,
) -> None:
    """offerind: follow marketplace offers recorded on an EVM chain."""
    logging.basicConfig(
        level=[logging.WARNING, logging.INFO, logging.DEBUG][min(verbose, 2)],
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.obj = SyncConfig(
        rpc_url=rpc_url,
        ws_url=ws_url,
        registry_address=registry_address,
        default_floor=_floor(default_floor),
        timeout_s=timeout_s,
        concurrency=concurrency,
        abi_path=abi_path,
        out_root=out_root,
    )


@cli.command("resync")
@click.option("--from-block", default=None, help="Block number, 'genesis' or 'latest'")
@click.option("--resume/--no-resume", default=True, show_default=True, help="Start after the saved checkpoint")
@click.option("--journal/--no-journal", default=True, show_default=True, help="Append events to the journal")
@click.pass_obj
def resync_cmd(config: SyncConfig, from_block: str | None, resume: bool, journal: bool) -> None:
    """Rebuild offer events from history and save a checkpoint."""
    dirs = setup_directories(config)

    async def run() -> None:
        floor = _floor(from_block)
        checkpoint = Checkpoint.load(dirs.checkpoint_path)
        if floor is None and resume and checkpoint is not None:
            floor = checkpoint.next_block
            console.print(f"resuming after checkpoint block {checkpoint.synced_to_block:,}")

        t0 = time.time()
        async with connect(config) as chain:
            result = await chain.resync(floor)

        if journal:
            await EventJournal(dirs.journal_path).apply_many(result.events(), None)
        Checkpoint(synced_to_block=result.synced_to_block, updated_at=time.time()).save(dirs.checkpoint_path)

        table = Table(title=f"synced to block {result.synced_to_block:,}")
        table.add_column("family")
        table.add_column("events", justify="right")
        for family, count in result.counts().items():
            table.add_row(family, str(count))
        console.print(table)
        console.print(f"[bold]done[/] in {time.time() - t0:.2f}s")

    _run(run())


@cli.command("watch")
@click.option("--from-block", type=int, default=None, help="Replay from this block before following")
@click.option("--resync/--no-resync", "do_resync", default=False, show_default=True, help="Resync first, then follow from the next block")
@click.option("--journal/--no-journal", default=True, show_default=True, help="Append events to the journal")
@click.pass_obj
def watch_cmd(config: SyncConfig, from_block: int | None, do_resync: bool, journal: bool) -> None:
    """Follow offer events until interrupted."""
    if config.ws_url is None:
        raise click.UsageError("watch needs a websocket endpoint (--ws / OFFERIND_WS_URL)")
    dirs = setup_directories(config)
    sink = EventJournal(dirs.journal_path) if journal else None

    async def on_event(event: OfferEventModel, block: int) -> None:
        console.print(f"[green]+[/] {block:>10,}  {event.kind.value:<15} {event.to_dict()}")
        if sink is not None:
            await sink.apply(event, block)

    async def on_revert(event: OfferEventModel) -> None:
        console.print(f"[red]-[/] {'reorg':>10}  {event.kind.value:<15} {event.to_dict()}")
        if sink is not None:
            await sink.revert(event)

    def on_error(name: str, message: str) -> None:
        console.print(f"[red]{name}[/]: {message}")

    async def run() -> None:
        start = from_block
        async with connect(config) as chain:
            if do_resync:
                result = await chain.resync(from_block)
                if sink is not None:
                    await sink.apply_many(result.events(), None)
                Checkpoint(synced_to_block=result.synced_to_block, updated_at=time.time()).save(dirs.checkpoint_path)
                start = result.synced_to_block + 1
                console.print(f"resynced to block {result.synced_to_block:,}, following from {start:,}")

            handle = chain.follow(on_event, on_revert, on_error, start)
            try:
                await asyncio.Event().wait()
            finally:
                handle.unsubscribe()

    _run(run())


@cli.command("find-cid")
@click.argument("cid")
@click.pass_obj
def find_cid_cmd(config: SyncConfig, cid: str) -> None:
    """Tell whether CID is attached to an offer, and in which status."""

    async def run() -> None:
        async with connect(config) as chain:
            result = await chain.find_cid(cid)
        match result:
            case NotFound():
                console.print(f"[yellow]not found[/]: {cid} was never attached")
            case Gone():
                console.print(f"[yellow]gone[/]: {cid} is no longer attached to any offer")
            case Found(statuses=statuses):
                names = ", ".join(sorted(s.name for s in statuses))
                console.print(f"[green]found[/]: {cid} ({names})")

    _run(run())


@cli.command("offer")
@click.argument("address")
@click.pass_obj
def offer_cmd(config: SyncConfig, address: str) -> None:
    """Print the current state of one offer contract."""

    async def run() -> None:
        async with connect(config) as chain:
            snapshot = await chain.read_offer(address)
        table = Table(title=address)
        table.add_column("property")
        table.add_column("value")
        for name in ("status", "title", "price", "category", "ships_from", "seller", "buyer", "attached_files"):
            value = getattr(snapshot, name)
            table.add_row(name, value.name if name == "status" else str(value))
        console.print(table)

    _run(run())


if __name__ == "__main__":
    cli()

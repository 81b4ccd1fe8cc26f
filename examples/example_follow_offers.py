import asyncio
import os

from offerind.core.config import SyncConfig
from offerind.core.models import Found, Gone, NotFound
from offerind.orchestration.blockchain import connect

config = SyncConfig(
    rpc_url=os.environ.get("OFFERIND_RPC_URL", "http://127.0.0.1:8545"),
    ws_url=os.environ.get("OFFERIND_WS_URL", "ws://127.0.0.1:8545"),
    default_floor="genesis",
)


def on_event(event, block):
    print(f"+ {block:>8} {event.to_dict()}")


def on_revert(event):
    print(f"- reorg    {event.to_dict()}")


def on_error(name, message):
    print(f"! {name}: {message}")


async def main():
    async with connect(config) as chain:
        # Rebuild history up to the current head
        result = await chain.resync()
        print(f"synced to block {result.synced_to_block}: {result.counts()}")

        created = result.created[0] if result.created else None
        if created is not None:
            match await chain.find_cid(created.attached_files):
                case NotFound():
                    print(f"{created.attached_files}: never attached")
                case Gone():
                    print(f"{created.attached_files}: replaced since")
                case Found(statuses=statuses):
                    print(f"{created.attached_files}: {sorted(s.name for s in statuses)}")
            print(await chain.read_offer(created.offer))

        # Then follow new blocks for a minute
        handle = chain.follow(on_event, on_revert, on_error, result.synced_to_block + 1)
        try:
            await asyncio.sleep(60)
        finally:
            handle.unsubscribe()


asyncio.run(main())

"""
pricing_events.py — Listen for SPACE pricing notifications.

Usage:
    export SPACE_URL=http://localhost:5403
    export SPACE_API_KEY=...
    python examples/pricing_events.py
"""

import asyncio
import logging

from space_client import SpaceClient, SpaceClientSettings


def on_created(details) -> None:
    print("pricing created:", details)


async def on_archived(details) -> None:
    print("pricing archived:", details)


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    client = SpaceClient(SpaceClientSettings.from_env())
    client.on("synchronized", lambda _: print("listening for pricing events"))
    client.on("pricing_created", on_created)
    client.on("pricing_archived", on_archived)

    async with client:
        await client.connect()
        await asyncio.sleep(60)


if __name__ == "__main__":
    asyncio.run(main())

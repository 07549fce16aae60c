"""
inmemory_cache.py — SPACE client with the in-process cache.

Repeated contract reads and read-only feature evaluations are served
from memory after the first call.

Usage:
    export SPACE_URL=http://localhost:5403
    export SPACE_API_KEY=...
    python examples/inmemory_cache.py
"""

import os

from space_client import CacheConfig, connect


async def main() -> None:
    client = connect(
        os.environ["SPACE_URL"],
        os.environ["SPACE_API_KEY"],
        cache=CacheConfig(enabled=True, type="inmemory", ttl=300),
    )
    async with client:
        contract = await client.contracts.get_contract("user123")
        print("from API:", contract.user_contact.username)
        await client.contracts.get_contract("user123")

        result = await client.features.evaluate("user123", "zoom-meetings")
        print("allowed:", result.eval)

        print(client.get_cache().stats())


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())

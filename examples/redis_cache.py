"""
redis_cache.py — SPACE client sharing a Redis cache.

Cache entries survive process restarts and are shared by every client
pointed at the same Redis database and key prefix.

Usage:
    export SPACE_URL=http://localhost:5403
    export SPACE_API_KEY=...
    export SPACE_CACHE_REDIS_URL=redis://localhost:6379/0
    python examples/redis_cache.py
"""

import os

from space_client import CacheConfig, RedisCacheConfig, connect


async def main() -> None:
    redis = RedisCacheConfig.from_url(
        os.environ.get("SPACE_CACHE_REDIS_URL", "redis://localhost:6379/0"),
        key_prefix="my-app:",
    )
    client = connect(
        os.environ["SPACE_URL"],
        os.environ["SPACE_API_KEY"],
        cache=CacheConfig(enabled=True, type="redis", ttl=600, redis=redis),
    )
    async with client:
        await client.contracts.get_contract("user456")
        print("cached contracts:", await client.get_cache().keys("contract:*"))

        # Consuming usage drops the user's cached contract and token.
        await client.features.evaluate(
            "user456", "zoom-meetings", {"zoom-maxMeetings": 1}
        )
        print("after evaluation:", await client.get_cache().keys("contract:*"))


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())

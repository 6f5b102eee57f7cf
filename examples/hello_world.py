"""
keyv_hana — Hello World

Keys are strings, values are opaque, namespaces are key prefixes.
Connection settings come from HANA_HOST, HANA_PORT, HANA_USER and
HANA_PASSWORD (or a .env file).
"""

import asyncio
import json
import logging

from keyv_hana import HanaStore, build_composite_id


async def main():
    logging.basicConfig(level=logging.INFO)

    # ──────────────────────────────────────
    #  1. Create the store (no I/O yet)
    # ──────────────────────────────────────
    store = HanaStore.from_env(namespace="users", iteration_limit=2)
    store.on_error(lambda exc: print(f"  [INIT FAILED] {exc}"))

    async with store:
        # ──────────────────────────────────────
        #  2. Write and read under the namespace
        # ──────────────────────────────────────
        await store.set_many(
            [
                (build_composite_id("users", name), json.dumps({"name": name}))
                for name in ("alice", "bob", "carol")
            ]
        )
        print(await store.get(build_composite_id("users", "alice")))
        print(await store.has_many([build_composite_id("users", n) for n in ("bob", "eve")]))

        # ──────────────────────────────────────
        #  3. Walk the namespace in batches of two
        # ──────────────────────────────────────
        async for key, value in store.iterator("users"):
            print(f"  {key} -> {value}")

        # ──────────────────────────────────────
        #  4. Drop only this namespace
        # ──────────────────────────────────────
        await store.clear()


if __name__ == "__main__":
    asyncio.run(main())

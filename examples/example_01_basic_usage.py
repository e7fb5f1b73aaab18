"""Example 01: Basic Usage - mongoplug Fundamentals.

This example demonstrates the fundamental operations:
- Connecting through a MongoStore (one shared bring-up for every call)
- Inserting documents and reading them back as Records
- Filtering with a predicate sequence
- Partial updates with a touched-key set

Requires a MongoDB server; set MONGOPLUG_URL to point at it.
"""

import asyncio
import re

from mongoplug import MongoPlugConfig, MongoStore


async def main():
    """Run the basic usage example."""
    print("=" * 80)
    print("MONGOPLUG BASIC USAGE EXAMPLE")
    print("=" * 80)

    config = MongoPlugConfig.from_env()
    async with MongoStore(config) as store:
        await store.remove("users", [])
        await store.create_index("users", "email_idx", {"email": 1})

        # Step 1: Insert
        alice = await store.insert("users", {"email": "alice@x.com", "age": 30, "tags": ["a"]})
        await store.insert("users", {"email": "bob@x.com", "age": 25, "tags": ["b"]})
        await store.insert("users", {"email": "carol@y.com", "age": 41, "tags": ["a", "b"]})
        print(f"\n✓ Inserted alice as {alice}")

        # Step 2: Point lookup
        record = await store.find_by_id("users", alice)
        print(f"✓ find_by_id -> {record.to_dict()}")

        # Step 3: Predicate sequence
        records = await store.find(
            "users",
            [
                {"type": "filter", "filter": {"email": re.compile(r"@x\.com$")}},
                {"type": "gte", "key": "age", "min": 20},
                {"type": "sort", "sortKey": "age", "desc": True},
            ],
        )
        print(f"✓ @x.com users, oldest first: {[r.object['email'] for r in records]}")

        # Step 4: Adjacent negations coalesce into one $nin
        pts = [
            {"type": "ne", "key": "email", "val": "alice@x.com"},
            {"type": "ne", "key": "email", "val": "bob@x.com"},
        ]
        print(f"✓ compiled: {store.raw('users', pts)}")
        print(f"✓ count: {await store.count('users', pts)}")

        # Step 5: Aggregate
        total = await store.sum("users", [{"type": "elem", "arrKey": "tags", "filter": "a"}], "age")
        print(f"✓ sum of ages tagged 'a': {total}")

        # Step 6: Partial update; age is unset because it is None
        await store.update_by_id("users", alice, {"age": None, "city": "Oslo"}, {"age", "city"})
        print(f"✓ after update: {(await store.find_by_id('users', alice)).object}")


if __name__ == "__main__":
    asyncio.run(main())

"""Example 02: Error Handling.

This example demonstrates how failures surface:
- MalformedPredicateError raised at compile time
- InvalidIdentifierError for ids that are not ObjectIds
- ConnectionFailureError shared by every waiter on a failed bring-up
- Not-found is None, never an error
"""

import asyncio

from mongoplug import (
    ConnectionFailureError,
    InvalidIdentifierError,
    MalformedPredicateError,
    MongoPlugConfig,
    MongoStore,
    compile_predicates,
)


async def main():
    """Run error handling example."""
    print("=" * 80)
    print("EXAMPLE 02: ERROR HANDLING")
    print("=" * 80)

    try:
        compile_predicates([{"type": "between", "key": "age"}])
    except MalformedPredicateError as e:
        print(f"\n✓ compile-time failure: {e}")

    store = MongoStore(
        MongoPlugConfig(url="mongodb://127.0.0.1:1", server_selection_timeout_ms=200)
    )
    results = await asyncio.gather(
        store.find("users", []),
        store.count("users", []),
        return_exceptions=True,
    )
    for result in results:
        assert isinstance(result, ConnectionFailureError)
    print(f"✓ both waiters saw the same failure: {results[0] is results[1]}")
    print(f"✓ connection attempts made: {store.guard.attempts}")

    try:
        await store.find_by_id("users", "not-an-id")
    except InvalidIdentifierError as e:
        print(f"✓ {e}")
    store.close()


if __name__ == "__main__":
    asyncio.run(main())

"""
jsonkv — Hello World

A key-value store whose values are plain JSON.  Counters and lists
mutate atomically per key; queries run over a snapshot of every record.
"""

import asyncio

from jsonkv import Database


async def main():
    # ──────────────────────────────────────
    #  1. Open a database (connects lazily)
    # ──────────────────────────────────────
    async with Database("sqlite:///hello_world.db") as db:
        await db.clear()

        # ──────────────────────────────────────
        #  2. Plain values
        # ──────────────────────────────────────
        await db.set("user:1", {"name": "John", "age": 30, "active": True})
        await db.set("user:2", {"name": "Ann", "age": 25, "active": False})
        print("User:", await db.get("user:1"))

        # ──────────────────────────────────────
        #  3. Counters
        # ──────────────────────────────────────
        await db.set("counter", 0)
        await db.add("counter", 5)
        await db.add("counter", 3)
        print("Counter:", await db.get("counter"))
        print("Halved: ", await db.math("counter", "divide", 2))

        # ──────────────────────────────────────
        #  4. Lists
        # ──────────────────────────────────────
        await db.push("fruits", "apple", "banana", "orange")
        print("Fruits:", await db.get("fruits"))
        await db.pull("fruits", "banana")
        print("Fruits after removing banana:", await db.get("fruits"))

        # ──────────────────────────────────────
        #  5. Queries
        # ──────────────────────────────────────
        print("\n=== Queries ===\n")
        print("  Keys:       ", await db.keys())
        print("  Size:       ", await db.size())
        print("  Has user:1: ", await db.has("user:1"))

        active = await db.filter(lambda value, key: key.startswith("user:") and value["active"])
        print("  Active users:", [r.key for r in active])

        names = await db.map(lambda value, key: value.get("name") if isinstance(value, dict) else None)
        print("  Names:      ", [n for n in names if n])

        backup = await db.backup()
        print("\nBackup:", backup)


if __name__ == "__main__":
    asyncio.run(main())

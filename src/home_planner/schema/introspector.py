"""SQLite schema introspection via ``sqlite_master`` and ``PRAGMA table_info``."""

from home_planner.adapters.base import DatabaseClient

# Tables to exclude from introspection (SQLite internals)
EXCLUDED_PREFIXES = ("sqlite_",)


async def get_column_names(client: DatabaseClient) -> dict[str, set[str]]:
    """Return ``{table: {column, ...}}`` for every user table."""
    tables = await client.fetch_all(
        "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
    )
    columns: dict[str, set[str]] = {}
    for row in tables:
        name = row["name"]
        if name.startswith(EXCLUDED_PREFIXES):
            continue
        info = await client.fetch_all(f"PRAGMA table_info({name})")
        columns[name] = {c["name"] for c in info}
    return columns

"""LifeRhythm mock MCP server (task / reminder items).

Stands in for the sheet-backed LifeRhythm server during local development.
Items are kept in ``data/<LIFERHYTHM_SHEET_ID>.json``.

    MCP_SERVER_PATH=mcp_servers/liferhythm_mock MCP_SERVER_COMMAND=python \
    MCP_SERVER_ARGS=server.py liferhythm --interactive
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List

from mcp.server.fastmcp import FastMCP


def _items_path() -> Path:
    data_dir = Path(os.environ.get("LIFERHYTHM_DATA_DIR") or Path(__file__).resolve().parent / "data")
    data_dir.mkdir(parents=True, exist_ok=True)
    sheet_id = os.environ.get("LIFERHYTHM_SHEET_ID") or "default"
    return data_dir / f"{sheet_id}.json"


def _load_items() -> List[Dict[str, Any]]:
    path = _items_path()
    if not path.exists():
        path.write_text("[]", encoding="utf-8")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _save_items(items: List[Dict[str, Any]]) -> None:
    with open(_items_path(), "w", encoding="utf-8") as f:
        json.dump(items, f, indent=2)


mcp = FastMCP("LifeRhythm Mock (Items)", json_response=True)


@mcp.tool()
def create_item(
    title: str,
    category: str = "task",
    status: str = "open",
    event_date: str = "",
    reminder_date: str = "",
    reminder_max_date: str = "",
    notes: str = "",
) -> str:
    """Log a task, event or reminder. Dates are ISO 8601 (YYYY-MM-DD); pass "" to leave unset."""
    items = _load_items()
    item = {
        "id": f"ITEM-{len(items) + 1}",
        "title": title,
        "category": category,
        "status": status,
        "event_date": event_date,
        "reminder_date": reminder_date,
        "reminder_max_date": reminder_max_date,
        "notes": notes,
    }
    items.append(item)
    _save_items(items)
    return json.dumps({"ok": True, "item": item}, indent=2)


@mcp.tool()
def search_items(query: str = "", status: str = "", limit: int = 20) -> str:
    """Search items by text in title or notes and optionally by status, both case-insensitive."""
    needle = query.lower()
    items = _load_items()
    if needle:
        items = [
            i for i in items
            if needle in i.get("title", "").lower() or needle in i.get("notes", "").lower()
        ]
    if status:
        items = [i for i in items if i.get("status", "").lower() == status.lower()]
    return json.dumps(items[:limit], indent=2)


@mcp.tool()
def update_status(item_id: str, status: str) -> str:
    """Set the status of an item (e.g. open, waiting, done)."""
    items = _load_items()
    for item in items:
        if item["id"] == item_id:
            item["status"] = status
            _save_items(items)
            return json.dumps({"ok": True, "item": item}, indent=2)
    return json.dumps({"error": f"Item not found: {item_id}"}, indent=2)


@mcp.tool()
def list_due_reminders(as_of: str) -> str:
    """List open items whose reminder_date is on or before as_of (YYYY-MM-DD)."""
    items = _load_items()
    due = [
        i for i in items
        if i.get("status") != "done" and i.get("reminder_date") and i["reminder_date"] <= as_of
    ]
    return json.dumps(due, indent=2)


if __name__ == "__main__":
    mcp.run(transport="stdio")

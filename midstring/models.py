from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


# === Domain objects shared by the stores ===


@dataclass
class OrderedList:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    version: int = 0


@dataclass
class Item:
    id: str
    list_id: str
    label: str
    sort_key: str
    created_at: datetime
    updated_at: datetime
    version: int = 0


def item_order(item: Item) -> tuple:
    # code point order on the key; ties fall back to creation time then id
    return (item.sort_key, item.created_at, item.id)

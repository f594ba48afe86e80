from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .core import keys_between, midpoint
from .errors import NotFound, VersionConflict
from .models import Item, OrderedList, item_order
from .utils import new_uuid, now_utc

logger = logging.getLogger(__name__)


def check_version(kind: str, ident: str, expected: Optional[int], actual: int) -> None:
    if expected is not None and expected != actual:
        raise VersionConflict(kind, ident, expected, actual)


def neighbor_keys(
    items: Dict[str, Item],
    after_id: Optional[str],
    before_id: Optional[str],
) -> Tuple[str, str]:
    """Resolve neighbour ids to the ``(low, high)`` keys a new key must fit between.

    When only one neighbour is named, the other bound is the item next to it
    in list order, or ``""`` at either end. With neither, the key goes after
    the current last item.
    """
    for ident in (after_id, before_id):
        if ident is not None and ident not in items:
            raise NotFound("item", ident)
    ordered = sorted(items.values(), key=item_order)
    if after_id is None and before_id is None:
        return (ordered[-1].sort_key if ordered else "", "")
    if before_id is None:
        pos = ordered.index(items[after_id])
        following = ordered[pos + 1] if pos + 1 < len(ordered) else None
        return items[after_id].sort_key, following.sort_key if following else ""
    if after_id is None:
        pos = ordered.index(items[before_id])
        preceding = ordered[pos - 1] if pos > 0 else None
        return preceding.sort_key if preceding else "", items[before_id].sort_key
    return items[after_id].sort_key, items[before_id].sort_key


class Storage:
    """In-memory store for ordered lists and their items."""

    def __init__(self) -> None:
        self.lists: Dict[str, OrderedList] = {}
        self.items: Dict[str, Dict[str, Item]] = {}

    # === List operations ===
    def create_list(self, name: str) -> OrderedList:
        now = now_utc()
        lst = OrderedList(id=new_uuid(), name=name.strip(), created_at=now, updated_at=now, version=1)
        self.lists[lst.id] = lst
        self.items[lst.id] = {}
        return lst

    def list_lists(self) -> List[OrderedList]:
        return sorted(self.lists.values(), key=lambda l: (l.created_at, l.id))

    def get_list(self, list_id: str) -> OrderedList:
        try:
            return self.lists[list_id]
        except KeyError:
            raise NotFound("list", list_id) from None

    def rename_list(self, list_id: str, name: str, expected_version: Optional[int] = None) -> OrderedList:
        lst = self.get_list(list_id)
        check_version("list", list_id, expected_version, lst.version)
        lst.name = name.strip()
        self._touch(lst)
        return lst

    def delete_list(self, list_id: str, expected_version: Optional[int] = None) -> None:
        lst = self.get_list(list_id)
        check_version("list", list_id, expected_version, lst.version)
        del self.lists[list_id]
        del self.items[list_id]

    # === Item operations ===
    def list_items(self, list_id: str) -> List[Item]:
        self.get_list(list_id)
        return sorted(self.items[list_id].values(), key=item_order)

    def get_item(self, list_id: str, item_id: str) -> Item:
        self.get_list(list_id)
        try:
            return self.items[list_id][item_id]
        except KeyError:
            raise NotFound("item", item_id) from None

    def create_item(
        self,
        list_id: str,
        label: str,
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
    ) -> Item:
        return self.create_items(list_id, [label], after_id, before_id)[0]

    def create_items(
        self,
        list_id: str,
        labels: List[str],
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
    ) -> List[Item]:
        lst = self.get_list(list_id)
        items = self.items[list_id]
        low, high = neighbor_keys(items, after_id, before_id)
        keys = keys_between(low, high, len(labels))
        now = now_utc()
        created = []
        for label, key in zip(labels, keys):
            item = Item(
                id=new_uuid(),
                list_id=list_id,
                label=label.strip(),
                sort_key=key,
                created_at=now,
                updated_at=now,
                version=1,
            )
            items[item.id] = item
            created.append(item)
        logger.debug("list %s: %d item(s) keyed between %r and %r", list_id, len(created), low, high)
        self._touch(lst, now)
        return created

    def move_item(
        self,
        list_id: str,
        item_id: str,
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Item:
        lst = self.get_list(list_id)
        item = self.get_item(list_id, item_id)
        check_version("item", item_id, expected_version, item.version)
        others = {k: v for k, v in self.items[list_id].items() if k != item_id}
        low, high = neighbor_keys(others, after_id, before_id)
        item.sort_key = midpoint(low, high)
        logger.debug("list %s: item %s re-keyed to %r", list_id, item_id, item.sort_key)
        item.version += 1
        item.updated_at = now_utc()
        self._touch(lst, item.updated_at)
        return item

    def delete_item(self, list_id: str, item_id: str) -> None:
        lst = self.get_list(list_id)
        self.get_item(list_id, item_id)
        del self.items[list_id][item_id]
        self._touch(lst)

    def _touch(self, lst: OrderedList, when=None) -> None:
        lst.version += 1
        lst.updated_at = when or now_utc()

"""Tests for the in-memory and SQL stores; every test runs against both."""
import pytest

from midstring.core import midpoint
from midstring.errors import NoMidpoint, NotFound, VersionConflict
from midstring.models import Item
from midstring.storage import neighbor_keys
from midstring.utils import now_utc


def labels(store, list_id):
    return [i.label for i in store.list_items(list_id)]


def test_create_list(store):
    lst = store.create_list("  Backlog ")
    assert lst.name == "Backlog"
    assert lst.version == 1
    assert store.get_list(lst.id).name == "Backlog"
    assert [l.id for l in store.list_lists()] == [lst.id]


def test_items_append_in_order(store):
    lst = store.create_list("todo")
    for label in ["one", "two", "three"]:
        store.create_item(lst.id, label)
    assert labels(store, lst.id) == ["one", "two", "three"]
    assert store.get_list(lst.id).version == 4


def test_first_item_gets_filler_key(store):
    lst = store.create_list("todo")
    assert store.create_item(lst.id, "only").sort_key == "n"


def test_insert_between_neighbours(store):
    lst = store.create_list("todo")
    first = store.create_item(lst.id, "first")
    last = store.create_item(lst.id, "last")
    mid = store.create_item(lst.id, "middle", after_id=first.id, before_id=last.id)
    assert first.sort_key < mid.sort_key < last.sort_key
    assert labels(store, lst.id) == ["first", "middle", "last"]


def test_insert_at_start(store):
    lst = store.create_list("todo")
    first = store.create_item(lst.id, "first")
    store.create_item(lst.id, "zeroth", before_id=first.id)
    assert labels(store, lst.id) == ["zeroth", "first"]


def test_bulk_insert(store):
    lst = store.create_list("todo")
    head = store.create_item(lst.id, "head")
    tail = store.create_item(lst.id, "tail")
    batch = [f"b{i}" for i in range(9)]
    created = store.create_items(lst.id, batch, after_id=head.id, before_id=tail.id)
    assert [i.label for i in created] == batch
    assert labels(store, lst.id) == ["head", *batch, "tail"]


def test_move_only_rekeys_moved_item(store):
    lst = store.create_list("todo")
    a, b, c = (store.create_item(lst.id, label) for label in "abc")
    moved = store.move_item(lst.id, c.id, before_id=a.id)
    assert moved.version == 2
    assert labels(store, lst.id) == ["c", "a", "b"]
    keys = {i.id: i.sort_key for i in store.list_items(lst.id)}
    assert keys[a.id] == a.sort_key
    assert keys[b.id] == b.sort_key


def test_move_between(store):
    lst = store.create_list("todo")
    a, b, c = (store.create_item(lst.id, label) for label in "abc")
    store.move_item(lst.id, a.id, after_id=b.id, before_id=c.id)
    assert labels(store, lst.id) == ["b", "a", "c"]


def test_move_to_end(store):
    lst = store.create_list("todo")
    a, b, c = (store.create_item(lst.id, label) for label in "abc")
    store.move_item(lst.id, a.id)
    assert labels(store, lst.id) == ["b", "c", "a"]


def test_move_next_to_itself(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    with pytest.raises(NotFound):
        store.move_item(lst.id, a.id, after_id=a.id)


def test_neighbours_in_wrong_order(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    b = store.create_item(lst.id, "b")
    with pytest.raises(ValueError):
        store.create_item(lst.id, "x", after_id=b.id, before_id=a.id)
    assert labels(store, lst.id) == ["a", "b"]


def test_unknown_ids(store):
    with pytest.raises(NotFound):
        store.get_list("missing")
    lst = store.create_list("todo")
    with pytest.raises(NotFound):
        store.create_item(lst.id, "x", after_id="missing")
    with pytest.raises(NotFound):
        store.delete_item(lst.id, "missing")
    with pytest.raises(NotFound):
        store.move_item(lst.id, "missing")


def test_delete_item_and_list(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    store.create_item(lst.id, "b")
    store.delete_item(lst.id, a.id)
    assert labels(store, lst.id) == ["b"]
    store.delete_list(lst.id)
    with pytest.raises(NotFound):
        store.list_items(lst.id)
    assert store.list_lists() == []


def test_rename_list(store):
    lst = store.create_list("todo")
    renamed = store.rename_list(lst.id, "done")
    assert renamed.name == "done"
    assert renamed.version == 2


def test_many_inserts_at_front_stay_ordered(store):
    lst = store.create_list("todo")
    first = store.create_item(lst.id, "0")
    for i in range(1, 30):
        first = store.create_item(lst.id, str(i), before_id=first.id)
    assert labels(store, lst.id) == [str(i) for i in range(29, -1, -1)]


def test_insert_after_only_lands_next_to_neighbour(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    b = store.create_item(lst.id, "b")
    x = store.create_item(lst.id, "x", after_id=a.id)
    assert labels(store, lst.id) == ["a", "x", "b"]
    assert len({i.sort_key for i in store.list_items(lst.id)}) == 3
    store.create_item(lst.id, "y", after_id=x.id, before_id=b.id)
    assert labels(store, lst.id) == ["a", "x", "y", "b"]


def test_insert_before_only_lands_next_to_neighbour(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    b = store.create_item(lst.id, "b")
    store.create_item(lst.id, "x", before_id=b.id)
    assert labels(store, lst.id) == ["a", "x", "b"]


def test_bulk_insert_after_only(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    store.create_item(lst.id, "b")
    store.create_items(lst.id, ["x", "y"], after_id=a.id)
    assert labels(store, lst.id) == ["a", "x", "y", "b"]


def test_move_one_sided_into_middle(store):
    lst = store.create_list("todo")
    a, b, c, d = (store.create_item(lst.id, label) for label in "abcd")
    store.move_item(lst.id, d.id, after_id=a.id)
    assert labels(store, lst.id) == ["a", "d", "b", "c"]
    store.move_item(lst.id, a.id, before_id=c.id)
    assert labels(store, lst.id) == ["d", "b", "a", "c"]
    assert len({i.sort_key for i in store.list_items(lst.id)}) == 4


def test_stale_versions_are_rejected(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    store.create_item(lst.id, "b")
    with pytest.raises(VersionConflict):
        store.rename_list(lst.id, "renamed", expected_version=1)
    with pytest.raises(VersionConflict):
        store.delete_list(lst.id, expected_version=1)
    with pytest.raises(VersionConflict):
        store.move_item(lst.id, a.id, expected_version=2)
    assert store.get_list(lst.id).name == "todo"
    assert labels(store, lst.id) == ["a", "b"]


def test_current_versions_are_accepted(store):
    lst = store.create_list("todo")
    a = store.create_item(lst.id, "a")
    store.create_item(lst.id, "b")
    assert store.move_item(lst.id, a.id, expected_version=1).version == 2
    version = store.get_list(lst.id).version
    assert store.rename_list(lst.id, "done", expected_version=version).name == "done"
    store.delete_list(lst.id, expected_version=version + 1)
    assert store.list_lists() == []


def make_item(ident, key):
    now = now_utc()
    return Item(id=ident, list_id="l", label=ident, sort_key=key, created_at=now, updated_at=now)


class TestNeighborKeys:
    def test_no_neighbours_appends_after_last(self):
        items = {i.id: i for i in (make_item("x", "n"), make_item("y", "u"))}
        assert neighbor_keys(items, None, None) == ("u", "")

    def test_empty_list(self):
        assert neighbor_keys({}, None, None) == ("", "")

    def test_one_sided(self):
        items = {"x": make_item("x", "n")}
        assert neighbor_keys(items, "x", None) == ("n", "")
        assert neighbor_keys(items, None, "x") == ("", "n")

    def test_one_sided_takes_adjacent_item(self):
        items = {i.id: i for i in (make_item("x", "n"), make_item("y", "u"), make_item("z", "x"))}
        assert neighbor_keys(items, "x", None) == ("n", "u")
        assert neighbor_keys(items, "z", None) == ("x", "")
        assert neighbor_keys(items, None, "y") == ("n", "u")
        assert neighbor_keys(items, None, "x") == ("", "n")

    def test_imported_keys_without_room(self):
        items = {i.id: i for i in (make_item("x", "b"), make_item("y", "ba"))}
        low, high = neighbor_keys(items, "x", "y")
        with pytest.raises(NoMidpoint):
            midpoint(low, high)

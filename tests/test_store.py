from datetime import datetime, timezone

import pytest

from tasklist.errors import PersistenceError
from tasklist.models import TaskFilter
from tasklist.persistence import InMemoryPersistence
from tasklist.store import TaskStore

from .fakes import FailingPersistence


def texts(tasks):
    return [t["text"] for t in tasks]


class TestCreate:
    @pytest.mark.parametrize("text", ["", " ", "   ", "\t", "\n  \t "])
    def test_blank_text_is_ignored(self, store, persistence, text):
        assert store.create(text) is None
        assert store.query() == []
        assert persistence.saves == []

    def test_create_trims_and_defaults(self, store):
        before = datetime.now(timezone.utc)
        task = store.create("  Buy milk \n")
        assert task is not None
        assert task["text"] == "Buy milk"
        assert task["completed"] is False
        assert before <= task["created_at"] <= datetime.now(timezone.utc)
        assert store.query() == [task]

    def test_ids_are_unique_under_rapid_creation(self, store):
        created = [store.create(f"task {i}") for i in range(200)]
        ids = [t["id"] for t in created]
        assert len(set(ids)) == 200

    def test_ids_are_not_reused_after_delete(self, store):
        a = store.create("a")
        b = store.create("b")
        store.delete(b["id"])
        c = store.create("c")
        assert c["id"] not in {a["id"], b["id"]}

    def test_ids_continue_after_reload(self, persistence):
        first = TaskStore(persistence)
        old_ids = {first.create(t)["id"] for t in ("a", "b", "c")}
        second = TaskStore(persistence)
        new = second.create("d")
        assert new["id"] not in old_ids
        assert texts(second.query()) == ["a", "b", "c", "d"]

    def test_new_tasks_go_to_the_end(self, store):
        for t in ("one", "two", "three"):
            store.create(t)
        assert texts(store.query()) == ["one", "two", "three"]


class TestToggle:
    def test_toggle_twice_restores_state(self, store):
        task = store.create("Walk dog")
        assert store.toggle_complete(task["id"])["completed"] is True
        assert store.toggle_complete(task["id"])["completed"] is False
        assert store.get(task["id"])["completed"] is False

    def test_toggle_unknown_is_noop(self, store, persistence):
        store.create("x")
        saves = len(persistence.saves)
        snapshot = store.query()
        assert store.toggle_complete(999) is None
        assert store.query() == snapshot
        assert len(persistence.saves) == saves


class TestDelete:
    def test_delete_twice_is_idempotent(self, store):
        a = store.create("a")
        store.create("b")
        assert store.delete(a["id"]) is True
        after_first = store.query()
        assert store.delete(a["id"]) is False
        assert store.query() == after_first
        assert texts(after_first) == ["b"]

    def test_delete_keeps_order_of_the_rest(self, store):
        ids = [store.create(t)["id"] for t in ("a", "b", "c", "d")]
        store.delete(ids[1])
        assert texts(store.query()) == ["a", "c", "d"]

    def test_delete_unknown_still_saves(self, store, persistence):
        store.delete(42)
        assert len(persistence.saves) == 1
        assert persistence.saves[-1] == []


class TestEdit:
    def test_edit_trims_new_text(self, store):
        task = store.create("old")
        edited = store.edit(task["id"], "  new text ")
        assert edited["text"] == "new text"
        assert edited["id"] == task["id"]
        assert edited["created_at"] == task["created_at"]

    def test_edit_unknown_id_changes_nothing(self, store, persistence):
        store.create("keep")
        before = store.query()
        saves = len(persistence.saves)
        assert store.edit(12345, "new text") is None
        assert store.query() == before
        assert len(persistence.saves) == saves

    @pytest.mark.parametrize("text", ["", "   "])
    def test_edit_blank_text_changes_nothing(self, store, text):
        task = store.create("keep")
        assert store.edit(task["id"], text) is None
        assert store.get(task["id"])["text"] == "keep"

    def test_edit_with_same_text_still_saves(self, store, persistence):
        task = store.create("same")
        saves = len(persistence.saves)
        store.edit(task["id"], " same ")
        assert len(persistence.saves) == saves + 1


class TestClearCompleted:
    def test_clear_completed_is_idempotent(self, store):
        ids = [store.create(t)["id"] for t in ("a", "b", "c", "d")]
        store.toggle_complete(ids[0])
        store.toggle_complete(ids[2])
        assert store.clear_completed() == 2
        once = store.query()
        assert store.clear_completed() == 0
        assert store.query() == once
        assert texts(once) == ["b", "d"]

    def test_clear_without_completed_still_saves(self, store, persistence):
        store.create("a")
        saves = len(persistence.saves)
        store.clear_completed()
        assert len(persistence.saves) == saves + 1


class TestQueries:
    @pytest.fixture()
    def mixed(self, store):
        ids = [store.create(t)["id"] for t in ("a", "b", "c", "d", "e")]
        for i in (1, 2, 4):
            store.toggle_complete(ids[i])
        return store

    def test_filters_partition_all(self, mixed):
        all_ids = [t["id"] for t in mixed.query(TaskFilter.ALL)]
        active = [t["id"] for t in mixed.query(TaskFilter.ACTIVE)]
        completed = [t["id"] for t in mixed.query(TaskFilter.COMPLETED)]
        assert set(active).isdisjoint(completed)
        assert sorted(active + completed, key=all_ids.index) == all_ids
        assert texts(mixed.query("active")) == ["a", "d"]
        assert texts(mixed.query("completed")) == ["b", "c", "e"]

    def test_stats_add_up(self, mixed):
        stats = mixed.stats()
        assert stats == {"total": 5, "active": 2, "completed": 3}
        assert stats["active"] + stats["completed"] == stats["total"]

    def test_query_returns_copies(self, store):
        task = store.create("original")
        result = store.query()
        result[0]["text"] = "tampered"
        result.clear()
        assert store.get(task["id"])["text"] == "original"

    def test_unknown_filter_is_rejected(self, store):
        with pytest.raises(ValueError):
            store.query("done")


class TestWriteThrough:
    def test_persisted_state_matches_memory_after_each_mutation(self, persistence, store):
        def reloaded():
            return InMemoryPersistence(values=persistence.values).load()

        a = store.create("a")
        assert reloaded() == store.query()
        b = store.create("b")
        store.toggle_complete(a["id"])
        assert reloaded() == store.query()
        store.edit(b["id"], "bee")
        assert reloaded() == store.query()
        store.clear_completed()
        assert reloaded() == store.query()
        store.delete(b["id"])
        assert reloaded() == store.query() == []

    def test_save_failure_is_raised_and_memory_kept(self):
        persistence = FailingPersistence()
        store = TaskStore(persistence)
        with pytest.raises(PersistenceError):
            store.create("unsaved")
        assert texts(store.query()) == ["unsaved"]
        assert persistence.load() == []

        persistence.fail = False
        task = store.query()[0]
        store.toggle_complete(task["id"])
        assert persistence.load() == store.query()


class TestScenarios:
    def test_create_toggle_clear(self, store):
        task = store.create("Buy milk")
        assert [(t["text"], t["completed"]) for t in store.query()] == [("Buy milk", False)]
        store.toggle_complete(task["id"])
        assert store.stats() == {"total": 1, "active": 0, "completed": 1}
        store.clear_completed()
        assert store.query() == []

    def test_whitespace_only_create(self, store):
        store.create("  ")
        assert store.query() == []

    def test_edit_unknown_id(self, store):
        store.edit(7, "new text")
        assert store.query() == []

"""Tests for the in-memory data store."""

import pytest

from contracts import AiConfig, AiMode, AwaitingProject, ChatRole, ConversationMemory, DocType
from store import InMemoryStore, StoreError, get_store, SupabaseStore


class TestInMemoryStore:
    """Tests for InMemoryStore."""

    @pytest.fixture
    def store(self):
        return InMemoryStore()

    def test_ids_are_sequential_per_kind(self, store):
        alpha = store.add_project("Alpha")
        beta = store.create_project("Beta")
        task = store.create_task(alpha.id, "T")
        assert (alpha.id, beta.id, task.id) == ("project-1", "project-2", "task-1")

    def test_list_tasks_by_project(self, store):
        alpha, beta = store.add_project("Alpha"), store.add_project("Beta")
        store.add_task(alpha.id, "A1")
        store.add_task(beta.id, "B1")
        assert [t.title for t in store.list_tasks(beta.id)] == ["B1"]
        assert len(store.list_tasks()) == 2

    def test_create_task_in_missing_project(self, store):
        with pytest.raises(StoreError) as exc:
            store.create_task("project-99", "T")
        assert exc.value.operation == "create_task"

    def test_update_assignees_overwrites(self, store):
        alpha = store.add_project("Alpha")
        task = store.add_task(alpha.id, "T", assignees=["A", "B"])
        store.update_task_assignees(task.id, ["C"])
        assert store.tasks[task.id].assignees == ["C"]

    def test_update_assignees_missing_task(self, store):
        with pytest.raises(StoreError):
            store.update_task_assignees("task-404", ["C"])

    def test_create_document(self, store):
        alpha = store.add_project("Alpha")
        document = store.create_document(alpha.id, "Plan", "# Plan", DocType.TECHNICAL)
        assert document.id == "doc-1"
        assert store.documents[document.id].type == DocType.TECHNICAL

    def test_memory_slot_is_single_and_copied(self, store):
        memory = ConversationMemory(session_id="s1", context=AwaitingProject(title="T", last_options=["A"]))
        store.upsert_memory(memory)
        memory.context.last_options.append("B")
        assert store.read_memory("s1").context.last_options == ["A"]

        store.upsert_memory(
            ConversationMemory(session_id="s1", context=AwaitingProject(title="U", last_options=[]))
        )
        assert store.read_memory("s1").context.title == "U"

        store.delete_memory("s1")
        assert store.read_memory("s1") is None
        store.delete_memory("s1")

    def test_chat_history_order_and_clear(self, store):
        store.append_chat_history("s1", ChatRole.USER, "hola")
        store.append_chat_history("s1", ChatRole.ASSISTANT, "¡Hola!")
        store.append_chat_history("s2", ChatRole.USER, "otro")
        assert [m.content for m in store.read_chat_history("s1")] == ["hola", "¡Hola!"]

        store.clear_chat_history("s1")
        assert store.read_chat_history("s1") == []
        assert len(store.read_chat_history("s2")) == 1

    def test_ai_config_defaults_to_deterministic(self, store):
        assert store.read_ai_config(None).mode == AiMode.DETERMINISTIC
        assert store.read_ai_config("ana").mode == AiMode.DETERMINISTIC
        store.set_ai_config("ana", AiConfig(mode=AiMode.AI, api_key="sk"))
        assert store.read_ai_config("ana").is_ai_active()

    def test_fail_on(self):
        store = InMemoryStore(fail_on={"list_projects": "db down"})
        with pytest.raises(StoreError, match="db down"):
            store.list_projects()
        assert store.list_tasks() == []


class TestGetStore:
    """Tests for the store factory."""

    def test_memory_backend(self):
        assert isinstance(get_store("memory"), InMemoryStore)

    def test_supabase_backend_is_lazy(self):
        assert isinstance(get_store("Supabase"), SupabaseStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown store backend"):
            get_store("sqlite")

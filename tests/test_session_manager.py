"""Tests for the chat orchestrator: memory threading, history and AI bypass."""

import gc
import re
import threading

import pytest
from unittest.mock import MagicMock

from brain import Brain, BrainError
from contracts import (
    AiConfig,
    AiMode,
    AwaitingConfirmation,
    AwaitingProject,
    ChatRole,
    ConversationMemory,
    PendingAction,
)
from interpreter import responses
from orchestrator import ChatOrchestrator, brain_failed, core_failed
from store import InMemoryStore


SESSION = "web_ana_1"


@pytest.fixture
def store():
    store = InMemoryStore()
    store.add_project("Alpha")
    store.add_project("Beta")
    return store


@pytest.fixture
def brain():
    return MagicMock(spec=Brain)


@pytest.fixture
def orchestrator(store, brain):
    return ChatOrchestrator(store, brain=brain)


class TestDeterministicTurns:
    """Turns handled by the command interpreter."""

    def test_blank_message_rejected(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.send(SESSION, "ana", "   ")

    def test_project_listing_leaves_no_memory(self, orchestrator, store):
        reply = orchestrator.send(SESSION, "ana", "Muestra los proyectos")

        assert "- **Alpha**" in reply.content
        assert "- **Beta**" in reply.content
        assert reply.mode == AiMode.DETERMINISTIC
        assert not reply.refresh
        assert store.read_memory(SESSION) is None

    def test_disambiguation_persists_live_list(self, orchestrator, store):
        reply = orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')

        memory = store.read_memory(SESSION)
        assert memory.current_action == PendingAction.AWAITING_PROJECT
        assert memory.context.last_options == ["Alpha", "Beta"]
        assert "1. **Alpha**" in reply.content

    def test_unresolvable_reply_is_idempotent(self, orchestrator, store):
        orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')
        store.add_project("Gamma")
        orchestrator.send(SESSION, "ana", "Zeta")
        orchestrator.send(SESSION, "ana", "tampoco")

        memory = store.read_memory(SESSION)
        assert memory.current_action == PendingAction.AWAITING_PROJECT
        assert memory.context.last_options == ["Alpha", "Beta"]

    def test_unchanged_memory_is_not_rewritten(self, store, brain):
        orchestrator = ChatOrchestrator(store, brain=brain)
        orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')
        store.fail_on["upsert_memory"] = "should not be called"

        reply = orchestrator.send(SESSION, "ana", "Zeta")
        assert "No pude encontrar" in reply.content

    def test_full_task_flow(self, orchestrator, store):
        orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')
        reply = orchestrator.send(SESSION, "ana", "2")
        assert reply.refresh
        assert store.read_memory(SESSION).current_action == PendingAction.AWAITING_ASSIGNMENT

        reply = orchestrator.send(SESSION, "ana", "Ana")
        (task,) = store.list_tasks()
        assert task.project_id == store.list_projects()[1].id
        assert task.assignees == ["Ana"]
        assert reply.refresh
        assert store.read_memory(SESSION) is None

    def test_confirmation_always_clears_memory(self, orchestrator, store):
        for reply_text in ("si", "no"):
            store.upsert_memory(
                ConversationMemory(session_id=SESSION, context=AwaitingConfirmation(command="generic"))
            )
            orchestrator.send(SESSION, "ana", reply_text)
            assert store.read_memory(SESSION) is None

    def test_unrecognized_command_confirmed_next_turn(self, orchestrator, store):
        reply = orchestrator.send(SESSION, "ana", "revisa el servidor")
        assert reply.content == responses.CONFIRM_PROCEED
        memory = store.read_memory(SESSION)
        assert memory.current_action == PendingAction.AWAITING_CONFIRMATION
        assert memory.context.command == "generic"

        reply = orchestrator.send(SESSION, "ana", "si, procede")
        assert reply.content == responses.GENERIC_CONFIRMATION
        assert store.read_memory(SESSION) is None

    def test_unrecognized_command_cancelled(self, orchestrator, store):
        orchestrator.send(SESSION, "ana", "revisa el servidor")
        reply = orchestrator.send(SESSION, "ana", "mejor no")
        assert reply.content == responses.CANCELLED
        assert store.read_memory(SESSION) is None

    def test_history_order(self, orchestrator, store):
        orchestrator.send(SESSION, "ana", "Hola")
        orchestrator.send(SESSION, "ana", "Ver backlog")

        history = orchestrator.history(SESSION)
        assert [m.role for m in history] == [
            ChatRole.USER, ChatRole.ASSISTANT, ChatRole.USER, ChatRole.ASSISTANT,
        ]
        assert history[0].content == "Hola"
        assert history[2].content == "Ver backlog"

    def test_mutation_failure_keeps_state(self, store, brain):
        store.fail_on["create_task"] = "permission denied"
        orchestrator = ChatOrchestrator(store, brain=brain)
        orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')
        reply = orchestrator.send(SESSION, "ana", "1")

        assert "permission denied" in reply.content
        assert not reply.refresh
        assert store.read_memory(SESSION).current_action == PendingAction.AWAITING_PROJECT

    def test_store_failure_becomes_reply(self, store, brain):
        store.fail_on["list_projects"] = "connection reset"
        orchestrator = ChatOrchestrator(store, brain=brain)
        reply = orchestrator.send(SESSION, "ana", "Muestra los proyectos")
        assert reply.content == core_failed("connection reset")


class TestAiTurns:
    """Turns bypassing the interpreter."""

    @pytest.fixture
    def ai_store(self, store):
        store.set_ai_config("ana", AiConfig(mode=AiMode.AI, api_key="sk-ana"))
        return store

    def test_brain_reply_used_verbatim(self, ai_store, brain):
        brain.invoke.return_value = "Tarea creada con éxito"
        orchestrator = ChatOrchestrator(ai_store, brain=brain)
        reply = orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')

        assert reply.content == "Tarea creada con éxito"
        assert reply.mode == AiMode.AI
        assert reply.refresh
        assert ai_store.list_tasks() == []
        assert ai_store.read_memory(SESSION) is None
        args, kwargs = brain.invoke.call_args
        assert args == ('Crea la tarea "Fix login"', SESSION, "ana")
        assert kwargs["config"].api_key == "sk-ana"
        assert [m.role for m in ai_store.read_chat_history(SESSION)] == [ChatRole.USER, ChatRole.ASSISTANT]

    def test_reply_without_keywords_does_not_refresh(self, ai_store, brain):
        brain.invoke.return_value = "Tienes 3 proyectos."
        reply = ChatOrchestrator(ai_store, brain=brain).send(SESSION, "ana", "¿cuántos proyectos?")
        assert not reply.refresh

    def test_brain_failure_leaves_memory(self, ai_store, brain):
        memory = ConversationMemory(session_id=SESSION, context=AwaitingProject(title="T", last_options=["Alpha"]))
        ai_store.upsert_memory(memory)
        brain.invoke.side_effect = BrainError("invalid key")

        reply = ChatOrchestrator(ai_store, brain=brain).send(SESSION, "ana", "hola")
        assert reply.content == brain_failed("invalid key")
        assert reply.mode == AiMode.AI
        assert not reply.refresh
        assert ai_store.read_memory(SESSION) == memory
        assert [m.role for m in ai_store.read_chat_history(SESSION)] == [ChatRole.USER]

    def test_ai_mode_without_key_stays_deterministic(self, store, brain):
        store.set_ai_config("ana", AiConfig(mode=AiMode.AI))
        reply = ChatOrchestrator(store, brain=brain).send(SESSION, "ana", "Hola")
        assert reply.mode == AiMode.DETERMINISTIC
        brain.invoke.assert_not_called()


class TestSessions:
    """Session ids, clearing and serialization."""

    def test_new_session_id(self, orchestrator):
        assert re.fullmatch(r"web_ana_\d{13}", orchestrator.new_session_id("ana"))

    def test_clear_history_drops_memory(self, orchestrator, store):
        orchestrator.send(SESSION, "ana", 'Crea la tarea "Fix login"')
        orchestrator.clear_history(SESSION)

        assert orchestrator.history(SESSION) == []
        assert store.read_memory(SESSION) is None

    def test_same_session_turns_do_not_interleave(self, store, brain):
        orchestrator = ChatOrchestrator(store, brain=brain)
        active = []
        overlaps = []
        original = orchestrator.interpreter.handle

        def slow_handle(*args, **kwargs):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            threading.Event().wait(0.01)
            active.pop()
            return original(*args, **kwargs)

        orchestrator.interpreter.handle = slow_handle
        threads = [
            threading.Thread(target=orchestrator.send, args=(SESSION, "ana", "Hola"))
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlaps == []
        assert len(orchestrator.history(SESSION)) == 10

    def test_session_locks_released_after_turns(self, orchestrator):
        for i in range(20):
            orchestrator.send(f"web_ana_{i}", "ana", "Hola")
        gc.collect()
        assert len(orchestrator._locks) == 0

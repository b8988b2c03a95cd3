"""Session manager - runs one chat turn per message, one session at a time.

For every message the manager:
1. Logs the user message to the session's chat history
2. Reads the session's pending memory and the user's AI configuration
3. Hands the message to the brain (AI mode) or the command interpreter
4. Persists the next memory before the reply is surfaced
5. Logs the assistant reply and returns it
"""

import threading
import time
import weakref
from typing import List, Optional

from loguru import logger

from brain import Brain, BrainError, get_brain, should_refresh
from contracts import AiConfig, AiMode, ChatMessage, ChatReply, ChatRole, ConversationMemory, TurnResult
from interpreter import CommandInterpreter
from store import DataStore, StoreError
from config import settings


def brain_failed(error: str) -> str:
    return f"⚠️ El Core AI tuvo un problema: {error}. Revisa tu API Key en Configuración."


def core_failed(error: str) -> str:
    return f"❌ Error en el Core IA: {error}"


class ChatOrchestrator:
    """Serializes turns per session and threads memory between them."""

    def __init__(
        self,
        store: DataStore,
        interpreter: Optional[CommandInterpreter] = None,
        brain: Optional[Brain] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Data store shared by the interpreter and the history log
            interpreter: Deterministic interpreter (built on ``store`` when omitted)
            brain: AI brain for sessions in AI mode (from settings when omitted)
        """
        self.store = store
        self.interpreter = interpreter or CommandInterpreter(store)
        self.brain = brain or get_brain(store=store)

        # Entries vanish once no turn holds the session lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
            return lock

    def new_session_id(self, user_id: str) -> str:
        """Fresh conversation id, e.g. ``web_<user>_<epoch-ms>``."""
        return f"{settings.session_prefix}_{user_id}_{int(time.time() * 1000)}"

    def send(self, session_id: str, user_id: Optional[str], text: str) -> ChatReply:
        """Handle one user message.

        Args:
            session_id: Conversation id
            user_id: Owner of the conversation (selects the AI configuration)
            text: Raw message

        Returns:
            ChatReply with the response text, the mode that produced it and
            whether cached dashboard data should be reloaded

        Raises:
            ValueError: If the message is blank
        """
        if not text or not text.strip():
            raise ValueError("Message must not be empty")

        with self._lock_for(session_id):
            try:
                self.store.append_chat_history(session_id, ChatRole.USER, text, user_id=user_id)
                memory = self.store.read_memory(session_id)
                config = self.store.read_ai_config(user_id)

                if config.is_ai_active():
                    return self._ai_turn(session_id, user_id, text, config)
                return self._deterministic_turn(session_id, user_id, text, memory)
            except StoreError as e:
                logger.error("Store failure in session {} ({}): {}", session_id, e.operation, e)
                return ChatReply(session_id=session_id, content=core_failed(e.message))

    def _ai_turn(self, session_id: str, user_id: Optional[str], text: str, config: AiConfig) -> ChatReply:
        logger.debug("Session {} routed to the {} brain", session_id, self.brain.name)
        try:
            content = self.brain.invoke(text, session_id, user_id, config=config)
        except BrainError as e:
            logger.warning("Brain failed for session {}: {}", session_id, e.message)
            return ChatReply(session_id=session_id, content=brain_failed(e.message), mode=AiMode.AI)

        self.store.append_chat_history(session_id, ChatRole.ASSISTANT, content, user_id=user_id)
        return ChatReply(
            session_id=session_id,
            content=content,
            mode=AiMode.AI,
            refresh=should_refresh(content),
        )

    def _deterministic_turn(
        self,
        session_id: str,
        user_id: Optional[str],
        text: str,
        memory: Optional[ConversationMemory],
    ) -> ChatReply:
        projects = self.store.list_projects()
        tasks = self.store.list_tasks()
        result = self.interpreter.handle(session_id, text, memory, projects, tasks)

        self._persist_memory(session_id, memory, result, user_id)
        self.store.append_chat_history(session_id, ChatRole.ASSISTANT, result.response, user_id=user_id)
        return ChatReply(
            session_id=session_id,
            content=result.response,
            refresh=result.applied_changes(),
            effects=result.effects,
        )

    def _persist_memory(
        self,
        session_id: str,
        current: Optional[ConversationMemory],
        result: TurnResult,
        user_id: Optional[str],
    ) -> None:
        nxt = result.next_memory
        if nxt is None:
            if current is not None:
                self.store.delete_memory(session_id)
                logger.debug("Session {} back to idle", session_id)
        elif nxt is not current and nxt != current:
            self.store.upsert_memory(nxt, user_id=user_id)
            logger.debug("Session {} now {}", session_id, nxt.current_action.value)

    def history(self, session_id: str) -> List[ChatMessage]:
        """Chat history of a session, oldest first."""
        return self.store.read_chat_history(session_id)

    def clear_history(self, session_id: str) -> None:
        """Forget a session: its chat history and any pending flow."""
        with self._lock_for(session_id):
            self.store.clear_chat_history(session_id)
            self.store.delete_memory(session_id)
        logger.info("Cleared session {}", session_id)

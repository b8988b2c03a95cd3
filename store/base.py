"""Base data store interface.

The interpreter and orchestrator only talk to storage through these calls.
Every failure is raised as ``StoreError`` so callers can turn it into a chat
reply instead of a crash.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from contracts import (
    AiConfig,
    ChatMessage,
    ChatRole,
    ConversationMemory,
    DocType,
    Document,
    Project,
    Task,
    TaskStatus,
    Priority,
)


class StoreError(Exception):
    """A read or write was rejected by the store."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        return self.message


class DataStore(ABC):
    """Abstract base class for assistant data stores."""

    # Conversation memory

    @abstractmethod
    def read_memory(self, session_id: str) -> Optional[ConversationMemory]:
        """Return the session's pending-flow record, or None."""
        pass

    @abstractmethod
    def upsert_memory(self, memory: ConversationMemory, user_id: Optional[str] = None) -> None:
        """Create or overwrite the session's single memory record."""
        pass

    @abstractmethod
    def delete_memory(self, session_id: str) -> None:
        pass

    # Dashboard data

    @abstractmethod
    def list_projects(self) -> List[Project]:
        pass

    @abstractmethod
    def list_tasks(self, project_id: Optional[str] = None) -> List[Task]:
        pass

    @abstractmethod
    def create_project(self, name: str, status: str = "active") -> Project:
        pass

    @abstractmethod
    def create_task(
        self,
        project_id: str,
        title: str,
        status: str = TaskStatus.TODO.value,
        priority: str = Priority.MEDIUM.value,
        due_date: Optional[str] = None,
    ) -> Task:
        """Insert an issue and return it with its new id."""
        pass

    @abstractmethod
    def update_task_assignees(self, task_id: str, assignees: List[str]) -> None:
        """Overwrite the issue's assignee list."""
        pass

    @abstractmethod
    def create_document(
        self,
        project_id: str,
        title: str,
        content: str,
        doc_type: DocType = DocType.DRAFT,
    ) -> Document:
        pass

    # Chat history and configuration

    @abstractmethod
    def append_chat_history(
        self,
        session_id: str,
        role: ChatRole,
        content: str,
        user_id: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    def read_chat_history(self, session_id: str) -> List[ChatMessage]:
        """Return the session's messages, oldest first."""
        pass

    @abstractmethod
    def clear_chat_history(self, session_id: str) -> None:
        pass

    @abstractmethod
    def read_ai_config(self, user_id: Optional[str]) -> AiConfig:
        """Return the user's assistant configuration (deterministic by default)."""
        pass

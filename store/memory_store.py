"""Process-local data store.

Backs the CLI demo and the test suite. Rows live in plain dictionaries and
ids come from per-table counters so they are predictable.
"""

from itertools import count
from typing import Dict, List, Optional

from loguru import logger

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
from .base import DataStore, StoreError


class InMemoryStore(DataStore):
    """Dictionary-backed store.

    ``fail_on`` maps an operation name (e.g. ``"create_task"``) to the error
    message that operation should raise, to exercise error branches.
    """

    def __init__(self, fail_on: Optional[Dict[str, str]] = None):
        self.projects: Dict[str, Project] = {}
        self.tasks: Dict[str, Task] = {}
        self.documents: Dict[str, Document] = {}
        self.memories: Dict[str, ConversationMemory] = {}
        self.history: Dict[str, List[ChatMessage]] = {}
        self.configs: Dict[str, AiConfig] = {}
        self.fail_on: Dict[str, str] = dict(fail_on or {})
        self._ids = {name: count(1) for name in ("project", "task", "doc")}

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(self.fail_on[operation], operation=operation)

    def _next_id(self, kind: str) -> str:
        return f"{kind}-{next(self._ids[kind])}"

    # Seeding helpers

    def add_project(self, name: str, status: str = "active") -> Project:
        project = Project(id=self._next_id("project"), name=name, status=status)
        self.projects[project.id] = project
        return project

    def add_task(
        self,
        project_id: str,
        title: str,
        status: str = TaskStatus.TODO.value,
        assignees: Optional[List[str]] = None,
    ) -> Task:
        task = Task(
            id=self._next_id("task"),
            project_id=project_id,
            title=title,
            status=status,
            assignees=list(assignees or []),
        )
        self.tasks[task.id] = task
        return task

    def set_ai_config(self, user_id: str, config: AiConfig) -> None:
        self.configs[user_id] = config

    # Conversation memory

    def read_memory(self, session_id: str) -> Optional[ConversationMemory]:
        self._check("read_memory")
        return self.memories.get(session_id)

    def upsert_memory(self, memory: ConversationMemory, user_id: Optional[str] = None) -> None:
        self._check("upsert_memory")
        self.memories[memory.session_id] = memory.model_copy(deep=True)

    def delete_memory(self, session_id: str) -> None:
        self._check("delete_memory")
        self.memories.pop(session_id, None)

    # Dashboard data

    def list_projects(self) -> List[Project]:
        self._check("list_projects")
        return list(self.projects.values())

    def list_tasks(self, project_id: Optional[str] = None) -> List[Task]:
        self._check("list_tasks")
        tasks = list(self.tasks.values())
        if project_id is not None:
            tasks = [t for t in tasks if t.project_id == project_id]
        return tasks

    def create_project(self, name: str, status: str = "active") -> Project:
        self._check("create_project")
        project = self.add_project(name, status)
        logger.debug("Created project {} ({})", project.name, project.id)
        return project

    def create_task(
        self,
        project_id: str,
        title: str,
        status: str = TaskStatus.TODO.value,
        priority: str = Priority.MEDIUM.value,
        due_date: Optional[str] = None,
    ) -> Task:
        self._check("create_task")
        if project_id not in self.projects:
            raise StoreError(f"Project {project_id} does not exist", operation="create_task")
        task = Task(
            id=self._next_id("task"),
            project_id=project_id,
            title=title,
            status=status,
            priority=priority,
            due_date=due_date,
        )
        self.tasks[task.id] = task
        return task

    def update_task_assignees(self, task_id: str, assignees: List[str]) -> None:
        self._check("update_task_assignees")
        task = self.tasks.get(task_id)
        if task is None:
            raise StoreError(f"Task {task_id} does not exist", operation="update_task_assignees")
        self.tasks[task_id] = task.model_copy(update={"assignees": list(assignees)})

    def create_document(
        self,
        project_id: str,
        title: str,
        content: str,
        doc_type: DocType = DocType.DRAFT,
    ) -> Document:
        self._check("create_document")
        if project_id not in self.projects:
            raise StoreError(f"Project {project_id} does not exist", operation="create_document")
        document = Document(
            id=self._next_id("doc"),
            project_id=project_id,
            title=title,
            content=content,
            type=doc_type,
        )
        self.documents[document.id] = document
        return document

    # Chat history and configuration

    def append_chat_history(
        self,
        session_id: str,
        role: ChatRole,
        content: str,
        user_id: Optional[str] = None,
    ) -> None:
        self._check("append_chat_history")
        self.history.setdefault(session_id, []).append(
            ChatMessage(session_id=session_id, role=role, content=content)
        )

    def read_chat_history(self, session_id: str) -> List[ChatMessage]:
        self._check("read_chat_history")
        return list(self.history.get(session_id, []))

    def clear_chat_history(self, session_id: str) -> None:
        self._check("clear_chat_history")
        self.history.pop(session_id, None)

    def read_ai_config(self, user_id: Optional[str]) -> AiConfig:
        self._check("read_ai_config")
        if user_id is None:
            return AiConfig()
        return self.configs.get(user_id, AiConfig())

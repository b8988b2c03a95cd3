"""Supabase-backed data store.

Table layout (PostgREST):
    projects         id, name, status, progress
    issues           id, project_id, title, status, priority, due_date, assigned_to text[]
    project_docs     id, project_id, title, content, type
    ai_memories      user_id, session_id (unique), current_action, context_data jsonb, updated_at
    ai_chat_history  user_id, session_id, role, content, created_at
    ai_config        user_id, mode, api_key, model_name
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from pydantic import ValidationError

from contracts import (
    AiConfig,
    AiMode,
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
from config import settings
from .base import DataStore, StoreError


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_task(row: Dict[str, Any]) -> Task:
    return Task(
        id=str(row["id"]),
        project_id=str(row.get("project_id") or ""),
        title=row.get("title") or "",
        status=row.get("status") or TaskStatus.TODO.value,
        assignees=list(row.get("assigned_to") or []),
        priority=row.get("priority") or Priority.MEDIUM.value,
        due_date=row.get("due_date"),
    )


def _to_project(row: Dict[str, Any]) -> Project:
    return Project(id=str(row["id"]), name=row.get("name") or "", status=row.get("status") or "active")


class SupabaseStore(DataStore):
    """Store that reads and writes through a Supabase client."""

    def __init__(self, client=None, url: Optional[str] = None, key: Optional[str] = None):
        """Initialize the store.

        Args:
            client: Pre-built ``supabase.Client``. Created lazily when omitted.
            url: Supabase URL. Uses NOVA_SUPABASE_URL if not provided.
            key: Supabase key. Uses NOVA_SUPABASE_KEY if not provided.
        """
        self.url = url or settings.supabase_url
        self.key = key or settings.supabase_key
        self._client = client

    def _get_client(self):
        if self._client is None:
            if not (self.url and self.key):
                raise StoreError("Supabase URL and key are not configured", operation="connect")
            from supabase import create_client
            self._client = create_client(self.url, self.key)
        return self._client

    def _table(self, name: str):
        return self._get_client().table(name)

    def _execute(self, operation: str, query) -> List[Dict[str, Any]]:
        """Run a PostgREST query and return its rows."""
        try:
            response = query.execute()
        except APIError as e:
            logger.warning("Supabase {} failed: {}", operation, e.message)
            raise StoreError(e.message or str(e), operation=operation) from e
        except httpx.HTTPError as e:
            logger.warning("Supabase {} transport error: {}", operation, e)
            raise StoreError(str(e), operation=operation) from e
        return list(response.data or [])

    def _single(self, operation: str, query) -> Dict[str, Any]:
        rows = self._execute(operation, query)
        if not rows:
            raise StoreError(f"{operation} returned no row", operation=operation)
        return rows[0]

    # Conversation memory

    def read_memory(self, session_id: str) -> Optional[ConversationMemory]:
        rows = self._execute(
            "read_memory",
            self._table("ai_memories")
            .select("*")
            .eq("session_id", session_id)
            .order("updated_at", desc=True)
            .limit(1),
        )
        if not rows:
            return None
        row = rows[0]
        try:
            return ConversationMemory.from_record(
                session_id, row.get("current_action"), row.get("context_data")
            )
        except ValidationError as e:
            logger.warning("Discarding unreadable memory for session {}: {}", session_id, e)
            return None

    def upsert_memory(self, memory: ConversationMemory, user_id: Optional[str] = None) -> None:
        record = memory.to_record()
        record["updated_at"] = _now_iso()
        if user_id is not None:
            record["user_id"] = user_id
        self._execute(
            "upsert_memory",
            self._table("ai_memories").upsert(record, on_conflict="session_id"),
        )

    def delete_memory(self, session_id: str) -> None:
        self._execute(
            "delete_memory",
            self._table("ai_memories").delete().eq("session_id", session_id),
        )

    # Dashboard data

    def list_projects(self) -> List[Project]:
        rows = self._execute(
            "list_projects",
            self._table("projects").select("id, name, status").order("name"),
        )
        return [_to_project(row) for row in rows]

    def list_tasks(self, project_id: Optional[str] = None) -> List[Task]:
        query = self._table("issues").select("*")
        if project_id is not None:
            query = query.eq("project_id", project_id)
        rows = self._execute("list_tasks", query.order("created_at"))
        return [_to_task(row) for row in rows]

    def create_project(self, name: str, status: str = "active") -> Project:
        row = self._single(
            "create_project",
            self._table("projects").insert({"name": name, "status": status, "progress": 0}),
        )
        return _to_project(row)

    def create_task(
        self,
        project_id: str,
        title: str,
        status: str = TaskStatus.TODO.value,
        priority: str = Priority.MEDIUM.value,
        due_date: Optional[str] = None,
    ) -> Task:
        row = self._single(
            "create_task",
            self._table("issues").insert({
                "project_id": project_id,
                "title": title,
                "status": status,
                "priority": priority,
                "due_date": due_date,
            }),
        )
        return _to_task(row)

    def update_task_assignees(self, task_id: str, assignees: List[str]) -> None:
        self._execute(
            "update_task_assignees",
            self._table("issues").update({"assigned_to": list(assignees)}).eq("id", task_id),
        )

    def create_document(
        self,
        project_id: str,
        title: str,
        content: str,
        doc_type: DocType = DocType.DRAFT,
    ) -> Document:
        row = self._single(
            "create_document",
            self._table("project_docs").insert({
                "project_id": project_id,
                "title": title,
                "content": content,
                "type": DocType(doc_type).value,
            }),
        )
        return Document(
            id=str(row["id"]),
            project_id=str(row.get("project_id") or project_id),
            title=row.get("title") or title,
            content=row.get("content") or content,
            type=DocType(row.get("type") or doc_type),
        )

    # Chat history and configuration

    def append_chat_history(
        self,
        session_id: str,
        role: ChatRole,
        content: str,
        user_id: Optional[str] = None,
    ) -> None:
        record = {"session_id": session_id, "role": ChatRole(role).value, "content": content}
        if user_id is not None:
            record["user_id"] = user_id
        self._execute("append_chat_history", self._table("ai_chat_history").insert(record))

    def read_chat_history(self, session_id: str) -> List[ChatMessage]:
        rows = self._execute(
            "read_chat_history",
            self._table("ai_chat_history")
            .select("*")
            .eq("session_id", session_id)
            .order("created_at"),
        )
        messages = []
        for row in rows:
            message = {
                "session_id": session_id,
                "role": row.get("role") or ChatRole.ASSISTANT.value,
                "content": row.get("content") or "",
            }
            if row.get("created_at"):
                message["created_at"] = row["created_at"]
            messages.append(ChatMessage(**message))
        return messages

    def clear_chat_history(self, session_id: str) -> None:
        self._execute(
            "clear_chat_history",
            self._table("ai_chat_history").delete().eq("session_id", session_id),
        )

    def read_ai_config(self, user_id: Optional[str]) -> AiConfig:
        if user_id is None:
            return AiConfig()
        rows = self._execute(
            "read_ai_config",
            self._table("ai_config").select("*").eq("user_id", user_id).limit(1),
        )
        if not rows:
            return AiConfig()
        row = rows[0]
        mode = row.get("mode") or AiMode.DETERMINISTIC.value
        if mode not in {m.value for m in AiMode}:
            mode = AiMode.DETERMINISTIC.value
        return AiConfig(mode=mode, api_key=row.get("api_key"), model_name=row.get("model_name"))

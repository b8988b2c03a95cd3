"""Domain contracts for the dashboard data the assistant reads and mutates."""

from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum
from datetime import datetime


class TaskStatus(str, Enum):
    """Workflow status of an issue."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class Priority(str, Enum):
    """Priority of an issue."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class DocType(str, Enum):
    """Kind of project document."""
    DRAFT = "draft"
    SCOPE = "scope"
    TECHNICAL = "technical"


class Project(BaseModel):
    """A dashboard project."""
    id: str = Field(..., description="Store identifier")
    name: str = Field(..., description="Display name, used for fuzzy matching")
    status: str = Field(default="active", description="Free-text project status")


class Task(BaseModel):
    """An issue/task belonging to a project."""
    id: str
    project_id: str
    title: str
    status: str = Field(default=TaskStatus.TODO.value)
    assignees: List[str] = Field(default_factory=list, description="Ordered free-text assignee names")
    priority: str = Field(default=Priority.MEDIUM.value)
    due_date: Optional[str] = Field(None, description="ISO date (YYYY-MM-DD)")

    def is_pending(self) -> bool:
        return self.status != TaskStatus.DONE.value


class Document(BaseModel):
    """A Markdown document attached to a project."""
    id: str
    project_id: str
    title: str
    content: str
    type: DocType = DocType.DRAFT


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One entry of a session's chat history."""
    session_id: str
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=datetime.now)


class AiMode(str, Enum):
    """How a user's messages are answered."""
    DETERMINISTIC = "deterministic"
    AI = "ai"


class AiConfig(BaseModel):
    """Per-user assistant configuration."""
    mode: AiMode = AiMode.DETERMINISTIC
    api_key: Optional[str] = Field(None, description="Credential required for AI mode")
    model_name: Optional[str] = None

    def is_ai_active(self) -> bool:
        """AI mode only applies when a credential is configured."""
        return self.mode == AiMode.AI and bool(self.api_key)

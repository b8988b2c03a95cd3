"""Turn contracts: what one interpreted message produces."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from enum import Enum

from .domain_contracts import AiMode
from .memory_contracts import ConversationMemory


class EffectKind(str, Enum):
    """Kind of mutation issued against the store."""
    CREATE_TASK = "create_task"
    ASSIGN_TASK = "assign_task"
    CREATE_DOCUMENT = "create_document"
    CREATE_PROJECT = "create_project"


class Effect(BaseModel):
    """A mutation call issued while handling a message."""
    kind: EffectKind
    target_id: Optional[str] = Field(None, description="Id of the created or updated row")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Arguments sent to the store")
    ok: bool = True
    error: Optional[str] = Field(None, description="Store error message when ok is False")


class TurnResult(BaseModel):
    """Response text, issued mutations and the memory for the next turn.

    ``next_memory`` is None when the session should have no pending flow.
    Returning the incoming memory unchanged leaves the stored record as is.
    """
    response: str
    effects: List[Effect] = Field(default_factory=list)
    next_memory: Optional[ConversationMemory] = None

    def applied_changes(self) -> bool:
        """Check if any mutation succeeded."""
        return any(e.ok for e in self.effects)


class ChatReply(BaseModel):
    """What the chat surface renders for one user message."""
    session_id: str
    content: str
    mode: AiMode = AiMode.DETERMINISTIC
    refresh: bool = Field(default=False, description="Whether cached dashboard data should be reloaded")
    effects: List[Effect] = Field(default_factory=list)

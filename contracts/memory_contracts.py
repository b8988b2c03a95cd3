"""Conversation memory contracts.

A session holds at most one memory record. Its pending action decides how the
next message is interpreted, and each action carries exactly the slots its
handler needs. In storage the slots live in an open ``context_data`` mapping,
so the contracts convert both ways.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from enum import Enum

from .domain_contracts import DocType, Priority


class PendingAction(str, Enum):
    """Pending-flow tag stored as ``current_action``."""
    NONE = "none"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    AWAITING_ASSIGNMENT = "awaiting_assignment"
    AWAITING_PROJECT = "awaiting_project"
    AWAITING_PROJECT_DOC = "awaiting_project_doc"


class AwaitingConfirmation(BaseModel):
    """Waiting for a yes/no answer to a pending command."""
    action: Literal["awaiting_confirmation"] = "awaiting_confirmation"
    command: str = Field(default="generic", description="Command to run if the user confirms")


class AwaitingAssignment(BaseModel):
    """A task was created and we asked who should own it."""
    action: Literal["awaiting_assignment"] = "awaiting_assignment"
    title: str
    task_id: str


class AwaitingProject(BaseModel):
    """A task title was captured but its project is still unknown."""
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["awaiting_project"] = "awaiting_project"
    title: str = "Tarea IA"
    last_options: List[str] = Field(default_factory=list, description="Project names offered, in order")
    priority: str = Priority.MEDIUM.value
    due_date: Optional[str] = None


class AwaitingProjectDoc(BaseModel):
    """A document title was captured but its project is still unknown."""
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["awaiting_project_doc"] = "awaiting_project_doc"
    title: str = "Documento IA"
    doc_type: DocType = Field(default=DocType.DRAFT, alias="docType")
    last_options: List[str] = Field(default_factory=list, description="Project names offered, in order")


PendingContext = Annotated[
    Union[AwaitingConfirmation, AwaitingAssignment, AwaitingProject, AwaitingProjectDoc],
    Field(discriminator="action"),
]

_context_adapter = TypeAdapter(PendingContext)


class ConversationMemory(BaseModel):
    """The single pending-flow slot of a session."""
    session_id: str = Field(..., description="Client-chosen conversation id")
    context: PendingContext

    @property
    def current_action(self) -> PendingAction:
        return PendingAction(self.context.action)

    def context_data(self) -> Dict[str, Any]:
        """Slots in their storage shape (e.g. ``docType``, ``last_options``)."""
        return self.context.model_dump(mode="json", by_alias=True, exclude={"action"}, exclude_none=True)

    def to_record(self) -> Dict[str, Any]:
        """Row shape used by the stores."""
        return {
            "session_id": self.session_id,
            "current_action": self.current_action.value,
            "context_data": self.context_data(),
        }

    @classmethod
    def from_record(
        cls,
        session_id: str,
        current_action: Optional[str],
        context_data: Optional[Dict[str, Any]],
    ) -> Optional["ConversationMemory"]:
        """Build a memory from a stored row.

        Returns None when the row carries no pending action. Raises
        ``pydantic.ValidationError`` when the slots do not fit the action.
        """
        try:
            action = PendingAction(current_action or PendingAction.NONE.value)
        except ValueError:
            return None
        if action == PendingAction.NONE:
            return None

        data = dict(context_data or {})
        data["action"] = action.value
        return cls(session_id=session_id, context=_context_adapter.validate_python(data))

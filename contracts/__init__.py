"""Pydantic contracts for the Nova PM assistant.

Every value crossing the interpreter, store and brain boundaries is typed
through these contracts.
"""

from .domain_contracts import (
    TaskStatus,
    Priority,
    DocType,
    Project,
    Task,
    Document,
    ChatRole,
    ChatMessage,
    AiMode,
    AiConfig,
)

from .memory_contracts import (
    PendingAction,
    AwaitingConfirmation,
    AwaitingAssignment,
    AwaitingProject,
    AwaitingProjectDoc,
    PendingContext,
    ConversationMemory,
)

from .turn_contracts import (
    EffectKind,
    Effect,
    TurnResult,
    ChatReply,
)

__all__ = [
    # Domain
    "TaskStatus",
    "Priority",
    "DocType",
    "Project",
    "Task",
    "Document",
    "ChatRole",
    "ChatMessage",
    "AiMode",
    "AiConfig",
    # Memory
    "PendingAction",
    "AwaitingConfirmation",
    "AwaitingAssignment",
    "AwaitingProject",
    "AwaitingProjectDoc",
    "PendingContext",
    "ConversationMemory",
    # Turn
    "EffectKind",
    "Effect",
    "TurnResult",
    "ChatReply",
]

"""Orchestrator module for chat session execution."""

from .session_manager import ChatOrchestrator, brain_failed, core_failed

__all__ = [
    "ChatOrchestrator",
    "brain_failed",
    "core_failed",
]

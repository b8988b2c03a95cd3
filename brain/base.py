"""Brain interface for the AI path that bypasses the command interpreter."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from contracts import AiConfig
from config import settings
from interpreter.patterns import mentions_any


class BrainError(Exception):
    """Raised when the AI path fails or answers with nothing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Brain(ABC):
    """Abstract base class for AI brains."""

    name: str = "brain"

    @abstractmethod
    def invoke(
        self,
        message: str,
        session_id: str,
        user_id: Optional[str],
        config: Optional[AiConfig] = None,
    ) -> str:
        """Answer one raw message.

        Args:
            message: Raw user text, forwarded verbatim
            session_id: Conversation id
            user_id: Owner of the conversation
            config: The user's AI configuration (key and model), if any

        Returns:
            Non-empty response text

        Raises:
            BrainError: If the call fails or the response is empty
        """
        pass


def should_refresh(text: str, keywords: Optional[Iterable[str]] = None) -> bool:
    """Whether an AI reply reports a change that invalidates cached data."""
    return mentions_any(text, keywords if keywords is not None else settings.refresh_keywords)

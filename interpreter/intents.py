"""Intent classifier for fresh commands.

Only used when the session has no pending flow. Rules are evaluated in a
fixed priority order against the lower-cased message; the first rule whose
predicate holds decides the intent.
"""

from enum import Enum
from typing import Callable, List, Tuple

from . import patterns


class Intent(str, Enum):
    """What a fresh command asks for."""
    CREATE_DOCUMENT = "create_document"
    CREATE_TASK = "create_task"
    CREATE_PROJECT = "create_project"
    LIST_PROJECTS = "list_projects"
    LIST_TASKS = "list_tasks"
    GREETING = "greeting"
    UNRECOGNIZED = "unrecognized"


def _is_creation(text: str) -> bool:
    return bool(patterns.CREATION_VERBS.search(text))


def wants_document(text: str) -> bool:
    return bool(patterns.DOC_KEYWORDS.search(text)) and _is_creation(text)


def wants_task(text: str) -> bool:
    return bool(patterns.TASK_KEYWORDS.search(text)) and _is_creation(text)


def wants_new_project(text: str) -> bool:
    return bool(patterns.PROJECT_CREATION.search(text))


def wants_project_list(text: str) -> bool:
    return patterns.PROJECT_LIST_WORD in text


def wants_task_list(text: str) -> bool:
    return any(word in text for word in patterns.TASK_LIST_WORDS)


def is_greeting(text: str) -> bool:
    return bool(patterns.GREETINGS.search(text))


class IntentClassifier:
    """Classifies a fresh command with ordered keyword rules."""

    RULES: List[Tuple[Callable[[str], bool], Intent]] = [
        (wants_document, Intent.CREATE_DOCUMENT),
        (wants_task, Intent.CREATE_TASK),
        (wants_new_project, Intent.CREATE_PROJECT),
        (wants_project_list, Intent.LIST_PROJECTS),
        (wants_task_list, Intent.LIST_TASKS),
        (is_greeting, Intent.GREETING),
    ]

    def classify(self, text: str) -> Intent:
        """Classify the message.

        Args:
            text: Raw user message

        Returns:
            The first matching Intent, or Intent.UNRECOGNIZED
        """
        lowered = text.lower().strip()
        for predicate, intent in self.RULES:
            if predicate(lowered):
                return intent
        return Intent.UNRECOGNIZED


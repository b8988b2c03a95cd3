"""Command interpreter: intent classification, slot filling and the pending-flow state machine."""

from .intents import Intent, IntentClassifier
from .interpreter import CommandInterpreter

__all__ = [
    "Intent",
    "IntentClassifier",
    "CommandInterpreter",
]

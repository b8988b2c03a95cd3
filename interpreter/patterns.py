"""Keyword sets, patterns and constants recognised by the command interpreter."""

import re
import unicodedata
from typing import Dict, Iterable, Tuple


# Intent detection (searched in the lower-cased message)
DOC_KEYWORDS = re.compile(
    r"documento|doc|archivo|alcance|minuta|requerimiento|technical|scope|técnico", re.IGNORECASE
)
CREATION_VERBS = re.compile(r"crea|nuevo|new|genera|agrega|crear|añadir", re.IGNORECASE)
TASK_KEYWORDS = re.compile(r"tarea|task|issue|backlog|pendiente", re.IGNORECASE)
PROJECT_CREATION = re.compile(
    r"(nuevo|agrega|crea)\s+(proyecto|proeycto|project|infraestructura)", re.IGNORECASE
)
GREETINGS = re.compile(r"hola|saludos|buenos|hey", re.IGNORECASE)

PROJECT_LIST_WORD = "proyecto"
TASK_LIST_WORDS = ("tarea", "backlog")

# Slot extraction
_FILLER = r"(?:\s+(?:llamad[oa]|titulad[oa]|de|del|sobre|alcance|t[eé]cnico|nuev[oa]|named|called))*"
_DOC_TITLE_KEYWORDS = r"documento|doc|llamado|alcance|minuta|archivo|llamada"
_TASK_TITLE_KEYWORDS = r"tarea|task|llamada"

DOC_TITLE = re.compile(rf"({_DOC_TITLE_KEYWORDS})\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE)
DOC_TITLE_QUOTED = re.compile(rf"(?:{_DOC_TITLE_KEYWORDS}){_FILLER}\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
TASK_TITLE = re.compile(rf"({_TASK_TITLE_KEYWORDS})\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE)
TASK_TITLE_QUOTED = re.compile(rf"(?:{_TASK_TITLE_KEYWORDS}){_FILLER}\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
LEADING_FILLER = re.compile(rf"^{_FILLER}\s+", re.IGNORECASE)

# "proyecto X" wins over the looser "en X"
PROJECT_MENTION = re.compile(r"\b(?:proyecto|project)\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE)
PROJECT_MENTION_EN = re.compile(r"\ben\s+(?:el\s+|la\s+)?[\"']?([^\"']+)[\"']?", re.IGNORECASE)

PRIORITY = re.compile(r"prioridad\s+(low|medium|high|urgent|baja|media|alta|urgente)", re.IGNORECASE)
DUE_DATE = re.compile(r"para\s+el\s+([0-9-]{10})", re.IGNORECASE)
TRAILING_CLAUSES = re.compile(r"\s+(?:con\s+)?(?:prioridad\s+\w+|para\s+el\s+[0-9-]{10}).*$", re.IGNORECASE)
DANGLING_PREPOSITION = re.compile(r"\s+(?:en(?:\s+(?:el|la))?|del?|para)\s*$", re.IGNORECASE)

PROJECT_NAME_SPLIT = re.compile(r"llamado|llamada|proyecto|project", re.IGNORECASE)
PROJECT_NAME_SUFFIX = re.compile(r"para el", re.IGNORECASE)

LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

SPANISH_PRIORITIES: Dict[str, str] = {
    "baja": "low",
    "media": "medium",
    "alta": "high",
    "urgente": "urgent",
}

DEFAULT_DOC_TITLE = "Documento IA"
DEFAULT_TASK_TITLE = "Tarea IA"
DEFAULT_PROJECT_NAME = "Nuevo Proyecto"

# Confirmation replies (substring match)
AFFIRMATIVE_TOKENS: Tuple[str, ...] = ("si", "yes", "confirmado", "procede", "ok")

# Ordinal replies to a numbered project list. The task flow understands three
# positions and the document flow only two; both fall back to the numeric parse.
TASK_PROJECT_ORDINALS: Dict[str, int] = {
    "primero": 0, "1": 0, "1ro": 0, "uno": 0,
    "segundo": 1, "2": 1, "2do": 1, "dos": 1,
    "tercero": 2, "3": 2, "3ro": 2, "tres": 2,
}
DOC_PROJECT_ORDINALS: Dict[str, int] = {
    "primero": 0, "1": 0,
    "segundo": 1, "2": 1,
}


def strip_accents(text: str) -> str:
    """Lower-case and drop combining accents (``Éxito`` -> ``exito``)."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def mentions_any(text: str, keywords: Iterable[str]) -> bool:
    """Case- and accent-insensitive substring scan."""
    haystack = strip_accents(text)
    return any(strip_accents(keyword) in haystack for keyword in keywords)


def parse_leading_int(text: str):
    """Leading integer of ``text`` or None (``"2do"`` -> 2, ``"dos"`` -> None)."""
    match = LEADING_INT.match(text)
    return int(match.group(1)) if match else None

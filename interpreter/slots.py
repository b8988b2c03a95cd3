"""Slot extraction and project resolution.

Pulls titles, project mentions, document types, priorities and due dates out
of a raw command, and resolves free-text replies against the projects that
were offered to the user.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence

from contracts import DocType, Priority, Project
from . import patterns


@dataclass
class CreationSlots:
    """Slots captured from a create-task or create-document command."""
    title: str
    project_mention: Optional[str] = None
    priority: str = Priority.MEDIUM.value
    due_date: Optional[str] = None


def _clean(value: str) -> str:
    return value.strip().strip("\"'").strip()


def _extract_title(text: str, quoted: Pattern, loose: Pattern):
    """Return ``(title, start, end, was_quoted)`` or None.

    A quoted title right after the keyword wins; otherwise the loose pattern
    captures everything after the keyword up to the next quote.
    """
    match = quoted.search(text)
    if match:
        return match.group(1).strip(), match.start(), match.end(), True
    match = loose.search(text)
    if match:
        return match.group(2), match.start(2), match.end(2), False
    return None


def _find_mention(text: str):
    """Return ``(mention, start)`` for the first project clause in ``text``."""
    for pattern in (patterns.PROJECT_MENTION, patterns.PROJECT_MENTION_EN):
        match = pattern.search(text)
        if match:
            mention = patterns.TRAILING_CLAUSES.sub("", match.group(1))
            mention = _clean(mention)
            if mention:
                return mention, match.start()
    return None


def extract_priority(text: str) -> str:
    match = patterns.PRIORITY.search(text)
    if not match:
        return Priority.MEDIUM.value
    value = match.group(1).lower()
    return patterns.SPANISH_PRIORITIES.get(value, value)


def extract_due_date(text: str) -> Optional[str]:
    match = patterns.DUE_DATE.search(text)
    return match.group(1) if match else None


def _extract_creation(text: str, quoted: Pattern, loose: Pattern, default_title: str) -> CreationSlots:
    title = default_title
    search_space = text
    found = _extract_title(text, quoted, loose)
    if found:
        raw_title, start, end, was_quoted = found
        if was_quoted:
            # Keep words inside the quoted title out of the project search
            search_space = text[:start] + " " + text[end:]
        mention = _find_mention(search_space)
        if not was_quoted:
            cut = len(raw_title)
            if mention and start < mention[1] < end:
                cut = min(cut, mention[1] - start)
            trailing = patterns.TRAILING_CLAUSES.search(raw_title)
            if trailing:
                cut = min(cut, trailing.start())
            raw_title = patterns.LEADING_FILLER.sub("", " " + raw_title[:cut])
            raw_title = patterns.DANGLING_PREPOSITION.sub("", raw_title)
        title = _clean(raw_title) or default_title
    else:
        mention = _find_mention(search_space)

    return CreationSlots(
        title=title,
        project_mention=mention[0] if mention else None,
        priority=extract_priority(text),
        due_date=extract_due_date(text),
    )


def extract_task_slots(text: str) -> CreationSlots:
    """Slots for "crea la tarea ..." style commands."""
    return _extract_creation(
        text, patterns.TASK_TITLE_QUOTED, patterns.TASK_TITLE, patterns.DEFAULT_TASK_TITLE
    )


def extract_document_slots(text: str) -> CreationSlots:
    """Slots for "crea el documento ..." style commands."""
    return _extract_creation(
        text, patterns.DOC_TITLE_QUOTED, patterns.DOC_TITLE, patterns.DEFAULT_DOC_TITLE
    )


def classify_doc_type(text: str) -> DocType:
    normalized = patterns.strip_accents(text)
    if "alcance" in normalized or "scope" in normalized:
        return DocType.SCOPE
    if "tecnico" in normalized or "technical" in normalized:
        return DocType.TECHNICAL
    return DocType.DRAFT


def extract_project_name(text: str) -> str:
    """Name for a new project: whatever follows the last naming keyword."""
    tail = patterns.PROJECT_NAME_SPLIT.split(text)[-1]
    tail = tail.replace('"', "").replace("'", "").strip()
    name = patterns.PROJECT_NAME_SUFFIX.split(tail)[0].strip()
    return name or patterns.DEFAULT_PROJECT_NAME


def match_project(needle: Optional[str], projects: Sequence[Project]) -> Optional[Project]:
    """First project whose name contains ``needle`` (case-insensitive)."""
    if not needle:
        return None
    needle = needle.lower().strip()
    if not needle:
        return None
    for project in projects:
        if needle in project.name.lower():
            return project
    return None


def resolve_choice(
    reply: str,
    last_options: List[str],
    projects: Sequence[Project],
    ordinals: Dict[str, int],
) -> Optional[Project]:
    """Resolve a reply to a numbered project list.

    Tries the ordinal map, then the leading integer, both as indexes into
    ``last_options``; an index that hits an offered name resolves to the live
    project with exactly that name. Otherwise falls back to a substring match
    against live project names.
    """
    key = reply.lower().strip()

    index = ordinals.get(key)
    if index is None:
        number = patterns.parse_leading_int(key)
        index = number - 1 if number is not None else None

    if index is not None and 0 <= index < len(last_options) and last_options[index]:
        name = last_options[index]
        return next((p for p in projects if p.name == name), None)

    return match_project(key.replace("en el ", "", 1), projects)

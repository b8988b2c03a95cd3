"""Deterministic multi-turn command interpreter.

One call handles one message. A pending memory record has priority: its
action alone decides how the message is read. Without one, the message goes
through fresh intent classification. Mutations go to the store as they are
decided; store failures become chat replies and leave the pending flow where
it was, so the user can retry the same step.
"""

from typing import Optional, Sequence, Tuple

from loguru import logger

from contracts import (
    AwaitingConfirmation,
    AwaitingAssignment,
    AwaitingProject,
    AwaitingProjectDoc,
    ConversationMemory,
    DocType,
    Document,
    Effect,
    EffectKind,
    PendingAction,
    Project,
    Task,
    TaskStatus,
    Priority,
    TurnResult,
)
from store import DataStore, StoreError
from config import settings
from . import patterns, responses
from .intents import Intent, IntentClassifier
from .slots import (
    classify_doc_type,
    extract_document_slots,
    extract_project_name,
    extract_task_slots,
    match_project,
    resolve_choice,
)


class CommandInterpreter:
    """Turns one chat message plus the session's memory into a TurnResult."""

    def __init__(
        self,
        store: DataStore,
        classifier: Optional[IntentClassifier] = None,
        task_list_limit: Optional[int] = None,
    ):
        """Initialize the interpreter.

        Args:
            store: Data store receiving the mutations
            classifier: Optional custom intent classifier
            task_list_limit: Max pending tasks listed (defaults to settings)
        """
        self.store = store
        self.classifier = classifier or IntentClassifier()
        self.task_list_limit = task_list_limit or settings.task_list_limit

        self._state_handlers = {
            PendingAction.AWAITING_CONFIRMATION: self._handle_confirmation,
            PendingAction.AWAITING_ASSIGNMENT: self._handle_assignment,
            PendingAction.AWAITING_PROJECT: self._handle_task_project,
            PendingAction.AWAITING_PROJECT_DOC: self._handle_document_project,
        }
        self._intent_handlers = {
            Intent.CREATE_DOCUMENT: self._create_document,
            Intent.CREATE_TASK: self._create_task,
            Intent.CREATE_PROJECT: self._create_project,
            Intent.LIST_PROJECTS: self._list_projects,
            Intent.LIST_TASKS: self._list_tasks,
            Intent.GREETING: self._greet,
            Intent.UNRECOGNIZED: self._ask_confirmation,
        }

    def handle(
        self,
        session_id: str,
        text: str,
        memory: Optional[ConversationMemory],
        projects: Sequence[Project],
        tasks: Sequence[Task],
    ) -> TurnResult:
        """Interpret one message.

        Args:
            session_id: Conversation id the memory belongs to
            text: Raw user message
            memory: The session's pending-flow record, if any
            projects: Live project snapshot
            tasks: Live task snapshot

        Returns:
            TurnResult with the reply, the mutations issued and the memory for
            the next turn (None clears it, the same object leaves it as is)
        """
        if memory is not None and memory.current_action != PendingAction.NONE:
            logger.debug("Session {} continuing {}", session_id, memory.current_action.value)
            handler = self._state_handlers[memory.current_action]
            return handler(text, memory, projects)

        intent = self.classifier.classify(text)
        logger.debug("Session {} classified as {}", session_id, intent.value)
        return self._intent_handlers[intent](session_id, text, projects, tasks)

    # Pending flows

    def _handle_confirmation(
        self,
        text: str,
        memory: ConversationMemory,
        projects: Sequence[Project],
    ) -> TurnResult:
        lowered = text.lower().strip()
        if any(token in lowered for token in patterns.AFFIRMATIVE_TOKENS):
            if memory.context.command == Intent.LIST_PROJECTS.value:
                response = responses.project_status_list(projects)
            else:
                response = responses.GENERIC_CONFIRMATION
        else:
            response = responses.CANCELLED
        return TurnResult(response=response, next_memory=None)

    def _handle_assignment(
        self,
        text: str,
        memory: ConversationMemory,
        projects: Sequence[Project],
    ) -> TurnResult:
        context = memory.context
        effect = Effect(
            kind=EffectKind.ASSIGN_TASK,
            target_id=context.task_id,
            payload={"assignees": [text]},
        )
        try:
            self.store.update_task_assignees(context.task_id, [text])
        except StoreError as e:
            logger.warning("Assignment of task {} failed: {}", context.task_id, e)
            effect.ok, effect.error = False, e.message
            return TurnResult(
                response=responses.assignment_failed(e.message),
                effects=[effect],
                next_memory=memory,
            )

        logger.info("Assigned task {} to {}", context.task_id, text)
        return TurnResult(
            response=responses.assigned(text, context.title),
            effects=[effect],
            next_memory=None,
        )

    def _handle_task_project(
        self,
        text: str,
        memory: ConversationMemory,
        projects: Sequence[Project],
    ) -> TurnResult:
        context = memory.context
        project = resolve_choice(text, context.last_options, projects, patterns.TASK_PROJECT_ORDINALS)
        if project is None:
            return TurnResult(response=responses.project_not_found(text), next_memory=memory)

        task, effect = self._insert_task(project, context.title, context.priority, context.due_date)
        if task is None:
            return TurnResult(
                response=responses.creation_failed(effect.error),
                effects=[effect],
                next_memory=memory,
            )
        return TurnResult(
            response=responses.task_created_ask_assignee(context.title, project),
            effects=[effect],
            next_memory=self._await_assignment(memory.session_id, context.title, task),
        )

    def _handle_document_project(
        self,
        text: str,
        memory: ConversationMemory,
        projects: Sequence[Project],
    ) -> TurnResult:
        context = memory.context
        project = resolve_choice(text, context.last_options, projects, patterns.DOC_PROJECT_ORDINALS)
        if project is None:
            return TurnResult(response=responses.project_not_found(text), next_memory=memory)

        document, effect = self._insert_document(project, context.title, context.doc_type)
        if document is None:
            return TurnResult(
                response=responses.creation_failed(effect.error),
                effects=[effect],
                next_memory=memory,
            )
        return TurnResult(
            response=responses.document_created(context.title, context.doc_type, project),
            effects=[effect],
            next_memory=None,
        )

    # Fresh commands

    def _create_document(
        self,
        session_id: str,
        text: str,
        projects: Sequence[Project],
        tasks: Sequence[Task],
    ) -> TurnResult:
        slots = extract_document_slots(text)
        doc_type = classify_doc_type(text)
        project = match_project(slots.project_mention, projects)

        if project is None:
            names = [p.name for p in projects]
            return TurnResult(
                response=responses.ask_document_project(slots.title, names),
                next_memory=ConversationMemory(
                    session_id=session_id,
                    context=AwaitingProjectDoc(title=slots.title, doc_type=doc_type, last_options=names),
                ),
            )

        document, effect = self._insert_document(project, slots.title, doc_type)
        if document is None:
            return TurnResult(response=responses.creation_failed(effect.error), effects=[effect])
        return TurnResult(
            response=responses.document_created(slots.title, doc_type, project),
            effects=[effect],
        )

    def _create_task(
        self,
        session_id: str,
        text: str,
        projects: Sequence[Project],
        tasks: Sequence[Task],
    ) -> TurnResult:
        slots = extract_task_slots(text)
        project = match_project(slots.project_mention, projects)

        if project is None:
            names = [p.name for p in projects]
            return TurnResult(
                response=responses.ask_task_project(slots.title, names),
                next_memory=ConversationMemory(
                    session_id=session_id,
                    context=AwaitingProject(
                        title=slots.title,
                        last_options=names,
                        priority=slots.priority,
                        due_date=slots.due_date,
                    ),
                ),
            )

        task, effect = self._insert_task(project, slots.title, slots.priority, slots.due_date)
        if task is None:
            return TurnResult(response=responses.creation_failed(effect.error), effects=[effect])
        return TurnResult(
            response=responses.task_created(slots.title, project, slots.priority, slots.due_date),
            effects=[effect],
            next_memory=self._await_assignment(session_id, slots.title, task),
        )

    def _create_project(
        self,
        session_id: str,
        text: str,
        projects: Sequence[Project],
        tasks: Sequence[Task],
    ) -> TurnResult:
        name = extract_project_name(text)
        effect = Effect(kind=EffectKind.CREATE_PROJECT, payload={"name": name})
        try:
            project = self.store.create_project(name)
        except StoreError as e:
            logger.warning("Project creation failed: {}", e)
            effect.ok, effect.error = False, e.message
            return TurnResult(response=responses.project_creation_failed(e.message), effects=[effect])

        effect.target_id = project.id
        logger.info("Created project {} ({})", project.name, project.id)
        return TurnResult(response=responses.project_created(project.name), effects=[effect])

    def _list_projects(self, session_id, text, projects, tasks) -> TurnResult:
        return TurnResult(response=responses.project_name_list(projects))

    def _list_tasks(self, session_id, text, projects, tasks) -> TurnResult:
        pending = [t for t in tasks if t.is_pending()][: self.task_list_limit]
        return TurnResult(response=responses.pending_task_list(pending))

    def _greet(self, session_id, text, projects, tasks) -> TurnResult:
        return TurnResult(response=responses.GREETING)

    def _ask_confirmation(self, session_id, text, projects, tasks) -> TurnResult:
        return TurnResult(
            response=responses.CONFIRM_PROCEED,
            next_memory=ConversationMemory(session_id=session_id, context=AwaitingConfirmation()),
        )

    # Mutations

    def _insert_task(
        self,
        project: Project,
        title: str,
        priority: str = Priority.MEDIUM.value,
        due_date: Optional[str] = None,
    ) -> Tuple[Optional[Task], Effect]:
        payload = {
            "project_id": project.id,
            "title": title,
            "status": TaskStatus.TODO.value,
            "priority": priority,
            "due_date": due_date,
        }
        effect = Effect(kind=EffectKind.CREATE_TASK, payload=payload)
        try:
            task = self.store.create_task(**payload)
        except StoreError as e:
            logger.warning("Task creation in {} failed: {}", project.name, e)
            effect.ok, effect.error = False, e.message
            return None, effect

        effect.target_id = task.id
        logger.info("Created task {} ({}) in {}", title, task.id, project.name)
        return task, effect

    def _insert_document(
        self,
        project: Project,
        title: str,
        doc_type: DocType,
    ) -> Tuple[Optional[Document], Effect]:
        payload = {
            "project_id": project.id,
            "title": title,
            "content": f"# {title}",
            "doc_type": DocType(doc_type).value,
        }
        effect = Effect(kind=EffectKind.CREATE_DOCUMENT, payload=payload)
        try:
            document = self.store.create_document(
                project.id, title, payload["content"], DocType(doc_type)
            )
        except StoreError as e:
            logger.warning("Document creation in {} failed: {}", project.name, e)
            effect.ok, effect.error = False, e.message
            return None, effect

        effect.target_id = document.id
        logger.info("Created {} document {} ({}) in {}", payload["doc_type"], title, document.id, project.name)
        return document, effect

    @staticmethod
    def _await_assignment(session_id: str, title: str, task: Task) -> ConversationMemory:
        return ConversationMemory(
            session_id=session_id,
            context=AwaitingAssignment(title=title, task_id=task.id),
        )

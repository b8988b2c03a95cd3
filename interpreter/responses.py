"""Reply templates (Markdown) produced by the command interpreter."""

from typing import List, Optional, Sequence

from contracts import DocType, Project, Task


def project_status_list(projects: Sequence[Project]) -> str:
    lines = "\n".join(f"- **{p.name}** [{p.status}]" for p in projects)
    return f"🏗️ **Infraestructura del Servidor:**\n\n{lines}\n\nOperación completada exitosamente."


def project_name_list(projects: Sequence[Project]) -> str:
    lines = "\n".join(f"- **{p.name}**" for p in projects)
    return f"🏗️ **Proyectos registrados:**\n\n{lines or '_No hay proyectos registrados._'}"


def pending_task_list(tasks: Sequence[Task]) -> str:
    lines = "\n".join(f"- **{t.title}** [{t.status}]" for t in tasks)
    return (
        "📋 **Backlog del Servidor:**\n\n"
        "Aquí están tus tareas pendientes prioritarias:\n\n"
        f"{lines or '_No hay tareas pendientes._'}"
    )


def numbered_options(names: List[str]) -> str:
    return "\n".join(f"{i}. **{name}**" for i, name in enumerate(names, start=1))


GENERIC_CONFIRMATION = "✅ ¡Confirmado! He procesado tu solicitud en el servidor central."
CANCELLED = "Operación cancelada. ¿Hay algo más que desees que supervise?"
GREETING = (
    "¡Hola! Estoy listo. Puedo operar el servidor, gestionar tareas o auditar tus "
    "proyectos. ¿Por dónde empezamos?"
)
CONFIRM_PROCEED = (
    "Comando recibido. Mi motor está listo para ejecutar esta acción en el servidor. "
    "¿Confirmas que quieres proceder con la gestión de tareas?"
)


def assigned(name: str, title: str) -> str:
    return (
        f"🎯 **Proceso Finalizado:** He asignado a **\"{name}\"** como responsable de "
        f"**\"{title}\"**.\n\n¿Necesitas algo más?"
    )


def assignment_failed(error: str) -> str:
    return f"❌ No pude completar la asignación: {error}"


def creation_failed(error: str) -> str:
    return f"⚠️ Error al crear: {error}"


def task_created_ask_assignee(title: str, project: Project) -> str:
    return (
        f"✅ Tarea **\"{title}\"** creada exitosamente en **{project.name}**.\n\n"
        "¿A quién deseas que se la asigne?"
    )


def task_created(title: str, project: Project, priority: str, due_date: Optional[str]) -> str:
    due = f" (Vence: {due_date})" if due_date else ""
    return (
        f"✅ Tarea **\"{title}\"** creada en **{project.name}** [Pr: {priority.upper()}]{due}.\n\n"
        "¿Deseas asignársela a alguien?"
    )


def ask_task_project(title: str, names: List[str]) -> str:
    return (
        f"Entendido. He capturado la tarea: **\"{title}\"**.\n\n"
        f"¿En qué proyecto quieres ubicarla?\n\n{numbered_options(names)}"
    )


def document_created(title: str, doc_type: DocType, project: Project) -> str:
    return (
        f"📄 Documento **\"{title}\"** ({DocType(doc_type).value}) creado exitosamente "
        f"en **{project.name}**."
    )


def ask_document_project(title: str, names: List[str]) -> str:
    return (
        f"Entendido. Prepararé el documento **\"{title}\"**.\n\n"
        f"¿En qué proyecto quieres guardarlo?\n\n{numbered_options(names)}"
    )


def project_not_found(reply: str) -> str:
    return (
        f"No pude encontrar el proyecto \"{reply}\". Por favor, dime el número de la "
        "lista o el nombre exacto."
    )


def project_created(name: str) -> str:
    return (
        f"🏗️ **Infraestructura Actualizada:** He creado el nuevo proyecto **\"{name}\"** "
        "exitosamente.\n\n¿Deseas que cree alguna tarea inicial para este proyecto?"
    )


def project_creation_failed(error: str) -> str:
    return f"❌ Error al crear el proyecto: {error}"

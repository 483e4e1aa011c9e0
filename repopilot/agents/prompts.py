"""Prompt templates for the multi-agent workflow."""

from __future__ import annotations

from collections.abc import Sequence

from repopilot.agents.types import Task

NO_FILES_PLACEHOLDER = "No files were selected"
AGENT_USER_MESSAGE = "Generate your JSON report."


def build_agent_prompt(
    task: Task,
    languages: Sequence[str],
    user_prompt: str,
    file_context: str,
) -> str:
    """Build the system instructions for one agent task.

    The user request and the repository context are inserted verbatim.
    """
    context = file_context or NO_FILES_PLACEHOLDER
    return (
        f"You are the {task.role} working inside a multi-agent swarm. "
        "Stay concise and structured.\n\n"
        f"User request:\n{user_prompt}\n\n"
        f"Repository context (only what is provided):\n{context}\n\n"
        f"Supported languages for implementation: {', '.join(languages)}.\n"
        f"{task.objective}\n"
        "Respond only as JSON with the shape:\n"
        "{\n"
        f'"role": "{task.role}",\n'
        '"summary": "one or two sentences",\n'
        '"proposedChanges": [{"path": "string", "summary": "string", '
        '"rationale": "string (optional)"}],\n'
        '"risks": ["string"],\n'
        '"testPlan": ["string"],\n'
        '"confidence": 0.0 // between 0 and 1\n'
        "}"
    )

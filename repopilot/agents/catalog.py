"""Role definitions for the multi-agent workflow."""

from __future__ import annotations

from typing import Any

from repopilot.agents.types import Task

# Order matters: findings are reported in this order.
AGENT_TASKS: tuple[Task, ...] = (
    Task(
        id="research",
        role="Research Agent",
        objective=(
            "Perform grounded research on the request, summarize relevant context "
            "from the repo files, and cite which files/areas you would study to "
            "gain clarity."
        ),
    ),
    Task(
        id="generation",
        role="Generation Agent",
        objective=(
            "Draft new or revised code to address the request using the supported "
            "language set. Focus on correctness and completeness while keeping the "
            "diff minimal."
        ),
    ),
    Task(
        id="revision",
        role="Revision Agent",
        objective=(
            "Review the proposed implementation for potential regressions and "
            "highlight any refinements to improve readability or maintainability."
        ),
    ),
    Task(
        id="feature",
        role="Feature Expansion Agent",
        objective=(
            "Identify small, high-impact enhancements related to the prompt that "
            "could be delivered in the same change safely."
        ),
    ),
    Task(
        id="qa",
        role="Quality Agent",
        objective=(
            "Validate logic, edge cases, and API contracts. Flag ambiguous "
            "requirements and provide acceptance criteria."
        ),
    ),
    Task(
        id="tests",
        role="Testing Agent",
        objective=(
            "Design targeted, automated tests and quick manual checks to verify "
            "the change before commit."
        ),
    ),
)

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "C",
    "C++",
    "Python",
    "Rust",
    "Lua",
    "XML",
    "Java",
    "Bash",
    "Perl",
    "Assembly",
    "HTML",
    "HTML5",
)


def get_task(task_id: str) -> Task | None:
    """Get a task by id."""
    wanted = task_id.lower()
    for task in AGENT_TASKS:
        if task.id == wanted:
            return task
    return None


def list_task_ids() -> list[str]:
    """List task ids in catalog order."""
    return [task.id for task in AGENT_TASKS]


def get_all_tasks_info() -> list[dict[str, Any]]:
    """Get info about all tasks for display/API purposes."""
    return [
        {"id": task.id, "role": task.role, "objective": task.objective}
        for task in AGENT_TASKS
    ]

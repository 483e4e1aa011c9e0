"""Single-shot change-set generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from repopilot.agents.validator import load_json_object
from repopilot.agents.workflow import AgentWorkflowRequest
from repopilot.context import FileFetcher, assemble_context
from repopilot.llm.completion import CompletionClient

logger = logging.getLogger(__name__)

OPERATIONS = ("create", "modify", "delete")

CHANGE_SYSTEM_PROMPT = """You are an expert software engineer assistant. Return ONLY JSON with the shape:
{
  "changes": [
    {
      "path": "string",
      "operation": "create" | "modify" | "delete",
      "contents": "string"
    }
  ],
  "commitMessage": "string"
}
- Include full file contents for create/modify.
- Do not include Markdown.
- Keep the response concise."""


@dataclass
class FileChange:
    """One proposed file operation."""

    path: str
    operation: str  # create | modify | delete
    contents: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "operation": self.operation}
        if self.operation != "delete":
            data["contents"] = self.contents
        return data


@dataclass
class ChangeSet:
    """A proposed commit: file changes plus a commit message."""

    changes: list[FileChange] = field(default_factory=list)
    commit_message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "commitMessage": self.commit_message,
        }


def build_change_prompt(user_prompt: str, context: str) -> str:
    return "\n\n".join(
        [
            "You will propose code changes.",
            "Existing files:",
            context,
            "User instructions:",
            user_prompt,
        ]
    )


def parse_change_set(raw: str | None) -> ChangeSet:
    """Validate a raw model reply into a :class:`ChangeSet`.

    Entries without a path or with an unknown operation are dropped.
    """
    data = load_json_object(raw, "The model")

    changes: list[FileChange] = []
    items = data.get("changes")
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        path = item.get("path")
        operation = item.get("operation")
        if not isinstance(path, str) or not path.strip() or operation not in OPERATIONS:
            logger.warning("Dropping invalid change entry: %r", item)
            continue
        contents = item.get("contents")
        changes.append(
            FileChange(
                path=path,
                operation=operation,
                contents=contents if isinstance(contents, str) else "",
            )
        )

    message = data.get("commitMessage")
    return ChangeSet(
        changes=changes,
        commit_message=message if isinstance(message, str) else "",
    )


async def generate_change(
    request: AgentWorkflowRequest,
    *,
    github: FileFetcher,
    completion: CompletionClient,
) -> ChangeSet:
    """Ask the model for one change set covering the user's request."""
    request.validate()
    context = await assemble_context(
        github,
        request.owner,
        request.repo,
        request.base_branch,
        request.file_paths,
    )
    raw = await completion.complete(
        CHANGE_SYSTEM_PROMPT,
        build_change_prompt(request.user_prompt, context),
    )
    change_set = parse_change_set(raw)
    logger.info(
        "Generated %d change(s) for %s/%s",
        len(change_set.changes),
        request.owner,
        request.repo,
    )
    return change_set

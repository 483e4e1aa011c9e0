"""Shared fakes for the repopilot test suite."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import pytest

from repopilot.errors import FileReadError

_ROLE_RE = re.compile(r"^You are the (.+?) working inside")


def finding_json(**overrides: Any) -> str:
    payload: dict[str, Any] = {
        "role": "ignored",
        "summary": "Looks fine",
        "proposedChanges": [{"path": "src/index.ts", "summary": "add y"}],
        "risks": ["none"],
        "testPlan": ["run unit tests"],
        "confidence": 0.8,
    }
    payload.update(overrides)
    return json.dumps(payload)


class FakeCompletion:
    """Completion client that answers per role and records every call.

    ``replies`` maps a role name to a raw string or an exception to raise.
    ``delays`` maps a role name to seconds to sleep before answering.
    """

    def __init__(
        self,
        replies: dict[str, Any] | None = None,
        default: Any = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.replies = replies or {}
        self.default = finding_json() if default is None else default
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []
        self.completed: list[str] = []

    async def complete(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        match = _ROLE_RE.match(system)
        role = match.group(1) if match else ""
        await asyncio.sleep(self.delays.get(role, 0))
        reply = self.replies.get(role, self.default)
        self.completed.append(role)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeFetcher:
    """In-memory stand-in for GitHubClient.get_file_content."""

    def __init__(self, files: dict[str, str]) -> None:
        self.files = files
        self.requests: list[tuple[str, str, str, str]] = []

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> str:
        self.requests.append((owner, repo, path, ref))
        if path not in self.files:
            raise FileReadError(path, status_code=404)
        return self.files[path]


@pytest.fixture
def fake_completion():
    return FakeCompletion


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def make_finding_json():
    return finding_json

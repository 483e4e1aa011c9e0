"""GitHub access for repopilot."""

from __future__ import annotations

from repopilot.github.client import GitHubClient

__all__ = ["GitHubClient"]

"""Shared types for the multi-agent workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Task:
    """A fixed role definition dispatched once per workflow run."""

    id: str
    role: str
    objective: str


@dataclass
class ProposedChangeOutline:
    """One file-level suggestion inside a finding. Never applied."""

    path: str
    summary: str = ""
    rationale: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "summary": self.summary}
        if self.rationale:
            data["rationale"] = self.rationale
        return data


@dataclass
class Finding:
    """Normalized output of a single agent task."""

    role: str
    summary: str = ""
    proposed_changes: list[ProposedChangeOutline] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)
    test_plan: list[str] = field(default_factory=list)
    confidence: float = 0.0
    error: str | None = None  # set only when the agent failed

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "role": self.role,
            "summary": self.summary,
            "proposedChanges": [c.to_dict() for c in self.proposed_changes],
            "risks": list(self.risks),
            "testPlan": list(self.test_plan),
            "confidence": self.confidence,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class WorkflowResult:
    """Aggregated report returned for one workflow request."""

    agents: list[Finding]
    recommended_tests: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    status: str = "achieved"  # achieved | partial | failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "agents": [a.to_dict() for a in self.agents],
            "recommendedTests": list(self.recommended_tests),
            "notes": list(self.notes),
            "status": self.status,
        }

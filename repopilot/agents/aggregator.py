"""Aggregation of agent findings into one workflow report."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from repopilot.agents.types import Finding, WorkflowResult

ADVISORY_NOTES: tuple[str, ...] = (
    "Agents run concurrently to cross-validate proposals before commit.",
    "Use the recommended tests to gate the commit and pull request steps.",
)


def aggregate_tests(findings: Iterable[Finding]) -> list[str]:
    """Flatten every test plan, dropping blanks and duplicates.

    Entries are compared and reported after trimming whitespace. First
    occurrence wins and keeps its position.
    """
    seen: set[str] = set()
    tests: list[str] = []
    for finding in findings:
        for item in finding.test_plan:
            if not isinstance(item, str):
                continue
            key = item.strip()
            if not key or key in seen:
                continue
            seen.add(key)
            tests.append(key)
    return tests


def workflow_status(findings: Sequence[Finding]) -> str:
    failed = sum(1 for f in findings if f.failed)
    if failed == 0:
        return "achieved"
    if failed < len(findings):
        return "partial"
    return "failed"


def aggregate(findings: Sequence[Finding] | None) -> WorkflowResult:
    """Merge findings into a :class:`WorkflowResult`."""
    agents = list(findings or [])
    notes = list(ADVISORY_NOTES)
    notes.extend(f"{f.role} failed: {f.error}" for f in agents if f.failed)
    return WorkflowResult(
        agents=agents,
        recommended_tests=aggregate_tests(agents),
        notes=notes,
        status=workflow_status(agents),
    )

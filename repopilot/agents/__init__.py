"""Multi-agent review workflow for repopilot."""

from __future__ import annotations

from repopilot.agents.aggregator import aggregate
from repopilot.agents.catalog import AGENT_TASKS, SUPPORTED_LANGUAGES
from repopilot.agents.scheduler import run_agents
from repopilot.agents.types import Finding, ProposedChangeOutline, Task, WorkflowResult
from repopilot.agents.workflow import AgentWorkflowRequest, run_agent_workflow

__all__ = [
    "AGENT_TASKS",
    "SUPPORTED_LANGUAGES",
    "AgentWorkflowRequest",
    "Finding",
    "ProposedChangeOutline",
    "Task",
    "WorkflowResult",
    "aggregate",
    "run_agent_workflow",
    "run_agents",
]

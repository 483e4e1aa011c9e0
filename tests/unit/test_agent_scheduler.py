"""Tests for the agent fan-out scheduler."""

from __future__ import annotations

import asyncio

import pytest

from repopilot.agents.catalog import AGENT_TASKS
from repopilot.agents.prompts import AGENT_USER_MESSAGE
from repopilot.agents.scheduler import degraded_finding, run_agent_task, run_agents
from repopilot.errors import AdapterError, MalformedJson

ROLES = [t.role for t in AGENT_TASKS]
CONTEXT = "FILE: src/index.ts\nexport const x = 1;"


# ── Ordering ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_findings_follow_catalog_order(fake_completion):
    client = fake_completion()
    findings = await run_agents(client, CONTEXT, "Add a y export")
    assert [f.role for f in findings] == ROLES
    assert len(client.calls) == 6


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "order",
    [list(reversed(ROLES)), ROLES[3:] + ROLES[:3], [ROLES[i] for i in (4, 0, 5, 2, 1, 3)]],
)
async def test_order_invariant_under_completion_order(fake_completion, order):
    # The first role in *order* finishes first.
    delays = {role: 0.01 * i for i, role in enumerate(order)}
    client = fake_completion(delays=delays)
    findings = await run_agents(client, CONTEXT, "Add a y export")
    assert client.completed == order
    assert [f.role for f in findings] == ROLES


@pytest.mark.asyncio
async def test_tasks_run_concurrently(fake_completion):
    client = fake_completion(delays={role: 0.2 for role in ROLES})
    loop = asyncio.get_running_loop()
    started = loop.time()
    await run_agents(client, CONTEXT, "p")
    assert loop.time() - started < 0.2 * len(ROLES) / 2


@pytest.mark.asyncio
async def test_every_prompt_shares_context(fake_completion):
    client = fake_completion()
    await run_agents(client, CONTEXT, "Add a y export")
    for system, user in client.calls:
        assert CONTEXT in system
        assert "Add a y export" in system
        assert user == AGENT_USER_MESSAGE


# ── Isolate policy ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_isolate_degrades_failed_task(fake_completion):
    client = fake_completion(replies={"Research Agent": AdapterError("connection reset")})
    findings = await run_agents(client, CONTEXT, "p", failure_policy="isolate")

    assert len(findings) == 6
    research = findings[0]
    assert research.role == "Research Agent"
    assert research.failed
    assert research.confidence == 0
    assert research.summary == "agent failed: connection reset"
    assert research.error == "connection reset"
    assert all(not f.failed for f in findings[1:])
    assert all(f.confidence == 0.8 for f in findings[1:])


@pytest.mark.asyncio
async def test_isolate_degrades_malformed_and_empty(fake_completion):
    client = fake_completion(replies={"Quality Agent": "not json", "Testing Agent": ""})
    findings = await run_agents(client, CONTEXT, "p")
    assert findings[4].failed
    assert "invalid JSON" in findings[4].error
    assert findings[5].failed
    assert findings[5].error == "Testing Agent returned an empty response"


@pytest.mark.asyncio
async def test_isolate_degrades_unexpected_exception(fake_completion):
    client = fake_completion(replies={"Revision Agent": RuntimeError()})
    findings = await run_agents(client, CONTEXT, "p")
    assert findings[2].error == "RuntimeError"


@pytest.mark.asyncio
async def test_timeout_is_adapter_error(fake_completion):
    client = fake_completion(delays={"Generation Agent": 5})
    findings = await run_agents(client, CONTEXT, "p", timeout=0.05)
    assert findings[1].failed
    assert findings[1].error == "Generation Agent timed out after 0.05s"
    assert not findings[0].failed


# ── Fail-fast policy ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_fail_fast_raises(fake_completion):
    client = fake_completion(replies={"Research Agent": AdapterError("boom", status_code=429)})
    with pytest.raises(AdapterError) as exc_info:
        await run_agents(client, CONTEXT, "p", failure_policy="fail_fast")
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_fail_fast_cancels_remaining(fake_completion):
    client = fake_completion(
        replies={"Research Agent": "oops"},
        delays={role: 1.0 for role in ROLES[1:]},
    )
    with pytest.raises(MalformedJson):
        await run_agents(client, CONTEXT, "p", failure_policy="fail_fast")
    assert client.completed == ["Research Agent"]


@pytest.mark.asyncio
async def test_unknown_policy(fake_completion):
    with pytest.raises(ValueError):
        await run_agents(fake_completion(), CONTEXT, "p", failure_policy="retry")  # type: ignore[arg-type]


# ── Single task ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_run_agent_task(fake_completion, make_finding_json):
    client = fake_completion(default=make_finding_json(summary="solo"))
    finding = await run_agent_task(client, AGENT_TASKS[3], "", "p")
    assert finding.role == "Feature Expansion Agent"
    assert finding.summary == "solo"
    assert "No files were selected" in client.calls[0][0]


def test_degraded_finding_shape():
    finding = degraded_finding(AGENT_TASKS[0], AdapterError("down"))
    assert finding.to_dict() == {
        "role": "Research Agent",
        "summary": "agent failed: down",
        "proposedChanges": [],
        "risks": [],
        "testPlan": [],
        "confidence": 0.0,
        "error": "down",
    }

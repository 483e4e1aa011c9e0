"""Validation of raw agent replies into canonical findings.

Model output is untrusted: the reply is parsed into a generic JSON value and
then mapped field by field, substituting a safe default for anything missing
or of the wrong type. The ``role`` of a finding always comes from the task,
never from the reply.
"""

from __future__ import annotations

import json
import math
from typing import Any

from repopilot.agents.types import Finding, ProposedChangeOutline, Task
from repopilot.errors import EmptyResponse, MalformedJson


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def load_json_object(raw: str | None, source: str) -> dict[str, Any]:
    """Parse *raw* as a single JSON object.

    Raises:
        EmptyResponse: when *raw* is empty or missing.
        MalformedJson: when it is not valid JSON or not an object.
    """
    if raw is None or not raw.strip():
        raise EmptyResponse(f"{source} returned an empty response")

    content = strip_code_fences(raw)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedJson(f"{source} returned invalid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise MalformedJson(
            f"{source} returned JSON {type(data).__name__}, expected an object"
        )
    return data


def parse_finding(raw: str | None, task: Task) -> Finding:
    """Turn a raw completion into a :class:`Finding` for *task*."""
    data = load_json_object(raw, task.role)
    return Finding(
        role=task.role,
        summary=_coerce_text(data.get("summary")),
        proposed_changes=_coerce_changes(data.get("proposedChanges")),
        risks=_coerce_strings(data.get("risks")),
        test_plan=_coerce_strings(data.get("testPlan")),
        confidence=coerce_confidence(data.get("confidence")),
    )


def coerce_confidence(value: Any) -> float:
    """Return *value* if it is a real number in [0, 1], else 0.0.

    Out-of-range values are zeroed rather than clamped.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        return 0.0
    return float(value)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _coerce_strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _coerce_changes(value: Any) -> list[ProposedChangeOutline]:
    if not isinstance(value, list):
        return []

    changes: list[ProposedChangeOutline] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        path = item.get("path")
        if not isinstance(path, str) or not path.strip():
            continue
        rationale = item.get("rationale")
        changes.append(
            ProposedChangeOutline(
                path=path,
                summary=_coerce_text(item.get("summary")),
                rationale=rationale if isinstance(rationale, str) and rationale else None,
            )
        )
    return changes

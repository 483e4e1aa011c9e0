"""Server configuration dataclass."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

CONFIG_FILE = ".repopilot.yml"
ENV_PREFIX = "REPOPILOT_"

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass
class ServerConfig:
    """Settings shared by the HTTP server and the CLI."""

    model_name: str = DEFAULT_MODEL
    temperature: float = 0.2
    agent_timeout: float = 120.0  # seconds per agent task, 0 = no limit
    failure_policy: str = "isolate"  # isolate | fail_fast
    github_api_base: str = "https://api.github.com"
    github_timeout: float = 30.0
    allow_env_credentials: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        from repopilot.agents.scheduler import FAILURE_POLICIES

        if self.failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"failure_policy must be one of {', '.join(FAILURE_POLICIES)}, "
                f"got {self.failure_policy!r}"
            )
        if self.agent_timeout < 0:
            raise ValueError("agent_timeout must be >= 0")

    @property
    def timeout_or_none(self) -> float | None:
        return self.agent_timeout or None


def load_config(cwd: str) -> dict[str, Any] | None:
    """Load config from .repopilot.yml if it exists, else return None."""
    import yaml

    config_path = Path(cwd) / CONFIG_FILE
    if not config_path.exists():
        return None
    with config_path.open() as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def _convert(raw: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return str(raw)


def resolve_config(cwd: str | None = None, **overrides: Any) -> ServerConfig:
    """Build a :class:`ServerConfig`.

    Precedence: explicit overrides > REPOPILOT_* env vars > .repopilot.yml
    > defaults. Unknown keys are ignored.
    """
    from dotenv import load_dotenv

    load_dotenv()

    file_cfg = load_config(cwd or str(Path.cwd())) or {}
    values: dict[str, Any] = {}
    for f in fields(ServerConfig):
        default = f.default
        if f.name in file_cfg and file_cfg[f.name] is not None:
            values[f.name] = _convert(file_cfg[f.name], default)
        env_value = os.environ.get(ENV_PREFIX + f.name.upper())
        if env_value:
            values[f.name] = _convert(env_value, default)
        if overrides.get(f.name) is not None:
            values[f.name] = _convert(overrides[f.name], default)

    return ServerConfig(**values)

"""Build the primary agent and the judge agent from settings."""

from pathlib import Path
from typing import Any, Sequence

from agents import Agent

from a2a_bridge.agents.instructions import resolve_instructions
from a2a_bridge.executor.models import JudgeTaskState, StructuredResponse
from a2a_bridge.settings import get_setting

_PACKAGE_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _PACKAGE_DIR.parent


def _agent_instructions(cfg: dict[str, Any], template_vars: dict[str, Any] | None = None) -> str:
    return resolve_instructions(
        instructions=cfg.get("instructions", "") or "",
        instructions_file=cfg.get("instructions_file", "") or "",
        search_dirs=(_PROJECT_ROOT, _PACKAGE_DIR),
        template_vars=template_vars,
    )


def create_primary_agent(
    settings: dict[str, Any],
    tools: Sequence[Any] = (),
    mcp_servers: Sequence[Any] = (),
) -> Agent:
    """Agent that serves A2A requests (settings: agents.primary)."""
    cfg = get_setting(settings, "agents.primary", {}) or {}
    agent = Agent(
        name=cfg.get("name", "Assistant"),
        instructions=_agent_instructions(cfg),
        model=cfg.get("model"),
        tools=list(tools),
        mcp_servers=list(mcp_servers),
    )
    if mcp_servers:
        agent.mcp_config = {"convert_schemas_to_strict": True}
    return agent


def create_judge_agent(settings: dict[str, Any]) -> Agent:
    """Agent that classifies a finished run (settings: agents.judge). Outputs StructuredResponse."""
    cfg = get_setting(settings, "agents.judge", {}) or {}
    instructions = _agent_instructions(
        cfg, template_vars={"task_states": [s.value for s in JudgeTaskState]}
    )
    return Agent(
        name=cfg.get("name", "Task Judge"),
        instructions=instructions,
        model=cfg.get("model"),
        output_type=StructuredResponse,
    )

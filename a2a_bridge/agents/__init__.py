"""Agent definitions built from settings."""

from a2a_bridge.agents.builder import create_judge_agent, create_primary_agent
from a2a_bridge.agents.instructions import resolve_instructions

__all__ = ["create_judge_agent", "create_primary_agent", "resolve_instructions"]

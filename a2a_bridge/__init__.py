"""A2A bridge for OpenAI Agents SDK agents."""

from a2a_bridge.executor import (
    OpenAIAgentExecutor,
    StructuredResponse,
    StructuredResponseWithArtifacts,
)
from a2a_bridge.factory import build_executor

__all__ = [
    "OpenAIAgentExecutor",
    "StructuredResponse",
    "StructuredResponseWithArtifacts",
    "build_executor",
]

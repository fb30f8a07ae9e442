"""A2A executor for OpenAI Agents SDK agents."""

from a2a_bridge.executor.errors import A2ABridgeError, UnsupportedItemKindError
from a2a_bridge.executor.judge import JudgeDriver
from a2a_bridge.executor.mcp import McpLifecycle, build_mcp_servers
from a2a_bridge.executor.models import (
    ArtifactDataPart,
    ArtifactTextPart,
    JudgeTaskState,
    StructuredResponse,
    StructuredResponseArtifact,
    StructuredResponseWithArtifacts,
)
from a2a_bridge.executor.openai import OpenAIAgentExecutor
from a2a_bridge.executor.publisher import EventPublisher
from a2a_bridge.executor.sessions import SessionCache, SessionProvider
from a2a_bridge.executor.translator import EventTranslator

__all__ = [
    "A2ABridgeError",
    "ArtifactDataPart",
    "ArtifactTextPart",
    "EventPublisher",
    "EventTranslator",
    "JudgeDriver",
    "JudgeTaskState",
    "McpLifecycle",
    "OpenAIAgentExecutor",
    "SessionCache",
    "SessionProvider",
    "StructuredResponse",
    "StructuredResponseArtifact",
    "StructuredResponseWithArtifacts",
    "UnsupportedItemKindError",
    "build_mcp_servers",
]

"""Wire an OpenAIAgentExecutor from settings: agents, SQLite sessions, MCP servers."""

import logging
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv

from a2a_bridge import secrets
from a2a_bridge.agents import create_judge_agent, create_primary_agent
from a2a_bridge.executor import OpenAIAgentExecutor, SessionProvider, build_mcp_servers
from a2a_bridge.settings import get_setting, load_settings

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

__all__ = ["build_executor", "sqlite_session_provider"]


def sqlite_session_provider(db_path: Path) -> SessionProvider:
    """Session provider storing each context's history in one SQLite file."""
    from agents import SQLiteSession

    db_path.parent.mkdir(parents=True, exist_ok=True)

    def provide(context_id: str) -> SQLiteSession:
        return SQLiteSession(context_id, str(db_path))

    return provide


async def build_executor(
    settings: dict[str, Any] | None = None,
    project_root: Path | None = None,
    tools: Sequence[Any] = (),
) -> OpenAIAgentExecutor:
    """Executor built from settings (load_settings() when None). Relative paths resolve against project_root."""
    root = project_root or _PROJECT_ROOT
    load_dotenv(root / ".env")
    if settings is None:
        settings = load_settings()

    mcp_servers = await build_mcp_servers(
        get_setting(settings, "mcp.servers", []), secrets.get_secret
    )
    agent = create_primary_agent(settings, tools=tools, mcp_servers=mcp_servers)
    judge_agent = create_judge_agent(settings)

    session_provider = None
    if get_setting(settings, "session.enabled", True):
        db_path = root / get_setting(settings, "session.db_path", "data/sessions.db")
        session_provider = sqlite_session_provider(db_path)

    logger.info(
        "executor ready: agent=%s judge=%s mcp_servers=%d sessions=%s",
        agent.name,
        judge_agent.name,
        len(mcp_servers),
        session_provider is not None,
    )
    return OpenAIAgentExecutor(
        agent,
        judge_agent,
        session_provider=session_provider,
        mcp_servers=mcp_servers,
        max_turns=get_setting(settings, "runner.max_turns"),
    )

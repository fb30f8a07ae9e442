"""MCP servers: build from config, connect before a run, clean up after it on every exit path."""

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence

from agents.mcp import (
    MCPServerManager,
    MCPServerStdio,
    MCPServerStreamableHttp,
    create_static_tool_filter,
)

if TYPE_CHECKING:
    from agents.mcp import MCPServer

logger = logging.getLogger(__name__)

_SECRET_PATTERN = re.compile(r"\$\{(\w+)\}")

SecretGetter = Callable[[str], Awaitable[str | None]]

__all__ = ["McpLifecycle", "build_mcp_servers"]


def _server_name(server: Any) -> str:
    return str(getattr(server, "name", "?"))


class McpLifecycle:
    """Scoped connect/cleanup for a fixed set of MCP servers, driven by MCPServerManager.

    connect_all fails fast and leaves nothing connected behind; close_all never raises
    and logs each server that failed to close. Overlapping runs share one connection:
    the first connect_all connects, the last matching close_all cleans up.
    """

    def __init__(self, servers: Sequence["MCPServer"] | None = None) -> None:
        self._servers: list["MCPServer"] = list(servers or [])
        self._manager = MCPServerManager(
            self._servers,
            strict=True,
            drop_failed_servers=False,
            connect_in_parallel=True,
        )
        self._lock = asyncio.Lock()
        self._users = 0

    @property
    def servers(self) -> list["MCPServer"]:
        return list(self._servers)

    async def connect_all(self) -> None:
        if not self._servers:
            return
        async with self._lock:
            if self._users == 0:
                await self._manager.connect_all()
                logger.info("mcp: connected %d server(s)", len(self._servers))
            self._users += 1

    async def close_all(self) -> None:
        if not self._servers:
            return
        async with self._lock:
            if self._users > 1:
                self._users -= 1
                return
            self._users = 0
            previous = self._manager.errors
            await self._manager.cleanup_all()
            for server, error in self._manager.errors.items():
                if previous.get(server) is not error:
                    logger.error(
                        "mcp: failed to close server %s: %s",
                        _server_name(server),
                        error,
                        exc_info=error,
                    )

    async def __aenter__(self) -> "McpLifecycle":
        await self.connect_all()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_all()


async def _resolve_secrets_in_string(value: str, get_secret: SecretGetter) -> str | None:
    """Replace ${NAME} with secret. Return None if any secret is missing."""
    result_parts: list[str] = []
    last_end = 0
    for match in _SECRET_PATTERN.finditer(value):
        secret = await get_secret(match.group(1))
        if secret is None:
            return None
        result_parts.append(value[last_end : match.start()])
        result_parts.append(secret)
        last_end = match.end()
    result_parts.append(value[last_end:])
    return "".join(result_parts)


async def _resolve_entry_secrets(
    entry: dict[str, Any], get_secret: SecretGetter
) -> dict[str, Any] | None:
    """Resolve ${NAME} in url and in headers/env values. Return None if any is missing."""
    resolved: dict[str, Any] = dict(entry)
    if isinstance(resolved.get("url"), str):
        url = await _resolve_secrets_in_string(resolved["url"], get_secret)
        if url is None:
            return None
        resolved["url"] = url
    for key in ("headers", "env"):
        values = resolved.get(key)
        if not isinstance(values, dict):
            continue
        out: dict[str, Any] = {}
        for k, v in values.items():
            if isinstance(v, str):
                v = await _resolve_secrets_in_string(v, get_secret)
                if v is None:
                    return None
            out[k] = v
        resolved[key] = out
    return resolved


def _missing_secret_names(entry: dict[str, Any]) -> list[str]:
    parts = [str(entry.get("url", ""))]
    parts.extend(str(v) for v in (entry.get("headers") or {}).values())
    parts.extend(str(v) for v in (entry.get("env") or {}).values())
    return list(dict.fromkeys(_SECRET_PATTERN.findall(" ".join(parts))))


def _common_options(entry: dict[str, Any]) -> dict[str, Any]:
    opts: dict[str, Any] = {"cache_tools_list": bool(entry.get("cache_tools", False))}
    names = entry.get("tool_filter")
    if isinstance(names, list) and names:
        opts["tool_filter"] = create_static_tool_filter(allowed_tool_names=names)
    return opts


def _build_server(alias: str, entry: dict[str, Any]) -> "MCPServer | None":
    """MCPServerStdio or MCPServerStreamableHttp from one config entry. None on bad config."""
    transport = entry.get("transport")
    common = _common_options(entry)

    if transport == "stdio":
        command = entry.get("command")
        if not command:
            logger.warning("mcp: server %s (stdio) missing command", alias)
            return None
        params: dict[str, Any] = {"command": command, "args": list(entry.get("args") or [])}
        if "env" in entry:
            params["env"] = entry["env"]
        return MCPServerStdio(name=alias, params=params, **common)

    if transport == "streamable-http":
        url = entry.get("url")
        if not url:
            logger.warning("mcp: server %s (streamable-http) missing url", alias)
            return None
        params = {"url": url, "timeout": entry.get("timeout", 10)}
        if "headers" in entry:
            params["headers"] = entry["headers"]
        return MCPServerStreamableHttp(name=alias, params=params, **common)

    logger.warning("mcp: server %s: unsupported transport %s", alias, transport)
    return None


async def build_mcp_servers(
    entries: list[dict[str, Any]] | None, get_secret: SecretGetter
) -> list["MCPServer"]:
    """Build servers from mcp.servers config. Bad entries and entries with missing secrets are skipped."""
    if not entries:
        return []
    if not isinstance(entries, list):
        logger.warning("mcp: servers must be a list, got %s", type(entries))
        return []
    servers: list["MCPServer"] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        alias = entry.get("alias")
        if not alias or not entry.get("transport"):
            logger.warning("mcp: server entry missing alias or transport, skip")
            continue
        resolved = await _resolve_entry_secrets(entry, get_secret)
        if resolved is None:
            logger.warning(
                "mcp: skipping server %s: missing secret(s) %s",
                alias,
                _missing_secret_names(entry),
            )
            continue
        server = _build_server(alias, resolved)
        if server is not None:
            servers.append(server)
    return servers

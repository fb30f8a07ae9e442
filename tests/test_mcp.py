"""Tests for McpLifecycle (connect/cleanup) and building MCP servers from config."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from a2a_bridge.executor.mcp import McpLifecycle, build_mcp_servers


def _server(name: str) -> MagicMock:
    server = MagicMock()
    server.name = name
    server.connect = AsyncMock()
    server.cleanup = AsyncMock()
    return server


class TestMcpLifecycle:
    @pytest.mark.asyncio
    async def test_no_servers_is_noop(self) -> None:
        lifecycle = McpLifecycle()
        await lifecycle.connect_all()
        await lifecycle.close_all()
        assert lifecycle.servers == []

    @pytest.mark.asyncio
    async def test_connect_all_connects_every_server(self) -> None:
        a, b = _server("a"), _server("b")
        lifecycle = McpLifecycle([a, b])
        await lifecycle.connect_all()
        a.connect.assert_awaited_once()
        b.connect.assert_awaited_once()
        await lifecycle.close_all()

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self) -> None:
        a, b = _server("a"), _server("b")
        b.connect.side_effect = ConnectionError("refused")
        with pytest.raises(ConnectionError, match="refused"):
            await McpLifecycle([a, b]).connect_all()

    @pytest.mark.asyncio
    async def test_connect_failure_cleans_up_every_server(self) -> None:
        a, b = _server("a"), _server("b")
        b.connect.side_effect = ConnectionError("refused")
        lifecycle = McpLifecycle([a, b])
        with pytest.raises(ConnectionError):
            await lifecycle.connect_all()

        a.cleanup.assert_awaited_once()
        b.cleanup.assert_awaited_once()

        await lifecycle.close_all()
        a.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_all_cleans_up_connected_servers(self) -> None:
        a, b = _server("a"), _server("b")
        lifecycle = McpLifecycle([a, b])
        await lifecycle.connect_all()
        await lifecycle.close_all()
        a.cleanup.assert_awaited_once()
        b.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_overlapping_runs_share_one_connection(self) -> None:
        a = _server("a")
        lifecycle = McpLifecycle([a])
        await lifecycle.connect_all()
        await lifecycle.connect_all()
        a.connect.assert_awaited_once()

        await lifecycle.close_all()
        a.cleanup.assert_not_awaited()
        await lifecycle.close_all()
        a.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scope_closes_when_body_raises(self) -> None:
        a = _server("a")
        with pytest.raises(RuntimeError, match="boom"):
            async with McpLifecycle([a]):
                a.connect.assert_awaited_once()
                raise RuntimeError("boom")
        a.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reconnects_after_close(self) -> None:
        a = _server("a")
        lifecycle = McpLifecycle([a])
        for _ in range(2):
            await lifecycle.connect_all()
            await lifecycle.close_all()
        assert a.connect.await_count == 2
        assert a.cleanup.await_count == 2

    @pytest.mark.asyncio
    async def test_close_failure_does_not_block_other_servers(self) -> None:
        a, b = _server("a"), _server("b")
        a.cleanup.side_effect = RuntimeError("stuck")
        lifecycle = McpLifecycle([a, b])
        await lifecycle.connect_all()

        await lifecycle.close_all()

        a.cleanup.assert_awaited_once()
        b.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        a = _server("weather")
        a.cleanup.side_effect = RuntimeError("stuck")
        lifecycle = McpLifecycle([a])
        await lifecycle.connect_all()
        with caplog.at_level("ERROR", logger="a2a_bridge.executor.mcp"):
            await lifecycle.close_all()
        assert "mcp: failed to close server weather" in caplog.text


async def _secrets(name: str) -> str | None:
    return {"TOKEN": "s3cret"}.get(name)


class TestBuildMcpServers:
    @pytest.mark.asyncio
    async def test_stdio_and_http_servers(self) -> None:
        entries = [
            {"alias": "files", "transport": "stdio", "command": "npx", "args": ["srv"]},
            {
                "alias": "weather",
                "transport": "streamable-http",
                "url": "https://example.com/mcp",
                "headers": {"Authorization": "Bearer ${TOKEN}"},
            },
        ]
        with patch("a2a_bridge.executor.mcp.MCPServerStdio") as stdio, patch(
            "a2a_bridge.executor.mcp.MCPServerStreamableHttp"
        ) as http:
            servers = await build_mcp_servers(entries, _secrets)

        assert servers == [stdio.return_value, http.return_value]
        assert stdio.call_args.kwargs["name"] == "files"
        assert stdio.call_args.kwargs["params"] == {"command": "npx", "args": ["srv"]}
        http_params = http.call_args.kwargs["params"]
        assert http_params["url"] == "https://example.com/mcp"
        assert http_params["headers"] == {"Authorization": "Bearer s3cret"}

    @pytest.mark.asyncio
    async def test_missing_secret_skips_server(self) -> None:
        entries = [
            {
                "alias": "weather",
                "transport": "streamable-http",
                "url": "https://example.com/mcp?key=${MISSING}",
            }
        ]
        with patch("a2a_bridge.executor.mcp.MCPServerStreamableHttp") as http:
            servers = await build_mcp_servers(entries, _secrets)
        assert servers == []
        http.assert_not_called()

    @pytest.mark.asyncio
    async def test_bad_entries_skipped(self) -> None:
        entries = [
            "not-a-dict",
            {"transport": "stdio", "command": "x"},
            {"alias": "nocmd", "transport": "stdio"},
            {"alias": "ws", "transport": "websocket", "url": "ws://x"},
        ]
        with patch("a2a_bridge.executor.mcp.MCPServerStdio") as stdio:
            servers = await build_mcp_servers(entries, _secrets)
        assert servers == []
        stdio.assert_not_called()

    @pytest.mark.asyncio
    async def test_tool_filter_and_cache_options(self) -> None:
        entries = [
            {
                "alias": "files",
                "transport": "stdio",
                "command": "npx",
                "cache_tools": True,
                "tool_filter": ["read_file"],
            }
        ]
        with patch("a2a_bridge.executor.mcp.MCPServerStdio") as stdio:
            await build_mcp_servers(entries, _secrets)
        kwargs = stdio.call_args.kwargs
        assert kwargs["cache_tools_list"] is True
        assert "tool_filter" in kwargs

    @pytest.mark.asyncio
    async def test_empty_config(self) -> None:
        assert await build_mcp_servers(None, _secrets) == []
        assert await build_mcp_servers([], _secrets) == []

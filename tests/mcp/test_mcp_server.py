# -*- coding: utf-8 -*-
# filename: test_mcp_server.py
# @Time    : 2025/11/14 10:30
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP Server 测试 | MCP Server Tests
"""

import json
import os
from collections.abc import Generator
from typing import Any

import pytest
from confz import DataSource
from starlette.applications import Starlette

from edit4ai.mcp.config import MCPServerConfig
from edit4ai.mcp.server import EditMCPServer


@pytest.fixture
def mcp_server(temp_dir) -> Generator[EditMCPServer, Any, None]:
    """
    创建 MCP Server 实例 | Create an MCP Server instance
    """
    with MCPServerConfig.change_config_sources(
        DataSource(data={"root_dir": temp_dir, "project_name": "test-edit4ai", "search_exclude": "**/.git, **/build"})
    ):
        config = MCPServerConfig()
    server = EditMCPServer(config)
    yield server
    server.close()


def test_config_to_workspace_kwargs(mcp_server, temp_dir) -> None:
    kwargs = mcp_server.config.to_workspace_kwargs()
    assert kwargs["root_dir"] == temp_dir
    assert kwargs["project_name"] == "test-edit4ai"
    assert kwargs["workspace_folders"] is None
    assert kwargs["workspace_setting"]["search_exclude"] == ["**/.git", "**/build"]
    assert mcp_server.workspace.workspace_folders == [temp_dir]


@pytest.mark.asyncio
async def test_list_tools(mcp_server) -> None:
    tools = await mcp_server.list_tools()
    assert {tool.name for tool in tools} == {"ApplyWorkspaceEdit", "CreateFile", "DeleteFile", "RenameFile", "Glob"}
    for tool in tools:
        assert tool.inputSchema["type"] == "object"


@pytest.mark.asyncio
async def test_call_tool_returns_json(mcp_server, temp_dir) -> None:
    contents = await mcp_server.call_tool("CreateFile", {"uri": "hello.txt"})
    assert len(contents) == 1
    result = json.loads(contents[0].text)
    assert result["success"] is True
    assert os.path.isfile(os.path.join(temp_dir, "hello.txt"))

    contents = await mcp_server.call_tool("Glob", {"pattern": "*.txt"})
    result = json.loads(contents[0].text)
    assert result["count"] == 1


@pytest.mark.asyncio
async def test_call_unknown_tool(mcp_server) -> None:
    contents = await mcp_server.call_tool("FormatFile", {})
    assert "FormatFile" in contents[0].text


def test_create_http_app(mcp_server) -> None:
    app = mcp_server.create_http_app()
    assert isinstance(app, Starlette)
    assert [route.path for route in app.routes] == ["/mcp"]

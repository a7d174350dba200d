# -*- coding: utf-8 -*-
# filename: test_mcp_tools.py
# @Time    : 2025/11/14 10:00
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP 工具测试 | MCP Tool Tests
"""

import os

import pytest

from edit4ai.mcp.tools import ApplyWorkspaceEditTool, CreateFileTool, DeleteFileTool, GlobTool, RenameFileTool
from edit4ai.utils import path_to_uri


@pytest.mark.parametrize(
    ("tool_cls", "name", "field"),
    [
        (ApplyWorkspaceEditTool, "ApplyWorkspaceEdit", "workspace_edit"),
        (CreateFileTool, "CreateFile", "uri"),
        (DeleteFileTool, "DeleteFile", "recursive"),
        (RenameFileTool, "RenameFile", "new_uri"),
        (GlobTool, "Glob", "pattern"),
    ],
)
def test_tool_properties(workspace, tool_cls, name, field):
    """
    测试工具的属性 | Test tool properties
    """
    tool = tool_cls(workspace)
    assert tool.name == name
    assert isinstance(tool.description, str) and len(tool.description) > 0
    schema = tool.input_schema
    assert "properties" in schema
    assert field in schema["properties"]


@pytest.mark.asyncio
async def test_file_operation_tools(temp_dir, workspace):
    create = CreateFileTool(workspace)
    result = await create.execute({"uri": "docs/a.md"})
    assert result["success"] is True
    assert os.path.isfile(os.path.join(temp_dir, "docs", "a.md"))

    result = await create.execute({"uri": "docs/a.md"})
    assert result["success"] is False
    assert result["error"]

    rename = RenameFileTool(workspace)
    result = await rename.execute({"old_uri": "docs/a.md", "new_uri": "docs/b.md"})
    assert result["success"] is True
    assert os.path.isfile(os.path.join(temp_dir, "docs", "b.md"))

    delete = DeleteFileTool(workspace)
    result = await delete.execute({"uri": "docs"})
    assert result["success"] is False
    result = await delete.execute({"uri": "docs", "recursive": True})
    assert result["success"] is True
    assert not os.path.exists(os.path.join(temp_dir, "docs"))


@pytest.mark.asyncio
async def test_tool_argument_validation(workspace):
    result = await CreateFileTool(workspace).execute({"overwrite": True})
    assert result["success"] is False
    assert "参数验证失败" in result["error"]

    result = await GlobTool(workspace).execute({"pattern": "*", "max_results": 0})
    assert result["success"] is False


@pytest.mark.asyncio
async def test_apply_workspace_edit_tool(temp_dir, workspace):
    uri = path_to_uri(os.path.join(temp_dir, "new.py"))
    tool = ApplyWorkspaceEditTool(workspace)
    result = await tool.execute(
        {
            "workspace_edit": {
                "documentChanges": [
                    {"kind": "create", "uri": uri},
                    {
                        "textDocument": {"uri": uri, "version": 0},
                        "edits": [
                            {
                                "range": {"start": {"line": 0, "character": 0}, "end": {"line": 0, "character": 0}},
                                "newText": "x = 1\n",
                            }
                        ],
                    },
                ]
            }
        }
    )
    assert result["success"] is True
    assert workspace.read_file(uri=uri) == "x = 1\n"

    result = await tool.execute(
        {"workspace_edit": {"documentChanges": [{"textDocument": {"uri": uri, "version": 0}, "edits": []}]}}
    )
    assert result["success"] is False
    assert result["metadata"]["reward"] == 0.0


@pytest.mark.asyncio
async def test_glob_tool(temp_dir, workspace, make_file):
    make_file(os.path.join(temp_dir, "src", "a.py"))
    make_file(os.path.join(temp_dir, "src", "b.py"))
    make_file(os.path.join(temp_dir, "tests", "test_a.py"))

    tool = GlobTool(workspace)
    result = await tool.execute({"pattern": "**/*.py"})
    assert result["success"] is True
    assert result["count"] == 3

    result = await tool.execute({"pattern": "*.py", "path": "src", "max_results": 1})
    assert result["files"] == [path_to_uri(os.path.join(temp_dir, "src", "a.py"))]

    result = await tool.execute({"pattern": "**/*.py", "exclude": ["tests/**"]})
    assert result["count"] == 2

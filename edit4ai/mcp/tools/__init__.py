# filename: __init__.py
# @Time    : 2025/11/12 14:30
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP 工具实现 | MCP Tools Implementation
"""

from edit4ai.mcp.tools.apply_edit import ApplyWorkspaceEditTool
from edit4ai.mcp.tools.file_ops import CreateFileTool, DeleteFileTool, RenameFileTool
from edit4ai.mcp.tools.glob import GlobTool

__all__ = ["ApplyWorkspaceEditTool", "CreateFileTool", "DeleteFileTool", "GlobTool", "RenameFileTool"]

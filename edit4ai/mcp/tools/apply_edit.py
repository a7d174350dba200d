# filename: apply_edit.py
# @Time    : 2025/11/12 14:50
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
ApplyWorkspaceEdit 工具实现 | ApplyWorkspaceEdit Tool Implementation

以原子方式应用 LSP WorkspaceEdit，失败时整体回滚
Applies an LSP WorkspaceEdit as one unit, rolling everything back on failure
"""

from typing import Any

from loguru import logger

from edit4ai.mcp.schemas.tools import ApplyWorkspaceEditInput, FileOperationOutput
from edit4ai.mcp.tools.base import BaseTool


class ApplyWorkspaceEditTool(BaseTool):
    """
    工作区编辑工具 | Workspace edit tool
    """

    @property
    def name(self) -> str:
        return "ApplyWorkspaceEdit"

    @property
    def description(self) -> str:
        return (
            "应用一个 LSP WorkspaceEdit | Apply an LSP WorkspaceEdit\n\n"
            "功能特性 | Features:\n"
            "- 文本编辑与创建/删除/重命名文件按顺序执行 | Text edits and file operations run in order\n"
            "- 指定 version 时校验文档版本 | Document versions are checked when given\n"
            "- 任意一步失败时全部回滚 | Everything is rolled back when a step fails\n"
            "- 编辑中的 Position 均为 0-based | Positions are zero-based"
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return ApplyWorkspaceEditInput.model_json_schema()

    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            tool_input = self.validate_input(arguments, ApplyWorkspaceEditInput)
        except ValueError as e:
            err_info = f"参数验证失败 | Argument validation failed: {e}"
            logger.error(err_info)
            return FileOperationOutput(success=False, error=err_info).model_dump()

        action = {
            "category": "workspace",
            "action_name": "apply_workspace_edit",
            "action_args": {"workspace_edit": tool_input.workspace_edit, "active_uri": tool_input.active_uri},
        }
        obs, reward, done, success, info = self.workspace.step(action)
        logger.info(f"WorkspaceEdit 执行完成 | Workspace edit finished: success={success}")
        return FileOperationOutput(
            success=bool(success),
            message=str(obs.get("obs", "")),
            error=None if success else str(obs.get("obs", "")),
            metadata={"reward": float(reward), "done": done},
        ).model_dump()

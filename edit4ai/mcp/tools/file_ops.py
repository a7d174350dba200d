# filename: file_ops.py
# @Time    : 2025/11/12 15:10
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
文件操作工具实现 | File operation tools

CreateFile / DeleteFile / RenameFile 三个工具共享同一套执行流程，只是动作名与参数模型不同
The three tools share one execution flow and differ in action name and input model
"""

from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel

from edit4ai.mcp.schemas.tools import CreateFileInput, DeleteFileInput, FileOperationOutput, RenameFileInput
from edit4ai.mcp.tools.base import BaseTool


class FileOperationTool(BaseTool):
    """
    文件操作工具基类 | Base of the file operation tools
    """

    action_name: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            tool_input = self.validate_input(arguments, self.input_model)
        except ValueError as e:
            err_info = f"参数验证失败 | Argument validation failed: {e}"
            logger.error(err_info)
            return FileOperationOutput(success=False, error=err_info).model_dump()

        action = {
            "category": "workspace",
            "action_name": self.action_name,
            "action_args": tool_input.model_dump(),
        }
        try:
            obs, reward, done, success, info = self.workspace.step(action)
        except Exception as e:
            logger.exception(f"{self.name} 执行出错 | {self.name} failed: {e}")
            return FileOperationOutput(
                success=False, error=str(e), metadata={"exception_type": type(e).__name__}
            ).model_dump()
        logger.info(f"{self.name} 执行完成 | {self.name} finished: success={success}")
        return FileOperationOutput(
            success=bool(success),
            message=str(obs.get("obs", "")),
            error=None if success else info.get("error", str(obs.get("obs", ""))),
            metadata={"reward": float(reward), "done": done},
        ).model_dump()


class CreateFileTool(FileOperationTool):
    action_name = "create_file"
    input_model = CreateFileInput

    @property
    def name(self) -> str:
        return "CreateFile"

    @property
    def description(self) -> str:
        return (
            "创建文件，缺失的上级目录会一并创建 | Create a file, missing parent folders are created too\n"
            "- overwrite 优先于 ignore_if_exists | overwrite wins over ignore_if_exists"
        )


class DeleteFileTool(FileOperationTool):
    action_name = "delete_file"
    input_model = DeleteFileInput

    @property
    def name(self) -> str:
        return "DeleteFile"

    @property
    def description(self) -> str:
        return (
            "删除文件或目录，已打开的文档会被关闭 | Delete a file or folder, open documents are closed\n"
            "- 非空目录需要 recursive | A non-empty folder requires recursive"
        )


class RenameFileTool(FileOperationTool):
    action_name = "rename_file"
    input_model = RenameFileInput

    @property
    def name(self) -> str:
        return "RenameFile"

    @property
    def description(self) -> str:
        return (
            "重命名或移动文件/目录，已打开的文档随之迁移 | Rename or move a file or folder, open documents follow it"
        )

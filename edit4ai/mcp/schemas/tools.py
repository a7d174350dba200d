# filename: tools.py
# @Time    : 2025/11/12 14:20
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP 工具的输入输出模型 | Input and output models of the MCP tools
"""

from typing import Any

from pydantic import BaseModel, Field


class ApplyWorkspaceEditInput(BaseModel):
    """ApplyWorkspaceEdit 工具输入 | ApplyWorkspaceEdit tool input"""

    workspace_edit: dict[str, Any] = Field(
        ...,
        description=(
            "LSP WorkspaceEdit，支持 changes 与 documentChanges（TextDocumentEdit / CreateFile / RenameFile / "
            "DeleteFile）| An LSP WorkspaceEdit with changes and/or documentChanges"
        ),
    )
    active_uri: str | None = Field(
        None,
        description="当前聚焦文档的 URI，被编辑时会调整光标 | Focused document uri, its cursor follows the edit",
    )


class CreateFileInput(BaseModel):
    """CreateFile 工具输入 | CreateFile tool input"""

    uri: str = Field(..., description="文件 URI 或路径，相对路径基于工作区根目录 | File uri or path")
    overwrite: bool | None = Field(None, description="文件存在时覆盖 | Overwrite an existing file")
    ignore_if_exists: bool | None = Field(None, description="文件存在时忽略 | Do nothing when the file exists")


class DeleteFileInput(BaseModel):
    """DeleteFile 工具输入 | DeleteFile tool input"""

    uri: str = Field(..., description="文件或目录 URI | File or folder uri")
    recursive: bool | None = Field(None, description="递归删除非空目录 | Delete a non-empty folder recursively")
    ignore_if_not_exists: bool | None = Field(None, description="不存在时忽略 | Do nothing when it does not exist")


class RenameFileInput(BaseModel):
    """RenameFile 工具输入 | RenameFile tool input"""

    old_uri: str = Field(..., description="源 URI | Source uri")
    new_uri: str = Field(..., description="目标 URI | Destination uri")
    overwrite: bool | None = Field(None, description="目标存在时覆盖 | Overwrite an existing destination")
    ignore_if_exists: bool | None = Field(None, description="目标存在时忽略 | Do nothing when the destination exists")


class GlobInput(BaseModel):
    """Glob 工具输入 | Glob tool input"""

    pattern: str = Field(..., description="glob 模式，如 **/*.py | Glob pattern such as **/*.py")
    path: str | None = Field(None, description="只在该目录下搜索 | Only search under this folder")
    exclude: list[str] | None = Field(None, description="排除模式 | Exclude patterns")
    max_results: int | None = Field(None, ge=1, description="结果上限 | Result ceiling")


class FileOperationOutput(BaseModel):
    """文件操作类工具的输出 | Output of the file operation tools"""

    success: bool
    message: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GlobOutput(BaseModel):
    """Glob 工具输出 | Glob tool output"""

    success: bool
    files: list[str] = Field(default_factory=list)
    count: int = 0
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

# filename: __init__.py
# @Time    : 2025/11/10 10:20
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
edit4ai: 工作区编辑与文件操作引擎 | Workspace edit & file operation engine
"""

from edit4ai.environment.workspace import (
    EditWorkspace,
    FileOperationExecutor,
    WorkspaceEditApplier,
    WorkspaceSetting,
)

__all__ = [
    "EditWorkspace",
    "FileOperationExecutor",
    "WorkspaceEditApplier",
    "WorkspaceSetting",
]

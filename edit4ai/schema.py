# filename: schema.py
# @Time    : 2025/11/12 09:30
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

WORKSPACE_ACTIONS = {
    "apply_workspace_edit",
    "create_file",
    "delete_file",
    "rename_file",
    "find_files",
    "open_file",
    "open_files",
    "read_file",
    "save_file",
    "close_file",
}


class WorkspaceAction(BaseModel):
    """
    工作区动作 | Workspace action

    Attributes:
        category (Literal["workspace"]): 动作类别 | Action category
        action_name (str): 动作名称，取值见 WORKSPACE_ACTIONS | Action name, one of WORKSPACE_ACTIONS
        action_args (dict[str, Any] | str | None): 动作参数 | Action arguments
    """

    category: Literal["workspace"] = "workspace"
    action_name: str
    action_args: dict[str, Any] | str | None = None


class WorkspaceObs(BaseModel):
    """
    工作区观察结果 | Workspace observation
    """

    created_at: str = Field(default_factory=lambda: datetime.datetime.now().isoformat())
    obs: str
    original_result: Any = None

# filename: base.py
# @Time    : 2025/11/12 14:35
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP 工具基类 | MCP tool base class
"""

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from edit4ai.environment.workspace.workspace import EditWorkspace

InputT = TypeVar("InputT", bound=BaseModel)


class BaseTool(ABC):
    """
    MCP 工具基类，所有工具通过 EditWorkspace 执行 | Base of the MCP tools, every tool runs through EditWorkspace

    Attributes:
        workspace (EditWorkspace): 工作区环境 | Workspace environment
    """

    def __init__(self, workspace: EditWorkspace) -> None:
        self.workspace = workspace

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """返回 JSON Schema 格式的输入定义 | Return input definition in JSON Schema format"""

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]: ...

    @staticmethod
    def validate_input(arguments: dict[str, Any], model: type[InputT]) -> InputT:
        """
        校验工具参数 | Validate tool arguments

        Raises:
            ValueError: 参数不合法 | Invalid arguments
        """
        try:
            return model.model_validate(arguments)
        except ValidationError as e:
            raise ValueError(str(e)) from e

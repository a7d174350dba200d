# filename: exceptions.py
# @Time    : 2025/11/10 10:12
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
编辑引擎异常定义 | Edit engine exception definitions

所有异常都携带 message 与 detail_for_llm 两部分信息，前者用于日志，后者用于直接反馈给调用方（通常是 LLM）。
Every exception carries a message (for logs) and a detail_for_llm (fed back to the caller, usually an LLM).
"""


class EditEngineError(Exception):
    """
    编辑引擎异常基类 | Base class of edit engine errors

    Attributes:
        message (str): 异常信息 | Error message
        detail_for_llm (str): 面向调用方的详细说明 | Detail for the caller
    """

    def __init__(self, message: str, detail_for_llm: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail_for_llm = detail_for_llm or message

    def __str__(self) -> str:
        return self.message


class ConflictError(EditEngineError):
    """文档版本不一致，视为并发修改 | Document version mismatch, treated as a concurrent modification"""


class InvalidEditError(EditEngineError):
    """文本编辑非法，例如 Range 重叠 | Invalid text edits, e.g. overlapping ranges"""


class FileOperationError(EditEngineError):
    """文件操作异常基类 | Base class of file operation errors"""


class AlreadyExistsError(FileOperationError):
    """目标已存在且未设置 overwrite / ignoreIfExists | Target exists without overwrite / ignoreIfExists"""


class NotFoundError(FileOperationError):
    """源文件不存在且未设置 ignoreIfNotExists | Source missing without ignoreIfNotExists"""


class UnsupportedSchemeError(FileOperationError):
    """文件操作的 URI 不是文件系统 URI | File operation targets a non-filesystem URI"""


class WorkspaceIOError(FileOperationError):
    """其它文件系统错误（权限、磁盘已满等）| Any other filesystem failure (permission, disk full...)"""

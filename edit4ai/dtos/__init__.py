# filename: __init__.py
# @Time    : 2025/11/10 10:28
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
LSP 协议数据结构 | LSP protocol data structures
"""

from edit4ai.dtos.file_resource import (
    LSPCreateFile,
    LSPCreateFileOptions,
    LSPDeleteFile,
    LSPDeleteFileOptions,
    LSPRenameFile,
    LSPRenameFileOptions,
)
from edit4ai.dtos.text_documents import (
    LSPChangeAnnotation,
    LSPOptionalVersionedTextDocumentIdentifier,
    LSPPosition,
    LSPRange,
    LSPTextDocumentEdit,
    LSPTextEdit,
)
from edit4ai.dtos.workspace_edit import LSPWorkspaceEdit, WorkspaceChange

__all__ = [
    "LSPChangeAnnotation",
    "LSPCreateFile",
    "LSPCreateFileOptions",
    "LSPDeleteFile",
    "LSPDeleteFileOptions",
    "LSPOptionalVersionedTextDocumentIdentifier",
    "LSPPosition",
    "LSPRange",
    "LSPRenameFile",
    "LSPRenameFileOptions",
    "LSPTextDocumentEdit",
    "LSPTextEdit",
    "LSPWorkspaceEdit",
    "WorkspaceChange",
]

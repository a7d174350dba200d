# filename: __init__.py
# @Time    : 2025/11/10 15:10
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm

from edit4ai.environment.workspace.buffer_host import BufferHost, InMemoryBufferHost
from edit4ai.environment.workspace.document_store import DocumentStore, InMemoryDocumentStore
from edit4ai.environment.workspace.edit_applier import WorkspaceEditApplier
from edit4ai.environment.workspace.files import FileOperationExecutor, PathSnapshot
from edit4ai.environment.workspace.model import TextDocument
from edit4ai.environment.workspace.recovery import RecoverFunc, run_recover_funcs
from edit4ai.environment.workspace.search import (
    CancellationToken,
    CancellationTokenSource,
    FileSearcher,
    RelativePattern,
    afind_files,
    check_folder,
    find_files,
)
from edit4ai.environment.workspace.workspace import EditWorkspace, WorkspaceSetting

__all__ = [
    "BufferHost",
    "CancellationToken",
    "CancellationTokenSource",
    "DocumentStore",
    "EditWorkspace",
    "FileOperationExecutor",
    "FileSearcher",
    "InMemoryBufferHost",
    "InMemoryDocumentStore",
    "PathSnapshot",
    "RecoverFunc",
    "RelativePattern",
    "TextDocument",
    "WorkspaceEditApplier",
    "WorkspaceSetting",
    "afind_files",
    "check_folder",
    "find_files",
    "run_recover_funcs",
]

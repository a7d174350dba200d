# filename: conftest.py
# @Time    : 2025/11/13 10:00
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import os
from collections.abc import Generator
from tempfile import TemporaryDirectory
from typing import Any

import pytest

from edit4ai.environment.workspace.buffer_host import InMemoryBufferHost
from edit4ai.environment.workspace.document_store import InMemoryDocumentStore
from edit4ai.environment.workspace.edit_applier import WorkspaceEditApplier
from edit4ai.environment.workspace.files import FileOperationExecutor
from edit4ai.environment.workspace.workspace import EditWorkspace


@pytest.fixture
def temp_dir() -> Generator[str, Any, None]:
    with TemporaryDirectory() as tmpdirname:
        yield os.path.realpath(tmpdirname)


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def buffer_host() -> InMemoryBufferHost:
    return InMemoryBufferHost()


@pytest.fixture
def executor(document_store, buffer_host) -> FileOperationExecutor:
    return FileOperationExecutor(document_store, buffer_host)


@pytest.fixture
def applier(document_store, buffer_host, executor) -> WorkspaceEditApplier:
    return WorkspaceEditApplier(document_store, buffer_host, executor)


@pytest.fixture
def workspace(temp_dir) -> Generator[EditWorkspace, Any, None]:
    ws = EditWorkspace(root_dir=temp_dir, project_name="edit4ai_for_test")
    yield ws
    ws.close()


@pytest.fixture
def make_file():
    """
    返回一个写文件的辅助函数，会自动创建上级目录 | A helper writing a file, parent folders included
    """

    def _make_file(path: str, content: str = "") -> str:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return _make_file

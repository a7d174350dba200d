# filename: document_store.py
# @Time    : 2025/11/10 16:25
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
文档仓库 | Document store

维护 URI 到内存文档的映射。编辑引擎通过构造函数注入该依赖，测试中可替换为内存实现。
Maps an uri to its in-memory document. The edit engine receives it through its constructor so tests can substitute
the in-memory implementation.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from overrides import override

from edit4ai.dtos.text_documents import LSPTextEdit
from edit4ai.environment.workspace.model import TextDocument


class DocumentStore(ABC):
    """
    文档仓库接口 | Document store interface
    """

    @abstractmethod
    def get(self, uri: str) -> TextDocument | None:
        """获取已打开的文档 | Get an open document"""

    @abstractmethod
    def open(self, uri: str, content: str, version: int = 0) -> TextDocument:
        """打开文档，已存在时替换 | Open a document, replacing an existing one"""

    @abstractmethod
    def apply_patch(self, uri: str, edits: Sequence[LSPTextEdit]) -> int:
        """应用合并补丁并返回新版本 | Apply a combined patch and return the new version"""

    @abstractmethod
    def close(self, uri: str) -> TextDocument | None:
        """关闭文档并返回被关闭的文档 | Close a document and return it"""

    @abstractmethod
    def rename(self, old_uri: str, new_uri: str) -> TextDocument | None:
        """将文档身份迁移到新 URI，内容与版本保持不变 | Move a document to a new uri, keeping content and version"""

    @abstractmethod
    def reset(self, uri: str, content: str, version: int) -> TextDocument:
        """强制设置文档内容与版本，用于回滚 | Force content and version, used by rollback"""

    @abstractmethod
    def uris(self) -> list[str]:
        """所有已打开文档的 URI | Uris of every open document"""


class InMemoryDocumentStore(DocumentStore):
    """
    基于字典的线程安全文档仓库 | Dict backed, thread-safe document store
    """

    def __init__(self) -> None:
        self._documents: dict[str, TextDocument] = {}
        self._lock = threading.RLock()

    @override
    def get(self, uri: str) -> TextDocument | None:
        with self._lock:
            return self._documents.get(uri)

    @override
    def open(self, uri: str, content: str, version: int = 0) -> TextDocument:
        with self._lock:
            document = TextDocument(uri, content, version)
            self._documents[uri] = document
            return document

    @override
    def apply_patch(self, uri: str, edits: Sequence[LSPTextEdit]) -> int:
        with self._lock:
            document = self._documents.get(uri)
            if document is None:
                raise KeyError(f"Document not open: {uri}")
            return document.apply_edits(edits)

    @override
    def close(self, uri: str) -> TextDocument | None:
        with self._lock:
            return self._documents.pop(uri, None)

    @override
    def rename(self, old_uri: str, new_uri: str) -> TextDocument | None:
        with self._lock:
            document = self._documents.pop(old_uri, None)
            if document is None:
                return None
            document.uri = new_uri
            self._documents[new_uri] = document
            return document

    @override
    def reset(self, uri: str, content: str, version: int) -> TextDocument:
        with self._lock:
            document = self._documents.get(uri)
            if document is None:
                return self.open(uri, content, version)
            document.set_value(content, version)
            return document

    @override
    def uris(self) -> list[str]:
        with self._lock:
            return list(self._documents)

# filename: buffer_host.py
# @Time    : 2025/11/10 16:50
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
编辑器缓冲区宿主 | Editor buffer host

编辑器中“已打开文件”的身份（缓冲区编号）与光标由宿主维护。编辑引擎只依赖这里定义的窄接口。
The editor host owns open-file identity (buffer numbers) and the cursor. The engine only depends on this narrow
interface.
"""

import os
import threading
from abc import ABC, abstractmethod

from overrides import override

from edit4ai.dtos.text_documents import LSPPosition


class BufferHost(ABC):
    """
    缓冲区宿主接口，路径均为文件系统绝对路径 | Buffer host interface, paths are absolute filesystem paths
    """

    @abstractmethod
    def is_open(self, path: str) -> bool: ...

    @abstractmethod
    def load(self, path: str) -> int:
        """加载缓冲区并返回缓冲区编号 | Load a buffer and return its number"""

    @abstractmethod
    def unload(self, path: str) -> None: ...

    @abstractmethod
    def move_path(self, old_path: str, new_path: str) -> None:
        """将缓冲区指向新路径，编号与光标不变 | Re-point a buffer, keeping its number and cursor"""

    @abstractmethod
    def set_cursor(self, position: LSPPosition) -> None:
        """设置当前聚焦缓冲区的光标 | Set the cursor of the focused buffer"""

    @abstractmethod
    def get_cursor(self) -> LSPPosition:
        """获取当前聚焦缓冲区的光标 | Get the cursor of the focused buffer"""

    @abstractmethod
    def open_paths(self) -> list[str]:
        """所有已加载缓冲区的路径 | Paths of every loaded buffer"""

    @abstractmethod
    def get_bufnr(self, path: str) -> int | None: ...


class InMemoryBufferHost(BufferHost):
    """
    内存实现的缓冲区宿主，模拟编辑器的缓冲区列表与光标
    In-memory buffer host mimicking an editor's buffer list and cursor

    Attributes:
        current (str | None): 当前聚焦缓冲区的路径 | Path of the focused buffer
    """

    def __init__(self) -> None:
        self._buffers: dict[str, int] = {}
        self._cursors: dict[int, LSPPosition] = {}
        self._next_bufnr = 1
        self._lock = threading.RLock()
        self.current: str | None = None

    @staticmethod
    def _key(path: str) -> str:
        return os.path.normpath(path)

    @override
    def is_open(self, path: str) -> bool:
        with self._lock:
            return self._key(path) in self._buffers

    @override
    def load(self, path: str) -> int:
        with self._lock:
            key = self._key(path)
            bufnr = self._buffers.get(key)
            if bufnr is None:
                bufnr = self._next_bufnr
                self._next_bufnr += 1
                self._buffers[key] = bufnr
                self._cursors[bufnr] = LSPPosition(line=0, character=0)
            return bufnr

    @override
    def unload(self, path: str) -> None:
        with self._lock:
            key = self._key(path)
            bufnr = self._buffers.pop(key, None)
            if bufnr is not None:
                self._cursors.pop(bufnr, None)
            if self.current == key:
                self.current = None

    @override
    def move_path(self, old_path: str, new_path: str) -> None:
        with self._lock:
            old_key, new_key = self._key(old_path), self._key(new_path)
            bufnr = self._buffers.pop(old_key, None)
            if bufnr is None:
                return
            self._buffers[new_key] = bufnr
            if self.current == old_key:
                self.current = new_key

    def focus(self, path: str) -> int:
        """
        加载并聚焦缓冲区 | Load and focus a buffer
        """
        with self._lock:
            bufnr = self.load(path)
            self.current = self._key(path)
            return bufnr

    @override
    def set_cursor(self, position: LSPPosition) -> None:
        with self._lock:
            if self.current is None:
                return
            self._cursors[self._buffers[self.current]] = position

    @override
    def get_cursor(self) -> LSPPosition:
        with self._lock:
            if self.current is None:
                return LSPPosition(line=0, character=0)
            return self._cursors[self._buffers[self.current]]

    @override
    def open_paths(self) -> list[str]:
        with self._lock:
            return list(self._buffers)

    @override
    def get_bufnr(self, path: str) -> int | None:
        with self._lock:
            return self._buffers.get(self._key(path))

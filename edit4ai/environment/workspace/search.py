# filename: search.py
# @Time    : 2025/11/11 14:30
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
工作区文件搜索 | Workspace file search

在若干工作区根目录下按 glob 模式查找文件，支持排除模式、结果上限与取消。遍历为按名称排序的深度优先，结果顺序稳定。
Finds files under the workspace roots by glob pattern, with exclude patterns, a result ceiling and cancellation.
The walk is depth-first with entries sorted by name, so the result order is stable.
"""

import asyncio
import os
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from loguru import logger

from edit4ai.utils import match_glob, uri_to_path


class CancellationToken:
    """
    取消令牌，由 CancellationTokenSource 触发 | Cancellation token, triggered by a CancellationTokenSource
    """

    def __init__(self, event: threading.Event | None = None) -> None:
        self._event = event or threading.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()


class CancellationTokenSource:
    """
    取消令牌源，可在其它线程或协程中调用 cancel | Token source, cancel may be called from another thread or task
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.token = CancellationToken(self._event)

    def cancel(self) -> None:
        self._event.set()


@dataclass(frozen=True)
class RelativePattern:
    """
    限定在某个目录下生效的 glob 模式 | A glob pattern scoped to a base folder

    Attributes:
        base (str): 基准目录，路径或 file URI | Base folder, a path or a file uri
        pattern (str): 相对 base 的 glob 模式 | Glob relative to the base
    """

    base: str
    pattern: str

    def __post_init__(self) -> None:
        if not isinstance(self.base, str) or not self.base:
            raise ValueError("RelativePattern base must be a non-empty path or uri")
        if not isinstance(self.pattern, str):
            raise ValueError("RelativePattern pattern must be a string")

    @property
    def base_path(self) -> str:
        return uri_to_path(self.base)


GlobPattern = str | RelativePattern


def _relative(path: str, root: str) -> str:
    rel = os.path.relpath(path, root)
    return rel.replace(os.sep, "/") if os.sep != "/" else rel


class FileSearcher:
    """
    基于 glob 的文件搜索器 | Glob based file searcher

    Attributes:
        roots (list[str]): 工作区根目录 | Workspace roots
        ignore_case (bool): 匹配时是否忽略大小写 | Case insensitive matching
    """

    def __init__(self, roots: Sequence[str], ignore_case: bool = False) -> None:
        self.roots = [uri_to_path(root) for root in roots]
        self.ignore_case = ignore_case

    def _excluded(self, path: str, root: str, exclude: Sequence[GlobPattern], is_dir: bool) -> bool:
        for pattern in exclude:
            if isinstance(pattern, RelativePattern):
                base = pattern.base_path
                rel_path = os.path.normpath(path)
                if rel_path != base and not rel_path.startswith(base.rstrip(os.sep) + os.sep):
                    continue
                glob, rel = pattern.pattern, _relative(path, base)
            else:
                glob, rel = pattern, _relative(path, root)
            if match_glob(glob, rel, self.ignore_case):
                return True
            # "dir/**" 形式的模式同样排除目录本身 | Patterns like "dir/**" exclude the folder itself too
            if is_dir and match_glob(glob, rel + "/", self.ignore_case):
                return True
        return False

    def _walk(
        self,
        root: str,
        directory: str,
        exclude: Sequence[GlobPattern],
        token: CancellationToken | None,
    ) -> Iterator[str]:
        if token is not None and token.is_cancellation_requested:
            return
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            logger.debug(f"跳过无法读取的目录 | Skip unreadable folder {directory}: {e}")
            return
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError:
                continue
            if self._excluded(entry.path, root, exclude, is_dir):
                continue
            if is_dir:
                yield from self._walk(root, entry.path, exclude, token)
                if token is not None and token.is_cancellation_requested:
                    return
            elif is_file:
                yield entry.path

    def find_files(
        self,
        include: GlobPattern,
        exclude: GlobPattern | Sequence[GlobPattern] | None = None,
        max_results: int | None = None,
        token: CancellationToken | None = None,
    ) -> list[str]:
        """
        查找匹配 include 的文件 | Find files matching include

        Args:
            include (GlobPattern): glob 字符串，或只搜索其 base 的 RelativePattern
                A glob string, or a RelativePattern searching only its base
            exclude (GlobPattern | Sequence[GlobPattern] | None): 排除模式，被排除的目录不会进入
                Exclude patterns, excluded folders are not descended into
            max_results (int | None): 结果上限 | Result ceiling
            token (CancellationToken | None): 取消令牌，取消后返回已找到的结果 | Cancelling returns what was found so far

        Returns:
            list[str]: 文件绝对路径 | Absolute file paths
        """
        if isinstance(include, RelativePattern):
            roots, glob = [include.base_path], include.pattern
        else:
            roots, glob = self.roots, include
        if exclude is None:
            excludes: list[GlobPattern] = []
        elif isinstance(exclude, (str, RelativePattern)):
            excludes = [exclude]
        else:
            excludes = list(exclude)
        results: list[str] = []
        if max_results is not None and max_results <= 0:
            return results
        for root in roots:
            if token is not None and token.is_cancellation_requested:
                break
            if not os.path.isdir(root):
                logger.debug(f"搜索根目录不存在 | Search root is not a folder: {root}")
                continue
            for path in self._walk(root, root, excludes, token):
                if not match_glob(glob, _relative(path, root), self.ignore_case):
                    continue
                results.append(path)
                if max_results is not None and len(results) >= max_results:
                    return results
        if token is not None and token.is_cancellation_requested:
            logger.debug(f"文件搜索已取消 | File search cancelled with {len(results)} result(s)")
        return results

    async def afind_files(
        self,
        include: GlobPattern,
        exclude: GlobPattern | Sequence[GlobPattern] | None = None,
        max_results: int | None = None,
        token: CancellationToken | None = None,
    ) -> list[str]:
        """
        在工作线程中执行 find_files | Run find_files in a worker thread
        """
        return await asyncio.to_thread(self.find_files, include, exclude, max_results, token)

    def check_folder(self, directory: str, pattern: str, token: CancellationToken | None = None) -> bool:
        """
        目录下是否存在匹配模式的文件 | Whether any file under the folder matches the pattern
        """
        return bool(self.find_files(RelativePattern(directory, pattern), max_results=1, token=token))


def find_files(
    roots: Sequence[str],
    include: GlobPattern,
    exclude: GlobPattern | Sequence[GlobPattern] | None = None,
    max_results: int | None = None,
    token: CancellationToken | None = None,
) -> list[str]:
    return FileSearcher(roots).find_files(include, exclude, max_results, token)


async def afind_files(
    roots: Sequence[str],
    include: GlobPattern,
    exclude: GlobPattern | Sequence[GlobPattern] | None = None,
    max_results: int | None = None,
    token: CancellationToken | None = None,
) -> list[str]:
    return await FileSearcher(roots).afind_files(include, exclude, max_results, token)


def check_folder(directory: str, pattern: str, token: CancellationToken | None = None) -> bool:
    return FileSearcher([directory]).check_folder(directory, pattern, token)

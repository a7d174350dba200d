# filename: utils.py
# @Time    : 2025/11/10 14:05
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import glob as _glob
import os
import re
import shutil
import stat
import subprocess
from collections.abc import Iterable, Sequence
from enum import IntEnum
from pathlib import Path
from urllib.parse import unquote, urlparse

from cachetools import LRUCache, cached
from loguru import logger


class FileType(IntEnum):
    """
    文件类型，取值与 LSP/VSCode 的 FileType 保持一致 | File type, values follow the LSP/VSCode FileType
    """

    Unknown = 0
    File = 1
    Directory = 2
    SymbolicLink = 64


def get_scheme(uri: str) -> str:
    """
    获取 URI 的 scheme，普通路径视为 file | Scheme of an uri, plain paths count as "file"
    """
    if os.path.isabs(uri):
        return "file"
    scheme = urlparse(uri).scheme
    return scheme or "file"


def uri_to_path(uri: str) -> str:
    """
    将 file:// URI 转换为文件系统路径，普通路径原样返回（转为绝对路径）
    Convert a file:// uri to a filesystem path, plain paths are returned as absolute paths

    Args:
        uri (str): file URI 或路径 | file uri or path

    Returns:
        str: 文件系统绝对路径 | Absolute filesystem path
    """
    if uri.startswith("file://"):
        return os.path.normpath(unquote(urlparse(uri).path))
    return os.path.abspath(uri)


def path_to_uri(path: str) -> str:
    return Path(os.path.abspath(path)).as_uri()


def normalize_uri(uri: str) -> str:
    """
    统一 file URI 的写法（百分号编码、多余的分隔符），其它 scheme 原样返回
    Canonical spelling of file uris (percent encoding, redundant separators), other schemes are kept as is
    """
    if get_scheme(uri) != "file":
        return uri
    return path_to_uri(uri_to_path(uri))


def _translate_glob(pattern: str) -> str:
    i, n = 0, len(pattern)
    parts: list[str] = []
    depth = 0
    while i < n:
        c = pattern[i]
        if c == "*":
            if i + 1 < n and pattern[i + 1] == "*":
                segment_start = i == 0 or pattern[i - 1] == "/"
                j = i + 2
                if segment_start and j < n and pattern[j] == "/":
                    # "**/" 匹配零个或多个目录 | "**/" matches zero or more directories
                    parts.append("(?:.*/)?")
                    i = j + 1
                    continue
                if segment_start and j == n:
                    parts.append(".*")
                    i = j
                    continue
                parts.append("[^/]*")
                i = j
                continue
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                parts.append(re.escape(c))
            else:
                body = pattern[i + 1 : j]
                if body[0] in "!^":
                    body = "^" + body[1:]
                parts.append("[" + body.replace("\\", "\\\\") + "]")
                i = j
        elif c == "{":
            depth += 1
            parts.append("(?:")
        elif c == "}" and depth:
            depth -= 1
            parts.append(")")
        elif c == "," and depth:
            parts.append("|")
        elif c == "\\" and i + 1 < n:
            i += 1
            parts.append(re.escape(pattern[i]))
        else:
            parts.append(re.escape(c))
        i += 1
    if depth:
        # 花括号不成对时按字面量处理 | Unbalanced braces are taken literally
        return _translate_glob(pattern.replace("{", "\\{").replace("}", "\\}"))
    return "".join(parts)


@cached(cache=LRUCache(maxsize=512))
def glob_to_regex(pattern: str, ignore_case: bool = False) -> re.Pattern[str]:
    """
    将 glob 模式编译为正则表达式 | Compile a glob pattern to a regular expression

    支持 | Supports:
        - `*`   : 匹配除 / 以外的任意字符 | any characters except /
        - `**`  : 作为完整路径段时匹配任意层级目录 | any number of directories when it is a whole segment
        - `?`   : 匹配除 / 以外的单个字符 | a single character except /
        - `[seq]` / `[!seq]` : 字符集合 | character classes
        - `{a,b}` : 备选项 | alternation

    点文件同样会被匹配 | Dot files are matched as well.

    Args:
        pattern (str): glob 模式 | glob pattern
        ignore_case (bool): 是否忽略大小写 | Whether to ignore case

    Returns:
        re.Pattern: 编译后的正则，使用 fullmatch 匹配 | Compiled regex, to be used with fullmatch
    """
    if pattern.startswith("./"):
        pattern = pattern[2:]
    flags = re.DOTALL | (re.IGNORECASE if ignore_case else 0)
    return re.compile(_translate_glob(pattern), flags)


def match_glob(pattern: str, path: str, ignore_case: bool = False) -> bool:
    """
    判断路径是否匹配 glob 模式，路径分隔符统一为 / | Whether the path matches the glob, separators normalized to /
    """
    normalized = path.replace(os.sep, "/") if os.sep != "/" else path
    return glob_to_regex(pattern, ignore_case).fullmatch(normalized) is not None


def match_patterns(files: Iterable[str], patterns: Sequence[str]) -> bool:
    """
    任意文件匹配任意模式即返回 True | True when any file matches any pattern
    """
    return any(match_glob(pattern, file) for file in files for pattern in patterns)


def _normalize(path: str) -> str:
    normalized = os.path.normcase(os.path.normpath(path))
    # POSIX 下 normpath 会保留开头的 "//" | normpath keeps a leading "//" on POSIX
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def is_parent_folder(folder: str, filepath: str, check_equal: bool = False) -> bool:
    """
    判断 folder 是否为 filepath 的上级目录 | Whether folder is an ancestor of filepath

    Args:
        folder (str): 上级目录 | Candidate ancestor
        filepath (str): 待检测路径 | Path to check
        check_equal (bool): 两者相同时是否返回 True | Whether equal paths count

    Returns:
        bool: 是否为上级目录 | Whether folder is an ancestor
    """
    pdir = _normalize(folder)
    target = _normalize(filepath)
    if pdir == target:
        return check_equal
    prefix = pdir if pdir.endswith(os.sep) else pdir + os.sep
    return target.startswith(prefix)


def parent_dirs(path: str) -> list[str]:
    """
    返回从根目录开始的所有上级目录（不包含自身）| All ancestors from the root, excluding the path itself

    Example:
        parent_dirs("/a/b/c")
        # returns ["/", "/a", "/a/b"]
    """
    normalized = _normalize(path)
    drive, rest = os.path.splitdrive(normalized)
    parts = [p for p in rest.split(os.sep) if p]
    current = drive + os.sep
    dirs = [current]
    for part in parts[:-1]:
        current = os.path.join(current, part)
        dirs.append(current)
    return dirs


def in_directory(directory: str, patterns: Sequence[str]) -> bool:
    """
    目录下是否存在匹配任一模式的文件 | Whether the directory holds an entry matching any pattern

    不含 / 的模式只匹配直接子项，含 / 的模式按递归 glob 处理
    Patterns without "/" only match direct children, the others are evaluated as recursive globs
    """
    try:
        names = os.listdir(directory)
    except OSError:
        return False
    for pattern in patterns:
        if "/" in pattern:
            if _glob.glob(pattern, root_dir=directory, recursive=True, include_hidden=True):
                return True
        elif any(match_glob(pattern, name) for name in names):
            return True
    return False


def find_up(names: str | Sequence[str], cwd: str, root: str | None = None) -> str | None:
    """
    从 cwd 开始逐级向上查找文件或目录 | Look for a file or folder from cwd upwards

    Args:
        names: 文件名或文件名列表 | A name or a list of names
        cwd: 起始目录 | Start directory
        root: 停止目录（包含）| Directory to stop at (inclusive)

    Returns:
        str | None: 找到的完整路径 | The full path found, None otherwise
    """
    if isinstance(names, str):
        names = [names]
    directory = os.path.abspath(cwd)
    stop = os.path.abspath(root) if root else None
    while True:
        for name in names:
            candidate = os.path.join(directory, name)
            if os.path.exists(candidate):
                return candidate
        parent = os.path.dirname(directory)
        if directory == stop or parent == directory:
            return None
        directory = parent


def resolve_root(
    folder: str,
    subs: Sequence[str],
    cwd: str | None = None,
    bottom_up: bool = False,
    check_cwd: bool = True,
    ignore: Sequence[str] | None = None,
) -> str | None:
    """
    根据标记文件（如 .git、pyproject.toml）推断工作区根目录
    Resolve the workspace root of a folder by marker files (.git, pyproject.toml...)

    Args:
        folder (str): 起始目录 | Folder to resolve from
        subs (Sequence[str]): 标记文件模式 | Marker patterns
        cwd (str | None): 当前工作目录 | Current working directory
        bottom_up (bool): 是否自底向上查找（默认自顶向下，取最外层）| Search from the folder upwards instead of
            from the filesystem root downwards
        check_cwd (bool): 若 folder 位于 cwd 内且 cwd 含标记，直接返回 cwd | Prefer cwd when it contains the folder
            and a marker
        ignore (Sequence[str] | None): 需要跳过的目录，可为路径或 glob | Folders to skip, paths or globs

    Returns:
        str | None: 根目录，找不到时为 None | Root folder or None
    """
    folder = os.path.abspath(folder)
    ignore = list(ignore or [])
    if check_cwd and cwd and is_parent_folder(cwd, folder, True) and in_directory(cwd, subs):
        return cwd
    home = os.path.expanduser("~")
    fs_root = os.path.abspath(os.sep)
    dirs = [d for d in parent_dirs(folder) if d != fs_root and d != home] + [folder]
    if bottom_up:
        dirs.reverse()
    for directory in dirs:
        if _is_ignored_folder(directory, ignore):
            continue
        if in_directory(directory, subs):
            return directory
    return None


def _is_ignored_folder(directory: str, ignore: Sequence[str]) -> bool:
    for item in ignore:
        if same_file(item, directory):
            return True
        if match_glob(item, directory) or match_glob(item, directory + "/"):
            return True
    return False


def is_git_ignored(path: str) -> bool:
    """
    通过 git check-ignore 判断文件是否被 .gitignore 忽略，不在仓库中的文件返回 False
    Whether git ignores the path according to the ignore files, False outside a repository
    """
    if not path or not os.path.exists(path):
        return False
    try:
        res = subprocess.run(
            ["git", "check-ignore", "-q", os.path.basename(path)],
            cwd=os.path.dirname(os.path.abspath(path)),
            capture_output=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"git check-ignore 执行失败 | git check-ignore failed: {e}")
        return False
    return res.returncode == 0


def same_file(one: str | None, other: str | None, case_insensitive: bool | None = None) -> bool:
    """
    判断两个路径是否指向同一文件（仅比较路径）| Whether two paths denote the same file (path comparison only)
    """
    if not one or not other:
        return False
    first = os.path.normpath(os.path.abspath(one))
    second = os.path.normpath(os.path.abspath(other))
    if case_insensitive is None:
        return os.path.normcase(first) == os.path.normcase(second)
    if case_insensitive:
        return first.lower() == second.lower()
    return first == second


def stat_path(path: str) -> os.stat_result | None:
    """
    lstat 路径，不存在时返回 None，其它错误继续抛出
    lstat a path, None when it does not exist, other errors propagate
    """
    try:
        return os.lstat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None


def get_file_type(path: str) -> FileType | None:
    st = stat_path(path)
    if st is None:
        return None
    if stat.S_ISLNK(st.st_mode):
        return FileType.SymbolicLink
    if stat.S_ISDIR(st.st_mode):
        return FileType.Directory
    if stat.S_ISREG(st.st_mode):
        return FileType.File
    return FileType.Unknown


def read_file_line(path: str, line: int, encoding: str = "utf-8") -> str:
    """
    读取指定行（0-based），超出范围返回空字符串 | Read a zero-based line, "" when out of range
    """
    with open(path, encoding=encoding, newline="") as f:
        for index, content in enumerate(f):
            if index == line:
                return content.rstrip("\r\n")
    return ""


def read_file_lines(path: str, start: int, end: int, encoding: str = "utf-8") -> list[str]:
    """
    读取 [start, end] 闭区间内的行（0-based）| Read lines in the inclusive zero-based range [start, end]
    """
    res: list[str] = []
    with open(path, encoding=encoding, newline="") as f:
        for index, content in enumerate(f):
            if index > end:
                break
            if index >= start:
                res.append(content.rstrip("\r\n"))
    return res


def get_file_line_count(path: str) -> int:
    count = 0
    with open(path, "rb") as f:
        for _ in f:
            count += 1
    return count


def remove_path(path: str | None) -> None:
    """
    删除文件或目录，失败时只记录日志 | Remove a file or folder, failures are only logged
    """
    if not path:
        return
    try:
        st = stat_path(path)
        if st is None:
            return
        if stat.S_ISDIR(st.st_mode):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except OSError as e:
        logger.warning(f"删除路径失败 | Failed to remove {path}: {e}")


def list_directory_tree(
    path: str,
    exclude: Sequence[str] | None = None,
    recursive: bool = True,
    indent: str = "",
    _root: str | None = None,
) -> str:
    """
    递归列出目录树结构，返回一个目录树的字符串。条目按名称排序，匹配 exclude 的条目被跳过。

    Args:
        path (str): 要遍历的根目录路径。
        exclude (Sequence[str] | None): 相对根目录的 glob 排除模式。
        recursive (bool): 是否递归展开目录。
        indent (str): 当前递归层的缩进，用于格式化输出。

    Returns:
        str: 格式化的目录树字符串。
    """
    root = _root or path
    output = []
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return ""
    for entry in entries:
        rel = os.path.relpath(entry.path, root).replace(os.sep, "/")
        if exclude and any(match_glob(p, rel) for p in exclude):
            continue
        if entry.is_dir(follow_symlinks=False):
            output.append(f"{indent}{entry.name}/")
            if recursive:
                sub_tree = list_directory_tree(entry.path, exclude, recursive, "  " + indent, root)
                if sub_tree:
                    output.append(sub_tree)
        elif entry.is_file(follow_symlinks=False):
            output.append(f"{indent}{entry.name}")
    return "\n".join(output)

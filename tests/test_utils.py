# filename: test_utils.py
# @Time    : 2025/11/13 10:20
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import os

import pytest

from edit4ai.utils import (
    FileType,
    find_up,
    get_file_line_count,
    get_file_type,
    get_scheme,
    glob_to_regex,
    in_directory,
    is_git_ignored,
    is_parent_folder,
    list_directory_tree,
    match_glob,
    match_patterns,
    normalize_uri,
    parent_dirs,
    path_to_uri,
    read_file_line,
    read_file_lines,
    remove_path,
    resolve_root,
    same_file,
    stat_path,
    uri_to_path,
)


def test_get_scheme() -> None:
    assert get_scheme("/tmp/a.py") == "file"
    assert get_scheme("file:///tmp/a.py") == "file"
    assert get_scheme("term://bash") == "term"
    assert get_scheme("untitled:Untitled-1") == "untitled"


def test_uri_and_path_conversion() -> None:
    assert path_to_uri("/tmp/a b.py") == "file:///tmp/a%20b.py"
    assert uri_to_path("file:///tmp/a%20b.py") == "/tmp/a b.py"
    assert uri_to_path("/tmp/x/../y.py") == "/tmp/y.py"
    assert normalize_uri("file:///tmp//a/../b.py") == "file:///tmp/b.py"
    assert normalize_uri("term://bash") == "term://bash"


@pytest.mark.parametrize(
    ("folder", "filepath", "check_equal", "expected"),
    [
        ("/a", "/a/b", False, True),
        ("/a/b", "/a/b/", False, False),
        ("/a/b", "/a/b", False, False),
        ("/a/b", "/a/b", True, True),
        ("//", "/", True, True),
        ("/a/b", "/a/bc", False, False),
        ("/", "/a", False, True),
    ],
)
def test_is_parent_folder(folder, filepath, check_equal, expected) -> None:
    assert is_parent_folder(folder, filepath, check_equal) is expected


def test_parent_dirs() -> None:
    assert parent_dirs("/a/b/c") == ["/", "/a", "/a/b"]
    assert parent_dirs("/a") == ["/"]


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("**/*.py", "a/b/c.py", True),
        ("**/*.py", "c.py", True),
        ("*.py", "a/c.py", False),
        ("*.py", "c.py", True),
        ("src/**", "src/a/b.txt", True),
        ("{src,lib}/**/*.ts", "lib/x/y.ts", True),
        ("{src,lib}/**/*.ts", "test/x/y.ts", False),
        ("?.txt", "a.txt", True),
        ("?.txt", "ab.txt", False),
        ("[!a]*.md", "b.md", True),
        ("[!a]*.md", "a.md", False),
        ("**/*", ".env", True),
        ("./*.py", "c.py", True),
    ],
)
def test_match_glob(pattern, path, expected) -> None:
    assert match_glob(pattern, path) is expected


def test_glob_to_regex_cached_and_ignore_case() -> None:
    assert glob_to_regex("*.py") is glob_to_regex("*.py")
    assert match_glob("*.PY", "a.py", ignore_case=True)
    assert not match_glob("*.PY", "a.py")


def test_match_patterns() -> None:
    assert match_patterns(["a.txt", "b.py"], ["*.py"])
    assert not match_patterns(["a.txt"], ["*.py", "*.js"])


def test_find_up_and_resolve_root(temp_dir, make_file) -> None:
    """
    测试按标记文件查找工作区根目录
    """
    folder = os.path.join(temp_dir, "a", "b", "c")
    os.makedirs(folder)
    make_file(os.path.join(temp_dir, "a", "pyproject.toml"))
    os.makedirs(os.path.join(temp_dir, "a", "b", ".git"))

    assert find_up("pyproject.toml", folder) == os.path.join(temp_dir, "a", "pyproject.toml")
    assert find_up(["missing.txt"], folder, root=temp_dir) is None

    assert resolve_root(folder, ["pyproject.toml"], check_cwd=False) == os.path.join(temp_dir, "a")
    assert resolve_root(folder, [".git", "pyproject.toml"], check_cwd=False, bottom_up=True) == os.path.join(
        temp_dir, "a", "b"
    )
    assert resolve_root(folder, [".git"], check_cwd=False, ignore=[os.path.join(temp_dir, "a", "b")]) is None
    assert resolve_root(folder, ["*.toml"], cwd=temp_dir, check_cwd=True) == os.path.join(temp_dir, "a")


def test_in_directory(temp_dir, make_file) -> None:
    make_file(os.path.join(temp_dir, "setup.cfg"))
    make_file(os.path.join(temp_dir, "pkg", "mod.py"))
    assert in_directory(temp_dir, ["*.cfg"])
    assert not in_directory(temp_dir, ["*.py"])
    assert in_directory(temp_dir, ["pkg/*.py"])
    assert not in_directory(os.path.join(temp_dir, "missing"), ["*"])


def test_same_file_and_stat(temp_dir, make_file) -> None:
    path = make_file(os.path.join(temp_dir, "f.txt"), "x")
    assert same_file(path, os.path.join(temp_dir, ".", "f.txt"))
    assert not same_file(path, None)
    assert same_file("/A/b", "/a/B", case_insensitive=True)
    assert stat_path(path) is not None
    assert stat_path(os.path.join(temp_dir, "nope")) is None
    assert stat_path(os.path.join(path, "child")) is None


def test_get_file_type(temp_dir, make_file) -> None:
    path = make_file(os.path.join(temp_dir, "f.txt"))
    link = os.path.join(temp_dir, "link")
    os.symlink(path, link)
    assert get_file_type(path) == FileType.File
    assert get_file_type(temp_dir) == FileType.Directory
    assert get_file_type(link) == FileType.SymbolicLink
    assert get_file_type(os.path.join(temp_dir, "nope")) is None


def test_read_file_lines(temp_dir, make_file) -> None:
    path = make_file(os.path.join(temp_dir, "lines.txt"), "zero\none\r\ntwo\nthree")
    assert read_file_line(path, 1) == "one"
    assert read_file_line(path, 10) == ""
    assert read_file_lines(path, 1, 2) == ["one", "two"]
    assert get_file_line_count(path) == 4


def test_remove_path(temp_dir, make_file) -> None:
    make_file(os.path.join(temp_dir, "d", "e", "f.txt"))
    remove_path(os.path.join(temp_dir, "d"))
    assert not os.path.exists(os.path.join(temp_dir, "d"))
    # 不存在的路径不会抛出异常
    remove_path(os.path.join(temp_dir, "d"))
    remove_path(None)


def test_is_git_ignored_outside_repo(temp_dir, make_file) -> None:
    path = make_file(os.path.join(temp_dir, "f.txt"))
    assert is_git_ignored(path) is False
    assert is_git_ignored(os.path.join(temp_dir, "missing.txt")) is False


def test_list_directory_tree(temp_dir, make_file) -> None:
    make_file(os.path.join(temp_dir, "b.txt"))
    make_file(os.path.join(temp_dir, "a", "x.py"))
    make_file(os.path.join(temp_dir, "node_modules", "m.js"))
    tree = list_directory_tree(temp_dir, exclude=["node_modules"], indent="- ")
    assert tree.splitlines() == ["- a/", "  - x.py", "- b.txt"]

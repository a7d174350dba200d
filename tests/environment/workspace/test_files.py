# filename: test_files.py
# @Time    : 2025/11/13 14:10
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import os
import stat

import pytest

from edit4ai.dtos import (
    LSPCreateFile,
    LSPCreateFileOptions,
    LSPDeleteFileOptions,
    LSPPosition,
    LSPRenameFileOptions,
    LSPWorkspaceEdit,
)
from edit4ai.environment.workspace.files import FileOperationExecutor, PathSnapshot
from edit4ai.environment.workspace.recovery import RecoverFunc, run_recover_funcs
from edit4ai.exceptions import AlreadyExistsError, NotFoundError, UnsupportedSchemeError, WorkspaceIOError
from edit4ai.utils import path_to_uri


def _read(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


# ---------------------------------------------------------------- create


def test_create_file_reverts_parent_folders(temp_dir, executor, document_store, buffer_host) -> None:
    """
    创建文件时一并创建的上级目录在回滚时被删除
    """
    target = os.path.join(temp_dir, "a", "b", "c.py")
    recover_funcs: list[RecoverFunc] = []
    executor.create_file(path_to_uri(target), recover_funcs=recover_funcs)
    assert os.path.isfile(target)
    assert buffer_host.is_open(target)
    assert document_store.get(path_to_uri(target)).get_value() == ""
    assert len(recover_funcs) == 1

    assert run_recover_funcs(recover_funcs)
    assert not os.path.exists(os.path.join(temp_dir, "a"))
    assert not buffer_host.is_open(target)
    assert document_store.get(path_to_uri(target)) is None


def test_create_file_ignore_if_exists_keeps_content(temp_dir, executor, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "keep.txt"), "original")
    options = LSPCreateFileOptions(ignore_if_exists=True)
    recover_funcs: list[RecoverFunc] = []
    executor.create_file(target, options, recover_funcs)
    executor.create_file(target, options, recover_funcs)
    assert _read(target) == "original"
    assert recover_funcs == []


def test_create_file_already_exists(temp_dir, executor, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "exists.txt"), "x")
    with pytest.raises(AlreadyExistsError):
        executor.create_file(target)


def test_create_file_overwrite_wins_and_reverts(temp_dir, executor, document_store, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "over.txt"), "old content")
    uri = path_to_uri(target)
    document_store.open(uri, "old content", 5)
    recover_funcs: list[RecoverFunc] = []
    executor.create_file(target, LSPCreateFileOptions(overwrite=True, ignore_if_exists=True), recover_funcs)
    assert _read(target) == ""
    assert document_store.get(uri).get_value() == ""
    assert document_store.get(uri).version == 6

    run_recover_funcs(recover_funcs)
    assert _read(target) == "old content"
    assert document_store.get(uri).get_value() == "old content"
    assert document_store.get(uri).version == 5


def test_create_file_overwrite_replaces_symlink(temp_dir, executor, make_file) -> None:
    """
    覆盖符号链接时只替换链接本身，链接目标内容不受影响，回滚后链接恢复
    """
    real = make_file(os.path.join(temp_dir, "real.txt"), "precious")
    link = os.path.join(temp_dir, "link.txt")
    os.symlink(real, link)
    recover_funcs: list[RecoverFunc] = []
    executor.create_file(path_to_uri(link), LSPCreateFileOptions(overwrite=True), recover_funcs)
    assert not os.path.islink(link)
    assert _read(link) == ""
    assert _read(real) == "precious"

    assert run_recover_funcs(recover_funcs)
    assert os.path.islink(link)
    assert os.readlink(link) == real
    assert _read(real) == "precious"


def test_failed_apply_keeps_symlink_target(temp_dir, applier, make_file) -> None:
    real = make_file(os.path.join(temp_dir, "real.txt"), "precious")
    link = os.path.join(temp_dir, "link.txt")
    os.symlink(real, link)
    edit = LSPWorkspaceEdit(
        document_changes=[
            LSPCreateFile.create(path_to_uri(link), LSPCreateFileOptions(overwrite=True)),
            LSPCreateFile.create(path_to_uri(real)),
        ]
    )
    assert applier.apply_edit(edit) is False
    assert os.path.islink(link)
    assert _read(real) == "precious"


def test_create_file_over_folder_fails(temp_dir, executor) -> None:
    os.makedirs(os.path.join(temp_dir, "folder"))
    with pytest.raises(WorkspaceIOError):
        executor.create_file(os.path.join(temp_dir, "folder"), LSPCreateFileOptions(overwrite=True))


def test_create_file_without_load(temp_dir, document_store, buffer_host) -> None:
    executor = FileOperationExecutor(document_store, buffer_host, load_on_create=False)
    target = os.path.join(temp_dir, "lazy.txt")
    executor.create_file(target)
    assert os.path.isfile(target)
    assert not buffer_host.is_open(target)
    assert document_store.get(path_to_uri(target)) is None


def test_create_file_unsupported_scheme(executor) -> None:
    with pytest.raises(UnsupportedSchemeError):
        executor.create_file("term://bash")


# ---------------------------------------------------------------- delete


def test_delete_missing_file(temp_dir, executor) -> None:
    target = os.path.join(temp_dir, "missing.txt")
    with pytest.raises(NotFoundError):
        executor.delete_file(target)
    recover_funcs: list[RecoverFunc] = []
    executor.delete_file(target, LSPDeleteFileOptions(ignore_if_not_exists=True), recover_funcs)
    assert len(recover_funcs) == 0


def test_delete_folder_requires_recursive(temp_dir, executor, make_file) -> None:
    make_file(os.path.join(temp_dir, "full", "f.txt"))
    with pytest.raises(WorkspaceIOError):
        executor.delete_file(os.path.join(temp_dir, "full"))
    assert os.path.isfile(os.path.join(temp_dir, "full", "f.txt"))

    os.makedirs(os.path.join(temp_dir, "empty"))
    executor.delete_file(os.path.join(temp_dir, "empty"))
    assert not os.path.exists(os.path.join(temp_dir, "empty"))


def test_delete_folder_round_trip(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    """
    递归删除目录后执行回滚，所有文件按字节恢复，缓冲区与文档重新打开
    """
    folder = os.path.join(temp_dir, "tree")
    make_file(os.path.join(folder, "a.txt"), "alpha")
    make_file(os.path.join(folder, "sub", "b.txt"), "beta\r\n")
    os.makedirs(os.path.join(folder, "sub", "empty"))
    script = make_file(os.path.join(folder, "run.sh"), "#!/bin/sh\n")
    os.chmod(script, 0o755)
    os.symlink("a.txt", os.path.join(folder, "link"))
    with open(os.path.join(folder, "bin.dat"), "wb") as f:
        f.write(bytes(range(256)))

    opened = os.path.join(folder, "sub", "b.txt")
    buffer_host.load(opened)
    document_store.open(path_to_uri(opened), "beta edited", 7)

    recover_funcs: list[RecoverFunc] = []
    executor.delete_file(folder, LSPDeleteFileOptions(recursive=True), recover_funcs)
    assert not os.path.exists(folder)
    assert not buffer_host.is_open(opened)
    assert document_store.get(path_to_uri(opened)) is None

    assert run_recover_funcs(recover_funcs)
    assert _read(os.path.join(folder, "a.txt")) == "alpha"
    with open(opened, "rb") as f:
        assert f.read() == b"beta\r\n"
    with open(os.path.join(folder, "bin.dat"), "rb") as f:
        assert f.read() == bytes(range(256))
    assert os.path.isdir(os.path.join(folder, "sub", "empty"))
    assert os.readlink(os.path.join(folder, "link")) == "a.txt"
    assert stat.S_IMODE(os.stat(script).st_mode) == 0o755
    assert buffer_host.is_open(opened)
    assert document_store.get(path_to_uri(opened)).get_value() == "beta edited"
    assert document_store.get(path_to_uri(opened)).version == 7


def test_path_snapshot_of_single_file(temp_dir, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "single.txt"), "content")
    snapshot = PathSnapshot.take(target)
    os.remove(target)
    snapshot.restore()
    assert _read(target) == "content"


# ---------------------------------------------------------------- rename


def test_rename_file_repoints_document(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    old = make_file(os.path.join(temp_dir, "old.py"), "print(1)\n")
    new = os.path.join(temp_dir, "pkg", "new.py")
    bufnr = buffer_host.focus(old)
    buffer_host.set_cursor(LSPPosition(line=1, character=0))
    document_store.open(path_to_uri(old), "print(2)\n", 3)

    recover_funcs: list[RecoverFunc] = []
    executor.rename_file(path_to_uri(old), path_to_uri(new), recover_funcs=recover_funcs)
    assert not os.path.exists(old)
    assert _read(new) == "print(1)\n"
    assert buffer_host.get_bufnr(new) == bufnr
    assert buffer_host.get_cursor().line == 1
    document = document_store.get(path_to_uri(new))
    assert document.get_value() == "print(2)\n" and document.version == 3
    assert document_store.get(path_to_uri(old)) is None

    assert run_recover_funcs(recover_funcs)
    assert _read(old) == "print(1)\n"
    assert not os.path.exists(os.path.join(temp_dir, "pkg"))
    assert buffer_host.get_bufnr(old) == bufnr
    assert document_store.get(path_to_uri(old)).version == 3


def test_rename_folder_repoints_buffers(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    """
    重命名包含已打开文档的目录，文档身份迁移到新路径，内容与光标行保持不变
    """
    src = os.path.join(temp_dir, "src")
    inner = make_file(os.path.join(src, "mod", "a.py"), "a = 1\n")
    buffer_host.focus(inner)
    buffer_host.set_cursor(LSPPosition(line=3, character=2))
    document_store.open(path_to_uri(inner), "a = 2\n", 2)

    dst = os.path.join(temp_dir, "lib")
    moved = os.path.join(dst, "mod", "a.py")
    recover_funcs: list[RecoverFunc] = []
    executor.rename_file(src, dst, recover_funcs=recover_funcs)
    assert os.path.isfile(moved)
    assert buffer_host.is_open(moved) and not buffer_host.is_open(inner)
    assert buffer_host.get_cursor().line == 3
    assert document_store.get(path_to_uri(moved)).get_value() == "a = 2\n"

    run_recover_funcs(recover_funcs)
    assert os.path.isfile(inner) and not os.path.exists(dst)
    assert buffer_host.is_open(inner) and not buffer_host.is_open(moved)
    assert document_store.get(path_to_uri(inner)).get_value() == "a = 2\n"


def test_rename_missing_source(temp_dir, executor, document_store) -> None:
    old = os.path.join(temp_dir, "ghost.py")
    new = os.path.join(temp_dir, "real.py")
    with pytest.raises(NotFoundError):
        executor.rename_file(old, new)

    # 只在内存中打开的文档仅迁移身份 | Only the in-memory identity moves
    document_store.open(path_to_uri(old), "unsaved", 1)
    executor.rename_file(old, new)
    assert not os.path.exists(new)
    assert document_store.get(path_to_uri(new)).get_value() == "unsaved"


def test_rename_destination_exists(temp_dir, executor, document_store, make_file) -> None:
    old = make_file(os.path.join(temp_dir, "a.txt"), "A")
    new = make_file(os.path.join(temp_dir, "b.txt"), "B")
    with pytest.raises(AlreadyExistsError):
        executor.rename_file(old, new)

    recover_funcs: list[RecoverFunc] = []
    executor.rename_file(old, new, LSPRenameFileOptions(ignore_if_exists=True), recover_funcs)
    assert _read(old) == "A" and _read(new) == "B"
    assert recover_funcs == []

    document_store.open(path_to_uri(new), "B in memory", 4)
    executor.rename_file(old, new, LSPRenameFileOptions(overwrite=True), recover_funcs)
    assert not os.path.exists(old) and _read(new) == "A"
    assert document_store.get(path_to_uri(new)) is None

    run_recover_funcs(recover_funcs)
    assert _read(old) == "A" and _read(new) == "B"
    assert document_store.get(path_to_uri(new)).get_value() == "B in memory"


def test_rename_into_itself_and_same_path(temp_dir, executor, make_file) -> None:
    make_file(os.path.join(temp_dir, "d", "f.txt"))
    with pytest.raises(WorkspaceIOError):
        executor.rename_file(os.path.join(temp_dir, "d"), os.path.join(temp_dir, "d", "inner"))
    recover_funcs: list[RecoverFunc] = []
    executor.rename_file(os.path.join(temp_dir, "d"), os.path.join(temp_dir, "d", "."), recover_funcs=recover_funcs)
    assert recover_funcs == []


# ---------------------------------------------------------------- load


def test_load_resource(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "doc.md"), "# title\n")
    recover_funcs: list[RecoverFunc] = []
    document = executor.load_resource(path_to_uri(target), recover_funcs)
    assert document.get_value() == "# title\n" and document.version == 0
    assert buffer_host.is_open(target)
    # 已打开的文档直接返回，不再记录回滚 | An open document is returned as is
    assert executor.load_resource(path_to_uri(target), recover_funcs) is document
    assert len(recover_funcs) == 1

    run_recover_funcs(recover_funcs)
    assert document_store.get(path_to_uri(target)) is None
    assert not buffer_host.is_open(target)


def test_load_resources_with_untitled_document(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    target = make_file(os.path.join(temp_dir, "doc.md"), "text")
    recover_funcs: list[RecoverFunc] = []
    documents = executor.load_resources([path_to_uri(target), "untitled:Untitled-1"], recover_funcs)
    assert [d.get_value() for d in documents] == ["text", ""]
    assert document_store.get("untitled:Untitled-1") is documents[1]
    assert buffer_host.open_paths() == [target]
    assert len(recover_funcs) == 2


def test_load_resources_closes_batch_on_failure(temp_dir, executor, document_store, buffer_host, make_file) -> None:
    """
    批量打开时某个文件无法解码，本次已打开的文档与缓冲区全部关闭
    """
    good = make_file(os.path.join(temp_dir, "good.txt"), "ok")
    bad = os.path.join(temp_dir, "bad.txt")
    with open(bad, "wb") as f:
        f.write(b"\xff\xfe\xfa")
    recover_funcs: list[RecoverFunc] = []
    with pytest.raises(WorkspaceIOError):
        executor.load_resources([path_to_uri(good), "untitled:Untitled-2", path_to_uri(bad)], recover_funcs)
    assert document_store.uris() == []
    assert buffer_host.open_paths() == []
    assert recover_funcs == []

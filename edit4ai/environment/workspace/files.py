# filename: files.py
# @Time    : 2025/11/11 10:15
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
文件操作执行器 | File operation executor

负责创建、删除、重命名文件，并同步文档仓库与编辑器缓冲区。每个已生效的操作都会向调用方提供的列表追加回滚动作。
Creates, deletes and renames files while keeping the document store and the editor buffers in sync. Every applied
operation appends recovery actions to the caller supplied list.
"""

import os
import shutil
import stat
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from edit4ai.dtos.file_resource import LSPCreateFileOptions, LSPDeleteFileOptions, LSPRenameFileOptions
from edit4ai.environment.workspace.buffer_host import BufferHost
from edit4ai.environment.workspace.document_store import DocumentStore
from edit4ai.environment.workspace.model import TextDocument
from edit4ai.environment.workspace.recovery import RecoverFunc, run_recover_funcs
from edit4ai.exceptions import (
    AlreadyExistsError,
    EditEngineError,
    NotFoundError,
    UnsupportedSchemeError,
    WorkspaceIOError,
)
from edit4ai.utils import get_scheme, is_parent_folder, path_to_uri, same_file, stat_path, uri_to_path


@dataclass
class PathSnapshot:
    """
    文件或目录树的完整快照，可按字节恢复 | Full snapshot of a file or a folder tree, restorable byte for byte

    Attributes:
        path (str): 快照根路径 | Snapshot root
        is_dir (bool): 根是否为目录 | Whether the root is a folder
        mode (int): 根的权限位 | Permission bits of the root
        dirs (list[tuple[str, int]]): 子目录相对路径与权限，自顶向下 | Sub folders with modes, top-down
        files (list[tuple[str, bytes, int]]): 文件相对路径、内容与权限 | Files with content and mode
        links (list[tuple[str, str]]): 符号链接相对路径与目标 | Symlinks with their targets
    """

    path: str
    is_dir: bool
    mode: int
    dirs: list[tuple[str, int]] = field(default_factory=list)
    files: list[tuple[str, bytes, int]] = field(default_factory=list)
    links: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def take(cls, path: str) -> "PathSnapshot":
        st = os.lstat(path)
        if stat.S_ISLNK(st.st_mode):
            return cls(path=path, is_dir=False, mode=st.st_mode, links=[("", os.readlink(path))])
        if not stat.S_ISDIR(st.st_mode):
            with open(path, "rb") as f:
                return cls(path=path, is_dir=False, mode=st.st_mode, files=[("", f.read(), st.st_mode)])
        snapshot = cls(path=path, is_dir=True, mode=st.st_mode)
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames.sort()
            rel_dir = os.path.relpath(dirpath, path)
            for name in list(dirnames):
                full = os.path.join(dirpath, name)
                rel = os.path.normpath(os.path.join(rel_dir, name))
                if os.path.islink(full):
                    snapshot.links.append((rel, os.readlink(full)))
                    dirnames.remove(name)
                else:
                    snapshot.dirs.append((rel, os.lstat(full).st_mode))
            for name in sorted(filenames):
                full = os.path.join(dirpath, name)
                rel = os.path.normpath(os.path.join(rel_dir, name))
                if os.path.islink(full):
                    snapshot.links.append((rel, os.readlink(full)))
                    continue
                with open(full, "rb") as f:
                    snapshot.files.append((rel, f.read(), os.lstat(full).st_mode))
        return snapshot

    def _target(self, rel: str) -> str:
        return os.path.join(self.path, rel) if rel else self.path

    def restore(self) -> None:
        if self.is_dir:
            os.makedirs(self.path, exist_ok=True)
            for rel, _ in self.dirs:
                os.makedirs(self._target(rel), exist_ok=True)
        for rel, data, mode in self.files:
            target = self._target(rel)
            if os.path.islink(target):
                os.remove(target)
            with open(target, "wb") as f:
                f.write(data)
            os.chmod(target, stat.S_IMODE(mode))
        for rel, link in self.links:
            target = self._target(rel)
            if os.path.islink(target) and os.readlink(target) == link:
                continue
            if os.path.lexists(target):
                os.remove(target)
            os.symlink(link, target)
        if self.is_dir:
            # 目录权限最后恢复，避免只读目录阻止写入子项 | Folder modes last, read-only folders would block writes
            for rel, mode in reversed(self.dirs):
                os.chmod(self._target(rel), stat.S_IMODE(mode))
            os.chmod(self.path, stat.S_IMODE(self.mode))


@dataclass
class ClosedResources:
    """被临时关闭的缓冲区与文档 | Buffers and documents closed by an operation"""

    buffers: list[str] = field(default_factory=list)
    documents: list[tuple[str, str, int]] = field(default_factory=list)


class FileOperationExecutor:
    """
    文件操作执行器 | File operation executor

    单独调用时失败直接抛出 FileOperationError；由 WorkspaceEditApplier 调用时，失败会触发整体回滚。
    Standalone calls raise FileOperationError directly; inside WorkspaceEditApplier a failure triggers the rollback.

    Attributes:
        document_store (DocumentStore): 文档仓库 | Document store
        buffer_host (BufferHost): 缓冲区宿主 | Buffer host
        load_on_create (bool): 创建文件后是否加载缓冲区与文档 | Load buffer and document after creating a file
        encoding (str): 读取文件内容时使用的编码 | Encoding used to read file content
    """

    def __init__(
        self,
        document_store: DocumentStore,
        buffer_host: BufferHost,
        load_on_create: bool = True,
        encoding: str = "utf-8",
    ) -> None:
        self.document_store = document_store
        self.buffer_host = buffer_host
        self.load_on_create = load_on_create
        self.encoding = encoding

    @staticmethod
    def to_fs_path(target: str) -> str:
        """
        将 URI 或路径转换为文件系统路径，非 file scheme 直接拒绝
        Convert an uri or a path to a filesystem path, non-file schemes are rejected

        Raises:
            UnsupportedSchemeError: 非文件系统 URI | Not a filesystem uri
        """
        scheme = get_scheme(target)
        if scheme != "file":
            raise UnsupportedSchemeError(
                message=f"不支持的 URI scheme | Unsupported uri scheme {scheme!r}: {target}",
                detail_for_llm=f"文件操作只支持 file:// URI，收到: {target} | File operations only accept file:// uris",
            )
        return uri_to_path(target)

    @staticmethod
    def _record(recover_funcs: list[RecoverFunc] | None, func: Callable[[], None], description: str) -> None:
        if recover_funcs is not None:
            recover_funcs.append(RecoverFunc(func, description))

    def load_resource(self, uri: str, recover_funcs: list[RecoverFunc] | None = None) -> TextDocument:
        """
        确保文档已打开：文件存在时读取磁盘内容，否则以空内容打开
        Make sure a document is open: read it from disk when the file exists, open it empty otherwise

        Args:
            uri (str): 文档 URI | Document uri
            recover_funcs (list[RecoverFunc] | None): 回滚动作列表 | Recovery action list

        Returns:
            TextDocument: 已打开的文档 | The open document
        """
        document = self.document_store.get(uri)
        if document is not None:
            return document
        content = ""
        loaded_path: str | None = None
        if get_scheme(uri) == "file":
            path = uri_to_path(uri)
            if os.path.isfile(path):
                try:
                    with open(path, encoding=self.encoding, newline="") as f:
                        content = f.read()
                except (OSError, UnicodeDecodeError) as e:
                    raise WorkspaceIOError(
                        message=f"读取文件失败 | Failed to read {path}: {e}",
                        detail_for_llm=f"无法读取文件 {path}: {e}",
                    ) from e
            if not self.buffer_host.is_open(path):
                self.buffer_host.load(path)
                loaded_path = path
        document = self.document_store.open(uri, content)
        logger.debug(f"已加载文档 | Loaded document {uri} (version={document.version})")

        def recover() -> None:
            self.document_store.close(uri)
            if loaded_path is not None:
                self.buffer_host.unload(loaded_path)

        self._record(recover_funcs, recover, f"close loaded document {uri}")
        return document

    def load_resources(self, uris: list[str], recover_funcs: list[RecoverFunc] | None = None) -> list[TextDocument]:
        """
        批量打开文档，任意一个失败时关闭本次已打开的文档后抛出
        Open several documents, the ones opened by this call are closed again when any of them fails

        非 file scheme（如 untitled:）的文档以空内容在内存中打开，不加载缓冲区
        Documents of other schemes (untitled: for instance) are opened empty in memory without a buffer

        Args:
            uris (list[str]): 文档 URI | Document uris
            recover_funcs (list[RecoverFunc] | None): 回滚动作列表 | Recovery action list

        Returns:
            list[TextDocument]: 与 uris 顺序一致的文档 | Documents in the order of uris
        """
        loaded: list[RecoverFunc] = []
        documents: list[TextDocument] = []
        try:
            for uri in uris:
                documents.append(self.load_resource(uri, loaded))
        except EditEngineError:
            run_recover_funcs(loaded)
            raise
        if recover_funcs is not None:
            recover_funcs.extend(loaded)
        return documents

    def _ensure_parent_dirs(self, path: str) -> list[str]:
        """
        创建缺失的上级目录，返回本次创建的目录（由深到浅）
        Create missing ancestors and return the ones created by this call, deepest first
        """
        missing: list[str] = []
        parent = os.path.dirname(path)
        while parent and not os.path.lexists(parent):
            missing.append(parent)
            next_parent = os.path.dirname(parent)
            if next_parent == parent:
                break
            parent = next_parent
        created: list[str] = []
        try:
            for directory in reversed(missing):
                os.mkdir(directory)
                created.insert(0, directory)
        except OSError as e:
            self._remove_dirs(created, strict=False)
            raise WorkspaceIOError(
                message=f"创建目录失败 | Failed to create parent folders of {path}: {e}",
                detail_for_llm=f"无法创建目录: {e}",
            ) from e
        return created

    @staticmethod
    def _remove_dirs(dirs: list[str], strict: bool = True) -> None:
        for directory in dirs:
            try:
                os.rmdir(directory)
            except FileNotFoundError:
                continue
            except OSError as e:
                if strict:
                    raise
                logger.warning(f"清理目录失败 | Failed to remove folder {directory}: {e}")

    def _resources_under(self, path: str) -> tuple[list[str], list[str]]:
        buffers = [p for p in self.buffer_host.open_paths() if is_parent_folder(path, p, True)]
        documents = [
            uri
            for uri in self.document_store.uris()
            if get_scheme(uri) == "file" and is_parent_folder(path, uri_to_path(uri), True)
        ]
        return buffers, documents

    def _close_resources(self, path: str) -> ClosedResources:
        buffers, uris = self._resources_under(path)
        closed = ClosedResources(buffers=buffers)
        for uri in uris:
            document = self.document_store.close(uri)
            if document is not None:
                closed.documents.append((uri, document.get_value(), document.version))
        for buffer_path in buffers:
            self.buffer_host.unload(buffer_path)
        return closed

    def _reopen_resources(self, closed: ClosedResources) -> None:
        for buffer_path in closed.buffers:
            self.buffer_host.load(buffer_path)
        for uri, content, version in closed.documents:
            self.document_store.open(uri, content, version)

    def create_file(
        self,
        target: str,
        options: LSPCreateFileOptions | None = None,
        recover_funcs: list[RecoverFunc] | None = None,
    ) -> None:
        """
        创建文件 | Create a file

        Args:
            target (str): 文件 URI 或路径 | File uri or path
            options (LSPCreateFileOptions | None): overwrite / ignoreIfExists
            recover_funcs (list[RecoverFunc] | None): 回滚动作列表，None 表示不记录 | Recovery actions, None to skip

        Raises:
            AlreadyExistsError: 文件已存在且未设置 overwrite / ignoreIfExists
            WorkspaceIOError: 其它文件系统错误
        """
        path = self.to_fs_path(target)
        uri = path_to_uri(path)
        opts = options or LSPCreateFileOptions()
        try:
            st = stat_path(path)
        except OSError as e:
            raise WorkspaceIOError(message=f"无法访问 | Cannot stat {path}: {e}") from e
        if st is not None:
            if opts.ignore_if_exists and not opts.overwrite:
                logger.debug(f"文件已存在，忽略创建 | File exists, create ignored: {path}")
                return
            if not opts.overwrite:
                raise AlreadyExistsError(
                    message=f"文件已存在 | File already exists: {path}",
                    detail_for_llm=f"文件 {path} 已存在，如需覆盖请设置 overwrite | Set overwrite to replace it",
                )
            if stat.S_ISDIR(st.st_mode):
                raise WorkspaceIOError(message=f"目标是目录，无法覆盖 | Cannot overwrite a folder with a file: {path}")
        try:
            previous = PathSnapshot.take(path) if st is not None else None
        except OSError as e:
            raise WorkspaceIOError(message=f"无法读取待覆盖文件 | Cannot snapshot {path}: {e}") from e
        created_dirs = self._ensure_parent_dirs(path)
        try:
            # 覆盖符号链接时替换链接本身，不写入链接目标 | Overwriting a symlink replaces the link, not its target
            if st is not None and stat.S_ISLNK(st.st_mode):
                os.remove(path)
            with open(path, "wb"):
                pass
        except OSError as e:
            self._remove_dirs(created_dirs, strict=False)
            raise WorkspaceIOError(
                message=f"创建文件失败 | Failed to create file at {path}: {e}",
                detail_for_llm=f"创建文件失败: {e}",
            ) from e

        loaded_buffer = False
        opened_document = False
        previous_document = self.document_store.get(uri)
        previous_state = (
            (previous_document.get_value(), previous_document.version) if previous_document is not None else None
        )
        if self.load_on_create:
            if not self.buffer_host.is_open(path):
                self.buffer_host.load(path)
                loaded_buffer = True
            if previous_document is None:
                self.document_store.open(uri, "")
                opened_document = True
        if previous_document is not None:
            self.document_store.reset(uri, "", previous_document.version + 1)
        logger.info(f"已创建文件 | Created file {path}")

        def recover() -> None:
            if previous is None:
                if os.path.lexists(path):
                    os.remove(path)
            else:
                previous.restore()
            self._remove_dirs(created_dirs)
            if loaded_buffer:
                self.buffer_host.unload(path)
            if previous_state is not None:
                self.document_store.reset(uri, *previous_state)
            elif opened_document:
                self.document_store.close(uri)

        self._record(recover_funcs, recover, f"revert create {path}")

    def delete_file(
        self,
        target: str,
        options: LSPDeleteFileOptions | None = None,
        recover_funcs: list[RecoverFunc] | None = None,
    ) -> None:
        """
        删除文件或目录 | Delete a file or a folder

        非空目录必须设置 recursive。删除前会关闭路径下的缓冲区与文档，并对文件或整个目录树做快照以便回滚。
        A non-empty folder requires recursive. Buffers and documents under the path are closed first and the file or
        the whole tree is snapshotted for rollback.

        Raises:
            NotFoundError: 路径不存在且未设置 ignoreIfNotExists
            WorkspaceIOError: 非空目录未设置 recursive，或其它文件系统错误
        """
        path = self.to_fs_path(target)
        opts = options or LSPDeleteFileOptions()
        try:
            st = stat_path(path)
        except OSError as e:
            raise WorkspaceIOError(message=f"无法访问 | Cannot stat {path}: {e}") from e
        if st is None:
            if opts.ignore_if_not_exists:
                logger.debug(f"文件不存在，忽略删除 | File missing, delete ignored: {path}")
                return
            raise NotFoundError(
                message=f"文件不存在 | File does not exist: {path}",
                detail_for_llm=f"要删除的文件 {path} 不存在 | The file to delete does not exist",
            )
        is_dir = stat.S_ISDIR(st.st_mode)
        try:
            if is_dir and not opts.recursive and os.listdir(path):
                raise WorkspaceIOError(
                    message=f"目录非空，需要 recursive | Folder not empty, recursive required: {path}",
                    detail_for_llm=f"目录 {path} 非空，删除目录需要设置 recursive",
                )
            snapshot = PathSnapshot.take(path)
        except OSError as e:
            raise WorkspaceIOError(message=f"无法读取待删除内容 | Cannot snapshot {path}: {e}") from e

        closed = self._close_resources(path)
        try:
            if is_dir:
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            # rmtree 可能只删除了一部分 | rmtree may have removed only a part
            snapshot.restore()
            self._reopen_resources(closed)
            raise WorkspaceIOError(
                message=f"删除失败 | Failed to delete {path}: {e}",
                detail_for_llm=f"删除失败: {e}",
            ) from e
        logger.info(f"已删除 | Deleted {'folder' if is_dir else 'file'} {path}")

        def recover() -> None:
            snapshot.restore()
            self._reopen_resources(closed)

        self._record(recover_funcs, recover, f"restore deleted {path}")

    @staticmethod
    def _rebase(path: str, old_root: str, new_root: str) -> str:
        if same_file(path, old_root):
            return new_root
        return os.path.join(new_root, os.path.relpath(path, old_root))

    def rename_file(
        self,
        old_target: str,
        new_target: str,
        options: LSPRenameFileOptions | None = None,
        recover_funcs: list[RecoverFunc] | None = None,
    ) -> None:
        """
        重命名文件或目录 | Rename a file or a folder

        源路径下所有已打开的缓冲区与文档都会指向新路径，缓冲区编号、光标、内容与版本保持不变。源文件不在磁盘上但文档已打开时，
        只迁移内存中的身份。

        Every open buffer and document under the source is re-pointed to the destination, keeping buffer number,
        cursor, content and version. When the source is missing on disk but open in memory, only the in-memory
        identity moves.

        Raises:
            AlreadyExistsError: 目标已存在且未设置 overwrite / ignoreIfExists
            NotFoundError: 源路径不存在且没有对应的已打开文档
            WorkspaceIOError: 其它文件系统错误
        """
        old_path = self.to_fs_path(old_target)
        new_path = self.to_fs_path(new_target)
        opts = options or LSPRenameFileOptions()
        if same_file(old_path, new_path):
            logger.debug(f"源与目标相同，忽略重命名 | Same source and destination, rename ignored: {old_path}")
            return
        try:
            old_st = stat_path(old_path)
            new_st = stat_path(new_path)
        except OSError as e:
            raise WorkspaceIOError(message=f"无法访问 | Cannot stat {old_path} / {new_path}: {e}") from e
        if new_st is not None and not opts.overwrite:
            if opts.ignore_if_exists:
                logger.debug(f"目标已存在，忽略重命名 | Destination exists, rename ignored: {new_path}")
                return
            raise AlreadyExistsError(
                message=f"目标已存在 | Destination already exists: {new_path}",
                detail_for_llm=f"目标 {new_path} 已存在，如需覆盖请设置 overwrite | Set overwrite to replace it",
            )
        buffers, documents = self._resources_under(old_path)
        if old_st is None and not buffers and not documents:
            raise NotFoundError(
                message=f"源文件不存在 | Source does not exist: {old_path}",
                detail_for_llm=f"要重命名的文件 {old_path} 不存在 | The file to rename does not exist",
            )
        if is_parent_folder(old_path, new_path):
            raise WorkspaceIOError(message=f"无法将目录移动到自身内部 | Cannot move {old_path} into itself")

        overwritten: PathSnapshot | None = None
        closed_destination = ClosedResources()
        created_dirs: list[str] = []
        if new_st is not None:
            try:
                overwritten = PathSnapshot.take(new_path)
            except OSError as e:
                raise WorkspaceIOError(message=f"无法读取待覆盖内容 | Cannot snapshot {new_path}: {e}") from e
            closed_destination = self._close_resources(new_path)
        if old_st is not None:
            created_dirs = self._ensure_parent_dirs(new_path)
            try:
                if new_st is not None:
                    if stat.S_ISDIR(new_st.st_mode):
                        shutil.rmtree(new_path)
                    else:
                        os.remove(new_path)
                shutil.move(old_path, new_path)
            except OSError as e:
                if overwritten is not None and not os.path.lexists(new_path):
                    overwritten.restore()
                self._reopen_resources(closed_destination)
                self._remove_dirs(created_dirs, strict=False)
                raise WorkspaceIOError(
                    message=f"重命名失败 | Failed to rename {old_path} to {new_path}: {e}",
                    detail_for_llm=f"重命名失败: {e}",
                ) from e

        moved_buffers: list[tuple[str, str]] = []
        for buffer_path in buffers:
            target_path = self._rebase(buffer_path, old_path, new_path)
            self.buffer_host.move_path(buffer_path, target_path)
            moved_buffers.append((buffer_path, target_path))
        moved_documents: list[tuple[str, str]] = []
        for uri in documents:
            new_uri = path_to_uri(self._rebase(uri_to_path(uri), old_path, new_path))
            self.document_store.rename(uri, new_uri)
            moved_documents.append((uri, new_uri))
        logger.info(
            f"已重命名 | Renamed {old_path} -> {new_path} "
            f"(buffers={len(moved_buffers)}, documents={len(moved_documents)}, on_disk={old_st is not None})"
        )

        def recover() -> None:
            for origin, moved in reversed(moved_documents):
                self.document_store.rename(moved, origin)
            for origin, moved in reversed(moved_buffers):
                self.buffer_host.move_path(moved, origin)
            if old_st is not None:
                shutil.move(new_path, old_path)
                if overwritten is not None:
                    overwritten.restore()
                self._remove_dirs(created_dirs)
            self._reopen_resources(closed_destination)

        self._record(recover_funcs, recover, f"revert rename {old_path} -> {new_path}")

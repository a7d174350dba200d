# filename: workspace.py
# @Time    : 2025/11/12 10:05
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import os
from typing import Any, ClassVar, SupportsFloat

import gymnasium as gym
from gymnasium.core import RenderFrame
from loguru import logger
from pydantic import ValidationError
from typing_extensions import TypedDict

from edit4ai.dtos.file_resource import LSPCreateFileOptions, LSPDeleteFileOptions, LSPRenameFileOptions
from edit4ai.dtos.workspace_edit import LSPWorkspaceEdit
from edit4ai.environment.workspace.buffer_host import BufferHost, InMemoryBufferHost
from edit4ai.environment.workspace.document_store import DocumentStore, InMemoryDocumentStore
from edit4ai.environment.workspace.edit_applier import WorkspaceEditApplier
from edit4ai.environment.workspace.files import FileOperationExecutor
from edit4ai.environment.workspace.model import TextDocument
from edit4ai.environment.workspace.search import CancellationToken, FileSearcher, GlobPattern
from edit4ai.exceptions import EditEngineError, NotFoundError, WorkspaceIOError
from edit4ai.schema import WORKSPACE_ACTIONS, WorkspaceAction, WorkspaceObs
from edit4ai.utils import get_scheme, list_directory_tree, normalize_uri, path_to_uri, uri_to_path

DEFAULT_SEARCH_EXCLUDE = ["**/.git", "**/node_modules", "**/__pycache__", "**/.venv"]


class WorkspaceSetting(TypedDict, total=False):
    """
    工作区配置项 / Workspace configuration options

    Attributes:
        load_on_create (bool): 创建文件后是否自动打开 / Open the buffer and document after creating a file
        encoding (str): 读写文件使用的编码 / Encoding used to read and write files
        search_exclude (list[str]): 文件搜索的默认排除模式 / Default exclude globs of file search
        max_search_results (int | None): 文件搜索的默认结果上限 / Default result ceiling of file search
        ignore_case (bool): 文件搜索是否忽略大小写 / Case insensitive file search
    """

    load_on_create: bool
    encoding: str
    search_exclude: list[str]
    max_search_results: int | None
    ignore_case: bool


class EditWorkspace(gym.Env):
    """
    工作区编辑环境，将编辑应用、文件操作与文件搜索封装为 gymnasium 环境。
    Workspace edit environment wrapping edit application, file operations and file search as a gymnasium env.

    Attributes:
        root_dir (str): 工作区根目录 / The root directory of the workspace.
        project_name (str): 项目名称 / The project name.
        workspace_folders (list[str]): 搜索根目录，默认只包含 root_dir / Search roots, root_dir by default.
        document_store (DocumentStore): 文档仓库 / Document store.
        buffer_host (BufferHost): 缓冲区宿主 / Buffer host.
        executor (FileOperationExecutor): 文件操作执行器 / File operation executor.
        applier (WorkspaceEditApplier): 工作区编辑应用器 / Workspace edit applier.
    """

    name: ClassVar[str] = "EditWorkspace"
    metadata: dict[str, Any] = {"render_modes": ["ansi"]}

    def __init__(
        self,
        root_dir: str,
        project_name: str,
        workspace_folders: list[str] | None = None,
        document_store: DocumentStore | None = None,
        buffer_host: BufferHost | None = None,
        workspace_setting: WorkspaceSetting | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.root_dir = os.path.abspath(root_dir)
        self.project_name = project_name
        self.workspace_folders = [uri_to_path(f) for f in workspace_folders] if workspace_folders else [self.root_dir]
        self._workspace_setting = workspace_setting or {}
        self.encoding = self._workspace_setting.get("encoding", "utf-8")
        self.search_exclude = self._workspace_setting.get("search_exclude", DEFAULT_SEARCH_EXCLUDE)
        self.max_search_results = self._workspace_setting.get("max_search_results")
        self.document_store = document_store or InMemoryDocumentStore()
        self.buffer_host = buffer_host or InMemoryBufferHost()
        self.executor = FileOperationExecutor(
            self.document_store,
            self.buffer_host,
            load_on_create=self._workspace_setting.get("load_on_create", True),
            encoding=self.encoding,
        )
        self.applier = WorkspaceEditApplier(self.document_store, self.buffer_host, self.executor)
        self.searcher = FileSearcher(
            self.workspace_folders, ignore_case=self._workspace_setting.get("ignore_case", False)
        )
        self.active_uri: str | None = None
        self._closed = False
        self.action_space = gym.spaces.Dict(
            {
                "category": gym.spaces.Discrete(1),
                "action_name": gym.spaces.Text(100),
                "action_args": gym.spaces.Text(100000),
            },
        )
        self.observation_space = gym.spaces.Dict(
            {
                "created_at": gym.spaces.Text(100),
                "obs": gym.spaces.Text(100000),
            },
        )

    def _assert_not_closed(self) -> None:
        if self._closed:
            raise ValueError("Workspace已关闭 | Workspace is closed")

    def resolve_path(self, path: str) -> str:
        """
        URI 或路径转换为文件系统绝对路径，相对路径按 root_dir 解析
        Filesystem path of an uri or a path, relative paths are resolved against root_dir
        """
        return uri_to_path(self._resolve_uri(path))

    def _resolve_uri(self, uri: str) -> str:
        """相对路径按 root_dir 解析 | Relative paths are resolved against root_dir"""
        if get_scheme(uri) == "file" and not uri.startswith("file://") and not os.path.isabs(uri):
            uri = os.path.join(self.root_dir, uri)
        return normalize_uri(uri)

    def construct_action(self, action: dict) -> WorkspaceAction:
        """
        构建 WorkspaceAction 对象

        Raises:
            ValueError: 如果动作不在支持的动作集合中 | If the action is not supported
        """
        workspace_action = WorkspaceAction.model_validate(action)
        if workspace_action.action_name not in WORKSPACE_ACTIONS:
            raise ValueError(f"Workspace不支持 {workspace_action.action_name} 动作")
        return workspace_action

    def step(self, action: dict) -> tuple[dict, SupportsFloat, bool, bool, dict[str, Any]]:
        """
        执行一个动作

        奖励机制：动作成功返回100，失败返回0

        Args:
            action (dict): 动作字典 | Action dictionary

        Returns:
            tuple[dict, SupportsFloat, bool, bool, dict[str, Any]]: 观察、奖励、是否结束、是否成功、额外信息 |
                Observation, Reward, Done, Success, Extra info
        """
        self._assert_not_closed()
        workspace_action = self.construct_action(action)
        args = workspace_action.action_args
        if isinstance(args, str):
            args = {"include": args} if workspace_action.action_name == "find_files" else {"uri": args}
        args = args or {}
        try:
            match workspace_action.action_name:
                case "apply_workspace_edit":
                    if self.apply_workspace_edit(**args):
                        return WorkspaceObs(obs="编辑已应用 | Edit applied").model_dump(), 100, True, True, {}
                    return WorkspaceObs(obs="编辑未应用，工作区未发生变化 | Edit rejected").model_dump(), 0, True, False, {}
                case "create_file" | "delete_file" | "rename_file" | "save_file" | "close_file":
                    getattr(self, workspace_action.action_name)(**args)
                    return (
                        WorkspaceObs(obs=f"{workspace_action.action_name} 执行成功 | succeeded").model_dump(),
                        100,
                        True,
                        True,
                        {},
                    )
                case "find_files":
                    uris = self.find_files(**args)
                    return WorkspaceObs(obs="\n".join(uris), original_result=uris).model_dump(), 100, True, True, {}
                case "open_file":
                    document = self.open_file(**args)
                    return WorkspaceObs(obs=document.get_value()).model_dump(), 100, True, True, {}
                case "open_files":
                    documents = self.open_files(**args)
                    summary = "\n".join(f"{d.uri} (version={d.version})" for d in documents)
                    return (
                        WorkspaceObs(obs=summary, original_result=[d.uri for d in documents]).model_dump(),
                        100,
                        True,
                        True,
                        {},
                    )
                case "read_file":
                    return WorkspaceObs(obs=self.read_file(**args)).model_dump(), 100, True, True, {}
                case _:
                    raise ValueError(f"不支持的动作 {workspace_action.action_name}")  # pragma: no cover
        except EditEngineError as e:
            return WorkspaceObs(obs=e.detail_for_llm).model_dump(), 0, True, False, {"error": e.message}
        except (TypeError, ValidationError) as e:
            return WorkspaceObs(obs=f"动作参数错误 | Invalid action arguments: {e}").model_dump(), 0, True, False, {}

    def reset(
        self,
        *,
        seed: int | None = None,
        options: dict[str, Any] | None = None,
    ) -> tuple[dict, dict[str, Any]]:
        super().reset(seed=seed)
        for uri in self.document_store.uris():
            self.document_store.close(uri)
        for path in self.buffer_host.open_paths():
            self.buffer_host.unload(path)
        self.active_uri = None
        return WorkspaceObs(obs=self.render()).model_dump(), {}

    def render(self) -> RenderFrame | list[RenderFrame] | None:
        """
        渲染当前工作区：目录树与已打开的文档

        Returns:
            str: 以字符串的形式来返回渲染结果
        """
        self._assert_not_closed()
        view = ""
        for folder in self.workspace_folders:
            dir_info = list_directory_tree(folder, exclude=self.search_exclude, recursive=True, indent="- ")
            view += f"当前工作区: {self.project_name} ({folder})\n\n{dir_info}\n"
        uris = self.document_store.uris()
        if uris:
            view += "\n已打开的文档 | Open documents:\n"
            for uri in uris:
                document = self.document_store.get(uri)
                if document is None:
                    continue  # pragma: no cover
                marker = "* " if uri == self.active_uri else "  "
                view += f"{marker}{uri} (version={document.version})\n"
        return view

    def close(self) -> None:
        if self._closed:
            return
        for uri in self.document_store.uris():
            self.document_store.close(uri)
        self._closed = True

    def apply_workspace_edit(
        self,
        *,
        workspace_edit: LSPWorkspaceEdit | dict[str, Any],
        active_uri: str | None = None,
    ) -> bool:
        """
        应用工作区编辑，失败时工作区保持不变 | Apply a workspace edit, the workspace is untouched on failure

        Args:
            workspace_edit (LSPWorkspaceEdit | dict[str, Any]): 工作区编辑 | The workspace edit
            active_uri (str | None): 聚焦文档，缺省为最近打开的文档 | Focused document, the last opened one by default

        Returns:
            bool: 是否应用成功 | Whether the edit was applied
        """
        self._assert_not_closed()
        return self.applier.apply_edit(workspace_edit, active_uri=active_uri or self.active_uri)

    def create_file(self, *, uri: str, overwrite: bool | None = None, ignore_if_exists: bool | None = None) -> None:
        self._assert_not_closed()
        options = LSPCreateFileOptions(overwrite=overwrite, ignore_if_exists=ignore_if_exists)
        self.executor.create_file(self._resolve_uri(uri), options)

    def delete_file(
        self,
        *,
        uri: str,
        recursive: bool | None = None,
        ignore_if_not_exists: bool | None = None,
    ) -> None:
        self._assert_not_closed()
        resolved = self._resolve_uri(uri)
        options = LSPDeleteFileOptions(recursive=recursive, ignore_if_not_exists=ignore_if_not_exists)
        self.executor.delete_file(resolved, options)
        if self.active_uri and self.document_store.get(self.active_uri) is None:
            self.active_uri = None

    def rename_file(
        self,
        *,
        old_uri: str,
        new_uri: str,
        overwrite: bool | None = None,
        ignore_if_exists: bool | None = None,
    ) -> None:
        """
        重命名文件或目录，已打开的文档随之迁移 | Rename a file or folder, open documents follow it
        """
        self._assert_not_closed()
        old, new = self._resolve_uri(old_uri), self._resolve_uri(new_uri)
        options = LSPRenameFileOptions(overwrite=overwrite, ignore_if_exists=ignore_if_exists)
        self.executor.rename_file(old, new, options)
        if self.active_uri == old:
            self.active_uri = new
        elif self.active_uri and self.active_uri.startswith(old.rstrip("/") + "/"):
            self.active_uri = new.rstrip("/") + self.active_uri[len(old.rstrip("/")) :]

    def find_files(
        self,
        *,
        include: GlobPattern,
        exclude: GlobPattern | list[GlobPattern] | None = None,
        max_results: int | None = None,
        token: CancellationToken | None = None,
    ) -> list[str]:
        """
        在工作区中按 glob 查找文件 | Find files in the workspace by glob

        Args:
            include (GlobPattern): 包含模式 | Include pattern
            exclude (GlobPattern | list[GlobPattern] | None): 排除模式，缺省使用 search_exclude | Defaults to search_exclude
            max_results (int | None): 结果上限，缺省使用 max_search_results | Defaults to max_search_results
            token (CancellationToken | None): 取消令牌 | Cancellation token

        Returns:
            list[str]: 文件 URI | File uris
        """
        self._assert_not_closed()
        paths = self.searcher.find_files(
            include,
            self.search_exclude if exclude is None else exclude,
            self.max_search_results if max_results is None else max_results,
            token,
        )
        return [path_to_uri(path) for path in paths]

    def open_file(self, *, uri: str) -> TextDocument:
        """
        打开文档并聚焦其缓冲区 | Open a document and focus its buffer
        """
        self._assert_not_closed()
        resolved = self._resolve_uri(uri)
        document = self.executor.load_resource(resolved)
        if get_scheme(resolved) == "file" and isinstance(self.buffer_host, InMemoryBufferHost):
            self.buffer_host.focus(uri_to_path(resolved))
        self.active_uri = resolved
        return document

    def open_files(self, *, uris: list[str]) -> list[TextDocument]:
        """
        批量打开文档，任意一个失败时不留下本次打开的文档，光标聚焦不变
        Open several documents, none stays open when one fails, the focus is left alone

        Raises:
            WorkspaceIOError: 文件无法读取 | A file cannot be read
        """
        self._assert_not_closed()
        return self.executor.load_resources([self._resolve_uri(uri) for uri in uris])

    def read_file(self, *, uri: str, with_line_num: bool = False) -> str:
        """
        读取文档内容，已打开时读取内存中的内容 | Read a document, the in-memory content when it is open

        Args:
            uri (str): 文档 URI | Document uri
            with_line_num (bool): 是否带行号（从 1 开始）| Prefix 1-based line numbers

        Raises:
            NotFoundError: 文档未打开且文件不存在 | Neither open nor on disk
        """
        self._assert_not_closed()
        resolved = self._resolve_uri(uri)
        document = self.document_store.get(resolved)
        if document is not None:
            content = document.get_value()
        else:
            path = self.executor.to_fs_path(resolved)
            if not os.path.isfile(path):
                raise NotFoundError(message=f"文件不存在 | File does not exist: {path}", detail_for_llm=f"文件 {path} 不存在")
            try:
                with open(path, encoding=self.encoding, newline="") as f:
                    content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                raise WorkspaceIOError(message=f"读取文件失败 | Failed to read {path}: {e}") from e
        if not with_line_num:
            return content
        return "\n".join(f"{index:>4}\t{line}" for index, line in enumerate(content.split("\n"), start=1))

    def save_file(self, *, uri: str) -> None:
        """
        将内存中的文档写回磁盘 | Write an open document back to disk

        Raises:
            NotFoundError: 文档未打开 | The document is not open
        """
        self._assert_not_closed()
        resolved = self._resolve_uri(uri)
        document = self.document_store.get(resolved)
        if document is None:
            raise NotFoundError(message=f"文档未打开 | Document not open: {resolved}", detail_for_llm="请先打开文档")
        path = self.executor.to_fs_path(resolved)
        try:
            with open(path, "w", encoding=self.encoding, newline="") as f:
                f.write(document.get_value())
        except OSError as e:
            raise WorkspaceIOError(message=f"保存文件失败 | Failed to save {path}: {e}") from e
        logger.info(f"已保存 | Saved {path} (version={document.version})")

    def close_file(self, *, uri: str) -> None:
        self._assert_not_closed()
        resolved = self._resolve_uri(uri)
        self.document_store.close(resolved)
        if get_scheme(resolved) == "file":
            self.buffer_host.unload(uri_to_path(resolved))
        if self.active_uri == resolved:
            self.active_uri = None

# filename: edit_applier.py
# @Time    : 2025/11/11 16:40
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
工作区编辑应用器 | Workspace edit applier

按顺序应用一个 WorkspaceEdit 中的全部变更。任何一步失败都会按严格逆序执行已记录的回滚动作，调用方只会看到 True 或 False。
Applies every change of a WorkspaceEdit in order. When a step fails the recorded recovery actions run in strict
reverse order, the caller only sees True or False.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from edit4ai.dtos.file_resource import LSPCreateFile, LSPDeleteFile, LSPRenameFile
from edit4ai.dtos.text_documents import LSPPosition, LSPTextDocumentEdit
from edit4ai.dtos.workspace_edit import LSPWorkspaceEdit, WorkspaceChange
from edit4ai.environment.workspace.buffer_host import BufferHost
from edit4ai.environment.workspace.document_store import DocumentStore
from edit4ai.environment.workspace.files import FileOperationExecutor
from edit4ai.environment.workspace.model import TextDocument
from edit4ai.environment.workspace.recovery import RecoverFunc, run_recover_funcs
from edit4ai.exceptions import ConflictError, EditEngineError
from edit4ai.utils import get_scheme, is_parent_folder, normalize_uri, path_to_uri, uri_to_path


@dataclass
class CursorTracker:
    """
    跟踪活动文档中的光标位置 | Tracks the cursor position inside the active document

    只有结束位置不晚于光标的编辑才会移动光标，紧贴光标的插入同样生效；与光标重叠或位于其后的编辑保持光标的行列不变，
    应用完成后再按文档内容截断。
    Only edits ending at or before the cursor move it, an insert right at the cursor included. Edits overlapping or
    following the cursor leave its line and character alone, the result is clamped to the document afterwards.

    Attributes:
        uri (str): 活动文档 URI，重命名后随之更新 | Active document uri, follows renames
        position (LSPPosition): 当前光标位置 | Current cursor position
        edited (bool): 活动文档是否被编辑过 | Whether the active document was edited
    """

    uri: str
    position: LSPPosition
    edited: bool = False

    def on_patch(self, change: LSPTextDocumentEdit) -> None:
        cursor = (self.position.line, self.position.character)
        line_delta = 0
        shift_line, shift = -1, 0
        for edit in sorted(change.edits, key=lambda e: (e.range.start.line, e.range.start.character)):
            start, end = edit.range.start, edit.range.end
            if (end.line, end.character) > cursor:
                continue
            lines = edit.new_text.split("\n")
            line_delta += len(lines) - 1 - (end.line - start.line)
            new_start = start.character + (shift if start.line == shift_line else 0)
            new_end = len(lines[-1]) if len(lines) > 1 else new_start + len(lines[0])
            shift_line, shift = end.line, new_end - end.character
        character = self.position.character + (shift if shift_line == self.position.line else 0)
        self.position = LSPPosition(line=self.position.line + line_delta, character=character)
        self.edited = True

    def resolve(self, document: TextDocument) -> LSPPosition:
        """按文档内容截断光标 | Clamp the cursor to the document content"""
        line = min(self.position.line, document.get_line_count() - 1)
        character = min(self.position.character, len(document.get_line(line)))
        return LSPPosition(line=line, character=character)

    def on_rename(self, old_uri: str, new_uri: str) -> None:
        if self.uri == old_uri:
            self.uri = new_uri
        elif get_scheme(self.uri) == "file" and is_parent_folder(uri_to_path(old_uri), uri_to_path(self.uri)):
            self.uri = path_to_uri(uri_to_path(new_uri) + uri_to_path(self.uri)[len(uri_to_path(old_uri)) :])


class WorkspaceEditApplier:
    """
    工作区编辑应用器 | Workspace edit applier

    Attributes:
        document_store (DocumentStore): 文档仓库 | Document store
        buffer_host (BufferHost): 缓冲区宿主 | Buffer host
        executor (FileOperationExecutor): 文件操作执行器 | File operation executor
    """

    def __init__(
        self,
        document_store: DocumentStore,
        buffer_host: BufferHost,
        executor: FileOperationExecutor,
    ) -> None:
        self.document_store = document_store
        self.buffer_host = buffer_host
        self.executor = executor

    def apply_edit(self, edit: LSPWorkspaceEdit | dict[str, Any], *, active_uri: str | None = None) -> bool:
        """
        应用工作区编辑 | Apply a workspace edit

        Args:
            edit (LSPWorkspaceEdit | dict[str, Any]): 工作区编辑，字典会先做校验 | The edit, dicts are validated first
            active_uri (str | None): 当前聚焦文档的 URI，被编辑时会调整光标 | Focused document, its cursor is adjusted

        Returns:
            bool: True 表示全部应用成功，False 表示未应用且无残留影响
                True when fully applied, False when nothing was applied
        """
        if isinstance(edit, dict):
            try:
                edit = LSPWorkspaceEdit.model_validate(edit)
            except ValidationError as e:
                logger.warning(f"无效的 WorkspaceEdit | Invalid workspace edit: {e}")
                return False
        plan = edit.ordered_changes()
        try:
            self._check_schemes(plan)
        except EditEngineError as e:
            logger.warning(f"拒绝应用 WorkspaceEdit | Workspace edit rejected: {e}")
            return False

        tracker = None
        if active_uri is not None:
            tracker = CursorTracker(uri=normalize_uri(active_uri), position=self.buffer_host.get_cursor())
        recover_funcs: list[RecoverFunc] = []
        try:
            for change in plan:
                self._apply_change(change, recover_funcs, tracker)
        except Exception as e:
            if isinstance(e, EditEngineError):
                logger.warning(f"WorkspaceEdit 应用失败，开始回滚 | Apply failed, rolling back: {e}")
            else:
                logger.exception(f"WorkspaceEdit 应用出现意外错误，开始回滚 | Unexpected error, rolling back: {e}")
            if not run_recover_funcs(recover_funcs):
                logger.error("部分回滚动作执行失败 | Some recovery actions failed")
            return False

        if tracker is not None and tracker.edited:
            document = self.document_store.get(tracker.uri)
            if document is not None:
                self.buffer_host.set_cursor(tracker.resolve(document))
        logger.info(f"WorkspaceEdit 已应用 | Workspace edit applied ({len(plan)} change(s))")
        return True

    def _check_schemes(self, plan: list[WorkspaceChange]) -> None:
        for change in plan:
            match change:
                case LSPCreateFile(uri=uri) | LSPDeleteFile(uri=uri):
                    self.executor.to_fs_path(uri)
                case LSPRenameFile(old_uri=old_uri, new_uri=new_uri):
                    self.executor.to_fs_path(old_uri)
                    self.executor.to_fs_path(new_uri)

    def _apply_change(
        self,
        change: WorkspaceChange,
        recover_funcs: list[RecoverFunc],
        tracker: CursorTracker | None,
    ) -> None:
        match change:
            case LSPTextDocumentEdit():
                self._apply_document_edit(change, recover_funcs, tracker)
            case LSPCreateFile():
                self.executor.create_file(change.uri, change.options, recover_funcs)
            case LSPDeleteFile():
                self.executor.delete_file(change.uri, change.options, recover_funcs)
            case LSPRenameFile():
                self.executor.rename_file(change.old_uri, change.new_uri, change.options, recover_funcs)
                if tracker is not None:
                    tracker.on_rename(normalize_uri(change.old_uri), normalize_uri(change.new_uri))

    def _apply_document_edit(
        self,
        change: LSPTextDocumentEdit,
        recover_funcs: list[RecoverFunc],
        tracker: CursorTracker | None,
    ) -> None:
        uri = normalize_uri(change.text_document.uri)
        document = self.executor.load_resource(uri, recover_funcs)
        expected = change.text_document.version
        if expected is not None and expected != document.version:
            raise ConflictError(
                message=f"文档版本不一致 | Version mismatch on {uri}: expected {expected}, current {document.version}",
                detail_for_llm=(
                    f"文档 {uri} 当前版本为 {document.version}，与编辑指定的版本 {expected} 不一致，请重新读取文档后再编辑 | "
                    "The document changed, read it again before editing"
                ),
            )
        content, version = document.get_value(), document.version
        new_version = self.document_store.apply_patch(uri, change.edits)
        if tracker is not None and tracker.uri == uri:
            tracker.on_patch(change)

        def recover() -> None:
            self.document_store.reset(uri, content, version)

        recover_funcs.append(RecoverFunc(recover, f"restore {uri} to version {version}"))
        logger.debug(f"已编辑文档 | Edited {uri}: version {version} -> {new_version}")

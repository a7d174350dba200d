# -*- coding: utf-8 -*-
# filename: workspace_edit.py
# @Time    : 2025/11/10 11:02
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
from typing import Annotated, Any, Optional, Union

from pydantic import Discriminator, Field, Tag

from edit4ai.dtos.file_resource import (
    LSPCreateFile,
    LSPDeleteFile,
    LSPRenameFile,
)
from edit4ai.dtos.text_documents import (
    LSPChangeAnnotation,
    LSPModel,
    LSPTextDocumentEdit,
    LSPTextEdit,
)
from edit4ai.utils import normalize_uri


def _change_kind(value: Any) -> str:
    """
    文本编辑在 LSP 中没有 kind 字段，缺省视为 "edit"
    Text document edits carry no kind in LSP, a missing kind means "edit"
    """
    if isinstance(value, dict):
        return value.get("kind") or "edit"
    return getattr(value, "kind", "edit")


WorkspaceChange = Annotated[
    Union[
        Annotated[LSPTextDocumentEdit, Tag("edit")],
        Annotated[LSPCreateFile, Tag("create")],
        Annotated[LSPRenameFile, Tag("rename")],
        Annotated[LSPDeleteFile, Tag("delete")],
    ],
    Discriminator(_change_kind),
]


class LSPWorkspaceEdit(LSPModel):
    """
    A workspace edit represents changes to many resources managed in the workspace. The edit should either provide
    changes or documentChanges. If both are present, the edits of `changes` are interleaved into `documentChanges`
    by `ordered_changes`.
    """

    changes: Optional[dict[str, list[LSPTextEdit]]] = None

    document_changes: Optional[list[WorkspaceChange]] = Field(default=None, validation_alias="documentChanges")

    change_annotations: Optional[dict[str, LSPChangeAnnotation]] = Field(
        default=None, validation_alias="changeAnnotations"
    )

    def ordered_changes(self) -> list[WorkspaceChange]:
        """
        生成唯一的应用顺序 | Build the single application plan

        documentChanges 保持原有顺序。changes 中的每个 uri 会被插入到：
        1. documentChanges 中最后一个"产生"该 uri 的操作（create 目标 / rename 目标）之后；
        2. 否则插入到第一个"移除"该 uri 的操作（delete 目标 / rename 源）之前；
        3. 否则按声明顺序追加到末尾。
        同一 uri 同时出现在两种形式中时，仅使用 documentChanges 中的版本。

        documentChanges keep their order. Each uri of `changes` goes right after the last operation that brings it
        into existence, else right before the first operation that removes it, else to the end. A uri present in
        both forms is taken from documentChanges only.

        Returns:
            list[WorkspaceChange]: 有序的变更列表 | Ordered list of changes
        """
        plan: list[WorkspaceChange] = list(self.document_changes or [])
        if not self.changes:
            return plan
        edited = {normalize_uri(c.text_document.uri) for c in plan if isinstance(c, LSPTextDocumentEdit)}
        inserts: dict[int, list[WorkspaceChange]] = {}
        tail: list[WorkspaceChange] = []
        for uri, edits in self.changes.items():
            if normalize_uri(uri) in edited:
                continue
            change = LSPTextDocumentEdit.create(uri, None, edits)
            position = self._placement(plan, normalize_uri(uri))
            if position is None:
                tail.append(change)
            else:
                inserts.setdefault(position, []).append(change)
        ordered: list[WorkspaceChange] = []
        for index, change in enumerate(plan):
            ordered.extend(inserts.get(index, []))
            ordered.append(change)
        ordered.extend(inserts.get(len(plan), []))
        ordered.extend(tail)
        return ordered

    @staticmethod
    def _placement(plan: list[WorkspaceChange], uri: str) -> int | None:
        """返回插入下标，None 表示追加到末尾，uri 需已规范化 | Insertion index, None means append, uri is normalized"""
        last_producer: int | None = None
        first_remover: int | None = None
        for index, change in enumerate(plan):
            if isinstance(change, LSPCreateFile) and normalize_uri(change.uri) == uri:
                last_producer = index
            elif isinstance(change, LSPRenameFile):
                if normalize_uri(change.new_uri) == uri:
                    last_producer = index
                elif normalize_uri(change.old_uri) == uri and first_remover is None:
                    first_remover = index
            elif isinstance(change, LSPDeleteFile) and normalize_uri(change.uri) == uri and first_remover is None:
                first_remover = index
        if last_producer is not None:
            return last_producer + 1
        return first_remover

# -*- coding: utf-8 -*-
# filename: file_resource.py
# @Time    : 2025/11/10 10:41
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
文件资源操作 | File resource operations

WorkspaceEdit.documentChanges 中的创建、重命名与删除操作，由 FileOperationExecutor 执行。
Create, rename and delete operations of WorkspaceEdit.documentChanges, carried out by FileOperationExecutor.
"""

from typing import Literal, Optional

from pydantic import Field
from typing_extensions import Self

from edit4ai.dtos.text_documents import LSPModel


class LSPCreateFileOptions(LSPModel):
    """
    创建选项 | Create options

    Attributes:
        overwrite: 目标已存在时清空为空文件，已打开的文档重置为空内容并升级版本；优先于 ignore_if_exists
            Truncate an existing target, an open document is reset to empty with a bumped version. Wins over
            ignore_if_exists
        ignore_if_exists: 目标已存在时什么也不做，也不记录回滚动作
            Do nothing when the target exists, no recovery action is recorded
    """

    overwrite: Optional[bool] = None
    ignore_if_exists: Optional[bool] = Field(None, validation_alias="ignoreIfExists")


class LSPCreateFile(LSPModel):
    """
    创建文件，缺失的上级目录一并创建 | Create a file, missing parent folders included

    Attributes:
        uri: 目标 file URI | Target file uri
        options: 创建选项 | Create options
        annotation_id: 变更注释标识，仅透传 | Change annotation id, passed through untouched
    """

    kind: Literal["create"] = "create"
    uri: str
    options: Optional[LSPCreateFileOptions] = None
    annotation_id: Optional[str] = Field(None, validation_alias="annotationId")

    @classmethod
    def create(cls, uri: str, options: LSPCreateFileOptions | None = None) -> Self:
        return cls(uri=uri, options=options)


class LSPRenameFileOptions(LSPModel):
    """
    重命名选项 | Rename options

    Attributes:
        overwrite: 目标已存在时先替换目标，被替换的内容会做快照以便回滚；优先于 ignore_if_exists
            Replace an existing destination, its content is snapshotted for rollback. Wins over ignore_if_exists
        ignore_if_exists: 目标已存在时整个重命名不执行，源保持原样
            Skip the whole rename when the destination exists, the source stays where it is
    """

    overwrite: Optional[bool] = None
    ignore_if_exists: Optional[bool] = Field(None, validation_alias="ignoreIfExists")


class LSPRenameFile(LSPModel):
    """
    重命名或移动文件/目录，源路径下已打开的文档与缓冲区随之迁移
    Rename or move a file or folder, open documents and buffers under the source follow it

    Attributes:
        old_uri: 源 URI | Source uri
        new_uri: 目标 URI | Destination uri
        options: 重命名选项 | Rename options
        annotation_id: 变更注释标识，仅透传 | Change annotation id, passed through untouched
    """

    kind: Literal["rename"] = "rename"
    old_uri: str = Field(..., validation_alias="oldUri")
    new_uri: str = Field(..., validation_alias="newUri")
    options: Optional[LSPRenameFileOptions] = None
    annotation_id: Optional[str] = Field(None, validation_alias="annotationId")

    @classmethod
    def create(cls, old_uri: str, new_uri: str, options: LSPRenameFileOptions | None = None) -> Self:
        return cls(old_uri=old_uri, new_uri=new_uri, options=options)


class LSPDeleteFileOptions(LSPModel):
    """
    删除选项 | Delete options

    Attributes:
        recursive: 删除非空目录时必须设置；空目录不需要 | Required for a non-empty folder, not for an empty one
        ignore_if_not_exists: 目标不存在时什么也不做 | Do nothing when the target is missing
    """

    recursive: Optional[bool] = None
    ignore_if_not_exists: Optional[bool] = Field(None, validation_alias="ignoreIfNotExists")


class LSPDeleteFile(LSPModel):
    """
    删除文件或目录，路径下已打开的文档与缓冲区会被关闭
    Delete a file or folder, open documents and buffers under it are closed

    Attributes:
        uri: 目标 URI | Target uri
        options: 删除选项 | Delete options
        annotation_id: 变更注释标识，仅透传 | Change annotation id, passed through untouched
    """

    kind: Literal["delete"] = "delete"
    uri: str
    options: Optional[LSPDeleteFileOptions] = None
    annotation_id: Optional[str] = Field(None, validation_alias="annotationId")

    @classmethod
    def create(cls, uri: str, options: LSPDeleteFileOptions | None = None) -> Self:
        return cls(uri=uri, options=options)

# -*- coding: utf-8 -*-
# filename: text_documents.py
# @Time    : 2025/11/10 10:30
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self


class LSPModel(BaseModel):
    """
    LSP 数据结构基类，同时接受 camelCase 别名与 snake_case 字段名
    Base of LSP structures, accepts camelCase aliases as well as snake_case field names
    """

    model_config = ConfigDict(populate_by_name=True)


class LSPPosition(LSPModel):
    """
    Position in a text document expressed as zero-based line and zero-based character offset.
    """

    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)

    def compare(self, other: "LSPPosition") -> int:
        if self.line != other.line:
            return -1 if self.line < other.line else 1
        if self.character != other.character:
            return -1 if self.character < other.character else 1
        return 0

    def __lt__(self, other: "LSPPosition") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "LSPPosition") -> bool:
        return self.compare(other) <= 0


class LSPRange(LSPModel):
    """
    A range in a text document expressed as (zero-based) start and end positions. The end position is exclusive.
    """

    start: LSPPosition
    end: LSPPosition

    @classmethod
    def create(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Self:
        return cls(
            start=LSPPosition(line=start_line, character=start_character),
            end=LSPPosition(line=end_line, character=end_character),
        )


class LSPTextEdit(LSPModel):
    """
    A textual edit applicable to a text document.
    """

    # The range of the text document to be manipulated. To insert text into a document create a range where
    # start === end.
    range: LSPRange
    # The string to be inserted. For delete operations use an empty string.
    new_text: str = Field(..., validation_alias="newText")
    # An optional annotation identifier describing the operation.
    annotation_id: Optional[str] = Field(None, validation_alias="annotationId")

    @classmethod
    def insert(cls, position: LSPPosition, new_text: str) -> Self:
        return cls(range=LSPRange(start=position, end=position), new_text=new_text)

    @classmethod
    def replace(cls, edit_range: LSPRange, new_text: str) -> Self:
        return cls(range=edit_range, new_text=new_text)

    @classmethod
    def delete(cls, edit_range: LSPRange) -> Self:
        return cls(range=edit_range, new_text="")


class LSPOptionalVersionedTextDocumentIdentifier(LSPModel):
    """
    A text document identifier to optionally denote a specific version of a text document.

    version 为 None 时表示无条件应用编辑，不校验当前版本
    A None version means the edit is applied unconditionally, the current version is not checked
    """

    uri: str
    version: Optional[int] = None


class LSPTextDocumentEdit(LSPModel):
    """
    Describes textual changes on a single text document.

    All edits are computed against the same original content, they are applied as one combined patch.
    """

    # LSP 原生结构没有 kind 字段，这里补充判别字段用于标签联合 | LSP has no kind here, added as union discriminant
    kind: Literal["edit"] = "edit"
    # The text document to change.
    text_document: LSPOptionalVersionedTextDocumentIdentifier = Field(..., validation_alias="textDocument")
    # The edits to be applied.
    edits: list[LSPTextEdit] = Field(default_factory=list)

    @classmethod
    def create(cls, uri: str, version: Optional[int], edits: list[LSPTextEdit]) -> Self:
        return cls(
            text_document=LSPOptionalVersionedTextDocumentIdentifier(uri=uri, version=version),
            edits=edits,
        )


class LSPChangeAnnotation(LSPModel):
    """
    Additional information that describes document changes.
    """

    # A human-readable string describing the actual change.
    label: str
    # A flag which indicates that user confirmation is needed before applying the change.
    needs_confirmation: Optional[bool] = Field(None, validation_alias="needsConfirmation")
    # A human-readable string which is rendered less prominent in the user interface.
    description: Optional[str] = None

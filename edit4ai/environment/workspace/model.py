# filename: model.py
# @Time    : 2025/11/10 15:48
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
from bisect import bisect_right
from collections.abc import Sequence

from edit4ai.dtos.text_documents import LSPPosition, LSPTextEdit
from edit4ai.exceptions import InvalidEditError


class TextDocument:
    """
    内存中的文本文档，每次修改版本号加一 | In-memory text document, the version grows by one on every mutation

    位置均为 0-based，character 以 Python 字符串下标计数。
    Positions are zero-based, characters count Python string indices.

    Attributes:
        uri (str): 文档 URI | Document uri
        version (int): 文档版本 | Document version
    """

    def __init__(self, uri: str, content: str = "", version: int = 0) -> None:
        self.uri = uri
        self.version = version
        self._content = content
        self._line_offsets: list[int] | None = None

    def __repr__(self) -> str:
        return f"TextDocument(uri={self.uri!r}, version={self.version})"

    def get_value(self) -> str:
        return self._content

    def get_version_id(self) -> int:
        return self.version

    @property
    def line_offsets(self) -> list[int]:
        if self._line_offsets is None:
            offsets = [0]
            for index, char in enumerate(self._content):
                if char == "\n":
                    offsets.append(index + 1)
            self._line_offsets = offsets
        return self._line_offsets

    def get_line_count(self) -> int:
        return len(self.line_offsets)

    def get_line(self, line: int) -> str:
        """
        获取某一行内容（不含换行符），越界返回空字符串 | Content of a line without EOL, "" when out of range
        """
        offsets = self.line_offsets
        if line < 0 or line >= len(offsets):
            return ""
        start = offsets[line]
        end = offsets[line + 1] - 1 if line + 1 < len(offsets) else len(self._content)
        return self._content[start:end].rstrip("\r")

    def offset_at(self, position: LSPPosition) -> int:
        """
        位置转换为字符偏移，超出范围时按 LSP 规则截断到行尾/文档末尾
        Convert a position to an offset, clamped to the line end / document end as LSP does
        """
        offsets = self.line_offsets
        if position.line >= len(offsets):
            return len(self._content)
        line_start = offsets[position.line]
        line_end = offsets[position.line + 1] - 1 if position.line + 1 < len(offsets) else len(self._content)
        return min(line_start + position.character, line_end)

    def position_at(self, offset: int) -> LSPPosition:
        offset = max(0, min(offset, len(self._content)))
        offsets = self.line_offsets
        line = bisect_right(offsets, offset) - 1
        return LSPPosition(line=line, character=offset - offsets[line])

    def set_value(self, content: str, version: int | None = None) -> int:
        self._content = content
        self._line_offsets = None
        self.version = self.version + 1 if version is None else version
        return self.version

    def apply_edits(self, edits: Sequence[LSPTextEdit]) -> int:
        """
        将一组编辑作为单个补丁应用。所有编辑都基于同一份原始内容计算，后面的编辑不会因前面的编辑自动调整偏移。
        Apply the edits as one combined patch. Every edit refers to the original content, offsets of later edits are
        not adjusted for earlier ones.

        Args:
            edits (Sequence[LSPTextEdit]): 互不重叠的编辑 | Non-overlapping edits

        Returns:
            int: 新版本号 | The new version

        Raises:
            InvalidEditError: Range 起止颠倒或相互重叠 | A range is reversed or ranges overlap
        """
        resolved: list[tuple[int, int, int, str]] = []
        for index, edit in enumerate(edits):
            start = self.offset_at(edit.range.start)
            end = self.offset_at(edit.range.end)
            if end < start:
                raise InvalidEditError(
                    message=f"Range 起止颠倒 | Reversed range in {self.uri}: {edit.range}",
                    detail_for_llm="编辑的 Range 结束位置早于开始位置 | The range end lies before its start",
                )
            resolved.append((start, end, index, edit.new_text))
        resolved.sort(key=lambda item: (item[0], item[1], item[2]))
        pieces: list[str] = []
        cursor = 0
        for start, end, _, new_text in resolved:
            if start < cursor:
                raise InvalidEditError(
                    message=f"编辑范围重叠 | Overlapping edits in {self.uri}",
                    detail_for_llm="同一文档中的编辑 Range 不允许重叠 | Edit ranges of one document must not overlap",
                )
            pieces.append(self._content[cursor:start])
            pieces.append(new_text)
            cursor = end
        pieces.append(self._content[cursor:])
        return self.set_value("".join(pieces))

# filename: glob.py
# @Time    : 2025/11/12 15:40
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
Glob 工具实现 | Glob Tool Implementation

按 glob 模式在工作区中查找文件，结果为文件 URI
Finds files in the workspace by glob pattern, results are file uris
"""

from typing import Any

from loguru import logger

from edit4ai.environment.workspace.search import RelativePattern
from edit4ai.mcp.schemas.tools import GlobInput, GlobOutput
from edit4ai.mcp.tools.base import BaseTool


class GlobTool(BaseTool):
    """
    文件搜索工具 | File search tool
    """

    @property
    def name(self) -> str:
        return "Glob"

    @property
    def description(self) -> str:
        return (
            "按 glob 模式查找文件 | Find files by glob pattern\n\n"
            "支持的语法 | Supported syntax:\n"
            "- `*` `?` `[abc]` `[!abc]`\n"
            "- `**` 匹配任意层级目录 | `**` matches any number of folders\n"
            "- `{a,b}` 备选项 | `{a,b}` alternation\n"
            "结果按路径排序，默认排除 .git、node_modules 等目录 | Sorted results, .git, node_modules and the like "
            "are excluded by default"
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return GlobInput.model_json_schema()

    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            glob_input = self.validate_input(arguments, GlobInput)
        except ValueError as e:
            err_info = f"参数验证失败 | Argument validation failed: {e}"
            logger.error(err_info)
            return GlobOutput(success=False, error=err_info).model_dump()

        include: str | RelativePattern = glob_input.pattern
        if glob_input.path:
            include = RelativePattern(self.workspace.resolve_path(glob_input.path), glob_input.pattern)
        action = {
            "category": "workspace",
            "action_name": "find_files",
            "action_args": {
                "include": include,
                "exclude": glob_input.exclude,
                "max_results": glob_input.max_results,
            },
        }
        try:
            obs, reward, done, success, info = self.workspace.step(action)
        except Exception as e:
            logger.exception(f"文件搜索出错 | File search failed: {e}")
            return GlobOutput(success=False, error=str(e)).model_dump()
        if not success:
            return GlobOutput(success=False, error=str(obs.get("obs", ""))).model_dump()
        files = list(obs.get("original_result") or [])
        logger.info(f"文件搜索完成 | File search finished: pattern={glob_input.pattern}, count={len(files)}")
        return GlobOutput(
            success=True,
            files=files,
            count=len(files),
            metadata={"pattern": glob_input.pattern, "path": glob_input.path},
        ).model_dump()

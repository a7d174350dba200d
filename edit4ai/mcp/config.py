# -*- coding: utf-8 -*-
# filename: config.py
# @Time    : 2025/11/12 14:05
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP Server 配置管理 | MCP Server Configuration Management

使用 confz 从环境变量与命令行参数读取配置，并转换为 EditWorkspace 的初始化参数
Reads the configuration from environment variables and command-line arguments with confz and converts it into
EditWorkspace initialization parameters
"""

from typing import Any, Literal

from confz import BaseConfig, CLArgSource, EnvSource
from pydantic import field_validator

from edit4ai.environment.workspace.workspace import DEFAULT_SEARCH_EXCLUDE, WorkspaceSetting

_REMAP = {
    "root-dir": "root_dir",
    "project-name": "project_name",
    "workspace-folders": "workspace_folders",
    "load-on-create": "load_on_create",
    "search-exclude": "search_exclude",
    "max-search-results": "max_search_results",
    "log-level": "log_level",
}


class MCPServerConfig(BaseConfig):
    """
    MCP Server 配置类 | MCP Server Configuration Class

    配置优先级 | Configuration priority: 命令行参数 > 环境变量 > 默认值 | CLI args > env vars > defaults

    Attributes:
        transport: 传输模式 | Transport mode
        host: 服务器主机地址 | Server host
        port: 服务器端口 | Server port
        root_dir: 根目录 | Root directory
        project_name: 项目名称 | Project name
        workspace_folders: 搜索根目录，逗号分隔 | Search roots, comma separated
        load_on_create: 创建文件后是否打开 | Open files after creating them
        search_exclude: 文件搜索排除模式，逗号分隔 | Search exclude globs, comma separated
        max_search_results: 文件搜索结果上限 | Search result ceiling
        log_level: 日志级别 | Log level
    """

    transport: Literal["stdio", "streamable-http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    root_dir: str = "."
    project_name: str = "edit4ai-project"
    workspace_folders: list[str] = []
    load_on_create: bool = True
    search_exclude: list[str] = list(DEFAULT_SEARCH_EXCLUDE)
    max_search_results: int | None = 1000
    log_level: str = "INFO"

    CONFIG_SOURCES = [
        EnvSource(allow_all=True, prefix="EDIT4AI_"),
        CLArgSource(remap=_REMAP),
    ]

    @field_validator("workspace_folders", "search_exclude", mode="before")
    @classmethod
    def _split_comma(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def to_workspace_kwargs(self) -> dict[str, Any]:
        """
        转换为 EditWorkspace 初始化参数 | Convert to EditWorkspace initialization parameters

        Returns:
            dict: 初始化参数字典 | Initialization parameters dict
        """
        setting: WorkspaceSetting = {
            "load_on_create": self.load_on_create,
            "search_exclude": list(self.search_exclude),
            "max_search_results": self.max_search_results,
        }
        return {
            "root_dir": self.root_dir,
            "project_name": self.project_name,
            "workspace_folders": list(self.workspace_folders) or None,
            "workspace_setting": setting,
        }

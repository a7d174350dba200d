# filename: server.py
# @Time    : 2025/11/12 16:00
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP Server 主入口 | MCP Server Main Entry Point

实现 MCP 协议的服务器，封装 EditWorkspace 的能力
Implements MCP protocol server, wrapping EditWorkspace capabilities
"""

import asyncio
import json
import sys
from typing import Any

import uvicorn
from loguru import logger
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.routing import Route

from edit4ai.environment.workspace.workspace import EditWorkspace
from edit4ai.mcp.config import MCPServerConfig
from edit4ai.mcp.tools import ApplyWorkspaceEditTool, CreateFileTool, DeleteFileTool, GlobTool, RenameFileTool
from edit4ai.mcp.tools.base import BaseTool


class StreamableHTTPASGIApp:
    """ASGI 应用包装器 | ASGI application wrapper"""

    def __init__(self, manager: StreamableHTTPSessionManager) -> None:
        self.session_manager = manager

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        await self.session_manager.handle_request(scope, receive, send)


class EditMCPServer:
    """
    Workspace Edit MCP Server

    封装 EditWorkspace 为 MCP Server，提供编辑与文件操作工具
    Wraps EditWorkspace as MCP Server, providing edit and file operation tools
    """

    def __init__(self, config: MCPServerConfig) -> None:
        """
        初始化 MCP Server | Initialize MCP Server

        Args:
            config: MCP Server 配置 | MCP Server configuration
        """
        self.config = config
        self.server = Server("edit4ai-mcp")
        self.workspace = EditWorkspace(**config.to_workspace_kwargs())
        self.tools: dict[str, BaseTool] = {}
        self._register_tools()
        self._setup_handlers()
        logger.info(
            f"Edit MCP Server 初始化完成 | Edit MCP Server initialized: project={config.project_name}, "
            f"root={config.root_dir}",
        )

    def close(self) -> None:
        """
        关闭 MCP Server 并清理资源 | Close MCP Server and cleanup resources
        """
        try:
            self.workspace.close()
            logger.info(f"MCP Server 资源已清理 | MCP Server resources cleaned up: project={self.config.project_name}")
        except Exception as e:
            logger.error(f"关闭 MCP Server 时出错 | Error closing MCP Server: {e}")

    def _register_tools(self) -> None:
        for tool_cls in (ApplyWorkspaceEditTool, CreateFileTool, DeleteFileTool, RenameFileTool, GlobTool):
            tool = tool_cls(self.workspace)
            self.tools[tool.name] = tool
        logger.info(f"已注册工具 | Registered tools: {list(self.tools.keys())}")

    async def list_tools(self) -> list[Tool]:
        """
        列出所有可用工具 | List all available tools
        """
        tools = [
            Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in self.tools.values()
        ]
        logger.debug(f"列出工具 | Listed tools: {[t.name for t in tools]}")
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """
        调用工具 | Call tool

        Args:
            name: 工具名称 | Tool name
            arguments: 工具参数 | Tool arguments

        Returns:
            list[TextContent]: JSON 格式的工具执行结果 | Tool result as JSON text
        """
        logger.info(f"调用工具 | Calling tool: {name}")
        tool = self.tools.get(name)
        if not tool:
            error_msg = f"未找到工具 | Tool not found: {name}"
            logger.error(error_msg)
            return [TextContent(type="text", text=error_msg)]
        try:
            result = await tool.execute(arguments or {})
        except Exception as e:
            error_msg = f"工具执行失败 | Tool execution failed: {e}"
            logger.exception(error_msg)
            return [TextContent(type="text", text=error_msg)]
        return [TextContent(type="text", text=json.dumps(result, ensure_ascii=False, default=str))]

    def _setup_handlers(self) -> None:
        """
        设置 MCP 协议处理器 | Setup MCP protocol handlers
        """
        self.server.list_tools()(self.list_tools)  # type: ignore[no-untyped-call]
        self.server.call_tool()(self.call_tool)

    async def run(self) -> None:
        """
        运行 MCP Server | Run MCP Server

        根据配置选择传输协议：stdio 或 streamable-http
        Choose transport protocol based on configuration: stdio or streamable-http
        """
        transport = self.config.transport
        logger.info(f"启动 MCP Server | Starting MCP Server with transport: {transport}")
        if transport == "stdio":
            await self._run_stdio()
        elif transport == "streamable-http":
            await self._run_streamable_http()
        else:
            raise ValueError(f"不支持的传输模式 | Unsupported transport mode: {transport}")  # pragma: no cover

    async def _run_stdio(self) -> None:
        logger.info("使用 stdio 传输模式 | Using stdio transport")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    def create_http_app(self) -> Starlette:
        """
        创建 Streamable HTTP 的 Starlette 应用，端点为 /mcp
        Build the Streamable HTTP Starlette application serving /mcp
        """
        # stateless=True: 每个请求都是独立的，不维护会话状态
        # stateless=True: Each request is independent, no session state is maintained
        session_manager = StreamableHTTPSessionManager(
            app=self.server,
            stateless=True,
            json_response=False,
        )
        return Starlette(
            debug=False,
            routes=[
                Route(
                    "/mcp",
                    endpoint=StreamableHTTPASGIApp(session_manager),
                    methods=["GET", "POST", "DELETE"],
                ),
            ],
            lifespan=lambda app: session_manager.run(),
        )

    async def _run_streamable_http(self) -> None:
        logger.info(
            f"使用 Streamable HTTP 传输模式 | Using Streamable HTTP transport: "
            f"http://{self.config.host}:{self.config.port}/mcp",
        )
        config = uvicorn.Config(
            app=self.create_http_app(),
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )
        server = uvicorn.Server(config)
        await server.serve()


def configure_logging(level: str) -> None:
    """
    日志输出到 stderr，避免干扰 stdio 传输 | Log to stderr so the stdio transport stays clean
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


async def async_main() -> None:
    """
    异步主函数 | Async main function

    使用 confz 从环境变量和命令行参数读取配置并启动 MCP Server
    Use confz to read configuration from environment variables and command-line arguments, then start MCP Server

    配置优先级 | Configuration Priority:
        命令行参数 > 环境变量 > 默认值
        Command-line arguments > Environment variables > Default values

    环境变量 | Environment Variables:
        - EDIT4AI_TRANSPORT: 传输模式 | Transport mode (default: "stdio")
        - EDIT4AI_HOST / EDIT4AI_PORT: 服务器地址 | Server address (default: 127.0.0.1:8000)
        - EDIT4AI_ROOT_DIR: 项目根目录 | Project root directory (default: ".")
        - EDIT4AI_PROJECT_NAME: 项目名称 | Project name
        - EDIT4AI_WORKSPACE_FOLDERS: 搜索根目录，逗号分隔 | Search roots, comma separated
        - EDIT4AI_SEARCH_EXCLUDE: 搜索排除模式，逗号分隔 | Search exclude globs, comma separated
        - EDIT4AI_MAX_SEARCH_RESULTS: 搜索结果上限 | Search result ceiling
        - EDIT4AI_LOG_LEVEL: 日志级别 | Log level

    命令行参数 | Command-line Arguments:
        --transport, --host, --port, --root-dir, --project-name, --workspace-folders, --load-on-create,
        --search-exclude, --max-search-results, --log-level
    """
    config = MCPServerConfig()
    configure_logging(config.log_level)
    logger.info(
        f"启动 MCP Server | Starting MCP Server: "
        f"transport={config.transport}, "
        f"host={config.host}, "
        f"port={config.port}, "
        f"root_dir={config.root_dir}, "
        f"project_name={config.project_name}, "
        f"workspace_folders={config.workspace_folders}",
    )
    server = EditMCPServer(config)
    try:
        await server.run()
    finally:
        server.close()


def main() -> None:
    """
    同步入口函数 | Synchronous entry point
    """
    asyncio.run(async_main())

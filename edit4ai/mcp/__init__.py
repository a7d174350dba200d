# filename: __init__.py
# @Time    : 2025/11/12 14:00
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
MCP Server 模块 | MCP Server module

将工作区编辑与文件操作能力暴露为 MCP 工具
Exposes workspace edits and file operations as MCP tools
"""

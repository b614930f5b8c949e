"""
命令处理器层
"""

from .command_handler import CommandHandler
from .llm_tool_handler import LLMToolHandler

__all__ = ["CommandHandler", "LLMToolHandler"]

"""
领域层 - 错误类型定义
"""

import re
from enum import Enum

# Playwright 给页面异常加上的 "Page.evaluate: " 前缀
_API_PREFIX = re.compile(r"^[A-Za-z]+\.[A-Za-z_]+: ")
# JS 异常名前缀，如 "Error: "、"TypeError: "
_JS_ERROR_NAME = re.compile(r"^[A-Za-z]*Error: ")
# JS 调用栈
_JS_STACK = re.compile(r"\n\s+at .*", re.DOTALL)


class ErrorCode(Enum):
    """错误代码枚举"""

    BROWSER_LAUNCH_FAILED = "BROWSER_LAUNCH_FAILED"
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"
    RENDER_TIMEOUT = "RENDER_TIMEOUT"
    SYNTAX_ERROR = "SYNTAX_ERROR"


class RenderError(Exception):
    """渲染错误基类"""

    def __init__(self, message: str, code: ErrorCode = None):
        super().__init__(message)
        self.code = code


class BrowserError(RenderError):
    """浏览器相关错误"""

    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.BROWSER_LAUNCH_FAILED)


class DependencyError(RenderError):
    """渲染页面依赖缺失"""

    def __init__(self, message: str, install_hint: str = ""):
        super().__init__(message, code=ErrorCode.DEPENDENCY_MISSING)
        self.install_hint = install_hint


class RenderTimeoutError(RenderError):
    """渲染超时

    由超时监督器构造，错误分类器不会对其重新分类。
    """

    def __init__(self, duration_ms: int, action: str = "convert"):
        super().__init__(
            f"Timeout error: {action} took more than {duration_ms}ms",
            code=ErrorCode.RENDER_TIMEOUT,
        )
        self.duration_ms = duration_ms
        self.action = action


class DiagramSyntaxError(RenderError):
    """图表语法错误

    str(err) 为底层解析错误的消息，user_message 为固定的用户提示。
    """

    user_message = "Syntax error in graph"

    def __init__(self, cause: BaseException):
        super().__init__(
            bare_error_message(cause) or self.user_message, code=ErrorCode.SYNTAX_ERROR
        )
        self.__cause__ = cause


def bare_error_message(error: BaseException) -> str:
    """去掉 Playwright 的 API 前缀、JS 异常名和调用栈，只保留错误消息本身"""
    message = getattr(error, "message", None) or str(error)
    message = _JS_STACK.sub("", message)
    message = _API_PREFIX.sub("", message, count=1)
    message = _JS_ERROR_NAME.sub("", message, count=1)
    return message.strip()

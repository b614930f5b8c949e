"""
领域层 - 核心接口、类型和错误定义
"""

from .interfaces import (
    ISessionFactory,
    IImageResolver,
    IPageRenderer,
    IRenderOrchestrator,
)
from .errors import (
    ErrorCode,
    RenderError,
    BrowserError,
    DependencyError,
    RenderTimeoutError,
    DiagramSyntaxError,
)
from .types import RenderTask, RenderConfig, RenderResult

__all__ = [
    "ISessionFactory",
    "IImageResolver",
    "IPageRenderer",
    "IRenderOrchestrator",
    "ErrorCode",
    "RenderError",
    "BrowserError",
    "DependencyError",
    "RenderTimeoutError",
    "DiagramSyntaxError",
    "RenderTask",
    "RenderConfig",
    "RenderResult",
]

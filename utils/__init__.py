"""
工具层 - AOP装饰器和超时监督
"""

from .decorators import log_execution, race_with_deadline

__all__ = ["log_execution", "race_with_deadline"]

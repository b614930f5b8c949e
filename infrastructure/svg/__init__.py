"""
基础设施层 - SVG 后处理模块
"""
from .image_resolver import ImageResolver

__all__ = ["ImageResolver"]

"""
基础设施层
"""
from .browser import BrowserManager, PageRenderer, ViewerAssetInstaller
from .svg import ImageResolver

__all__ = [
    "BrowserManager",
    "PageRenderer",
    "ViewerAssetInstaller",
    "ImageResolver",
]

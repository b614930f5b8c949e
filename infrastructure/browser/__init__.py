"""
基础设施层 - 浏览器模块
"""
from .asset_installer import ViewerAssetInstaller
from .browser_manager import BrowserManager
from .page_renderer import PageRenderer

__all__ = [
    "ViewerAssetInstaller",
    "BrowserManager",
    "PageRenderer",
]

"""
Drawio2Image 类型定义
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

DEFAULT_PAGE_URL = (
    Path(__file__).resolve().parent.parent / "assets" / "index.html"
).as_uri()

# SVG 文本或 PNG 字节
RenderResult = Union[str, bytes]


@dataclass(frozen=True)
class RenderTask:
    """单次渲染任务（不可变）"""

    source: str
    is_unsafe: bool = False  # 是否允许拉取并内联远程图片
    is_png: bool = False


@dataclass(frozen=True)
class RenderConfig:
    """渲染配置（不可变，构造时读取一次）"""

    page_url: str = DEFAULT_PAGE_URL
    convert_timeout_ms: int = 15000
    viewport_width: int = 600
    viewport_height: int = 800
    browser_endpoint: str = ""  # 为空时在本地启动 Chromium
    remote_debugging_port: int = 9222
    image_fetch_timeout_ms: int = 10000
    allow_unsafe: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RenderConfig":
        """从插件配置构造，缺省或空值使用默认值"""
        defaults = cls()
        return cls(
            page_url=config.get("page_url") or defaults.page_url,
            convert_timeout_ms=int(
                config.get("convert_timeout_ms") or defaults.convert_timeout_ms
            ),
            browser_endpoint=config.get("browser_endpoint") or "",
            remote_debugging_port=int(
                config.get("remote_debugging_port") or defaults.remote_debugging_port
            ),
            image_fetch_timeout_ms=int(
                config.get("image_fetch_timeout_ms") or defaults.image_fetch_timeout_ms
            ),
            allow_unsafe=bool(config.get("allow_unsafe", False)),
        )

"""
领域层 - 核心接口定义
遵循依赖倒置原则(DIP)，定义抽象接口
"""

from typing import Any, Protocol, runtime_checkable
from xml.etree.ElementTree import Element

from .types import RenderResult, RenderTask


@runtime_checkable
class ISessionFactory(Protocol):
    """浏览器会话工厂接口

    每次调用都返回一个新的、仅供单个任务使用的会话。
    """

    async def open_session(self) -> Any:
        """连接远程浏览器，返回会话（Playwright Browser）"""
        ...


@runtime_checkable
class IImageResolver(Protocol):
    """图片内联器接口"""

    async def resolve_images(self, document: Element) -> Element:
        """将外部图片引用改写为 data URI，原地修改并返回同一文档"""
        ...

    async def resolve_svg(self, svg: str) -> str:
        """解析 SVG 文本，内联图片后重新序列化"""
        ...


@runtime_checkable
class IPageRenderer(Protocol):
    """执行上下文内的页面渲染器接口"""

    async def open(self, page: Any) -> None:
        """导航到渲染页面"""
        ...

    async def render_svg(self, page: Any, source: str) -> str:
        """调用页面内的 render 能力，返回序列化后的 SVG"""
        ...

    async def rasterize(self, page: Any, svg: str, allow_remote: bool) -> bytes:
        """将 SVG 重新渲染并截取 PNG"""
        ...


@runtime_checkable
class IRenderOrchestrator(Protocol):
    """渲染编排器接口"""

    async def convert(self, task: RenderTask) -> RenderResult:
        """执行一次渲染任务"""
        ...

    async def close(self) -> None:
        """释放资源"""
        ...

"""
渲染编排器
编排单个渲染任务的完整生命周期
"""
from pathlib import Path
from typing import Any, Optional

from astrbot.api import logger

from ..domain.errors import DependencyError
from ..domain.interfaces import IImageResolver, IPageRenderer, ISessionFactory
from ..domain.types import DEFAULT_PAGE_URL, RenderConfig, RenderResult, RenderTask
from ..infrastructure.browser import BrowserManager, PageRenderer, ViewerAssetInstaller
from ..infrastructure.svg import ImageResolver
from ..utils.decorators import log_execution, race_with_deadline
from .error_classifier import ErrorClassifier

ASSET_DIR = Path(__file__).resolve().parent.parent / "assets"


class RenderOrchestrator:
    """
    渲染编排器

    Pipeline:
    session ──► context ──► goto ──► render(+resolve) ──► svg / png
                                        │ deadline race
    finally: close context ──► close session

    0. 使用自带渲染页面时确认 viewer 脚本已安装 (asset_installer)
    1. 为任务建立独立的浏览器会话 (session_factory)
    2. 创建隔离的执行上下文，固定视口 600x800
    3. 导航到渲染页面 (page_renderer)
    4. 在截止时间内渲染 SVG，unsafe 任务内联外部图片 (image_resolver)
    5. 按需截取 PNG
    6. 无论成功与否都关闭上下文和会话

    只有第 4 步的失败会经过错误分类器，其余步骤的异常原样抛出。
    """

    def __init__(
        self,
        config: RenderConfig,
        session_factory: Optional[ISessionFactory] = None,
        page_renderer: Optional[IPageRenderer] = None,
        image_resolver: Optional[IImageResolver] = None,
        error_classifier: Optional[ErrorClassifier] = None,
        asset_installer: Optional[ViewerAssetInstaller] = None,
    ):
        self._config = config
        self._owns_session_factory = session_factory is None
        self._session_factory = session_factory or BrowserManager(
            endpoint=config.browser_endpoint,
            remote_debugging_port=config.remote_debugging_port,
        )
        self._page_renderer = page_renderer or PageRenderer(config.page_url)
        self._image_resolver = image_resolver or ImageResolver(
            timeout_ms=config.image_fetch_timeout_ms
        )
        self._error_classifier = error_classifier or ErrorClassifier()

        # 自定义渲染页面自行负责依赖
        if asset_installer is None and config.page_url == DEFAULT_PAGE_URL:
            asset_installer = ViewerAssetInstaller(ASSET_DIR)
        self._asset_installer = asset_installer

    @log_execution
    async def convert(self, task: RenderTask) -> RenderResult:
        """执行一次渲染任务

        Returns:
            is_png 为 False 时返回 SVG 文本，否则返回 PNG 字节

        Raises:
            DiagramSyntaxError: 图表无法渲染
            RenderTimeoutError: 渲染超过截止时间
            DependencyError: 自带渲染页面缺少 viewer 脚本
        """
        logger.info(
            f"[Drawio2Image] 开始渲染，内容长度: {len(task.source)}, "
            f"png={task.is_png}, unsafe={task.is_unsafe}"
        )
        await self._ensure_assets()

        session = await self._session_factory.open_session()
        context = None
        try:
            context = await session.new_context(
                viewport={
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
                ignore_https_errors=True,
            )
            page = await context.new_page()
            await self._page_renderer.open(page)

            svg = await self._render(page, task)
            if not task.is_png:
                return svg

            return await self._page_renderer.rasterize(
                page, svg, allow_remote=task.is_unsafe
            )
        finally:
            await self._teardown(context, session)

    async def _render(self, page: Any, task: RenderTask) -> str:
        """在截止时间内渲染，并对失败进行分类"""
        try:
            return await race_with_deadline(
                self._render_and_resolve(page, task),
                self._config.convert_timeout_ms,
                "convert",
            )
        except Exception as e:
            classified = self._error_classifier.classify(e)
            if classified is e:
                raise
            raise classified from e

    async def _render_and_resolve(self, page: Any, task: RenderTask) -> str:
        svg = await self._page_renderer.render_svg(page, task.source)
        if task.is_unsafe:
            svg = await self._image_resolver.resolve_svg(svg)
        return svg

    async def _teardown(self, context: Any, session: Any) -> None:
        """依次关闭执行上下文和会话，失败只记录警告"""
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"[Drawio2Image] 无法关闭执行上下文: {type(e).__name__}: {e}")

        try:
            await session.close()
        except Exception as e:
            logger.warning(f"[Drawio2Image] 无法断开浏览器会话: {type(e).__name__}: {e}")

    async def close(self) -> None:
        """释放资源"""
        if self._owns_session_factory:
            await self._session_factory.close()
        logger.info("[Drawio2Image] 编排器资源已释放")

    async def _ensure_assets(self) -> None:
        if self._asset_installer is None:
            return
        if not await self._asset_installer.check_and_install():
            raise DependencyError(
                "diagrams.net viewer 脚本缺失",
                install_hint=self._asset_installer.install_hint(),
            )

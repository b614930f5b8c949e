"""
页面渲染器
在单个执行上下文（页面）内完成导航、渲染和截图
"""

from astrbot.api import logger

# 页面与编排器之间只传递可序列化的数据：传入源码，传出 SVG 文本
RENDER_SCRIPT = """
(source) => {
    const svgRoot = render({ xml: source, format: 'svg' }).getSvg();
    return new XMLSerializer().serializeToString(svgRoot);
}
"""

HOST_DOCUMENT = """<!DOCTYPE html>
<html>
<head>
<meta name='viewport' content='initial-scale=1.0, user-scalable=no' />
<meta http-equiv='Content-Type' content='text/html; charset=utf-8' />
</head>
<body>
{svg}
</body>
</html>"""


def _is_remote_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


class PageRenderer:
    """页面渲染器 - 渲染 diagrams.net 图表并截取 SVG 元素"""

    def __init__(self, page_url: str):
        self._page_url = page_url

    async def open(self, page) -> None:
        """挂接页面日志并导航到渲染页面"""
        self._setup_logging(page)
        await page.goto(self._page_url)
        logger.debug(f"[Drawio2Image] 渲染页面已加载: {self._page_url}")

    async def render_svg(self, page, source: str) -> str:
        """调用页面内的 render 能力，返回序列化后的 SVG"""
        return await page.evaluate(RENDER_SCRIPT, source)

    async def rasterize(self, page, svg: str, allow_remote: bool) -> bytes:
        """将 SVG 嵌入宿主文档，截取最外层 svg 元素为透明背景 PNG"""
        if not allow_remote:
            await page.route(_is_remote_url, self._abort_route)

        await page.set_content(HOST_DOCUMENT.format(svg=svg))
        container = await page.query_selector("svg")
        if container is None:
            raise ValueError("渲染结果中未找到 svg 元素")

        png = await container.screenshot(type="png", omit_background=True)
        logger.debug(f"[Drawio2Image] 截图完成，大小: {len(png)} bytes")
        return bytes(png)

    @staticmethod
    async def _abort_route(route) -> None:
        logger.debug(f"[Drawio2Image] 已拦截外部请求: {route.request.url}")
        await route.abort()

    def _setup_logging(self, page) -> None:
        """转发页面日志"""
        page.on(
            "console", lambda msg: logger.debug(f"[Browser] {msg.type}: {msg.text}")
        )
        page.on("pageerror", lambda err: logger.error(f"[Browser Error] {err}"))

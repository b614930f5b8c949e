"""
AstrBot Drawio2Image 插件
将 diagrams.net (draw.io) 图表渲染为 PNG 图片或 SVG 文件
"""
from astrbot.api.event import filter, AstrMessageEvent
from astrbot.api.star import Context, Star, StarTools, register
from astrbot.api import logger
from astrbot.api import AstrBotConfig

from .application import RenderOrchestrator
from .domain.types import RenderConfig
from .handlers import CommandHandler, LLMToolHandler

PLUGIN_NAME = "astrbot_plugin_drawio2image"


@register(
    PLUGIN_NAME,
    "Willixrain",
    "将 diagrams.net (draw.io) 图表渲染为图片",
    "1.0.0"
)
class Drawio2ImagePlugin(Star):
    """Drawio 转图片插件"""

    def __init__(self, context: Context, config: AstrBotConfig):
        super().__init__(context)
        self.config = config

        # 配置只在加载时读取一次
        self.render_config = RenderConfig.from_mapping(config)
        self.orchestrator = RenderOrchestrator(self.render_config)

        output_dir = StarTools.get_data_dir(PLUGIN_NAME)
        self.command_handler = CommandHandler(
            self.orchestrator,
            output_dir=output_dir,
            allow_unsafe=self.render_config.allow_unsafe,
        )
        self.llm_tool_handler = LLMToolHandler(
            self.orchestrator,
            output_dir=output_dir,
            context=context,
            allow_unsafe=self.render_config.allow_unsafe,
        )

        logger.info(
            f"[Drawio2Image] 渲染页面: {self.render_config.page_url}, "
            f"超时: {self.render_config.convert_timeout_ms}ms"
        )

    @filter.command("drawio")
    async def cmd_drawio(self, event: AstrMessageEvent, content: str = ""):
        """将 diagrams.net XML 渲染为 PNG 图片"""
        async for result in self.command_handler.handle_drawio(event):
            yield result

    @filter.command("drawio_svg")
    async def cmd_drawio_svg(self, event: AstrMessageEvent, content: str = ""):
        """将 diagrams.net XML 渲染为 SVG 文件"""
        async for result in self.command_handler.handle_drawio_svg(event):
            yield result

    # ==================== LLM 工具支持 ====================

    @filter.llm_tool(name="render_drawio")
    async def llm_render_drawio(
        self, event: AstrMessageEvent, xml: str, format: str = "png"
    ) -> str:
        """【流程图/架构图渲染工具】将 diagrams.net (draw.io) XML 渲染为图片。

        当需要向用户展示流程图、架构图、拓扑图等图表，并且已经写出
        diagrams.net 的 mxGraphModel / mxfile XML 时调用此工具。

        Args:
            xml(string): Required. diagrams.net XML（<mxfile> 或 <mxGraphModel>）
            format(string): 输出格式，png 或 svg，默认 png

        Returns:
            string: 渲染结果
        """
        return await self.llm_tool_handler.handle_render_drawio(xml, format)

    @filter.llm_tool(name="send_drawio_image")
    async def llm_send_drawio_image(self, event: AstrMessageEvent) -> str:
        """发送最近渲染的图表给用户。

        在使用 render_drawio 渲染成功后，调用此工具将结果发送给用户。

        Returns:
            string: 发送结果
        """
        return await self.llm_tool_handler.handle_send_image(event)

    async def terminate(self):
        """插件卸载时清理资源"""
        await self.orchestrator.close()
        logger.info("Drawio2Image 插件已卸载")

"""
LLM工具处理器
处理 render_drawio, send_drawio_image 等LLM工具调用
"""
import traceback
from pathlib import Path
from typing import Optional

from astrbot.api import logger
from astrbot.api.event import AstrMessageEvent, MessageChain
import astrbot.api.message_components as Comp

from ..domain.errors import RenderError
from ..domain.interfaces import IRenderOrchestrator
from ..domain.types import RenderTask
from ..utils.decorators import log_execution
from .command_handler import describe_error, save_render_result


class LLMToolHandler:
    """LLM工具处理器"""

    def __init__(
        self,
        render_orchestrator: IRenderOrchestrator,
        output_dir: Path,
        context,
        allow_unsafe: bool = False,
    ):
        self._render_orchestrator = render_orchestrator
        self._output_dir = output_dir
        self._context = context
        self._allow_unsafe = allow_unsafe

        # 最近渲染的结果
        self._last_rendered: Optional[Path] = None

    @log_execution
    async def handle_render_drawio(self, xml: str, fmt: str = "png") -> str:
        """处理 render_drawio 工具调用"""
        if not xml:
            return "错误：xml 参数不能为空"

        is_png = fmt.lower() != "svg"
        task = RenderTask(source=xml, is_unsafe=self._allow_unsafe, is_png=is_png)

        try:
            result = await self._render_orchestrator.convert(task)
        except RenderError as e:
            self._last_rendered = None
            return describe_error(e)
        except Exception as e:
            logger.error(f"[Drawio2Image] LLM工具渲染失败: {type(e).__name__}: {e}")
            logger.error(f"[Drawio2Image] 堆栈信息:\n{traceback.format_exc()}")
            self._last_rendered = None
            return describe_error(e)

        self._last_rendered = save_render_result(
            self._output_dir, result, "png" if is_png else "svg"
        )
        logger.info(f"[Drawio2Image] LLM工具渲染成功: {self._last_rendered}")
        return "渲染成功，图表已生成。请调用 send_drawio_image 工具发送。"

    async def handle_send_image(self, event: AstrMessageEvent) -> str:
        """发送最近渲染的结果给用户"""
        if self._last_rendered is None:
            return "没有可发送的图表，请先使用 render_drawio 渲染"

        if not self._last_rendered.exists():
            return f"文件不存在: {self._last_rendered}"

        path = self._last_rendered
        if path.suffix == ".png":
            chain = [Comp.Image.fromFileSystem(str(path))]
        else:
            chain = [Comp.File(name=path.name, file=str(path))]

        try:
            await self._context.send_message(event.unified_msg_origin, MessageChain(chain))
        except Exception as e:
            logger.error(f"[Drawio2Image] 发送图表失败: {e}")
            return f"发送失败: {e}"

        self._last_rendered = None
        return f"图表已发送: {path.name}"

    @property
    def last_rendered(self) -> Optional[Path]:
        """最近渲染的结果路径"""
        return self._last_rendered

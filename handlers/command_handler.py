"""
命令处理器
处理 /drawio, /drawio_svg 命令
"""

import traceback
import uuid
from pathlib import Path
from typing import AsyncIterator

from astrbot.api import logger
from astrbot.api.event import AstrMessageEvent
import astrbot.api.message_components as Comp

from ..domain.errors import (
    DependencyError,
    DiagramSyntaxError,
    RenderError,
    RenderTimeoutError,
)
from ..domain.interfaces import IRenderOrchestrator
from ..domain.types import RenderTask


def save_render_result(output_dir: Path, result, suffix: str) -> Path:
    """将渲染结果写入输出目录"""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"drawio_{uuid.uuid4().hex[:8]}.{suffix}"
    if isinstance(result, bytes):
        output_path.write_bytes(result)
    else:
        output_path.write_text(result, encoding="utf-8")
    return output_path


def describe_error(error: Exception) -> str:
    """生成面向用户的错误提示"""
    if isinstance(error, DiagramSyntaxError):
        return f"{error.user_message}: {error}"
    if isinstance(error, RenderTimeoutError):
        return f"渲染超时（超过 {error.duration_ms}ms），请简化图表后重试"
    if isinstance(error, DependencyError) and error.install_hint:
        return f"渲染失败: {error}，请手动安装: {error.install_hint}"
    return f"渲染失败: {error}"


class CommandHandler:
    """命令处理器"""

    def __init__(
        self,
        render_orchestrator: IRenderOrchestrator,
        output_dir: Path,
        allow_unsafe: bool = False,
    ):
        self._render_orchestrator = render_orchestrator
        self._output_dir = output_dir
        self._allow_unsafe = allow_unsafe

    async def handle_drawio(self, event: AstrMessageEvent) -> AsyncIterator:
        """处理 /drawio 命令，渲染为 PNG"""
        source = self._extract_command_content(event, "drawio")

        if not source:
            yield event.plain_result("请提供 diagrams.net XML，例如: /drawio <mxfile>...</mxfile>")
            return

        logger.info(f"[Drawio2Image] /drawio 内容长度: {len(source)}")
        async for result in self._render_and_send(event, source, is_png=True):
            yield result

    async def handle_drawio_svg(self, event: AstrMessageEvent) -> AsyncIterator:
        """处理 /drawio_svg 命令，渲染为 SVG 文件"""
        source = self._extract_command_content(event, "drawio_svg")

        if not source:
            yield event.plain_result("请提供 diagrams.net XML，例如: /drawio_svg <mxfile>...</mxfile>")
            return

        logger.info(f"[Drawio2Image] /drawio_svg 内容长度: {len(source)}")
        async for result in self._render_and_send(event, source, is_png=False):
            yield result

    async def _render_and_send(
        self, event: AstrMessageEvent, source: str, is_png: bool
    ) -> AsyncIterator:
        """渲染并发送结果"""
        task = RenderTask(source=source, is_unsafe=self._allow_unsafe, is_png=is_png)

        try:
            result = await self._render_orchestrator.convert(task)
        except RenderError as e:
            yield event.plain_result(describe_error(e))
            return
        except Exception as e:
            logger.error(f"[Drawio2Image] 渲染失败: {type(e).__name__}: {e}")
            logger.error(f"[Drawio2Image] 堆栈信息:\n{traceback.format_exc()}")
            yield event.plain_result(describe_error(e))
            return

        output_path = save_render_result(
            self._output_dir, result, "png" if is_png else "svg"
        )
        logger.info(f"[Drawio2Image] 渲染结果已保存: {output_path}")

        if is_png:
            yield event.chain_result([Comp.Image.fromFileSystem(str(output_path))])
        else:
            yield event.chain_result(
                [Comp.File(name=output_path.name, file=str(output_path))]
            )

    def _extract_command_content(self, event: AstrMessageEvent, cmd_name: str) -> str:
        """从完整消息中提取命令后的内容（XML 中含空格，不能依赖参数切分）"""
        full_msg = event.get_message_str()
        content = ""

        for prefix in [f"/{cmd_name} ", f"{cmd_name} "]:
            if full_msg.startswith(prefix):
                content = full_msg[len(prefix):]
                break

        return content.strip()

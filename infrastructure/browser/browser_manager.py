"""
浏览器管理器
托管 Playwright 驱动与本地 Chromium，并为每个任务建立独立的浏览器会话
"""
import asyncio
import traceback
from typing import Optional

from playwright.async_api import async_playwright, Browser, Playwright

from astrbot.api import logger
from ...domain.errors import BrowserError


class BrowserManager:
    """浏览器管理器

    配置了 endpoint 时直接连接远程浏览器；否则启动一个开启远程调试端口的
    本地 Chromium，并通过 CDP 连接它。open_session 每次都建立新连接，
    会话不做池化，由调用方负责关闭。
    """

    def __init__(self, endpoint: str = "", remote_debugging_port: int = 9222):
        self._endpoint = endpoint
        self._remote_debugging_port = remote_debugging_port
        self._playwright: Optional[Playwright] = None
        self._host_browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    async def open_session(self) -> Browser:
        """建立一个新的浏览器会话（连接失败原样抛出）"""
        endpoint = await self._ensure_endpoint()
        logger.debug(f"[Drawio2Image] 连接浏览器: {endpoint}")
        return await self._playwright.chromium.connect_over_cdp(endpoint)

    async def _ensure_endpoint(self) -> str:
        """启动 Playwright 驱动，必要时启动本地浏览器（并发安全）"""
        async with self._lock:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
                logger.debug("[Drawio2Image] Playwright 已启动")

            if self._endpoint:
                return self._endpoint

            if self._host_browser is None or not self._host_browser.is_connected():
                await self._launch_host_browser()
            return f"http://127.0.0.1:{self._remote_debugging_port}"

    async def _launch_host_browser(self) -> None:
        try:
            logger.info("[Drawio2Image] 正在启动本地浏览器...")
            self._host_browser = await self._playwright.chromium.launch(
                headless=True,
                args=[
                    f"--remote-debugging-port={self._remote_debugging_port}",
                    "--allow-file-access-from-files",
                    "--disable-features=VizDisplayCompositor",
                ],
            )
            logger.info("[Drawio2Image] 本地浏览器已启动")
        except Exception as e:
            logger.error(f"[Drawio2Image] 浏览器启动失败: {type(e).__name__}: {e}")
            logger.error(f"[Drawio2Image] 堆栈信息:\n{traceback.format_exc()}")
            raise BrowserError(f"浏览器启动失败: {e}")

    async def close(self) -> None:
        """关闭本地浏览器和 Playwright"""
        async with self._lock:
            if self._host_browser:
                try:
                    await self._host_browser.close()
                except Exception as e:
                    logger.warning(f"[Drawio2Image] 关闭浏览器时出错: {e}")
                finally:
                    self._host_browser = None

            if self._playwright:
                try:
                    await self._playwright.stop()
                except Exception as e:
                    logger.warning(f"[Drawio2Image] 关闭Playwright时出错: {e}")
                finally:
                    self._playwright = None

            logger.info("[Drawio2Image] 浏览器资源已释放")

    @property
    def is_hosting(self) -> bool:
        """是否托管着本地浏览器"""
        return self._host_browser is not None and self._host_browser.is_connected()

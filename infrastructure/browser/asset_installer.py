"""
渲染页面资源安装器
确保 diagrams.net viewer 脚本存在于插件的 assets 目录中
"""

import asyncio
from pathlib import Path
from typing import Optional

import httpx

from astrbot.api import logger

DRAWIO_VERSION = "24.7.17"
VIEWER_FILENAME = "viewer-static.min.js"
VIEWER_URL = (
    f"https://cdn.jsdelivr.net/gh/jgraph/drawio@v{DRAWIO_VERSION}"
    f"/src/main/webapp/js/{VIEWER_FILENAME}"
)


class ViewerAssetInstaller:
    """
    diagrams.net viewer 资源安装器

    安装策略:
    1. 渲染页面通过相对路径 drawio/viewer-static.min.js 加载本地脚本，渲染时不访问外网
    2. 首次渲染前检测脚本是否存在
    3. 缺失时从固定版本的地址下载一次，之后一直使用本地副本
    4. 下载失败时记录手动安装说明（离线环境可手动放置文件）
    """

    def __init__(
        self,
        asset_dir: Path,
        client: Optional[httpx.AsyncClient] = None,
        url: str = VIEWER_URL,
    ):
        self._viewer_path = asset_dir / "drawio" / VIEWER_FILENAME
        self._client = client
        self._url = url
        self._install_attempted = False
        self._lock = asyncio.Lock()

    @property
    def viewer_path(self) -> Path:
        return self._viewer_path

    def is_installed(self) -> bool:
        """检查 viewer 脚本是否已存在"""
        return self._viewer_path.is_file() and self._viewer_path.stat().st_size > 0

    async def check_and_install(self) -> bool:
        """检查并安装 viewer 脚本

        Returns:
            是否可用（已存在或安装成功）
        """
        async with self._lock:
            return await self._install_once()

    async def _install_once(self) -> bool:
        if self.is_installed():
            return True

        # 已尝试安装但失败，不再重复下载
        if self._install_attempted:
            return False

        self._install_attempted = True
        logger.info(f"[Drawio2Image] 正在下载 diagrams.net viewer v{DRAWIO_VERSION}...")

        try:
            if self._client is not None:
                content = await self._download(self._client)
            else:
                async with httpx.AsyncClient(timeout=60, follow_redirects=True) as client:
                    content = await self._download(client)
        except httpx.HTTPError as e:
            logger.error(f"[Drawio2Image] viewer 下载失败: {type(e).__name__}: {e}")
            self._log_manual_install_instructions()
            return False

        self._viewer_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._viewer_path.with_suffix(".tmp")
        tmp_path.write_bytes(content)
        tmp_path.replace(self._viewer_path)
        logger.info(f"[Drawio2Image] viewer 已安装: {self._viewer_path}")
        return True

    async def _download(self, client: httpx.AsyncClient) -> bytes:
        response = await client.get(self._url)
        response.raise_for_status()
        return response.content

    def install_hint(self) -> str:
        return f"curl -L -o {self._viewer_path} {self._url}"

    def _log_manual_install_instructions(self) -> None:
        logger.error(
            "[Drawio2Image] 自动下载失败，请手动放置 diagrams.net viewer 脚本:\n"
            f"  {self.install_hint()}"
        )

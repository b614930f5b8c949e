"""
SVG 图片内联器
将外部图片引用改写为自包含的 data URI
"""

import base64
import io
import xml.etree.ElementTree as ET
from typing import Dict, Optional

import httpx

from astrbot.api import logger

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"

XLINK_HREF = f"{{{XLINK_NS}}}href"
IMAGE_TAGS = (f"{{{SVG_NS}}}image", "image")


def parse_svg(svg: str):
    """解析 SVG 文本，同时记录源文本声明的命名空间前缀 {uri: prefix}"""
    prefixes: Dict[str, str] = {XML_NS: "xml"}
    taken = {"xml"}
    events = ET.iterparse(io.StringIO(svg), events=("start-ns",))
    for _, (prefix, uri) in events:
        if uri in prefixes:
            continue
        # 默认命名空间可在子树中重新声明，具名前缀只能对应一个 uri
        if prefix and prefix in taken:
            continue
        prefixes[uri] = prefix
        taken.add(prefix)
    return events.root, prefixes


def serialize_svg(root: ET.Element, prefixes: Dict[str, str]) -> str:
    """按源文本的前缀序列化

    ElementTree 的 register_namespace 是进程级全局状态，这里改为在树上
    直接写回前缀和 xmlns 声明。
    """
    _restore_prefixes(root, prefixes, None)
    for uri, prefix in prefixes.items():
        if prefix and prefix != "xml":
            root.set(f"xmlns:{prefix}", uri)
    return ET.tostring(root, encoding="unicode")


def _split(name: str):
    if name[:1] != "{":
        return None, name
    uri, local = name[1:].split("}", 1)
    return uri, local


def _restore_prefixes(elem: ET.Element, prefixes: Dict[str, str], default_uri) -> None:
    uri, local = _split(elem.tag)
    prefix = prefixes.get(uri) if uri is not None else None
    if prefix == "":
        elem.tag = local
        if uri != default_uri:
            elem.set("xmlns", uri)
            default_uri = uri
    elif prefix:
        elem.tag = f"{prefix}:{local}"

    for key in [key for key in elem.keys() if key[:1] == "{"]:
        attr_uri, attr_local = _split(key)
        attr_prefix = prefixes.get(attr_uri)
        if attr_prefix:
            elem.set(f"{attr_prefix}:{attr_local}", elem.attrib.pop(key))

    for child in elem:
        _restore_prefixes(child, prefixes, default_uri)


class ImageResolver:
    """图片内联器

    对文档中的每个 image 节点：
    1. 已是 data: 引用的跳过
    2. 其余引用通过 HTTP 拉取，按响应的 content-type 编码为 base64 data URI
    3. 移除 pointer-events 属性，避免内联图片拦截指针事件

    任一图片拉取失败都会中止整个内联过程，不返回部分结果。
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_ms: int = 10000,
    ):
        self._client = client
        self._timeout_ms = timeout_ms

    async def resolve_svg(self, svg: str) -> str:
        """解析 SVG 文本，内联图片后重新序列化"""
        root, prefixes = parse_svg(svg)
        root = await self.resolve_images(root)
        return serialize_svg(root, prefixes)

    async def resolve_images(self, document: ET.Element) -> ET.Element:
        """原地改写文档中的图片引用并返回同一文档"""
        # 先收集再修改，避免边遍历边改动树
        images = [node for tag in IMAGE_TAGS for node in document.iter(tag)]
        if not images:
            return document

        logger.debug(f"[Drawio2Image] 检测到 {len(images)} 个图片节点")

        if self._client is not None:
            await self._resolve_all(self._client, images)
        else:
            async with httpx.AsyncClient(
                timeout=self._timeout_ms / 1000, follow_redirects=True
            ) as client:
                await self._resolve_all(client, images)

        return document

    async def _resolve_all(self, client: httpx.AsyncClient, images: list) -> None:
        for node in images:
            attr = self._reference_attr(node)
            if attr is not None:
                href = node.get(attr)
                if not href.startswith("data:"):
                    node.set(attr, await self._fetch_as_data_uri(client, href))
            node.attrib.pop("pointer-events", None)

    @staticmethod
    def _reference_attr(node: ET.Element) -> Optional[str]:
        """返回节点上承载图片引用的属性名"""
        for attr in (XLINK_HREF, "href"):
            if node.get(attr):
                return attr
        return None

    async def _fetch_as_data_uri(self, client: httpx.AsyncClient, url: str) -> str:
        """拉取图片并编码为 data URI"""
        logger.debug(f"[Drawio2Image] 拉取图片: {url}")
        response = await client.get(url)
        response.raise_for_status()

        mime_type = response.headers.get("content-type", "application/octet-stream")
        payload = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime_type};base64,{payload}"

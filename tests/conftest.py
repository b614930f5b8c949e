import asyncio

import pytest

from astrbot_plugin_drawio2image.application import RenderOrchestrator
from astrbot_plugin_drawio2image.domain.types import RenderConfig

SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" width="10" height="10">'
    '<image xlink:href="https://example.com/logo.png" pointer-events="none"/>'
    "</svg>"
)
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeElement:
    def __init__(self, error=None):
        self.screenshot_kwargs = None
        self._error = error

    async def screenshot(self, **kwargs):
        self.screenshot_kwargs = kwargs
        if self._error is not None:
            raise self._error
        return PNG


class FakePage:
    def __init__(self, render, goto_error=None, screenshot_error=None):
        self._render = render
        self._goto_error = goto_error
        self.url = None
        self.content = None
        self.listeners = {}
        self.routes = []
        self.element = FakeElement(error=screenshot_error)

    def on(self, event, callback):
        self.listeners[event] = callback

    async def goto(self, url):
        if self._goto_error is not None:
            raise self._goto_error
        self.url = url

    async def evaluate(self, script, source):
        return await self._render(source)

    async def route(self, matcher, handler):
        self.routes.append(matcher)

    async def set_content(self, html):
        self.content = html

    async def query_selector(self, selector):
        if self.content and "<svg" in self.content:
            return self.element
        return None


class FakeContext:
    def __init__(self, page, close_error=None):
        self.page = page
        self.close_calls = 0
        self._close_error = close_error

    async def new_page(self):
        return self.page

    async def close(self):
        self.close_calls += 1
        if self._close_error is not None:
            raise self._close_error


class FakeSession:
    def __init__(self, page, close_error=None, context_close_error=None):
        self.context = FakeContext(page, close_error=context_close_error)
        self.context_kwargs = None
        self.close_calls = 0
        self._close_error = close_error

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self.context

    async def close(self):
        self.close_calls += 1
        if self._close_error is not None:
            raise self._close_error


class FakeSessionFactory:
    """每次 open_session 都返回新的会话，记录在 sessions 中"""

    def __init__(self, render, **session_kwargs):
        self._render = render
        self._goto_error = session_kwargs.pop("goto_error", None)
        self._screenshot_error = session_kwargs.pop("screenshot_error", None)
        self._session_kwargs = session_kwargs
        self.sessions = []

    async def open_session(self):
        session = FakeSession(
            FakePage(
                self._render,
                goto_error=self._goto_error,
                screenshot_error=self._screenshot_error,
            ),
            **self._session_kwargs,
        )
        self.sessions.append(session)
        return session


class RecordingResolver:
    def __init__(self):
        self.calls = []

    async def resolve_svg(self, svg):
        self.calls.append(svg)
        return svg.replace("https://example.com/logo.png", "data:image/png;base64,AAAA")


async def render_ok(source):
    return SVG


async def render_by_source(source):
    if "mxGraphModel" not in source:
        raise Exception("Expected mxGraphModel but found nothing")
    await asyncio.sleep(0)
    return SVG


@pytest.fixture
def make_orchestrator():
    def factory(render=render_ok, timeout_ms=15000, resolver=None, **session_kwargs):
        sessions = FakeSessionFactory(render, **session_kwargs)
        orchestrator = RenderOrchestrator(
            RenderConfig(page_url="file:///assets/index.html", convert_timeout_ms=timeout_ms),
            session_factory=sessions,
            image_resolver=resolver or RecordingResolver(),
        )
        return orchestrator, sessions

    return factory

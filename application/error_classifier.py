"""
错误分类器
将渲染流程中的失败归入固定的错误分类
"""

from astrbot.api import logger

from ..domain.errors import DiagramSyntaxError, RenderError, RenderTimeoutError


class ErrorClassifier:
    """错误分类器

    - RenderTimeoutError 已由超时监督器构造，原样返回
    - 其余渲染失败包装为 DiagramSyntaxError，保留原始异常作为 cause

    分类发生时即记录 error 日志，调用方后续包装或丢弃异常也不影响排查。
    """

    def classify(self, error: BaseException) -> RenderError:
        if isinstance(error, RenderTimeoutError):
            logger.error(f"[Drawio2Image] 渲染超时: {error}")
            return error

        classified = DiagramSyntaxError(error)
        logger.error(
            f"[Drawio2Image] {classified.user_message}: "
            f"{type(error).__name__}: {classified}"
        )
        return classified

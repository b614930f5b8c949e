"""
工具层 - AOP装饰器与超时监督
日志、超时等横切关注点
"""

import asyncio
import functools
import time
from typing import Awaitable, Callable, TypeVar

from astrbot.api import logger

from ..domain.errors import RenderTimeoutError

T = TypeVar("T")


def log_execution(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """日志装饰器 - 记录异步函数耗时"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        func_name = func.__qualname__
        logger.debug(f"[Drawio2Image] {func_name} 开始执行")
        start_time = time.monotonic()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            elapsed = time.monotonic() - start_time
            logger.debug(
                f"[Drawio2Image] {func_name} 执行失败，耗时: {elapsed:.2f}s, "
                f"错误: {type(e).__name__}"
            )
            raise
        elapsed = time.monotonic() - start_time
        logger.debug(f"[Drawio2Image] {func_name} 执行完成，耗时: {elapsed:.2f}s")
        return result

    return wrapper


async def race_with_deadline(
    operation: Awaitable[T], deadline_ms: int, action: str = "convert"
) -> T:
    """让 operation 与截止时间赛跑

    operation 先结束时原样返回结果或抛出其异常；截止时间先到时取消
    operation，等待取消完成后抛出 RenderTimeoutError。

    Raises:
        RenderTimeoutError: 超过 deadline_ms 仍未完成
    """
    task = asyncio.ensure_future(operation)
    try:
        done, _ = await asyncio.wait({task}, timeout=deadline_ms / 1000)
    except asyncio.CancelledError:
        # 调用方被取消时同样要等 operation 停下，再交给调用方清理
        await _cancel_and_wait(task)
        raise

    if task in done:
        return task.result()

    await _cancel_and_wait(task)
    logger.debug(f"[Drawio2Image] {action} 超过 {deadline_ms}ms，已取消")
    raise RenderTimeoutError(deadline_ms, action)


async def _cancel_and_wait(task: "asyncio.Future") -> None:
    task.cancel()
    await asyncio.wait({task})
    if not task.cancelled():
        # 取消前已结束的结果一律丢弃
        task.exception()

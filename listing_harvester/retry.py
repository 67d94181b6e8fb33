import asyncio

from loguru import logger

from .exceptions import RetryError


async def with_retries(attempts, delay, operation, retry_on=(Exception,), label=''):
    """
    有限次重试

    参数:
    - attempts: 最大尝试次数（>= 1）
    - delay: 两次尝试之间的固定间隔（秒）
    - operation: 无参协程函数，每次尝试都会重新调用
    - retry_on: 需要重试的异常类型，其它异常直接抛出
    - label: 日志中显示的名称

    全部失败时抛出 RetryError，携带最后一次的异常。
    """
    if attempts < 1:
        raise ValueError("attempts 必须 >= 1")

    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            logger.warning(f"第 {attempt}/{attempts} 次尝试失败: {label} - {e}")
            if attempt < attempts and delay > 0:
                await asyncio.sleep(delay)

    raise RetryError(attempts, last_error)

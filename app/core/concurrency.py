import asyncio
import threading
from contextlib import contextmanager

from app.core.errors import ConflictError
from app.logger import logger


async def run_in_thread(func, *args, **kwargs):
    return await asyncio.to_thread(func, *args, **kwargs)


class SingleFlightGuard:
    """进程内互斥：同一时刻只允许一个任务执行，并发调用立即拒绝而不排队"""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def try_acquire(self, source: str) -> bool:
        acquired = self._lock.acquire(blocking=False)
        if not acquired:
            logger.warning(f"{source}跳过: {self.name}正在执行")
        return acquired

    def release(self):
        self._lock.release()

    @contextmanager
    def hold(self, source: str):
        if not self.try_acquire(source):
            raise ConflictError(f"{self.name} already in progress")
        try:
            yield
        finally:
            self.release()

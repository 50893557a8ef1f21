import asyncio
import signal
import sys
from typing import Awaitable, Callable, List, Optional

from src.logger.logger import Logger


class GracefulShutdownManager:
    def __init__(self, loop: asyncio.AbstractEventLoop, logger: Optional[Logger] = None):
        self.loop = loop
        self.logger = logger
        self._callbacks: List[Callable[[], Awaitable[None]]] = []
        self._shutting_down = False

    def register_shutdown_callback(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Run ``callback`` before pending tasks are cancelled."""
        self._callbacks.append(callback)

    def setup_signal_handlers(self):
        if sys.platform != 'win32':
            for sig in (signal.SIGINT, signal.SIGTERM):
                self.loop.add_signal_handler(sig, lambda s=sig, *args: self.handle_signal(s))
        else:
            signal.signal(signal.SIGINT, lambda s, f, *args: self.handle_signal(s))

    def handle_signal(self, sig: int):
        self._log(f"Received signal {sig}, initiating shutdown...")
        if self.loop.is_running() and not self.loop.is_closed():
            self.loop.create_task(self.shutdown_gracefully())

    async def shutdown_gracefully(self):
        if self._shutting_down:
            return
        self._shutting_down = True
        self._log("Performing graceful shutdown...")

        for callback in self._callbacks:
            try:
                await callback()
            except Exception as e:
                self._log(f"Shutdown callback failed: {e}")

        pending_tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task() and not t.done()]
        if pending_tasks:
            self._log(f"Cancelling {len(pending_tasks)} tasks...")
            for task in pending_tasks:
                task.cancel()
            try:
                await asyncio.wait_for(asyncio.wait(pending_tasks), timeout=10.0)
            except asyncio.TimeoutError:
                task_details = [t.get_name() for t in pending_tasks if not t.done()]
                self._log(f"Some tasks didn't complete in time: {task_details}")
        try:
            await asyncio.wait_for(self.loop.shutdown_asyncgens(), timeout=2.0)
        except (asyncio.TimeoutError, RuntimeError) as e:
            self._log(f"Error shutting down async generators: {e}")
        self.loop.stop()

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.info(message)
        else:
            print(message)

import asyncio
import signal
import sys
from typing import Optional


class GracefulShutdownManager:
    """Turns SIGINT/SIGTERM into cancellation of the running pipeline task."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.main_task: Optional[asyncio.Task] = None

    def setup_signal_handlers(self):
        if sys.platform != 'win32':
            for sig in (signal.SIGINT, signal.SIGTERM):
                self.loop.add_signal_handler(sig, lambda s=sig: self.handle_signal(s))
        else:
            signal.signal(signal.SIGINT, lambda s, f: self.loop.call_soon_threadsafe(self.handle_signal, s))

    def register_main_task(self, task: asyncio.Task) -> None:
        self.main_task = task

    def handle_signal(self, sig: int):
        print(f"Received signal {sig}, initiating shutdown...")
        if self.main_task is not None and not self.main_task.done():
            self.main_task.cancel()

import asyncio
import functools
import logging
import socket
from typing import Any, Optional

import aiohttp

_RATE_LIMIT_PHRASES = {'too many requests', 'rate limit', '429', 'ratelimit'}

_NETWORK_EXCEPTIONS = (
    TimeoutError, ConnectionResetError, aiohttp.ClientConnectorError, aiohttp.ClientOSError,
    aiohttp.ServerDisconnectedError, aiohttp.ClientPayloadError, asyncio.TimeoutError, socket.gaierror
)


def _log(logger, level: str, message: str):
    log_func = getattr(logger, level) if logger else getattr(logging, level)
    if logger and hasattr(logger, 'findCaller'):
        log_func(message, stacklevel=3)
    else:
        log_func(message)


def _classify_retryable_error(e: Exception) -> str:
    msg = str(e).lower()
    if any(p in msg for p in _RATE_LIMIT_PHRASES):
        return "Rate limit. Retry {}"
    if isinstance(e, (TimeoutError, asyncio.TimeoutError)) or 'timeout' in msg:
        return "Timeout. Retry {}"
    if isinstance(e, (aiohttp.ClientConnectorError, aiohttp.ClientOSError, socket.gaierror, ConnectionResetError)):
        return "Network issue. Retry {}"
    return "Retry {}"


def retry_async(max_retries: Optional[int] = None, initial_delay: Optional[float] = None,
                backoff_factor: float = 2, max_delay: float = 30):
    """Retry decorator for async instance methods that fail with transient network errors.

    Only network-level exceptions are retried; anything else (HTTP status errors,
    decode errors) propagates on the first occurrence.

    Args:
        max_retries: Retries after the first attempt. None reads ``self.max_retries`` (default 0).
        initial_delay: Initial backoff delay seconds. None reads ``self.retry_delay`` (default 1).
        backoff_factor: Multiplier applied each retry.
        max_delay: Upper bound for backoff delay.
    """
    def decorator(func: Any):
        @functools.wraps(func)
        async def wrapper(self, *args: Any, **kwargs: Any):
            context = _RetryContext(self, func, max_retries, initial_delay, backoff_factor, max_delay)

            while True:
                try:
                    return await func(self, *args, **kwargs)
                except _NETWORK_EXCEPTIONS as e:
                    if not await context.handle_network_error(e):
                        raise
        return wrapper
    return decorator


class _RetryContext:
    """Tracks attempts and backoff for a single decorated call."""

    def __init__(self, instance, func, max_retries, initial_delay, backoff_factor, max_delay):
        self.logger = getattr(instance, 'logger', None)
        self.class_name = instance.__class__.__name__
        self.func_name = func.__name__
        self.max_retries = max_retries if max_retries is not None else getattr(instance, 'max_retries', 0)
        self.delay = initial_delay if initial_delay is not None else getattr(instance, 'retry_delay', 1)
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay
        self.attempt = 0

    def _should_continue_retrying(self) -> bool:
        self.attempt += 1
        return self.attempt <= self.max_retries

    async def handle_network_error(self, error: Exception) -> bool:
        if not self._should_continue_retrying():
            if self.max_retries > 0:
                _log(self.logger, 'error',
                     f"Function {self.class_name}.{self.func_name} failed after {self.max_retries} retries. "
                     f"Last error: {type(error).__name__} - {error}")
            return False

        template = _classify_retryable_error(error)
        _log(self.logger, 'warning',
             f"{template.format(self.attempt)} for {self.class_name}.{self.func_name} "
             f"in {self.delay:.2f} seconds. Type: {type(error).__name__}, Error: {error}")

        await asyncio.sleep(self.delay)
        self.delay = min(self.delay * self.backoff_factor, self.max_delay)
        return True

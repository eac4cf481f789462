"""
Time-window debouncing for coroutine calls.

Calls made for the same scope within ``delay`` seconds of each other are
collapsed: only the last one actually runs, and every superseded caller
receives its result (or its exception).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable

from formstate.generation import GenerationCounter

logger = logging.getLogger(__name__)


def _consume_exception(future: asyncio.Future) -> None:
    # Superseded callers may have gone away; do not leave the error unretrieved
    if not future.cancelled():
        future.exception()


class Debouncer:
    """Collapses bursts of calls per scope into a single invocation."""

    def __init__(self, delay: float = 0.0):
        """
        Args:
            delay: Quiet period in seconds; 0 disables debouncing
        """
        self.delay = delay
        self._generations = GenerationCounter()
        self._waiters: Dict[Hashable, asyncio.Future] = {}

    async def call(self, scope: Hashable, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Run ``func(*args, **kwargs)`` once the scope has been quiet for ``delay``.

        Args:
            scope: Calls with equal scopes debounce each other
            func: Coroutine function to run

        Returns:
            The result of the surviving call
        """
        if self.delay <= 0:
            return await func(*args, **kwargs)

        token = self._generations.issue(scope)
        waiter = self._waiters.get(scope)
        if waiter is None or waiter.done():
            waiter = asyncio.get_running_loop().create_future()
            waiter.add_done_callback(_consume_exception)
            self._waiters[scope] = waiter

        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            if self._generations.is_current(scope, token):
                # The burst lost its surviving call; release the callers joined to it
                self._release(scope, waiter)
                self._generations.discard(scope)
                waiter.cancel()
            raise

        if not self._generations.is_current(scope, token):
            logger.debug(f"Debounced call for {scope!r} superseded, joining the newest one")
            return await asyncio.shield(waiter)

        # Calls arriving from now on start a new burst
        self._release(scope, waiter)
        try:
            result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            waiter.cancel()
            raise
        except Exception as exc:
            if not waiter.done():
                waiter.set_exception(exc)
            raise
        finally:
            if self._generations.is_current(scope, token):
                self._generations.discard(scope)
        if not waiter.done():
            waiter.set_result(result)
        return result

    def _release(self, scope: Hashable, waiter: asyncio.Future) -> None:
        if self._waiters.get(scope) is waiter:
            del self._waiters[scope]

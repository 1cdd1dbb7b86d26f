"""Cooperative cancellation shared by the executor and its stages."""
from __future__ import annotations

import asyncio

from ..errors import PipelineCancelledError


class CancellationToken:
    """A one-way cancellation flag.

    Cancellation is cooperative: the executor checks the token before every
    stage and retry attempt, and long-running stages may poll it themselves.
    ``cancel`` must be called from the thread running the event loop (use
    ``loop.call_soon_threadsafe(token.cancel)`` from other threads).
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise PipelineCancelledError()

    async def wait(self, timeout: float) -> bool:
        """Sleep for ``timeout`` seconds or until cancelled.

        Returns ``True`` when the token was cancelled before the timeout elapsed.
        """
        if self._cancelled:
            return True
        if timeout <= 0:
            return False
        loop = asyncio.get_running_loop()
        if self._event is None or self._loop is not loop:
            # asyncio.Event binds to the loop that first awaits it
            self._event = asyncio.Event()
            self._loop = loop
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return self._cancelled
        return True

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"

"""
Cooperative Cancellation.

A CancelToken is created once at the process entry point and passed down
through the session into every API call. It is cancelled by the SIGINT
handler (or by a deadline set with ``with_timeout``) and observed by the
transport, which races each send against it.

Tokens are thread-safe and not bound to an event loop: the CLI runs one
``asyncio.run`` per command, and a signal handler may cancel the token
while no loop is running.

Usage:
    from asgardeo_cli.core.cancellation import CancelToken

    token = CancelToken()
    scoped = token.with_timeout(30)
    response = await scoped.guard(client.send(request))
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from asgardeo_cli.core.exceptions import CancellationError

T = TypeVar("T")


def _resolve(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class CancelToken:
    """
    Cancellation source shared by a chain of operations.

    A child token (``with_timeout``) is cancelled when its parent is,
    or when its own deadline passes.
    """

    def __init__(self, *, deadline: float | None = None, parent: "CancelToken | None" = None) -> None:
        self._deadline = deadline
        self._parent = parent
        # Reentrant: the SIGINT handler may call cancel() while this thread holds the lock.
        self._lock = threading.RLock()
        self._error: CancellationError | None = None
        self._callbacks: list[Callable[[], None]] = []

    def with_timeout(self, seconds: float) -> "CancelToken":
        """Return a child token whose deadline is ``seconds`` from now."""
        return CancelToken(deadline=time.monotonic() + seconds, parent=self)

    def cancel(self, reason: str = "operation cancelled") -> None:
        """Cancel the token and wake every waiter. Later calls are no-ops."""
        with self._lock:
            if self._error is not None:
                return
            self._error = CancellationError(reason)
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    @property
    def error(self) -> CancellationError | None:
        """The cancellation error, or None while the token is still live."""
        with self._lock:
            error = self._error
        if error is not None:
            return error
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return CancellationError("deadline exceeded", deadline_exceeded=True)
        if self._parent is not None:
            return self._parent.error
        return None

    @property
    def cancelled(self) -> bool:
        return self.error is not None

    def remaining(self) -> float | None:
        """Seconds until the nearest deadline in the chain, or None if there is none."""
        remaining = None
        if self._deadline is not None:
            remaining = max(0.0, self._deadline - time.monotonic())
        if self._parent is not None:
            parent_remaining = self._parent.remaining()
            if parent_remaining is not None:
                remaining = parent_remaining if remaining is None else min(remaining, parent_remaining)
        return remaining

    def _subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            live = self._error is None
            if live:
                self._callbacks.append(callback)
        if not live:
            callback()
            return lambda: None

        unsubscribe_parent = self._parent._subscribe(callback) if self._parent else None

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._callbacks
                if callback in callbacks:
                    callbacks.remove(callback)
            if unsubscribe_parent is not None:
                unsubscribe_parent()

        return unsubscribe

    async def wait(self) -> CancellationError:
        """Block until the token is cancelled or a deadline passes."""
        loop = asyncio.get_running_loop()
        fired = loop.create_future()

        def wake() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve, fired)

        unsubscribe = self._subscribe(wake)
        try:
            error = self.error
            while error is None:
                await asyncio.wait({fired}, timeout=self.remaining())
                error = self.error
            return error
        finally:
            unsubscribe()

    async def guard(
        self,
        awaitable: Awaitable[T],
        *,
        discard: Callable[[T], Awaitable[None]] | None = None,
    ) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        ``discard`` releases a result that the work produced after the token
        won, e.g. closing a response that is no longer wanted.

        Raises:
            CancellationError: If the token was already cancelled, or fires
                before ``awaitable`` completes. The pending work is cancelled.
        """
        error = self.error
        if error is not None:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise error

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if discard is not None and not task.cancelled() and task.exception() is None:
            await discard(task.result())
        raise waiter.result()

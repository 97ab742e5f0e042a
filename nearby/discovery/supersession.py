from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, TypeVar

from ..errors import NearbyError, Superseded

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SupersessionGuard:
    """Hands out monotonically increasing tokens per client key.

    Only the most recently issued token for a key is current; work started
    under an older token must drop its result.

    Keys are kept for the life of the process, one entry per client, so the
    table is bounded by the number of accounts that have searched.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def issue(self, key: str) -> int:
        token = next(self._counter)
        self._latest[key] = token
        return token

    def is_current(self, key: str, token: int) -> bool:
        return self._latest.get(key) == token

    def check(self, key: str, token: int) -> None:
        if not self.is_current(key, token):
            logger.debug("Dropping superseded work for %s (token %d)", key, token)
            raise Superseded()


class Debouncer:
    """Last-call-wins debounce per client key.

    Each call waits for ``delay`` seconds of quiescence before running its
    work. A newer call for the same key cancels the pending timer of the older
    one, and a result that arrives after a newer call was issued is dropped.
    Both cases raise ``Superseded`` in the older caller. So does a failure of
    the older call's work once a newer call exists.
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._guard = SupersessionGuard()
        self._timers: dict[str, asyncio.Future] = {}

    async def run(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        token = self._guard.issue(key)
        pending = self._timers.get(key)
        if pending is not None and not pending.done():
            pending.cancel()

        timer = asyncio.ensure_future(asyncio.sleep(self._delay))
        self._timers[key] = timer
        try:
            await asyncio.wait({timer})
        finally:
            if self._timers.get(key) is timer:
                del self._timers[key]
            if not timer.done():
                timer.cancel()

        if timer.cancelled():
            raise Superseded()
        self._guard.check(key, token)

        try:
            result = await work()
        except NearbyError:
            self._guard.check(key, token)
            raise
        self._guard.check(key, token)
        return result

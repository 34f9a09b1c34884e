"""
Scoped substitution of the active fetch, for tests.

Scopes nest: releasing one restores whatever was installed before it.
Overlapping scopes from independent tasks are not supported; a test
harness is expected to run one case at a time.
"""
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

from .models import FetchFunction

if TYPE_CHECKING:
    from .context import NetworkContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OverrideScope:
    """Guard that installs a replacement fetch and restores the previous one.

    Usable as ``with``/``async with``. ``release`` restores exactly once,
    however many exit paths reach it.
    """

    def __init__(self, context: "NetworkContext", replacement: FetchFunction):
        self._context = context
        self._replacement = replacement
        self._previous: Optional[FetchFunction] = None
        self._acquired = False
        self._released = False

    @property
    def active(self) -> bool:
        return self._acquired and not self._released

    def acquire(self) -> "OverrideScope":
        if self._acquired:
            raise RuntimeError("OverrideScope cannot be acquired twice")
        self._previous = self._context._swap_override(self._replacement)
        self._acquired = True
        logger.debug(f"Fetch override installed (nested={self._previous is not None})")
        return self

    def release(self) -> None:
        if not self._acquired or self._released:
            return
        self._released = True
        self._context._swap_override(self._previous)
        logger.debug(f"Fetch override released (restored nested={self._previous is not None})")

    async def release_after(self, pending: Awaitable[T]) -> T:
        """Await ``pending`` and release once it settles, either way."""
        try:
            return await pending
        finally:
            self.release()

    def __enter__(self) -> "OverrideScope":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    async def __aenter__(self) -> "OverrideScope":
        return self.acquire()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()


def with_override(
    context: "NetworkContext",
    replacement: FetchFunction,
    callback: Callable[[], Any]
) -> Any:
    """Install ``replacement`` for the duration of ``callback()``.

    If ``callback`` returns an awaitable, the override stays installed until
    it settles and a coroutine yielding its result is returned; the caller
    must await it. Otherwise the override is removed before returning.
    """
    scope = OverrideScope(context, replacement).acquire()
    try:
        result = callback()
    except BaseException:
        scope.release()
        raise

    if inspect.isawaitable(result):
        return scope.release_after(result)

    scope.release()
    return result

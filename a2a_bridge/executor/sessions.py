"""SessionCache: one Agents SDK session per A2A context id, created on first use."""

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Union

if TYPE_CHECKING:
    from agents.memory import Session

logger = logging.getLogger(__name__)

SessionProvider = Callable[[str], Union["Session", Awaitable["Session"]]]

__all__ = ["SessionCache", "SessionProvider"]


class SessionCache:
    """Maps context id -> Session for the lifetime of the executor. No eviction.

    First access per context id is serialized with a per-key lock, so concurrent
    callers for the same id share one provider call.
    """

    def __init__(self, provider: SessionProvider | None = None) -> None:
        self._provider = provider
        self._sessions: dict[str, "Session"] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def get_or_create(self, context_id: str) -> "Session | None":
        """Return the cached session for context_id, creating it via the provider if needed.

        None when no provider is configured. Provider errors propagate; nothing is cached.
        """
        if self._provider is None:
            return None
        session = self._sessions.get(context_id)
        if session is not None:
            return session
        lock = self._locks.get(context_id)
        if lock is None:
            lock = self._locks[context_id] = asyncio.Lock()
        async with lock:
            session = self._sessions.get(context_id)
            if session is not None:
                return session
            created = self._provider(context_id)
            if inspect.isawaitable(created):
                created = await created
            self._sessions[context_id] = created
            logger.debug("session created for context %s", context_id)
            return created

    def discard(self, context_id: str) -> None:
        """Forget the session for context_id. The session's storage is left untouched."""
        self._sessions.pop(context_id, None)
        self._locks.pop(context_id, None)

    def __contains__(self, context_id: object) -> bool:
        return context_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

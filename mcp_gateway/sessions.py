"""
Session Registry

One session per open push channel, keyed by an opaque client token.
Each session owns a frame queue with a single consumer (the channel's
stream), so frames reach the client in the order they were pushed.
"""

import asyncio
import itertools
import logging
import secrets
import time
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

# Queued after the last frame of a closed session
END_OF_STREAM = None


def generate_token() -> str:
    """Millisecond timestamp plus 64 random bits."""
    return f"{int(time.time() * 1000):x}-{secrets.token_hex(8)}"


class Session:
    """Server-side record of one open push channel."""

    def __init__(self, token: str, message_ids: Optional[Callable[[], str]] = None):
        self.token = token
        self.created_at = time.time()
        self.queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
        self.closed = False

        if message_ids is None:
            message_ids = map(str, itertools.count(1)).__next__
        self._message_ids = message_ids

    def next_message_id(self) -> str:
        return self._message_ids()

    def push(self, frame: str) -> bool:
        """Queue a frame for delivery. Frames for a closed session are dropped."""
        if self.closed:
            return False
        self.queue.put_nowait(frame)
        return True

    def _close(self) -> None:
        self.closed = True
        self.queue.put_nowait(END_OF_STREAM)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Session({self.token[:12]}..., {state})"


class SessionRegistry:
    """
    Maps client tokens to open sessions.

    ``open`` and ``close`` are the only mutators. Neither suspends, so on
    the event loop each runs as one atomic step.
    """

    def __init__(
        self,
        token_factory: Callable[[], str] = generate_token,
        message_ids: Optional[Callable[[], Callable[[], str]]] = None,
    ):
        self._sessions: Dict[str, Session] = {}
        self._token_factory = token_factory
        self._message_ids = message_ids
        self.opened_total = 0
        self.closed_total = 0

    def open(self) -> Session:
        token = self._token_factory()
        while token in self._sessions:
            token = self._token_factory()

        ids = self._message_ids() if self._message_ids else None
        session = Session(token, message_ids=ids)
        self._sessions[token] = session
        self.opened_total += 1
        logger.info(f"Session opened: {token} (active: {len(self._sessions)})")
        return session

    def get(self, token: str) -> Optional[Session]:
        if not token:
            return None
        return self._sessions.get(token)

    def close(self, token: str) -> bool:
        """
        Remove a session. Unknown or already-closed tokens are a no-op,
        since channel teardown can race with write-failure cleanup.
        Returns True only when a live session was removed.
        """
        session = self._sessions.pop(token, None)
        if session is None:
            return False

        session._close()
        self.closed_total += 1
        logger.info(f"Session closed: {token} (active: {len(self._sessions)})")
        return True

    def close_all(self) -> int:
        tokens = list(self._sessions)
        for token in tokens:
            self.close(token)
        return len(tokens)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        return token in self._sessions

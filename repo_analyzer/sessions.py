"""
Session registry for in-flight analyses.

The registry is shared between the thread running a crawl and the threads
serving progress and cancel requests. Every read and write of the mapping or
of a session's progress fields happens under one lock.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from models import AnalysisSession, SessionSnapshot


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Cooperative cancellation flag passed down the crawl.

    Setting it more than once is a no-op.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def make_session_id(caller: str, started_at: datetime) -> str:
    """
    Build a session id from caller identity and start time.

    Two sessions started by the same caller within the same millisecond get
    the same id.
    """
    return f"{caller}-{int(started_at.timestamp() * 1000)}"


def progress_percent(depth: int, max_depth: int) -> int:
    """Depth-based progress estimate: min(100, round(100 * depth / max_depth))."""
    if max_depth <= 0:
        return 100
    return min(100, int(100 * depth / max_depth + 0.5))


class SessionRegistry:
    """
    Process-wide table of in-flight analyses keyed by session id.

    Cancel and progress lookups are addressed by caller identity because the
    caller does not know its exact session id.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, AnalysisSession] = {}
        self._tokens: Dict[str, CancellationToken] = {}

    def register(self, session_id: str, caller: str, started_at: Optional[datetime] = None) -> CancellationToken:
        """
        Insert a fresh session.

        Args:
            session_id: Id from make_session_id()
            caller: Caller identity owning the session
            started_at: Session start time (defaults to now)

        Returns:
            The token the crawl must poll for cancellation
        """
        session = AnalysisSession(
            session_id=session_id,
            caller=caller,
            started_at=started_at or datetime.now(),
        )
        token = CancellationToken()
        with self._lock:
            if session_id in self._sessions:
                logger.warning("Session id collision for %s; replacing live session", session_id)
            self._sessions[session_id] = session
            self._tokens[session_id] = token
        logger.debug("Registered session %s", session_id)
        return token

    def mark_cancelled(self, caller: str) -> int:
        """
        Cancel every live session belonging to a caller.

        Args:
            caller: Caller identity

        Returns:
            Number of sessions flagged (0 if none is live)
        """
        with self._lock:
            tokens = [
                self._tokens[session_id]
                for session_id, session in self._sessions.items()
                if session.caller == caller
            ]
            for token in tokens:
                token.cancel()
        if tokens:
            logger.info("Cancellation requested for %d session(s) of %s", len(tokens), caller)
        return len(tokens)

    def progress(self, caller: str) -> Optional[SessionSnapshot]:
        """
        Snapshot the most recently started live session of a caller.

        Returns:
            SessionSnapshot, or None if the caller has no live session
        """
        with self._lock:
            matching = [s for s in self._sessions.values() if s.caller == caller]
            if not matching:
                return None
            session = max(matching, key=lambda s: s.started_at)
            return session.snapshot(self._tokens[session.session_id].cancelled)

    def update_progress(self, session_id: str, depth: int, path: str, max_depth: int) -> None:
        """
        Record the crawl's current position.

        The stored percentage never decreases, so a walk climbing back up the
        tree does not move a polling client's progress backwards.
        """
        percent = progress_percent(depth, max_depth)
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.current_depth = depth
            session.current_path = path
            session.progress_percent = max(session.progress_percent, percent)

    def unregister(self, session_id: str) -> None:
        """Remove a session unconditionally."""
        with self._lock:
            self._sessions.pop(session_id, None)
            self._tokens.pop(session_id, None)
        logger.debug("Unregistered session %s", session_id)

    def active_sessions(self) -> List[str]:
        """Ids of all live sessions."""
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

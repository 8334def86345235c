"""
Session State Store
===================

Single source of truth for "who am I" and "how many votes have I used",
persisted through :class:`~bulkgraph.utils.LocalStorage` so it survives
restarts. All session mutations go through this class.
"""

import json
import logging
from typing import List, Optional

from .config import MAX_VOTES_PER_USER, STORAGE_KEYS
from .models import SessionState
from .utils import LocalStorage, sanitize_handle

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Persistent session bookkeeping.

    Attributes:
        state: Current in-memory session
        max_votes: Vote limit the counter is clamped to
    """

    def __init__(
        self,
        storage: LocalStorage,
        max_votes: int = MAX_VOTES_PER_USER,
        fingerprint: str = ""
    ):
        self.storage = storage
        self.max_votes = max_votes
        self.state = SessionState(fingerprint=fingerprint)

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> SessionState:
        """
        Read the persisted session, substituting defaults for anything
        missing or malformed.
        """
        self.storage.reload()
        user = sanitize_handle(self.storage.get(STORAGE_KEYS["logged_user"]))

        self.state = SessionState(
            current_user=user or None,
            fingerprint=self.state.fingerprint,
            votes_today=self._load_vote_count(),
            voted_ids=self._load_voted_ids(),
        )
        logger.debug(
            "Session loaded: user=%s votes=%d voted=%d",
            self.state.current_user, self.state.votes_today, len(self.state.voted_ids)
        )
        return self.state

    def _load_vote_count(self) -> int:
        raw = self.storage.get(STORAGE_KEYS["votes_today"])
        if raw is None:
            return 0
        try:
            count = int(raw)
        except ValueError:
            logger.warning("Discarding malformed vote counter %r", raw)
            return 0
        return min(max(count, 0), self.max_votes)

    def _load_voted_ids(self) -> List[str]:
        raw = self.storage.get(STORAGE_KEYS["voted_ids"])
        if raw is None:
            return []
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding malformed voted-id list")
            return []
        if not isinstance(ids, list):
            logger.warning("Discarding malformed voted-id list")
            return []
        return [str(i) for i in ids if isinstance(i, (str, int)) and not isinstance(i, bool)]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def record_login(self, handle: str) -> Optional[str]:
        """
        Persist ``handle`` as the logged-in user.

        Returns:
            The sanitized handle, or None if nothing usable was left
        """
        clean = sanitize_handle(handle)
        if not clean:
            return None
        self.storage.set(STORAGE_KEYS["logged_user"], clean)
        self.state.current_user = clean
        logger.info("Logged in as %s", clean)
        return clean

    def logout(self) -> None:
        """Forget the current user; vote bookkeeping is kept."""
        self.storage.remove(STORAGE_KEYS["logged_user"])
        self.state.current_user = None

    def record_vote(self, candidate_id: str) -> int:
        """
        Record a cast vote and persist the updated bookkeeping.

        Callers must check :attr:`limit_reached` and :meth:`has_voted` first.

        Returns:
            Updated vote count
        """
        self.state.voted_ids.append(candidate_id)
        self.state.votes_today += 1
        self.storage.set(STORAGE_KEYS["voted_ids"], json.dumps(self.state.voted_ids))
        self.storage.set(STORAGE_KEYS["votes_today"], self.state.votes_today)
        return self.state.votes_today

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def current_user(self) -> Optional[str]:
        return self.state.current_user

    @property
    def is_logged_in(self) -> bool:
        return self.state.is_logged_in

    @property
    def votes_today(self) -> int:
        return self.state.votes_today

    @property
    def voted_ids(self) -> List[str]:
        return self.state.voted_ids

    @property
    def votes_remaining(self) -> int:
        return max(self.max_votes - self.state.votes_today, 0)

    @property
    def limit_reached(self) -> bool:
        return self.state.votes_today >= self.max_votes

    def has_voted(self, candidate_id: str) -> bool:
        return self.state.has_voted(candidate_id)

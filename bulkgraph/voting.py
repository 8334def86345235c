"""
Vote Processor
==============

Applies a single vote to the front of the voting queue:

1. Check preconditions (a target exists, a user is logged in, votes remain).
   If any fails the call is a silent no-op.
2. Record the vote in the session store.
3. For a positive vote, ask the candidate store to add one trust point.
   The session is already updated at this point, so a failed request
   leaves local bookkeeping consistent.
4. Decide whether the user stays in the voting flow or returns to the
   dashboard (queue exhausted OR vote limit reached). Leaving reloads the
   directory.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Any

from .directory import CandidateDirectory
from .models import Candidate, View, VoteValue
from .session import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class VoteOutcome:
    """Result of one vote attempt."""
    accepted: bool
    next_view: View
    target_id: Optional[str] = None
    value: Optional[VoteValue] = None
    votes_today: int = 0
    remaining_in_queue: int = 0
    trust_synced: Optional[bool] = None
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "next_view": self.next_view.value,
            "target_id": self.target_id,
            "value": self.value.value if self.value else None,
            "votes_today": self.votes_today,
            "remaining_in_queue": self.remaining_in_queue,
            "trust_synced": self.trust_synced,
            "reason": self.reason,
        }


class VoteProcessor:
    """
    Applies votes and routes the voting flow.

    Attributes:
        session: Session store receiving vote bookkeeping
        directory: Directory used for trust increments and reloads
    """

    def __init__(self, session: SessionStore, directory: CandidateDirectory):
        self.session = session
        self.directory = directory

    def _rejected(self, reason: str, queue: Sequence[Candidate]) -> VoteOutcome:
        logger.debug("Vote ignored: %s", reason)
        return VoteOutcome(
            accepted=False,
            next_view=View.VOTING,
            votes_today=self.session.votes_today,
            remaining_in_queue=len(queue),
            reason=reason,
        )

    def cast(self, queue: Sequence[Candidate], value: VoteValue) -> VoteOutcome:
        """
        Vote on the front of ``queue``.

        Args:
            queue: Current voting queue (front element is the target)
            value: RECOGNIZE or SKIP

        Returns:
            VoteOutcome describing what happened and which screen comes next
        """
        target = queue[0] if queue else None
        if target is None:
            return self._rejected("no target", queue)
        if not self.session.is_logged_in:
            return self._rejected("not logged in", queue)
        if self.session.limit_reached:
            return self._rejected("vote limit reached", queue)

        votes = self.session.record_vote(target.id)

        trust_synced = None
        if value.is_positive:
            trust_synced = self.directory.increment_trust(target.id)
            if not trust_synced:
                logger.warning("Trust for %s not synced; vote kept locally", target.id)

        voted = set(self.session.voted_ids)
        remaining = sum(1 for c in queue if c.id not in voted)

        if remaining > 0 and not self.session.limit_reached:
            next_view = View.VOTING
        else:
            self.directory.reload()
            next_view = View.DASHBOARD

        logger.info(
            "Vote %s on %s (%d/%d used, %d left in queue)",
            value.value, target.id, votes, self.session.max_votes, remaining
        )

        return VoteOutcome(
            accepted=True,
            next_view=next_view,
            target_id=target.id,
            value=value,
            votes_today=votes,
            remaining_in_queue=remaining,
            trust_synced=trust_synced,
        )

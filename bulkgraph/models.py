"""
Core data types shared across the recognition system.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Optional, Any


class VoteValue(Enum):
    """Possible votes on a voting card."""
    RECOGNIZE = "recognize"
    SKIP = "skip"

    @property
    def is_positive(self) -> bool:
        return self is VoteValue.RECOGNIZE


class View(Enum):
    """Screens the presentation layer can show."""
    LANDING = "landing"
    LOGIN = "login"
    DASHBOARD = "dashboard"
    VOTING = "voting"
    LEADERBOARD = "leaderboard"


@dataclass
class Candidate:
    """A registered member (node) of the recognition graph."""
    id: str
    name: str
    handle: str
    profile_image_url: str
    profile_url: str
    first_seen: str
    trust_score: int = 0
    platform: str = "Twitter"
    shared_count: int = 0
    total_interactions: int = 0

    def matches_handle(self, handle: Optional[str]) -> bool:
        """Case-insensitive handle comparison."""
        if not handle:
            return False
        return self.handle.lower() == handle.lower()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionState:
    """
    Who is logged in on this device and how many votes they have used.

    ``voted_ids`` keeps insertion order so the persisted list reads back
    the way it was written.
    """
    current_user: Optional[str] = None
    fingerprint: str = ""
    votes_today: int = 0
    voted_ids: List[str] = field(default_factory=list)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.current_user)

    def has_voted(self, candidate_id: str) -> bool:
        return candidate_id in self.voted_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_user": self.current_user,
            "fingerprint": self.fingerprint,
            "votes_today": self.votes_today,
            "voted_ids": list(self.voted_ids),
        }

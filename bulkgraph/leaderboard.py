"""
Leaderboard Classifier
======================

Ranks the directory by trust score and splits it into three fixed-size
bands:

    diamond = ranks 1-3
    gold    = ranks 4-10
    silver  = ranks 11-100

Members past the last band are not shown. A free-text query filters by
case-insensitive substring on name or handle before ranking. Ties keep
directory order (the sort is stable).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Any

import numpy as np

from .config import DEFAULT_TIERS, TierConfig
from .models import Candidate


@dataclass
class LeaderboardTiers:
    """Ranked bands for one query."""
    diamond: List[Candidate] = field(default_factory=list)
    gold: List[Candidate] = field(default_factory=list)
    silver: List[Candidate] = field(default_factory=list)
    query: str = ""
    total_matches: int = 0

    @property
    def visible(self) -> List[Candidate]:
        """All shown members in rank order."""
        return self.diamond + self.gold + self.silver

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "total_matches": self.total_matches,
            "diamond": [c.to_dict() for c in self.diamond],
            "gold": [c.to_dict() for c in self.gold],
            "silver": [c.to_dict() for c in self.silver],
        }


@dataclass
class LeaderboardSummary:
    """Aggregate trust statistics for the directory."""
    count: int = 0
    total_trust: int = 0
    mean_trust: float = 0.0
    median_trust: float = 0.0
    max_trust: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_trust": self.total_trust,
            "mean_trust": round(self.mean_trust, 2),
            "median_trust": round(self.median_trust, 2),
            "max_trust": self.max_trust,
        }


def matches_query(candidate: Candidate, query: str) -> bool:
    """Case-insensitive substring match against name or handle."""
    q = (query or "").lower()
    return q in candidate.name.lower() or q in candidate.handle.lower()


def rank(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Stable sort by trust score, highest first."""
    return sorted(candidates, key=lambda c: c.trust_score, reverse=True)


def classify(
    candidates: Iterable[Candidate],
    query: str = "",
    tiers: TierConfig = DEFAULT_TIERS
) -> LeaderboardTiers:
    """
    Filter, rank and band the directory.

    Args:
        candidates: Full directory
        query: Free-text filter; empty matches everything
        tiers: Band sizes

    Returns:
        LeaderboardTiers with contiguous, non-overlapping bands
    """
    filtered = [c for c in candidates if matches_query(c, query)]
    ranked = rank(filtered)

    gold_end = tiers.diamond + tiers.gold
    silver_end = gold_end + tiers.silver

    return LeaderboardTiers(
        diamond=ranked[:tiers.diamond],
        gold=ranked[tiers.diamond:gold_end],
        silver=ranked[gold_end:silver_end],
        query=query or "",
        total_matches=len(ranked),
    )


def rank_of(candidates: Iterable[Candidate], handle: Optional[str]) -> Optional[int]:
    """1-based position of ``handle`` in the unfiltered ranking."""
    for position, candidate in enumerate(rank(candidates), 1):
        if candidate.matches_handle(handle):
            return position
    return None


def summarize(candidates: Iterable[Candidate]) -> LeaderboardSummary:
    """Trust score statistics across the directory."""
    scores = np.array([c.trust_score for c in candidates], dtype=np.int64)
    if scores.size == 0:
        return LeaderboardSummary()

    return LeaderboardSummary(
        count=int(scores.size),
        total_trust=int(scores.sum()),
        mean_trust=float(np.mean(scores)),
        median_trust=float(np.median(scores)),
        max_trust=int(scores.max()),
    )

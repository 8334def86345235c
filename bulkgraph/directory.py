"""
Candidate Directory
===================

In-memory list of every known member with their trust scores.

Records come from the candidate store when it is reachable and returns
data; otherwise the built-in sample set is used so there is always
something to render. Persistence itself is delegated to the store; this
module only normalizes what it reads and what it sends.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .config import PLATFORM, SAMPLE_CANDIDATES
from .models import Candidate
from .utils import (
    avatar_url,
    bare_handle,
    clean_text,
    coerce_trust_score,
    profile_url,
)

logger = logging.getLogger(__name__)


def normalize_record(raw: Dict) -> Candidate:
    """
    Build a Candidate from a raw store record.

    Args:
        raw: Record with ``id, name, handle, created_at, trust_score``

    Returns:
        Normalized Candidate with derived profile links
    """
    handle = clean_text(raw.get("handle") or "@member")
    return Candidate(
        id=str(raw.get("id")),
        name=clean_text(raw.get("name") or "Member"),
        handle=handle,
        profile_image_url=avatar_url(handle),
        profile_url=profile_url(handle),
        first_seen=raw.get("created_at") or datetime.now(timezone.utc).isoformat(),
        trust_score=coerce_trust_score(raw.get("trust_score")),
        platform=PLATFORM,
    )


class CandidateDirectory:
    """
    The member list the voting queue and leaderboard are derived from.

    Attributes:
        candidates: Current normalized members, in store order
        from_fallback: True when the sample set is being shown
    """

    def __init__(self, store, fallback: Optional[List[Dict]] = None):
        """
        Initialize the directory.

        Args:
            store: Candidate store client (see ``SupabaseCandidateStore``)
            fallback: Raw records used when the store yields nothing
        """
        self.store = store
        self.fallback = fallback if fallback is not None else SAMPLE_CANDIDATES
        self.candidates: List[Candidate] = []
        self.from_fallback = False

    def load(self) -> List[Candidate]:
        """Load members from the store, falling back to the sample set."""
        try:
            records = self.store.fetch_all()
        except Exception as e:
            logger.warning("Candidate store failed, using sample set: %s", e)
            records = []

        candidates = []
        for raw in records or []:
            try:
                candidates.append(normalize_record(raw))
            except (AttributeError, TypeError) as e:
                logger.warning("Skipping malformed candidate record: %s", e)

        if candidates:
            self.candidates = candidates
            self.from_fallback = False
        else:
            self.candidates = [normalize_record(r) for r in self.fallback]
            self.from_fallback = True
            logger.info("Directory loaded from sample set (%d members)", len(self.candidates))

        return self.candidates

    reload = load

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get(self, candidate_id: str) -> Optional[Candidate]:
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None

    def find_by_handle(self, handle: Optional[str]) -> Optional[Candidate]:
        """Case-insensitive handle lookup."""
        for candidate in self.candidates:
            if candidate.matches_handle(handle):
                return candidate
        return None

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self):
        return iter(self.candidates)

    # =========================================================================
    # STORE DELEGATION
    # =========================================================================

    @staticmethod
    def new_node(handle: str, name: Optional[str] = None) -> Candidate:
        """Create a fresh member record for a first login."""
        handle = clean_text(handle)
        return Candidate(
            id=f"node-{int(time.time() * 1000)}",
            name=clean_text(name or bare_handle(handle)),
            handle=handle,
            profile_image_url=avatar_url(handle),
            profile_url=profile_url(handle),
            first_seen=datetime.now(timezone.utc).isoformat(),
            trust_score=0,
            platform=PLATFORM,
        )

    def linked_handle(self, fingerprint: str) -> Optional[str]:
        """Handle already bound to ``fingerprint`` in the store, if any."""
        try:
            return self.store.find_handle_by_fingerprint(fingerprint)
        except Exception as e:
            logger.warning("Fingerprint lookup failed: %s", e)
            return None

    def register(self, candidate: Candidate, fingerprint: str) -> bool:
        """Upsert a member in the store."""
        try:
            return bool(self.store.upsert(candidate, fingerprint))
        except Exception as e:
            logger.warning("Registering %s failed: %s", candidate.handle, e)
            return False

    def increment_trust(self, candidate_id: str) -> bool:
        """
        Ask the store to add one to a member's trust score.

        The local record is left untouched; the next reload picks up the
        stored value.
        """
        try:
            return bool(self.store.increment_trust(candidate_id))
        except Exception as e:
            logger.warning("Trust increment for %s failed: %s", candidate_id, e)
            return False

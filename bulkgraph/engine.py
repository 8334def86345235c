"""
Recognition Engine
==================

Orchestrates the complete recognition flow:
1. Restore the device session and load the directory
2. Bind a handle to this device (login)
3. Derive the voting queue and apply votes
4. Classify the leaderboard
5. Build the passport card

The engine owns the explicit session object and the current screen, so
presentation layers (Streamlit app, CLI) never write session fields
directly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import numpy as np

from .config import (
    DEFAULT_ENGINE_CONFIG,
    SHARE_URL_TEMPLATE,
    STORAGE_PATH,
    EngineConfig,
)
from .directory import CandidateDirectory
from .fingerprint import DeviceEnvironment, device_fingerprint
from .insights import InsightGenerator
from .leaderboard import (
    LeaderboardSummary,
    LeaderboardTiers,
    classify,
    rank_of,
    summarize,
)
from .models import Candidate, View, VoteValue
from .session import SessionStore
from .store_client import SupabaseCandidateStore
from .utils import LocalStorage, avatar_url, normalize_handle, profile_url
from .voting import VoteOutcome, VoteProcessor
from .voting_queue import build_voting_queue

logger = logging.getLogger(__name__)

# Screens that need a bound handle
PROTECTED_VIEWS = {View.DASHBOARD, View.VOTING, View.LEADERBOARD}


@dataclass
class LoginResult:
    """Outcome of a login attempt."""
    success: bool
    handle: Optional[str] = None
    message: str = ""
    linked_handle: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "handle": self.handle,
            "message": self.message,
            "linked_handle": self.linked_handle,
        }


@dataclass
class Passport:
    """Data for the shareable identity card."""
    name: str
    handle: str
    trust_score: int
    avatar_url: str
    analysis: str
    votes_today: int
    rank: Optional[int] = None

    @property
    def share_text(self) -> str:
        return (
            f"Verified my Digital Identity on Bulk Protocol. "
            f"Trust Index: {self.trust_score}. 🌐 #BulkProtocol #SocialGraph"
        )

    @property
    def share_url(self) -> str:
        return SHARE_URL_TEMPLATE.format(text=quote(self.share_text, safe=""))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "handle": self.handle,
            "trust_score": self.trust_score,
            "avatar_url": self.avatar_url,
            "analysis": self.analysis,
            "votes_today": self.votes_today,
            "rank": self.rank,
            "share_url": self.share_url,
        }


class RecognitionEngine:
    """
    Main recognition orchestrator.

    Usage:
        engine = RecognitionEngine()
        engine.start()
        engine.login("@alice")
        outcome = engine.vote(VoteValue.RECOGNIZE)
    """

    def __init__(
        self,
        store: Optional[Any] = None,
        insights: Optional[InsightGenerator] = None,
        storage: Optional[LocalStorage] = None,
        environment: Optional[DeviceEnvironment] = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize the engine.

        Args:
            store: Candidate store client (created from config if None)
            insights: Generative-text wrapper (created from config if None)
            storage: Durable key/value storage for the session
            environment: Device environment for fingerprinting
            config: Engine settings
            rng: Random generator for queue shuffling
        """
        self.config = config
        self.store = store or SupabaseCandidateStore()
        self.insights = insights or InsightGenerator(
            fallback_bio=config.fallback_bio,
            fallback_analysis=config.fallback_analysis,
        )
        self.environment = environment or DeviceEnvironment.detect()
        self.fingerprint = device_fingerprint(self.environment)
        self.rng = rng if rng is not None else np.random.default_rng()

        self.session = SessionStore(
            storage or LocalStorage(STORAGE_PATH),
            max_votes=config.max_votes_per_user,
            fingerprint=self.fingerprint,
        )
        self.directory = CandidateDirectory(self.store)
        self.processor = VoteProcessor(self.session, self.directory)
        self.view = View.LANDING

    def start(self) -> View:
        """Restore the persisted session and load the directory."""
        self.session.load()
        self.directory.load()
        self.view = View.DASHBOARD if self.session.is_logged_in else View.LANDING
        return self.view

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    def navigate(self, view: View) -> View:
        """Switch screens; protected screens require a logged-in user."""
        if view in PROTECTED_VIEWS and not self.session.is_logged_in:
            view = View.LOGIN
        self.view = view
        return self.view

    # =========================================================================
    # LOGIN
    # =========================================================================

    def login(self, raw_handle: str) -> LoginResult:
        """
        Bind ``raw_handle`` to this device.

        The session is only marked logged in once the store accepted the
        node; any earlier failure leaves it untouched.
        """
        handle = normalize_handle(raw_handle)
        if not handle:
            return LoginResult(success=False, message="Enter a handle to continue.")

        linked = self.directory.linked_handle(self.fingerprint)
        if linked and linked.lower() != handle.lower():
            logger.info("Device %s already linked to %s", self.fingerprint, linked)
            return LoginResult(
                success=False,
                handle=handle,
                message=f"Access Denied: Device already linked to node {linked}.",
                linked_handle=linked,
            )

        # Returning members keep their id and trust score; only the device link changes
        node = self.directory.find_by_handle(handle)
        if node is None:
            profile = self.insights.parse_profile_link(profile_url(handle))
            node = CandidateDirectory.new_node(handle, profile.name if profile else None)

        if not self.directory.register(node, self.fingerprint):
            logger.warning("Login for %s aborted: node not registered", handle)
            return LoginResult(
                success=False,
                handle=handle,
                message="Could not register your node. Try again later.",
            )

        self.session.record_login(handle)
        self.directory.reload()
        self.view = View.DASHBOARD
        return LoginResult(success=True, handle=handle, message=f"Linked {handle}.")

    def logout(self) -> None:
        self.session.logout()
        self.view = View.LANDING

    # =========================================================================
    # VOTING
    # =========================================================================

    def my_node(self) -> Optional[Candidate]:
        return self.directory.find_by_handle(self.session.current_user)

    def voting_queue(self) -> List[Candidate]:
        """Fresh random queue of members the current user can still vote on."""
        return build_voting_queue(
            self.directory.candidates,
            self.session.current_user,
            self.session.voted_ids,
            rng=self.rng,
        )

    def current_target(self) -> Optional[Candidate]:
        queue = self.voting_queue()
        return queue[0] if queue else None

    def vote(
        self,
        value: VoteValue,
        queue: Optional[List[Candidate]] = None
    ) -> VoteOutcome:
        """
        Vote on the front of ``queue`` (a fresh queue if omitted).

        Presentation layers that showed a card should pass the queue the
        card came from so the vote lands on the member the user saw.
        """
        if queue is None:
            queue = self.voting_queue()
        outcome = self.processor.cast(queue, value)
        if outcome.accepted:
            self.view = outcome.next_view
        return outcome

    def target_bio(self, candidate: Candidate) -> str:
        return self.insights.generate_bio(candidate.name)

    # =========================================================================
    # LEADERBOARD & PASSPORT
    # =========================================================================

    def leaderboard(self, query: str = "") -> LeaderboardTiers:
        return classify(self.directory.candidates, query, self.config.tiers)

    def summary(self) -> LeaderboardSummary:
        return summarize(self.directory.candidates)

    def passport(self) -> Optional[Passport]:
        """Passport card for the current user, or None when logged out."""
        handle = self.session.current_user
        if not handle:
            return None

        node = self.my_node()
        analysis = self.insights.generate_fingerprint_analysis(
            handle, self.session.votes_today
        )
        return Passport(
            name=node.name if node else handle,
            handle=handle,
            trust_score=node.trust_score if node else 0,
            avatar_url=avatar_url(handle),
            analysis=analysis or self.config.fallback_analysis,
            votes_today=self.session.votes_today,
            rank=rank_of(self.directory.candidates, handle),
        )

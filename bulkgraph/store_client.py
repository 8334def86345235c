"""
Candidate Store Client
======================

Handles all interactions with the hosted candidate table (Supabase's
PostgREST interface) including:
- Fetching the full member list
- Fingerprint lookups
- Upserting new nodes
- Incrementing trust scores

Every operation is best-effort: failures are logged and converted into a
safe default (empty list, None, False) rather than raised.
"""

import logging
from typing import Dict, List, Optional

import requests

from .config import (
    CANDIDATES_TABLE,
    REQUEST_TIMEOUT,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
)
from .models import Candidate
from .utils import clean_text

logger = logging.getLogger(__name__)


class SupabaseCandidateStore:
    """
    Thin wrapper around the candidate table's REST endpoint.

    Attributes:
        base_url: Project URL (``https://<ref>.supabase.co``)
        session: Shared HTTP session carrying the API key headers
    """

    def __init__(
        self,
        url: str = SUPABASE_URL,
        api_key: str = SUPABASE_ANON_KEY,
        table: str = CANDIDATES_TABLE,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the store client.

        Args:
            url: Supabase project URL
            api_key: Anonymous API key
            table: Candidate table name
            timeout: Per-request timeout in seconds
            session: Optional preconfigured HTTP session
        """
        self.base_url = url.rstrip("/")
        self.table = table
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        self._configured = bool(url and api_key)

        if not self._configured:
            logger.info("Candidate store not configured; using offline defaults")

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def fetch_all(self) -> List[Dict]:
        """
        Fetch every candidate record, highest trust score first.

        Returns:
            Raw records (``id, name, handle, created_at, trust_score``),
            or an empty list on any failure
        """
        if not self._configured:
            return []

        try:
            response = self.session.get(
                self.endpoint,
                params={"select": "*", "order": "trust_score.desc"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Error fetching candidates: %s", e)
            return []

        if not isinstance(data, list):
            logger.warning("Unexpected candidate payload type: %s", type(data).__name__)
            return []

        return [row for row in data if isinstance(row, dict)]

    def find_handle_by_fingerprint(self, fingerprint: str) -> Optional[str]:
        """
        Look up the handle a device fingerprint is linked to.

        Args:
            fingerprint: Device identifier

        Returns:
            Linked handle, or None if unlinked or the lookup failed
        """
        if not self._configured:
            return None

        try:
            response = self.session.get(
                self.endpoint,
                params={
                    "select": "handle",
                    "fingerprint": f"eq.{fingerprint}",
                    "limit": 1,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Error looking up fingerprint: %s", e)
            return None

        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0].get("handle") or None
        return None

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def upsert(self, candidate: Candidate, fingerprint: str) -> bool:
        """
        Insert or update a candidate, keyed on its handle.

        A second device claiming an existing handle overwrites the stored
        fingerprint link.

        Returns:
            True on success
        """
        if not self._configured:
            return False

        payload = {
            "id": candidate.id,
            "name": clean_text(candidate.name),
            "handle": clean_text(candidate.handle),
            "fingerprint": fingerprint,
            "trust_score": candidate.trust_score or 0,
        }

        try:
            response = self.session.post(
                self.endpoint,
                params={"on_conflict": "handle"},
                json=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Error upserting candidate %s: %s", candidate.handle, e)
            return False

        return True

    def increment_trust(self, candidate_id: str) -> bool:
        """
        Add one to a candidate's trust score (read, then write).

        Returns:
            True on success, False if the candidate is unknown or a request failed
        """
        if not self._configured:
            return False

        try:
            response = self.session.get(
                self.endpoint,
                params={"select": "trust_score", "id": f"eq.{candidate_id}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
            if not isinstance(rows, list) or not rows:
                logger.warning("Cannot increment trust: candidate %s not found", candidate_id)
                return False

            current = rows[0].get("trust_score") or 0
            response = self.session.patch(
                self.endpoint,
                params={"id": f"eq.{candidate_id}"},
                json={"trust_score": int(current) + 1},
                headers={"Prefer": "return=minimal"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            logger.warning("Error incrementing trust for %s: %s", candidate_id, e)
            return False

        return True

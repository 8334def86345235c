"""Shared fixtures: in-memory collaborators and sample directories."""

import numpy as np
import pytest

from bulkgraph.config import EngineConfig
from bulkgraph.directory import normalize_record
from bulkgraph.engine import RecognitionEngine
from bulkgraph.fingerprint import DeviceEnvironment
from bulkgraph.insights import ProfileInfo
from bulkgraph.utils import LocalStorage


class FakeStore:
    """Candidate store keeping records in a list and logging every call."""

    def __init__(self, records=None):
        self.records = [dict(r) for r in (records or [])]
        self.fingerprints = {}
        self.calls = []
        self.fail_fetch = False
        self.fail_upsert = False
        self.fail_increment = False

    def fetch_all(self):
        self.calls.append(("fetch_all",))
        if self.fail_fetch:
            raise ConnectionError("store down")
        return sorted(self.records, key=lambda r: r.get("trust_score", 0), reverse=True)

    def find_handle_by_fingerprint(self, fingerprint):
        self.calls.append(("find_handle_by_fingerprint", fingerprint))
        return self.fingerprints.get(fingerprint)

    def upsert(self, candidate, fingerprint):
        self.calls.append(("upsert", candidate.handle, fingerprint))
        if self.fail_upsert:
            return False
        self.records = [r for r in self.records if r["handle"].lower() != candidate.handle.lower()]
        self.records.append({
            "id": candidate.id,
            "name": candidate.name,
            "handle": candidate.handle,
            "created_at": candidate.first_seen,
            "trust_score": candidate.trust_score,
        })
        self.fingerprints[fingerprint] = candidate.handle
        return True

    def increment_trust(self, candidate_id):
        self.calls.append(("increment_trust", candidate_id))
        if self.fail_increment:
            return False
        for record in self.records:
            if record["id"] == candidate_id:
                record["trust_score"] = record.get("trust_score", 0) + 1
                return True
        return False

    def call_names(self):
        return [c[0] for c in self.calls]


class FakeInsights:
    """Insight generator returning canned text."""

    def __init__(self, profile=None, bio="A bio.", analysis="An analysis."):
        self.profile = profile
        self.bio = bio
        self.analysis = analysis
        self.parsed_urls = []

    def parse_profile_link(self, url):
        self.parsed_urls.append(url)
        return self.profile

    def generate_bio(self, name):
        return self.bio

    def generate_fingerprint_analysis(self, handle, vote_count):
        return self.analysis


def make_records(scores, prefix="c"):
    return [
        {
            "id": f"{prefix}{i}",
            "name": f"Member {i}",
            "handle": f"@member{i}",
            "created_at": "2024-01-01T00:00:00Z",
            "trust_score": score,
        }
        for i, score in enumerate(scores)
    ]


def make_candidates(scores, prefix="c"):
    return [normalize_record(r) for r in make_records(scores, prefix)]


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage.json"))


@pytest.fixture
def environment():
    return DeviceEnvironment(
        user_agent="Mozilla/5.0 (X11; Linux x86_64)",
        screen_width=1920,
        screen_height=1080,
        language="en-US",
    )


@pytest.fixture
def store():
    return FakeStore(make_records([5, 4, 3, 2, 1]))


@pytest.fixture
def insights():
    return FakeInsights(profile=ProfileInfo(name="Alice Liddell", handle="@alice"))


@pytest.fixture
def engine_factory(storage, environment, insights):
    def build(store, max_votes=3, storage_override=None):
        return RecognitionEngine(
            store=store,
            insights=insights,
            storage=storage_override or storage,
            environment=environment,
            config=EngineConfig(max_votes_per_user=max_votes),
            rng=np.random.default_rng(7),
        )
    return build

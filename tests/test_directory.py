"""
Tests for the candidate directory
"""

from bulkgraph.config import SAMPLE_CANDIDATES
from bulkgraph.directory import CandidateDirectory, normalize_record

from conftest import FakeStore, make_records


class TestNormalizeRecord:
    """Record normalization"""

    def test_full_record(self):
        c = normalize_record({
            "id": 12,
            "name": "  Alice  ",
            "handle": "@alice",
            "created_at": "2024-05-01T00:00:00Z",
            "trust_score": "7",
        })
        assert c.id == "12"
        assert c.name == "Alice"
        assert c.handle == "@alice"
        assert c.trust_score == 7
        assert c.profile_image_url == "https://unavatar.io/twitter/alice"
        assert c.profile_url == "https://x.com/alice"
        assert c.first_seen == "2024-05-01T00:00:00Z"
        assert c.platform == "Twitter"

    def test_defaults(self):
        c = normalize_record({"id": "x"})
        assert c.name == "Member"
        assert c.handle == "@member"
        assert c.trust_score == 0
        assert c.first_seen

    def test_text_capped(self):
        c = normalize_record({"id": "x", "name": "n" * 400})
        assert len(c.name) == 150

    def test_trust_coercion(self):
        assert normalize_record({"id": "x", "trust_score": -3}).trust_score == 0
        assert normalize_record({"id": "x", "trust_score": "junk"}).trust_score == 0
        assert normalize_record({"id": "x", "trust_score": 4.9}).trust_score == 4


class TestDirectoryLoad:
    """Loading with fallback"""

    def test_loads_from_store(self):
        directory = CandidateDirectory(FakeStore(make_records([1, 9])))
        candidates = directory.load()
        assert [c.trust_score for c in candidates] == [9, 1]
        assert not directory.from_fallback

    def test_falls_back_when_empty(self):
        directory = CandidateDirectory(FakeStore([]))
        assert len(directory.load()) == len(SAMPLE_CANDIDATES)
        assert directory.from_fallback

    def test_falls_back_when_store_raises(self):
        store = FakeStore(make_records([1]))
        store.fail_fetch = True
        directory = CandidateDirectory(store)
        directory.load()
        assert directory.from_fallback
        assert len(directory) == len(SAMPLE_CANDIDATES)

    def test_custom_fallback(self):
        directory = CandidateDirectory(FakeStore([]), fallback=make_records([3], prefix="f"))
        assert [c.id for c in directory.load()] == ["f0"]

    def test_skips_malformed_rows(self):
        store = FakeStore()
        store.fetch_all = lambda: ["not a dict", {"id": "ok", "handle": "@ok"}]
        directory = CandidateDirectory(store)
        assert [c.id for c in directory.load()] == ["ok"]


class TestDirectoryLookupsAndDelegation:
    """Lookups and store delegation"""

    def test_find_by_handle_is_case_insensitive(self):
        directory = CandidateDirectory(FakeStore(make_records([1, 2])))
        directory.load()
        assert directory.find_by_handle("@MEMBER1").id == "c1"
        assert directory.find_by_handle("@nobody") is None
        assert directory.find_by_handle(None) is None

    def test_get(self):
        directory = CandidateDirectory(FakeStore(make_records([1, 2])))
        directory.load()
        assert directory.get("c0").handle == "@member0"
        assert directory.get("zz") is None

    def test_new_node(self):
        node = CandidateDirectory.new_node("@zed")
        assert node.id.startswith("node-")
        assert node.name == "zed"
        assert node.trust_score == 0
        assert node.profile_url == "https://x.com/zed"

    def test_increment_does_not_touch_local_copy(self):
        store = FakeStore(make_records([1]))
        directory = CandidateDirectory(store)
        directory.load()
        assert directory.increment_trust("c0") is True
        assert directory.get("c0").trust_score == 1
        directory.reload()
        assert directory.get("c0").trust_score == 2

    def test_delegation_swallows_store_errors(self):
        class Broken:
            def fetch_all(self):
                return []

            def find_handle_by_fingerprint(self, fp):
                raise TimeoutError()

            def upsert(self, candidate, fp):
                raise TimeoutError()

            def increment_trust(self, cid):
                raise TimeoutError()

        directory = CandidateDirectory(Broken())
        assert directory.linked_handle("node-1") is None
        assert directory.register(CandidateDirectory.new_node("@a"), "node-1") is False
        assert directory.increment_trust("x") is False

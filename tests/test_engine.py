"""
Tests for the recognition engine (login flow, routing, passport)
"""

from urllib.parse import unquote

from bulkgraph.config import STORAGE_KEYS
from bulkgraph.models import View, VoteValue
from bulkgraph.utils import LocalStorage, device_storage_path

from conftest import FakeStore, make_records


class TestStart:
    """Startup and navigation"""

    def test_fresh_device_lands(self, engine_factory, store):
        engine = engine_factory(store)
        assert engine.start() == View.LANDING
        assert len(engine.directory) == 5

    def test_persisted_user_goes_to_dashboard(self, engine_factory, store, storage):
        storage.set(STORAGE_KEYS["logged_user"], "@member2")
        engine = engine_factory(store)
        assert engine.start() == View.DASHBOARD
        assert engine.my_node().id == "c2"

    def test_protected_views_require_login(self, engine_factory, store):
        engine = engine_factory(store)
        engine.start()
        assert engine.navigate(View.VOTING) == View.LOGIN
        assert engine.navigate(View.LEADERBOARD) == View.LOGIN
        assert engine.navigate(View.LANDING) == View.LANDING


class TestLogin:
    """Identity binding"""

    def test_success(self, engine_factory, store, insights):
        engine = engine_factory(store)
        engine.start()
        result = engine.login("  Alice ")
        assert result.success
        assert result.handle == "@alice"
        assert engine.session.current_user == "@alice"
        assert engine.view == View.DASHBOARD
        assert insights.parsed_urls == ["https://x.com/alice"]
        node = engine.my_node()
        assert node.name == "Alice Liddell"
        assert store.fingerprints[engine.fingerprint] == "@alice"

    def test_name_falls_back_to_handle(self, engine_factory, store, insights):
        insights.profile = None
        engine = engine_factory(store)
        engine.start()
        engine.login("@zed")
        assert engine.my_node().name == "zed"

    def test_empty_handle_rejected(self, engine_factory, store):
        engine = engine_factory(store)
        engine.start()
        result = engine.login(" </> ")
        assert not result.success
        assert "upsert" not in store.call_names()

    def test_upsert_failure_does_not_log_in(self, engine_factory, store, storage):
        store.fail_upsert = True
        engine = engine_factory(store)
        engine.start()
        result = engine.login("@alice")
        assert not result.success
        assert not engine.session.is_logged_in
        assert storage.get(STORAGE_KEYS["logged_user"]) is None
        assert engine.view == View.LANDING

    def test_device_bound_to_other_handle(self, engine_factory, store):
        engine = engine_factory(store)
        store.fingerprints[engine.fingerprint] = "@someoneelse"
        engine.start()
        result = engine.login("@alice")
        assert not result.success
        assert result.linked_handle == "@someoneelse"
        assert "@someoneelse" in result.message
        assert "upsert" not in store.call_names()
        assert not engine.session.is_logged_in

    def test_returning_member_keeps_trust(self, engine_factory, store, insights):
        engine = engine_factory(store)
        engine.start()
        assert engine.login("@MEMBER1").success
        node = engine.my_node()
        assert node.id == "c1"
        assert node.trust_score == 4
        assert insights.parsed_urls == []

    def test_same_handle_can_rebind(self, engine_factory, store):
        engine = engine_factory(store)
        store.fingerprints[engine.fingerprint] = "@ALICE"
        engine.start()
        assert engine.login("alice").success


class TestVotingFlow:
    """Queue and votes through the engine"""

    def test_queue_excludes_self(self, engine_factory, store):
        engine = engine_factory(store, max_votes=10)
        engine.start()
        engine.login("@member0")
        ids = {c.id for c in engine.voting_queue()}
        assert "c0" not in ids
        assert len(ids) == 4

    def test_vote_sequence_until_queue_exhausted(self, engine_factory, store):
        engine = engine_factory(store, max_votes=10)
        engine.start()
        engine.login("@member0")
        engine.navigate(View.VOTING)

        seen = []
        while engine.view == View.VOTING:
            target = engine.current_target()
            outcome = engine.vote(VoteValue.RECOGNIZE, queue=[target] + [
                c for c in engine.voting_queue() if c.id != target.id
            ])
            assert outcome.accepted
            assert outcome.target_id not in seen
            seen.append(outcome.target_id)

        assert sorted(seen) == ["c1", "c2", "c3", "c4"]
        assert engine.view == View.DASHBOARD
        assert engine.current_target() is None

    def test_vote_limit_routes_to_dashboard(self, engine_factory, store):
        engine = engine_factory(store, max_votes=2)
        engine.start()
        engine.login("@member0")
        engine.navigate(View.VOTING)
        engine.vote(VoteValue.SKIP)
        assert engine.view == View.VOTING
        outcome = engine.vote(VoteValue.SKIP)
        assert outcome.next_view == View.DASHBOARD
        assert engine.view == View.DASHBOARD
        assert not engine.vote(VoteValue.SKIP).accepted

    def test_recognition_visible_after_reload(self, engine_factory, store):
        engine = engine_factory(store, max_votes=1)
        engine.start()
        engine.login("@member0")
        target = engine.current_target()
        before = target.trust_score
        engine.vote(VoteValue.RECOGNIZE, queue=[target])
        assert engine.directory.get(target.id).trust_score == before + 1

    def test_session_survives_restart(self, engine_factory, store, storage):
        engine = engine_factory(store, max_votes=5)
        engine.start()
        engine.login("@member0")
        first = engine.vote(VoteValue.SKIP).target_id

        restarted = engine_factory(store, max_votes=5, storage_override=LocalStorage(str(storage.path)))
        assert restarted.start() == View.DASHBOARD
        assert restarted.session.votes_today == 1
        assert first not in {c.id for c in restarted.voting_queue()}

    def test_stale_engine_on_shared_file_keeps_votes(self, engine_factory, store, tmp_path):
        path = str(tmp_path / "shared.json")
        first = engine_factory(store, max_votes=5, storage_override=LocalStorage(path))
        stale = engine_factory(store, max_votes=5, storage_override=LocalStorage(path))
        first.start()
        stale.start()
        first.login("@member0")
        voted = first.vote(VoteValue.SKIP).target_id

        stale.session.storage.set("x", 1)

        again = engine_factory(store, max_votes=5, storage_override=LocalStorage(path))
        assert again.start() == View.DASHBOARD
        assert again.session.current_user == "@member0"
        assert again.session.votes_today == 1
        assert again.session.voted_ids == [voted]

    def test_devices_do_not_share_sessions(self, engine_factory, store, tmp_path):
        root = str(tmp_path)
        first = engine_factory(store, storage_override=LocalStorage(device_storage_path("node-1", root=root)))
        first.start()
        first.login("@member0")

        other = engine_factory(store, storage_override=LocalStorage(device_storage_path("node-2", root=root)))
        assert other.start() == View.LANDING
        assert other.session.votes_today == 0


class TestLeaderboardAndPassport:
    """Read-only views"""

    def test_leaderboard(self, engine_factory):
        engine = engine_factory(FakeStore(make_records([10, 8, 8, 5, 1])))
        engine.start()
        tiers = engine.leaderboard()
        assert [c.id for c in tiers.diamond] == ["c0", "c1", "c2"]
        assert engine.summary().max_trust == 10

    def test_passport_requires_login(self, engine_factory, store):
        engine = engine_factory(store)
        engine.start()
        assert engine.passport() is None

    def test_passport(self, engine_factory, store):
        engine = engine_factory(store)
        engine.start()
        engine.login("@member1")
        passport = engine.passport()
        assert passport.handle == "@member1"
        assert passport.trust_score == 4
        assert passport.rank == 2
        assert passport.analysis == "An analysis."
        assert passport.avatar_url == "https://unavatar.io/twitter/member1"
        assert "Trust Index: 4" in unquote(passport.share_url)
        assert passport.share_url.startswith("https://twitter.com/intent/tweet?text=")

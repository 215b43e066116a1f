"""
Tests for the durable local store and the session context.
"""

import json

from finwise.models.profile import AuthSession, AuthUser, UserProfile
from finwise.services.storage import DARK_MODE_KEY, PROFILE_KEY, LocalStore
from finwise.session import AuthStateChannel, SessionContext


class TestLocalStore:
    """Tests for LocalStore."""

    def test_missing_file_reads_empty(self, tmp_path):
        store = LocalStore(tmp_path / "missing.json")
        assert store.get("anything") is None
        assert store.load_profile() is None
        assert store.get_dark_mode() is False

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = LocalStore(path)
        assert store.get(PROFILE_KEY) is None

    def test_profile_round_trip(self, tmp_path):
        store = LocalStore(tmp_path / "nested" / "store.json")
        profile = UserProfile(uid="uid-1", first_name="Jane", last_name="Doe", currency="EUR")

        assert store.save_profile(profile) is True
        assert store.load_profile() == profile

        raw = json.loads(store.path.read_text(encoding="utf-8"))
        assert raw[PROFILE_KEY]["firstName"] == "Jane"

    def test_invalid_stored_profile_reads_none(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        store.set(PROFILE_KEY, {"firstName": "No uid"})
        assert store.load_profile() is None

    def test_clear_profile_keeps_other_keys(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        store.save_profile(UserProfile(uid="uid-1"))
        store.set_dark_mode(True)

        assert store.clear_profile() is True
        assert store.load_profile() is None
        assert store.get(DARK_MODE_KEY) is True
        assert store.get_dark_mode() is True

    def test_remove_missing_key(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        assert store.remove("nope") is True

    def test_write_failure_returns_false(self, tmp_path):
        """Test that an unwritable location is reported, not raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = LocalStore(blocker / "store.json")
        assert store.set_dark_mode(True) is False


class TestSessionContext:
    """Tests for SessionContext."""

    def test_start_caches_and_persists(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        context = SessionContext(store)
        profile = UserProfile(uid="uid-1", first_name="Jane")

        session = context.start(AuthUser(uid="uid-1"), profile)

        assert context.is_active
        assert session.profile == profile
        assert context.cached_profile("uid-1") == profile
        assert store.load_profile() == profile

    def test_stored_profile_must_match_uid(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        store.save_profile(UserProfile(uid="someone-else"))
        context = SessionContext(store)

        assert context.stored_profile("uid-1") is None
        assert context.stored_profile("someone-else") is not None

    def test_remember_updates_active_session(self, tmp_path):
        context = SessionContext(LocalStore(tmp_path / "store.json"))
        profile = UserProfile(uid="uid-1")
        context.start(AuthUser(uid="uid-1"), profile)

        context.remember(profile.touched(currency="USD"))

        assert context.profile.currency == "USD"

    def test_end_clears_everything(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        context = SessionContext(store)
        context.start(AuthUser(uid="uid-1"), UserProfile(uid="uid-1"))

        context.end()

        assert context.session is None
        assert context.cached_profile("uid-1") is None
        assert store.load_profile() is None


class TestAuthStateChannel:
    """Tests for AuthStateChannel."""

    def test_subscribe_emits_current_state(self):
        channel = AuthStateChannel()
        seen = []
        channel.subscribe(seen.append)
        assert seen == [None]

    def test_emits_on_change_until_unsubscribed(self):
        channel = AuthStateChannel()
        seen = []
        unsubscribe = channel.subscribe(seen.append)
        session = AuthSession(user=AuthUser(uid="u"), profile=UserProfile(uid="u"))

        channel.emit(session)
        unsubscribe()
        channel.emit(None)

        assert seen == [None, session]

    def test_late_subscriber_gets_current_session(self):
        channel = AuthStateChannel()
        session = AuthSession(user=AuthUser(uid="u"), profile=UserProfile(uid="u"))
        channel.emit(session)

        seen = []
        channel.subscribe(seen.append)
        assert seen == [session]

    def test_failing_subscriber_does_not_block_others(self):
        channel = AuthStateChannel()
        seen = []

        def broken(_session):
            raise RuntimeError("boom")

        channel.subscribe(broken)
        channel.subscribe(seen.append)
        channel.emit(None)

        assert seen == [None, None]

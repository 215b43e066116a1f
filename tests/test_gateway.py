"""
Tests for the auth/profile gateway (fake provider, in-memory profile store).
"""

import asyncio

import pytest

from finwise.gateway import AuthGateway, validate_sign_up
from finwise.models.profile import UserProfile
from finwise.services.auth import (
    EMAIL_EXISTS,
    PROFILE_WRITE_FAILED,
    VALIDATION_FAILED,
    AuthError,
    map_auth_error,
    NETWORK_ERROR,
    SIGN_IN,
    SIGN_UP,
)
from finwise.session import AuthStateChannel, SessionContext


def make_gateway(identity_provider, session_context, profile_store, audit_logger=None, timeout=0.5):
    return AuthGateway(
        identity_provider=identity_provider,
        session_context=session_context,
        profile_store=profile_store,
        audit_logger=audit_logger,
        auth_channel=AuthStateChannel(),
        profile_fetch_timeout=timeout,
        default_currency="INR",
    )


class TestSignUpValidation:
    """Tests for sign-up form validation."""

    def test_all_fields_required(self):
        assert validate_sign_up("Jane", "", "jane@example.com", "secret1") == "All fields are required"
        assert validate_sign_up("   ", "Doe", "jane@example.com", "secret1") == "All fields are required"

    def test_password_length(self):
        assert (
            validate_sign_up("Jane", "Doe", "jane@example.com", "12345")
            == "Password must be at least 6 characters"
        )

    @pytest.mark.parametrize("email", ["jane", "jane@example", "jane @example.com", "@example.com"])
    def test_email_format(self, email):
        assert validate_sign_up("Jane", "Doe", email, "secret1") == "Please enter a valid email address"

    def test_valid_input(self):
        assert validate_sign_up("Jane", "Doe", "jane@example.com", "secret1") is None


class TestAuthErrorMessages:
    """Tests for provider code -> message mapping."""

    def test_known_codes(self):
        assert map_auth_error(EMAIL_EXISTS, SIGN_UP) == "This email is already registered"
        assert map_auth_error("WEAK_PASSWORD", SIGN_UP) == "Password must be at least 6 characters"
        assert map_auth_error("INVALID_EMAIL", SIGN_IN) == "Please enter a valid email address"
        assert map_auth_error(NETWORK_ERROR, SIGN_IN) == "Network error. Please check your connection."

    def test_defaults_per_operation(self):
        assert map_auth_error("SOMETHING", SIGN_IN) == "Login failed. Please check your credentials."
        assert map_auth_error("SOMETHING", SIGN_UP) == "Signup failed. Please try again."


class TestSignUp:
    """Tests for AuthGateway.sign_up."""

    def test_invalid_input_never_reaches_provider(self, identity_provider, session_context, profile_store):
        gateway = make_gateway(identity_provider, session_context, profile_store)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(gateway.sign_up("Jane", "Doe", "not-an-email", "secret1"))

        assert exc_info.value.code == VALIDATION_FAILED
        assert exc_info.value.message == "Please enter a valid email address"
        assert identity_provider.sign_up_calls == 0

    def test_success_persists_profile_and_emits(
        self, identity_provider, session_context, profile_store, local_store, audit_logger, audit_storage
    ):
        gateway = make_gateway(identity_provider, session_context, profile_store, audit_logger)
        seen = []
        gateway.subscribe(seen.append)

        async def flow():
            session = await gateway.sign_up(" Jane ", "Doe", "jane@example.com", "secret1")
            await gateway.wait_for_background()
            return session

        session = asyncio.run(flow())

        profile = session.profile
        assert profile.first_name == "Jane"
        assert profile.currency == "INR"
        assert profile.created_at is not None
        assert profile_store.documents[profile.uid] == profile
        assert local_store.load_profile() == profile
        assert session_context.cached_profile(profile.uid) == profile
        assert seen == [None, session]
        assert identity_provider.display_name_updates == [(profile.uid, "Jane Doe")]
        assert "user_signed_up" in audit_storage.types()

    def test_existing_email(self, identity_provider, session_context, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-9")
        gateway = make_gateway(identity_provider, session_context, profile_store)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(gateway.sign_up("Jane", "Doe", "jane@example.com", "secret1"))

        assert exc_info.value.code == EMAIL_EXISTS
        assert exc_info.value.message == "This email is already registered"
        assert gateway.session is None

    def test_profile_write_failure_fails_sign_up(
        self, identity_provider, session_context, profile_store, local_store
    ):
        profile_store.fail_writes = True
        gateway = make_gateway(identity_provider, session_context, profile_store)

        async def flow():
            try:
                await gateway.sign_up("Jane", "Doe", "jane@example.com", "secret1")
            finally:
                await gateway.wait_for_background()

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(flow())

        assert exc_info.value.code == PROFILE_WRITE_FAILED
        assert exc_info.value.message == "Signup failed. Please try again."
        assert gateway.session is None
        assert local_store.load_profile() is None

    def test_display_name_failure_is_not_surfaced(self, identity_provider, session_context, profile_store):
        identity_provider.fail_display_name = True
        gateway = make_gateway(identity_provider, session_context, profile_store)

        async def flow():
            session = await gateway.sign_up("Jane", "Doe", "jane@example.com", "secret1")
            await gateway.wait_for_background()
            return session

        session = asyncio.run(flow())
        assert session.profile.full_name == "Jane Doe"
        assert identity_provider.display_name_updates == []


class TestSignIn:
    """Tests for AuthGateway.sign_in profile resolution."""

    def test_bad_credentials(self, identity_provider, session_context, profile_store, audit_logger, audit_storage):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1")
        gateway = make_gateway(identity_provider, session_context, profile_store, audit_logger)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(gateway.sign_in("jane@example.com", "wrong"))

        assert exc_info.value.message == "Login failed. Please check your credentials."
        assert audit_storage.types() == ["auth_failed"]

    def test_empty_credentials(self, identity_provider, session_context, profile_store):
        gateway = make_gateway(identity_provider, session_context, profile_store)
        with pytest.raises(AuthError) as exc_info:
            asyncio.run(gateway.sign_in("  ", ""))
        assert exc_info.value.code == VALIDATION_FAILED

    def test_remote_profile(self, identity_provider, session_context, profile_store, local_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        stored = UserProfile(uid="uid-1", first_name="Janet", last_name="Doe", currency="USD")
        profile_store.documents["uid-1"] = stored
        gateway = make_gateway(identity_provider, session_context, profile_store)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile == stored
        assert local_store.load_profile() == stored
        assert session_context.cached_profile("uid-1") == stored

    def test_cache_hit_skips_remote(self, identity_provider, session_context, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1")
        cached = UserProfile(uid="uid-1", first_name="Cached", currency="GBP")
        session_context.remember(cached)
        gateway = make_gateway(identity_provider, session_context, profile_store)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile == cached
        assert profile_store.reads == 0

    def test_local_store_hit_skips_remote(self, identity_provider, local_store, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1")
        local_store.save_profile(UserProfile(uid="uid-1", first_name="Stored", currency="EUR"))
        gateway = make_gateway(identity_provider, SessionContext(local_store), profile_store)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.first_name == "Stored"
        assert profile_store.reads == 0

    def test_local_store_for_other_user_is_ignored(self, identity_provider, local_store, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        local_store.save_profile(UserProfile(uid="uid-2", first_name="Other"))
        gateway = make_gateway(identity_provider, SessionContext(local_store), profile_store)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.first_name == "Jane"
        assert profile_store.reads == 1

    def test_missing_document_falls_back(
        self, identity_provider, session_context, profile_store, audit_logger, audit_storage
    ):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        gateway = make_gateway(identity_provider, session_context, profile_store, audit_logger)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.first_name == "Jane"
        assert session.profile.last_name == "Doe"
        assert session.profile.currency == "INR"
        assert audit_storage.types() == ["profile_fallback_used", "user_signed_in"]

    def test_timeout_falls_back(self, identity_provider, session_context, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "")
        profile_store.documents["uid-1"] = UserProfile(uid="uid-1", first_name="Remote")
        profile_store.read_delay = 0.5
        gateway = make_gateway(identity_provider, session_context, profile_store, timeout=0.05)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.first_name == "User"

    def test_store_error_falls_back(self, identity_provider, session_context, profile_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane")
        profile_store.fail_reads = True
        gateway = make_gateway(identity_provider, session_context, profile_store)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.first_name == "Jane"
        assert session.profile.last_name == ""

    def test_no_profile_store_falls_back(self, identity_provider, session_context):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        gateway = make_gateway(identity_provider, session_context, None)

        session = asyncio.run(gateway.sign_in("jane@example.com", "secret1"))

        assert session.profile.full_name == "Jane Doe"


class TestSignOut:
    """Tests for AuthGateway.sign_out."""

    def test_sign_out_clears_session(self, identity_provider, session_context, profile_store, local_store):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        gateway = make_gateway(identity_provider, session_context, profile_store)
        seen = []
        gateway.subscribe(seen.append)

        async def flow():
            await gateway.sign_in("jane@example.com", "secret1")
            await gateway.sign_out()

        asyncio.run(flow())

        assert gateway.session is None
        assert session_context.cached_profile("uid-1") is None
        assert local_store.load_profile() is None
        assert identity_provider.signed_out == ["uid-1"]
        assert seen[-1] is None
        assert len(seen) == 3

    def test_sign_out_without_session(self, identity_provider, session_context, profile_store):
        gateway = make_gateway(identity_provider, session_context, profile_store)
        asyncio.run(gateway.sign_out())
        assert identity_provider.signed_out == []


class TestUpdateCurrency:
    """Tests for AuthGateway.update_currency."""

    def _signed_in(self, identity_provider, session_context, profile_store, audit_logger=None):
        identity_provider.add_account("jane@example.com", "secret1", "uid-1", "Jane Doe")
        profile_store.documents["uid-1"] = UserProfile(uid="uid-1", first_name="Jane", currency="INR")
        gateway = make_gateway(identity_provider, session_context, profile_store, audit_logger)
        asyncio.run(gateway.sign_in("jane@example.com", "secret1"))
        return gateway

    def test_update_currency(
        self, identity_provider, session_context, profile_store, local_store, audit_logger, audit_storage
    ):
        gateway = self._signed_in(identity_provider, session_context, profile_store, audit_logger)

        assert asyncio.run(gateway.update_currency("USD")) is True

        assert gateway.profile.currency == "USD"
        assert profile_store.documents["uid-1"].currency == "USD"
        assert local_store.load_profile().currency == "USD"
        assert "currency_changed" in audit_storage.types()

    def test_unknown_currency_rejected(self, identity_provider, session_context, profile_store):
        gateway = self._signed_in(identity_provider, session_context, profile_store)

        assert asyncio.run(gateway.update_currency("XYZ")) is False
        assert gateway.profile.currency == "INR"

    def test_remote_failure_leaves_profile_unchanged(
        self, identity_provider, session_context, profile_store, local_store
    ):
        gateway = self._signed_in(identity_provider, session_context, profile_store)
        profile_store.fail_writes = True

        assert asyncio.run(gateway.update_currency("EUR")) is False
        assert gateway.profile.currency == "INR"
        assert local_store.load_profile().currency == "INR"

    def test_missing_document_is_created(self, identity_provider, session_context, profile_store):
        gateway = self._signed_in(identity_provider, session_context, profile_store)
        del profile_store.documents["uid-1"]

        assert asyncio.run(gateway.update_currency("JPY")) is True
        assert profile_store.documents["uid-1"].currency == "JPY"

    def test_requires_session(self, identity_provider, session_context, profile_store):
        gateway = make_gateway(identity_provider, session_context, profile_store)
        assert asyncio.run(gateway.update_currency("USD")) is False

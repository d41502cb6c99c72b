"""Tests for the password reset flow."""

from datetime import timedelta

import pytest

from identity_service.auth.schemas.login_schemas import LoginRequest
from identity_service.auth.schemas.register_schemas import RegisterRequest
from identity_service.auth.services.auth_services import RESET_REQUESTED_MESSAGE
from identity_service.core.exceptions import BadRequestError, UnauthorizedError


@pytest.fixture
def registered(auth_engine):
    return auth_engine.register(RegisterRequest(email="a@x.com", password="secret1"))


def login(engine, password):
    return engine.login(LoginRequest(email="a@x.com", password=password))


class TestRequestPasswordReset:
    def test_known_and_unknown_email_get_identical_response(self, auth_engine, registered, notifier):
        known = auth_engine.request_password_reset("a@x.com")
        unknown = auth_engine.request_password_reset("nobody@x.com")

        assert known == unknown
        assert known.message == RESET_REQUESTED_MESSAGE
        assert len(notifier.sent) == 1

    def test_notification_carries_reset_link(self, auth_engine, registered, notifier):
        auth_engine.request_password_reset("a@x.com")

        sent = notifier.sent[0]
        assert sent.channel == "email"
        assert sent.recipient == "a@x.com"
        assert "https://app.example.com/reset-password?token=" in sent.message
        assert len(notifier.last_token()) >= 32

    def test_token_expires_one_hour_after_creation(self, auth_engine, registered, notifier, reset_token_store, clock):
        auth_engine.request_password_reset("a@x.com")

        record = reset_token_store.find_unused_by_token(notifier.last_token())
        assert record.user_id == registered.user.id
        assert record.expires_at == clock() + timedelta(hours=1)
        assert record.used is False

    def test_delivery_failure_is_not_observable(self, auth_engine, registered, notifier, db):
        from identity_service.auth.models import PasswordResetToken

        notifier.fail = True

        response = auth_engine.request_password_reset("a@x.com")

        assert response.message == RESET_REQUESTED_MESSAGE
        # The token was still created and stays usable
        assert db.query(PasswordResetToken).count() == 1

    def test_unexpected_sender_error_is_not_observable(self, auth_engine, registered, notifier, monkeypatch):
        def broken_send(notification):
            raise RuntimeError("sender bug")

        monkeypatch.setattr(notifier, "send", broken_send)

        known = auth_engine.request_password_reset("a@x.com")
        unknown = auth_engine.request_password_reset("nobody@x.com")

        assert known == unknown
        assert known.message == RESET_REQUESTED_MESSAGE

    def test_unknown_email_creates_no_token(self, auth_engine, db):
        from identity_service.auth.models import PasswordResetToken

        auth_engine.request_password_reset("nobody@x.com")

        assert db.query(PasswordResetToken).count() == 0


class TestConfirmPasswordReset:
    def test_reset_replaces_password(self, auth_engine, registered, notifier):
        auth_engine.request_password_reset("a@x.com")

        response = auth_engine.confirm_password_reset(notifier.last_token(), "secret2")

        assert response.message == "Password has been reset successfully"
        with pytest.raises(UnauthorizedError):
            login(auth_engine, "secret1")
        assert login(auth_engine, "secret2").user.id == registered.user.id

    def test_token_is_single_use(self, auth_engine, registered, notifier):
        auth_engine.request_password_reset("a@x.com")
        token = notifier.last_token()

        auth_engine.confirm_password_reset(token, "secret2")
        with pytest.raises(BadRequestError):
            auth_engine.confirm_password_reset(token, "secret3")

        assert login(auth_engine, "secret2").user.id == registered.user.id

    def test_expired_token_rejected_even_if_unused(self, auth_engine, registered, notifier, clock):
        auth_engine.request_password_reset("a@x.com")
        clock.advance(hours=1, seconds=1)

        with pytest.raises(BadRequestError):
            auth_engine.confirm_password_reset(notifier.last_token(), "secret2")

        assert login(auth_engine, "secret1").user.id == registered.user.id

    def test_token_valid_right_at_expiry(self, auth_engine, registered, notifier, clock):
        auth_engine.request_password_reset("a@x.com")
        clock.advance(hours=1)

        auth_engine.confirm_password_reset(notifier.last_token(), "secret2")

        assert login(auth_engine, "secret2").user.id == registered.user.id

    def test_unknown_token_rejected(self, auth_engine):
        with pytest.raises(BadRequestError) as exc:
            auth_engine.confirm_password_reset("made-up-token", "secret2")

        assert exc.value.detail == "Invalid or expired reset token"

    def test_lost_race_fails_after_credential_write(self, auth_engine, registered, notifier, reset_token_store):
        """
        Another confirmation consumes the token between lookup and
        consumption: the loser is told the token is invalid.
        """
        auth_engine.request_password_reset("a@x.com")
        token = notifier.last_token()
        original_mark_used = reset_token_store.mark_used

        def consume_first(raw):
            original_mark_used(raw)
            return original_mark_used(raw)

        reset_token_store.mark_used = consume_first

        with pytest.raises(BadRequestError):
            auth_engine.confirm_password_reset(token, "secret2")

    def test_earlier_tokens_stay_usable(self, auth_engine, registered, notifier):
        """Requesting a second reset does not revoke the first token."""
        auth_engine.request_password_reset("a@x.com")
        first = notifier.last_token()
        auth_engine.request_password_reset("a@x.com")

        auth_engine.confirm_password_reset(first, "secret2")

        assert login(auth_engine, "secret2").user.id == registered.user.id
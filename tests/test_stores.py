"""Tests for the SQLAlchemy credential and reset token stores."""

from datetime import timedelta

import pytest

from identity_service.auth.records import ContactEntry, ContactType
from identity_service.core.exceptions import ConflictError


def _contact(kind, value, primary=False):
    return ContactEntry(type=kind, value=value, is_primary=primary)


class TestCredentialStore:
    def test_create_returns_persisted_record(self, credential_store):
        user = credential_store.create(email="a@x.com", password_hash="hash", is_active=True)

        assert user.id
        assert user.email == "a@x.com"
        assert user.created_at is not None
        assert user.created_at.tzinfo is not None
        assert credential_store.find_by_id(user.id) == user

    def test_lookups_return_none_when_missing(self, credential_store):
        assert credential_store.find_by_email("nobody@x.com") is None
        assert credential_store.find_by_phone("+100") is None
        assert credential_store.find_by_contact("other", "handle") is None
        assert credential_store.find_by_id("missing") is None

    def test_duplicate_email_is_a_conflict(self, credential_store):
        credential_store.create(email="a@x.com")

        with pytest.raises(ConflictError):
            credential_store.create(email="a@x.com")

    def test_contacts_keep_submission_order(self, credential_store):
        contacts = [
            _contact(ContactType.PHONE, "+100"),
            _contact(ContactType.EMAIL, "a@x.com", primary=True),
            _contact(ContactType.OTHER, "telegram:alice"),
        ]
        user = credential_store.create(email="a@x.com", contacts=contacts)

        assert list(user.contacts) == contacts

    def test_find_by_contact_matches_type_and_value(self, credential_store):
        user = credential_store.create(contacts=[_contact(ContactType.OTHER, "telegram:alice")])

        assert credential_store.find_by_contact("other", "telegram:alice").id == user.id
        assert credential_store.find_by_contact("email", "telegram:alice") is None

    def test_email_and_phone_lookups_search_the_contact_list(self, credential_store):
        user = credential_store.create(
            phone="+100",
            contacts=[
                _contact(ContactType.PHONE, "+100", primary=True),
                _contact(ContactType.EMAIL, "b@x.com"),
                _contact(ContactType.PHONE, "+200"),
            ],
        )

        assert credential_store.find_by_email("b@x.com").id == user.id
        assert credential_store.find_by_phone("+200").id == user.id
        assert credential_store.find_by_phone("+100").id == user.id
        # Type still has to match
        assert credential_store.find_by_email("+200") is None

    def test_legacy_column_match_wins_over_contact_entry(self, credential_store):
        older = credential_store.create(contacts=[_contact(ContactType.EMAIL, "a@x.com")])
        owner = credential_store.create(email="a@x.com")

        assert credential_store.find_by_email("a@x.com").id == owner.id
        assert older.id != owner.id

    def test_update_returns_new_record_and_leaves_old_untouched(self, credential_store):
        original = credential_store.create(email="a@x.com", name="Old")

        updated = credential_store.update(original.id, name="New")

        assert updated.name == "New"
        assert original.name == "Old"
        assert updated.updated_at >= original.updated_at

    def test_update_replaces_contact_list(self, credential_store):
        user = credential_store.create(contacts=[_contact(ContactType.PHONE, "+100")])
        contacts = list(user.contacts) + [_contact(ContactType.EMAIL, "a@x.com")]

        updated = credential_store.update(user.id, contacts=contacts)

        assert [c.value for c in updated.contacts] == ["+100", "a@x.com"]

    def test_update_missing_user_returns_none(self, credential_store):
        assert credential_store.update("missing", name="x") is None

    def test_unknown_field_rejected(self, credential_store):
        with pytest.raises(TypeError):
            credential_store.create(email="a@x.com", role="admin")

    def test_records_are_immutable(self, credential_store):
        user = credential_store.create(email="a@x.com")

        with pytest.raises(Exception):
            user.email = "b@x.com"


class TestResetTokenStore:
    def test_find_unused_by_token(self, credential_store, reset_token_store, clock):
        user = credential_store.create(email="a@x.com")
        reset_token_store.create(user.id, "raw-token", clock() + timedelta(hours=1))

        found = reset_token_store.find_unused_by_token("raw-token")

        assert found.user_id == user.id
        assert found.token == "raw-token"
        assert found.used is False
        assert found.expires_at == clock() + timedelta(hours=1)
        assert reset_token_store.find_unused_by_token("other-token") is None

    def test_token_not_stored_in_clear(self, db, credential_store, reset_token_store, clock):
        from identity_service.auth.models import PasswordResetToken

        user = credential_store.create(email="a@x.com")
        reset_token_store.create(user.id, "raw-token", clock() + timedelta(hours=1))

        row = db.query(PasswordResetToken).one()
        assert row.token_hash != "raw-token"
        assert len(row.token_hash) == 64

    def test_mark_used_succeeds_only_once(self, credential_store, reset_token_store, clock):
        user = credential_store.create(email="a@x.com")
        reset_token_store.create(user.id, "raw-token", clock() + timedelta(hours=1))

        assert reset_token_store.mark_used("raw-token") is True
        assert reset_token_store.mark_used("raw-token") is False
        assert reset_token_store.find_unused_by_token("raw-token") is None

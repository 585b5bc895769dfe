"""Tests for services.credential_manager."""

from unittest.mock import patch

from keyring.errors import KeyringError, PasswordDeleteError

from services.credential_manager import (
    CREDENTIAL_KEYS,
    SERVICE_NAME,
    delete_credential,
    get_credential,
    set_credential,
)


def test_credential_keys_cover_plaid_secrets():
    assert CREDENTIAL_KEYS == {"PLAID_CLIENT_ID", "PLAID_SECRET"}


# ---------------------------------------------------------------------------
# get_credential
# ---------------------------------------------------------------------------


class TestGetCredential:
    def test_returns_value(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = "secret123"
            result = get_credential("PLAID_SECRET")
        assert result == "secret123"
        mock_keyring.get_password.assert_called_once_with(SERVICE_NAME, "PLAID_SECRET")

    def test_returns_none_when_not_found(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = None
            assert get_credential("PLAID_SECRET") is None

    def test_returns_none_on_keyring_error(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            mock_keyring.get_password.side_effect = KeyringError("no backend")
            assert get_credential("PLAID_SECRET") is None


# ---------------------------------------------------------------------------
# set_credential
# ---------------------------------------------------------------------------


class TestSetCredential:
    def test_stores_value(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            assert set_credential("PLAID_CLIENT_ID", "client123") is True
        mock_keyring.set_password.assert_called_once_with(
            SERVICE_NAME, "PLAID_CLIENT_ID", "client123"
        )

    def test_rejects_non_credential_key(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            assert set_credential("DATABASE_URL", "sqlite://") is False
        mock_keyring.set_password.assert_not_called()

    def test_rejects_empty_value(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            assert set_credential("PLAID_SECRET", "") is False
            assert set_credential("PLAID_SECRET", "   ") is False
        mock_keyring.set_password.assert_not_called()

    def test_returns_false_on_keyring_error(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            mock_keyring.set_password.side_effect = KeyringError("locked")
            assert set_credential("PLAID_SECRET", "secret") is False


# ---------------------------------------------------------------------------
# delete_credential
# ---------------------------------------------------------------------------


class TestDeleteCredential:
    def test_deletes_value(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            assert delete_credential("PLAID_SECRET") is True
        mock_keyring.delete_password.assert_called_once_with(SERVICE_NAME, "PLAID_SECRET")

    def test_missing_entry_returns_false(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            mock_keyring.delete_password.side_effect = PasswordDeleteError("not found")
            assert delete_credential("PLAID_SECRET") is False

    def test_rejects_non_credential_key(self):
        with patch("services.credential_manager.keyring") as mock_keyring:
            assert delete_credential("LOG_LEVEL") is False
        mock_keyring.delete_password.assert_not_called()

"""Tests for the keyring package backend."""

import pytest
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from core.secrets import keyring_backend
from core.secrets.keyring_backend import KeyringSecretBackend


@pytest.fixture
def fake_keyring(monkeypatch):
    """Replace keyring's module-level API with a dict."""
    entries = {}

    def set_password(service, username, password):
        entries[(service, username)] = password

    def get_password(service, username):
        return entries.get((service, username))

    def delete_password(service, username):
        if (service, username) not in entries:
            raise PasswordDeleteError("not found")
        del entries[(service, username)]

    monkeypatch.setattr(keyring_backend.keyring, "set_password", set_password)
    monkeypatch.setattr(keyring_backend.keyring, "get_password", get_password)
    monkeypatch.setattr(keyring_backend.keyring, "delete_password", delete_password)
    return entries


class TestKeyringSecretBackend:
    """Tests for KeyringSecretBackend."""

    def test_store_then_lookup(self, fake_keyring):
        """Should keep the blob under (service, identifier)."""
        # Arrange
        backend = KeyringSecretBackend()

        # Act
        stored = backend.store("demo", "Secrets for demo", "A=1\nB=2")

        # Assert
        assert stored is True
        assert fake_keyring[("vaultsh", "demo")] == "A=1\nB=2"
        assert backend.lookup("demo") == "A=1\nB=2"

    def test_lookup_missing(self, fake_keyring):
        """Should return None for unknown identifiers."""
        assert KeyringSecretBackend().lookup("nope") is None

    def test_custom_service(self, fake_keyring):
        """Should store under the configured service."""
        # Arrange
        backend = KeyringSecretBackend(service="work")

        # Act
        backend.store("demo", "Secrets for demo", "A=1")

        # Assert
        assert ("work", "demo") in fake_keyring

    def test_lookup_error_is_absent(self, monkeypatch):
        """A keyring error during lookup counts as no entry."""
        # Arrange
        def broken(service, username):
            raise KeyringError("locked")

        monkeypatch.setattr(keyring_backend.keyring, "get_password", broken)

        # Act & Assert
        assert KeyringSecretBackend().lookup("demo") is None

    def test_store_error_returns_false(self, monkeypatch):
        """A keyring error during store is a failed store."""
        # Arrange
        def broken(service, username, password):
            raise KeyringError("locked")

        monkeypatch.setattr(keyring_backend.keyring, "set_password", broken)

        # Act & Assert
        assert KeyringSecretBackend().store("demo", "Secrets for demo", "A=1") is False

    def test_delete(self, fake_keyring):
        """Should delete existing entries and report missing ones."""
        # Arrange
        backend = KeyringSecretBackend()
        backend.store("demo", "Secrets for demo", "A=1")

        # Act & Assert
        assert backend.delete("demo") is True
        assert backend.delete("demo") is False

    def test_health_check_fail_backend(self, monkeypatch):
        """The fail backend means no usable keyring."""
        # Arrange
        monkeypatch.setattr(keyring_backend.keyring, "get_keyring", lambda: fail.Keyring())

        # Act & Assert
        assert KeyringSecretBackend().health_check() is False

    def test_health_check_real_backend(self, monkeypatch):
        """Any other backend counts as available."""
        # Arrange
        monkeypatch.setattr(keyring_backend.keyring, "get_keyring", lambda: object())

        # Act & Assert
        assert KeyringSecretBackend().health_check() is True

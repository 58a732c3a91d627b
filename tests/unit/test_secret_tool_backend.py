"""Tests for the secret-tool backend."""

import subprocess
from unittest.mock import patch

import pytest

from core.secrets.exceptions import SecretStoreUnavailableError
from core.secrets.registry import get_backend
from core.secrets.secret_tool_backend import SecretToolBackend


def completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


class TestSecretToolBackend:
    """Tests for SecretToolBackend."""

    def test_registered_as_default_name(self):
        """Should be reachable through the registry."""
        assert get_backend("secret-tool") is SecretToolBackend

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_lookup_success(self, mock_run):
        """Should return stdout of secret-tool lookup."""
        # Arrange
        mock_run.return_value = completed(stdout=b"A=1\nB=2")
        backend = SecretToolBackend()

        # Act
        result = backend.lookup("demo")

        # Assert
        assert result == "A=1\nB=2"
        assert mock_run.call_args.args[0] == ["secret-tool", "lookup", "app", "demo"]

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_lookup_missing_entry(self, mock_run):
        """A non-zero exit means no entry."""
        # Arrange
        mock_run.return_value = completed(returncode=1)
        backend = SecretToolBackend()

        # Act & Assert
        assert backend.lookup("demo") is None

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_lookup_keeps_undecodable_bytes(self, mock_run):
        """Invalid UTF-8 should survive a decode/encode cycle."""
        # Arrange
        raw = b"KEY=\xff\xfe\n"
        mock_run.return_value = completed(stdout=raw)
        backend = SecretToolBackend()

        # Act
        result = backend.lookup("demo")

        # Assert
        assert result.encode("utf-8", "surrogateescape") == raw

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_store_passes_label_and_stdin(self, mock_run):
        """Should pipe the blob on stdin, never on the command line."""
        # Arrange
        mock_run.return_value = completed()
        backend = SecretToolBackend()

        # Act
        result = backend.store("demo", "Secrets for demo", "A=1\nB=2")

        # Assert
        assert result is True
        args, kwargs = mock_run.call_args
        assert args[0] == [
            "secret-tool", "store", "--label", "Secrets for demo", "app", "demo"
        ]
        assert kwargs["input"] == b"A=1\nB=2"
        assert "A=1" not in " ".join(args[0])

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_store_failure(self, mock_run):
        """Should report failure instead of raising."""
        # Arrange
        mock_run.return_value = completed(returncode=1, stderr=b"no collection")
        backend = SecretToolBackend()

        # Act & Assert
        assert backend.store("demo", "Secrets for demo", "A=1") is False

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_delete_uses_clear(self, mock_run):
        """Should call secret-tool clear."""
        # Arrange
        mock_run.return_value = completed()
        backend = SecretToolBackend()

        # Act
        result = backend.delete("demo")

        # Assert
        assert result is True
        assert mock_run.call_args.args[0] == ["secret-tool", "clear", "app", "demo"]

    @patch("core.secrets.secret_tool_backend.subprocess.run")
    def test_custom_attribute_and_executable(self, mock_run):
        """Should honour backend options from config."""
        # Arrange
        mock_run.return_value = completed(stdout=b"A=1")
        backend = SecretToolBackend(executable="/opt/bin/secret-tool", attribute="project")

        # Act
        backend.lookup("demo")

        # Assert
        assert mock_run.call_args.args[0] == [
            "/opt/bin/secret-tool", "lookup", "project", "demo"
        ]

    @patch("core.secrets.secret_tool_backend.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary_raises(self, mock_run):
        """Should name the missing dependency."""
        # Arrange
        backend = SecretToolBackend()

        # Act & Assert
        with pytest.raises(SecretStoreUnavailableError) as exc_info:
            backend.lookup("demo")

        assert "libsecret-tools" in str(exc_info.value)

    @patch("core.secrets.secret_tool_backend.shutil.which")
    def test_health_check(self, mock_which):
        """Health check should look for the binary on PATH."""
        # Arrange
        backend = SecretToolBackend()

        # Act & Assert
        mock_which.return_value = "/usr/bin/secret-tool"
        assert backend.health_check() is True
        mock_which.return_value = None
        assert backend.health_check() is False

    @patch("core.secrets.secret_tool_backend.shutil.which", return_value=None)
    def test_require_available(self, mock_which):
        """Should raise with install hints when the binary is missing."""
        # Arrange
        backend = SecretToolBackend()

        # Act & Assert
        with pytest.raises(SecretStoreUnavailableError) as exc_info:
            backend.require_available()

        assert "sudo apt install libsecret-tools" in str(exc_info.value)

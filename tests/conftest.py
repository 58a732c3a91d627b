"""Shared fixtures: an in-memory secret store registered as 'memory'."""

import sys

import pytest

from core.secrets.base import SecretBackend
from core.secrets.registry import register_backend


@register_backend("memory")
class MemorySecretBackend(SecretBackend):
    """
    Test double for the platform keyring.

    State lives on the class so backends built deep inside the CLI see
    what a test seeded. Every call is appended to ``calls``.
    """

    shared: dict = {}
    calls: list = []
    available = True
    store_succeeds = True
    persist_on_store = True

    def __init__(self, entries=None):
        self.entries = entries if entries is not None else MemorySecretBackend.shared

    def lookup(self, identifier):
        self.calls.append(("lookup", identifier))
        return self.entries.get(identifier)

    def store(self, identifier, label, content):
        self.calls.append(("store", identifier, label))
        if not self.store_succeeds:
            return False
        if self.persist_on_store:
            self.entries[identifier] = content
        return True

    def delete(self, identifier):
        self.calls.append(("delete", identifier))
        return self.entries.pop(identifier, None) is not None

    def health_check(self):
        return self.available

    def unavailable_message(self):
        return "memory store switched off"


@pytest.fixture(autouse=True)
def memory_backend():
    """Fresh shared state for every test."""
    MemorySecretBackend.shared = {}
    MemorySecretBackend.calls = []
    MemorySecretBackend.available = True
    MemorySecretBackend.store_succeeds = True
    MemorySecretBackend.persist_on_store = True
    yield MemorySecretBackend


@pytest.fixture
def python_child(tmp_path):
    """
    Build a child argv running a Python snippet.

    The snippet gets ``out`` (a path it may write to) as sys.argv[1].
    """
    out = tmp_path / "child_out.txt"

    def build(code: str):
        return [sys.executable, "-c", code, str(out)], out

    return build

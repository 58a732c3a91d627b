"""Child process launch and signal scoping."""

from core.process.launcher import DEFAULT_ENV_VAR, child_environment, run
from core.process.signals import (
    SignalInterrupt,
    deferred_signals,
    raise_on_signals,
    signal_exit_code,
)

__all__ = [
    "run",
    "child_environment",
    "DEFAULT_ENV_VAR",
    "SignalInterrupt",
    "raise_on_signals",
    "deferred_signals",
    "signal_exit_code",
]

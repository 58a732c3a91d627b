"""Child process launch with exit-code propagation."""

import logging
import os
import signal
import subprocess
from typing import Mapping, Optional, Sequence

from core.process.signals import SignalInterrupt, signal_exit_code
from core.secrets.exceptions import CommandLaunchError

logger = logging.getLogger(__name__)

DEFAULT_ENV_VAR = "SECRETS_FILE"
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
# Seconds a child gets to exit after a forwarded signal before it is killed.
SHUTDOWN_GRACE = 10.0


def child_environment(
    artifact_path: str,
    env_var: str = DEFAULT_ENV_VAR,
    base: Optional[Mapping[str, str]] = None,
) -> dict:
    """Copy of base (default: os.environ) with env_var pointing at the artifact."""
    env = dict(os.environ if base is None else base)
    env[env_var] = artifact_path
    return env


def _stop(proc: subprocess.Popen, signum: Optional[int]) -> None:
    """Forward signum (if any) and wait for the child to go away."""
    if proc.poll() is not None:
        return
    if signum is not None:
        logger.info(f"Forwarding {signal.Signals(signum).name} to pid {proc.pid}")
        proc.send_signal(signum)
    try:
        proc.wait(timeout=SHUTDOWN_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning(f"pid {proc.pid} ignored shutdown, killing it")
        proc.kill()
        proc.wait()


def run(
    command: str,
    args: Sequence[str],
    artifact_path: str,
    env_var: str = DEFAULT_ENV_VAR,
    pass_fds: Sequence[int] = (),
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Run command with env_var set to artifact_path and return its exit code.

    Standard streams are inherited. A child killed by signal N yields
    128 + N. If this process is interrupted the child is stopped first and
    the interruption re-raised.

    Args:
        command: Executable to run (looked up on PATH)
        args: Arguments for command
        artifact_path: Value of env_var in the child
        env_var: Name of the variable carrying the path
        pass_fds: Descriptors the child inherits (handle mode)
        env: Base environment (defaults to os.environ)

    Raises:
        CommandLaunchError: command missing or not executable
    """
    argv = [command, *args]
    try:
        proc = subprocess.Popen(
            argv,
            env=child_environment(artifact_path, env_var, env),
            pass_fds=tuple(pass_fds),
        )
    except FileNotFoundError as e:
        raise CommandLaunchError(f"{command}: command not found", EXIT_NOT_FOUND) from e
    except PermissionError as e:
        raise CommandLaunchError(
            f"{command}: permission denied", EXIT_NOT_EXECUTABLE
        ) from e

    logger.debug(f"Started pid {proc.pid}: {argv}")
    try:
        returncode = proc.wait()
    except KeyboardInterrupt:
        # The terminal already delivered SIGINT to the whole foreground group
        _stop(proc, None)
        raise
    except SignalInterrupt as e:
        _stop(proc, e.signum)
        raise

    exit_code = signal_exit_code(returncode)
    logger.debug(f"pid {proc.pid} exited with {exit_code}")
    return exit_code

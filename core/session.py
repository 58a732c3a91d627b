"""The secrets pipeline: resolve, expose, run, clean up."""

import logging
from contextlib import ExitStack
from typing import Callable, Optional, Sequence, TextIO

from core.config.settings import VaultConfig
from core.exposure.materializer import ExposureMaterializer
from core.process.launcher import run
from core.process.signals import deferred_signals, raise_on_signals
from core.secrets.exceptions import NoCommandProvidedError
from core.secrets.resolver import SOURCE_KEYRING, Loaded, SecretResolver, label_for

logger = logging.getLogger(__name__)


def _silent(message: str) -> None:
    pass


def run_with_secrets(
    config: VaultConfig,
    command: Sequence[str],
    reporter: Optional[Callable[[str], None]] = None,
    input_stream: Optional[TextIO] = None,
) -> int:
    """
    Run command with its secrets exposed through config.env_var.

    The artifact is registered for cleanup as soon as it exists, so it is
    released on normal exit, child failure, errors, Ctrl-C and
    SIGTERM/SIGHUP alike.

    Args:
        config: Invocation configuration
        command: Child argv; must not be empty
        reporter: Receives human-readable status lines
        input_stream: Source for interactive capture (defaults to stdin)

    Returns:
        The child's exit code

    Raises:
        NoCommandProvidedError: command is empty (checked before anything else)
        VaultError: any resolution or exposure failure, before the child starts
        SignalInterrupt / KeyboardInterrupt: after cleanup has run
    """
    if not command:
        raise NoCommandProvidedError(
            "No command provided. Use --help for usage information."
        )

    report = reporter or _silent

    with raise_on_signals(), ExitStack() as stack:
        resolver = SecretResolver(
            config.backend,
            reporter=report,
            input_stream=input_stream,
            **config.backend_options,
        )
        if not config.secrets_file.is_file():
            if config.use_handle:
                report(f"Loading secrets for app='{config.app_name}' (FD mode - no disk I/O)...")
            else:
                report(
                    f"Loading secrets for app='{config.app_name}' → "
                    f"{config.secrets_file.name}..."
                )

        resolved = resolver.resolve(config.secrets_file, config.app_name)

        materializer = ExposureMaterializer(
            config.secrets_file, config.keep_suffix, report
        )
        with deferred_signals():
            artifact = stack.enter_context(materializer.expose(resolved, config.mode))

        if isinstance(resolved, Loaded):
            if resolved.source == SOURCE_KEYRING:
                report(f"✓ Loaded from keyring ({resolved.line_count} lines)")
            else:
                report(
                    f"✓ Stored in keyring as '{label_for(config.app_name)}' "
                    f"({resolved.line_count} lines)"
                )
        else:
            report(f"ℹ Using existing local file: {config.secrets_file.name}")

        report(f"→ Running: {' '.join(command)}")
        exit_code = run(
            command[0],
            command[1:],
            artifact.path,
            env_var=config.env_var,
            pass_fds=artifact.pass_fds,
        )
        logger.info(f"{command[0]} exited with {exit_code}")
        return exit_code

"""CLI for vaultsh."""

import click

from core.config.loader import ConfigLoader
from core.exposure.materializer import MODE_FILE, MODE_HANDLE, MODES, handle_mode_supported
from core.process.signals import SIGNAL_EXIT_BASE, SignalInterrupt
from core.secrets.exceptions import EXIT_FAILURE, SecretStoreUnavailableError, VaultError
from core.secrets.keys import key_names
from core.secrets.registry import available_backends
from core.secrets.resolver import SecretResolver, label_for
from core.session import run_with_secrets
from core.utils.logging import get_logger, resolve_level, setup_logging

logger = get_logger(__name__)

VERSION = "0.1.0"
SIGINT_EXIT = SIGNAL_EXIT_BASE + 2


def make_reporter(quiet: bool):
    """Status lines in cyan on stdout; colour is dropped when not a TTY."""

    def report(message: str) -> None:
        if not quiet:
            click.secho(message, fg="cyan")

    return report


def fail(error: VaultError):
    logger.debug(f"Aborting on {type(error).__name__}")
    click.echo(f"Error: {error}", err=True)
    raise SystemExit(error.exit_code)


def store_options(func):
    """--app and --backend, shared by every command that talks to the keyring."""
    func = click.option(
        "--backend", "-b", default=None, help="Secret-store backend (secret-tool, keyring)"
    )(func)
    return click.option(
        "--app", "-a", default=None, help="Keyring app identifier (default: current folder name)"
    )(func)


def _resolver(ctx, app, backend):
    """Config and resolver for the keyring-only commands."""
    config = ConfigLoader().load({"app": app, "backend": backend})
    resolver = SecretResolver(
        config.backend, reporter=ctx.obj["report"], **config.backend_options
    )
    resolver.backend.require_available()
    return config, resolver


@click.group()
@click.version_option(version=VERSION, prog_name="vaultsh")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for diagnostics on stderr",
)
@click.option(
    "--log-format",
    default="standard",
    type=click.Choice(["standard", "json"]),
    help="Log line format",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Also write logs to this file",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option("--quiet", "-q", is_flag=True, help="No status output")
@click.pass_context
def cli(ctx, log_level: str, log_format: str, log_file: str, verbose: bool, quiet: bool):
    """vaultsh - run commands with secrets from your keyring, not from .env files."""
    setup_logging(
        level=resolve_level(log_level, verbose, quiet),
        format_style=log_format,
        log_file=log_file,
    )
    ctx.ensure_object(dict)
    ctx.obj["report"] = make_reporter(quiet)


@cli.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option(
    "--file", "-f", "secrets_file", default=None, help="Secrets file path (default: .env)"
)
@store_options
@click.option(
    "--use-fd",
    is_flag=True,
    help="Pass secrets through a file descriptor (/dev/fd/N) instead of a file",
)
@click.option(
    "--mode",
    default=None,
    type=click.Choice(MODES),
    help="Materialization mode (default: file)",
)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, secrets_file, app, backend, use_fd, mode, command):
    """Run COMMAND with SECRETS_FILE pointing at its secrets.

    \b
    1. If the secrets file exists locally it is used directly.
    2. Otherwise secrets are loaded from the keyring (prompting and
       storing them on first use) and written to the secrets file,
       or fed through a file descriptor with --use-fd.
    3. COMMAND runs with SECRETS_FILE set; its exit code is returned.
    4. A secrets file written by this run is deleted afterwards,
       unless <secrets-file>.keep exists.

    \b
    Examples:
      vaultsh run uv run pywrangler dev
      vaultsh run --file .secrets act --secret-file .secrets
      vaultsh run --app myproject-prod npm start
      vaultsh run --use-fd docker run --env-file "$SECRETS_FILE" myimage
    """
    if use_fd and mode == MODE_FILE:
        raise click.UsageError("--use-fd conflicts with --mode file")

    try:
        config = ConfigLoader().load(
            {
                "file": secrets_file,
                "app": app,
                "backend": backend,
                "mode": MODE_HANDLE if use_fd else mode,
            }
        )
        exit_code = run_with_secrets(config, list(command), ctx.obj["report"])
    except VaultError as e:
        fail(e)
    except SignalInterrupt as e:
        click.echo(f"\nInterrupted by {e}", err=True)
        raise SystemExit(e.exit_code)
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        raise SystemExit(SIGINT_EXIT)

    raise SystemExit(exit_code)


@cli.command()
@store_options
@click.pass_context
def keys(ctx, app, backend):
    """List the variable names stored for an app (never the values)."""
    try:
        config, resolver = _resolver(ctx, app, backend)
        blob = resolver.fetch(config.app_name)
    except VaultError as e:
        fail(e)

    if blob is None:
        click.echo(f"Error: No secrets stored for app='{config.app_name}'", err=True)
        raise SystemExit(EXIT_FAILURE)

    for name in key_names(blob):
        click.echo(name)


@cli.command()
@store_options
@click.pass_context
def store(ctx, app, backend):
    """Read secrets from stdin and store them in the keyring."""
    try:
        config, resolver = _resolver(ctx, app, backend)
        loaded = resolver.capture_and_store(config.app_name)
    except VaultError as e:
        fail(e)

    ctx.obj["report"](
        f"✓ Stored in keyring as '{label_for(config.app_name)}' ({loaded.line_count} lines)"
    )


@cli.command()
@store_options
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def forget(ctx, app, backend, yes):
    """Delete the keyring entry of an app."""
    try:
        config, resolver = _resolver(ctx, app, backend)
    except VaultError as e:
        fail(e)

    if not yes:
        click.confirm(
            f"Delete secrets for app='{config.app_name}' from keyring?", abort=True
        )

    if not resolver.backend.delete(config.app_name):
        click.echo(
            f"Error: Could not delete secrets for app='{config.app_name}'", err=True
        )
        raise SystemExit(EXIT_FAILURE)

    ctx.obj["report"](f"✓ Deleted secrets for app='{config.app_name}'")


@cli.command()
@click.option("--backend", "-b", default=None, help="Secret-store backend to check")
def doctor(backend):
    """Check the secret store and file-descriptor support."""
    try:
        config = ConfigLoader().load({"backend": backend})
        resolver = SecretResolver(config.backend, **config.backend_options)
    except VaultError as e:
        fail(e)

    click.echo(f"\n{'='*60}")
    click.echo("vaultsh doctor")
    click.echo(f"{'='*60}\n")

    healthy = resolver.health_check()
    if healthy:
        click.echo(f"✓ Secret store '{config.backend}' available")
    else:
        click.echo(f"✗ {resolver.backend.unavailable_message()}")

    if handle_mode_supported():
        click.echo("✓ --use-fd supported (/dev/fd present)")
    else:
        click.echo("✗ --use-fd unsupported (/dev/fd missing)")

    click.echo(f"\nBackends: {', '.join(available_backends())}")
    click.echo(f"App: {config.app_name}")
    click.echo(f"Secrets file: {config.secrets_file}")
    marker_state = "present" if config.keep_marker.exists() else "absent"
    click.echo(f"Keep marker: {config.keep_marker} ({marker_state})")
    click.echo(f"Mode: {config.mode}\n")

    if not healthy:
        raise SystemExit(SecretStoreUnavailableError.exit_code)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()

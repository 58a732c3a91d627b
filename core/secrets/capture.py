"""Interactive capture of a secrets blob from the terminal."""

import sys
from typing import Callable, Optional, TextIO

PROMPT_LINES = (
    "Paste your secrets content (KEY=VALUE format), then press Ctrl-D to finish:",
    "(Press Ctrl-C to cancel)",
)


def capture_secrets(
    stream: Optional[TextIO] = None,
    reporter: Optional[Callable[[str], None]] = None,
) -> str:
    """
    Prompt for secrets and read until end of input.

    Args:
        stream: Where to read from (defaults to stdin)
        reporter: Receives the prompt lines

    Returns:
        Everything read, unmodified. May be empty.
    """
    if reporter is not None:
        for line in PROMPT_LINES:
            reporter(line)
    stream = stream if stream is not None else sys.stdin
    return stream.read()

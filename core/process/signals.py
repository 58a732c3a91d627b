"""Turn termination signals into exceptions so cleanup handlers run."""

import logging
import signal
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

SIGNAL_EXIT_BASE = 128
TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


class SignalInterrupt(BaseException):
    """
    Raised in the main thread when a termination signal arrives.

    Derives from BaseException like KeyboardInterrupt, so only code that
    means to handle interruption catches it.
    """

    def __init__(self, signum: int):
        super().__init__(signal.Signals(signum).name)
        self.signum = signum

    @property
    def exit_code(self) -> int:
        return SIGNAL_EXIT_BASE + self.signum


def signal_exit_code(returncode: int) -> int:
    """
    Map a subprocess return code to a shell-style exit status.

    Popen reports death by signal N as -N; shells report 128 + N.
    """
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


@contextmanager
def raise_on_signals(signums=TERMINATION_SIGNALS):
    """
    Raise SignalInterrupt for signums while the block runs.

    Previous handlers are restored on exit. Outside the main thread no
    handler can be installed and the block runs unchanged.

    Usage:
        with raise_on_signals():
            with artifact:
                run(...)
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}")
        raise SignalInterrupt(signum)

    previous = {}
    for signum in signums:
        previous[signum] = signal.signal(signum, _handler)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


@contextmanager
def deferred_signals(signums=TERMINATION_SIGNALS + (signal.SIGINT,)):
    """
    Hold back signums until the block ends.

    Signals arriving inside the block stay pending and are delivered when
    it exits, so their handlers run only after the block has finished its
    bookkeeping. Without pthread_sigmask the block runs unchanged.

    Usage:
        with deferred_signals():
            artifact = stack.enter_context(materializer.expose(...))
    """
    if not hasattr(signal, "pthread_sigmask"):
        yield
        return

    previous = signal.pthread_sigmask(signal.SIG_BLOCK, signums)
    try:
        yield
    finally:
        # Pending handlers run, and may raise, as the mask is restored
        signal.pthread_sigmask(signal.SIG_SETMASK, previous)

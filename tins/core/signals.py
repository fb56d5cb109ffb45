"""Signal handling for cancelling long waits."""

from __future__ import annotations

import logging
import signal
import threading
import types
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def cancel_on_signals(cancel_event: threading.Event) -> Iterator[threading.Event]:
    """Set ``cancel_event`` when SIGINT or SIGTERM arrives inside the block.

    The previous handlers are restored on exit. Outside the main thread,
    where handlers cannot be installed, the block runs without them and the
    event can still be set by the caller.

    Parameters
    ----------
    cancel_event : threading.Event
        Event waited on by the interruptible operation

    Yields
    ------
    threading.Event
        The same event, for use in ``with`` statements
    """
    if threading.current_thread() is not threading.main_thread():
        yield cancel_event
        return

    def handler(signum: int, frame: types.FrameType | None) -> None:
        """Record the cancellation request."""
        logger.debug("Received signal %s, cancelling wait", signum)
        cancel_event.set()

    previous = {signum: signal.getsignal(signum) for signum in CANCEL_SIGNALS}
    for signum in CANCEL_SIGNALS:
        signal.signal(signum, handler)

    try:
        yield cancel_event
    finally:
        for signum, previous_handler in previous.items():
            signal.signal(signum, previous_handler)

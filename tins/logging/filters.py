"""Logging filters routing records to stdout or stderr."""

import logging


class StreamRoutingFilter(logging.Filter):
    """Pass records destined for one output stream.

    Progress messages (below WARNING) go to stdout; warnings and errors go
    to stderr.

    Parameters
    ----------
    stream : str
        Either ``"stdout"`` or ``"stderr"``
    """

    def __init__(self, stream: str) -> None:
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"stream must be 'stdout' or 'stderr', got: {stream}")
        super().__init__()
        self.stream = stream

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record belongs on this filter's stream."""
        if self.stream == "stderr":
            return record.levelno >= logging.WARNING
        return record.levelno < logging.WARNING

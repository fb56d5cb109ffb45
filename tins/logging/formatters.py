"""Logging formatters for terminal output."""

import logging

LEVEL_PREFIXES = {
    logging.WARNING: "Warning: ",
    logging.ERROR: "Error: ",
    logging.CRITICAL: "Error: ",
}


class StreamFormatter(logging.Formatter):
    """Logging formatter that prefixes warnings and errors with their severity."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a severity prefix for WARNING and above.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message, prefixed with ``Warning:`` or ``Error:``
            where applicable
        """
        msg = super().format(record)
        prefix = LEVEL_PREFIXES.get(record.levelno, "")
        return f"{prefix}{msg}"

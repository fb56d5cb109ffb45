"""Logging configuration helpers for the tins CLI."""

from tins.logging.filters import StreamRoutingFilter
from tins.logging.formatters import StreamFormatter

__all__ = ["StreamFormatter", "StreamRoutingFilter"]

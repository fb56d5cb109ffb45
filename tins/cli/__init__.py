"""CLI argument parsing and handling."""

from __future__ import annotations

from tins.cli.parsing import normalize_identifier, split_passthrough_args

__all__ = [
    "normalize_identifier",
    "split_passthrough_args",
]

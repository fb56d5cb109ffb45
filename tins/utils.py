"""Utility functions for tins."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from tins.constants import (
    ADDRESS_TYPE_KEY,
    CREATED_TIME_FORMAT,
    PREFERRED_ADDRESS_TYPES,
    SSH_USERNAME,
)

SHORT_NAME_PATTERN = re.compile(r"[^\s/\\\x00-\x1f\x7f'\"`$]+")
RESERVED_SHORT_NAMES = frozenset({".", ".."})

STARTUP_SCRIPT_TEMPLATE = """#!/bin/bash
# Add public key to authorized_keys
mkdir -p /{home}/.ssh
echo "{public_key}" >> /{home}/.ssh/authorized_keys
chmod 600 /{home}/.ssh/authorized_keys
chmod 700 /{home}/.ssh
"""


def validate_short_name(name: str) -> str:
    """Validate a user-supplied instance name.

    Any printable name is accepted except ones that cannot name a key file
    or would break the quoting of the startup script: path separators,
    whitespace, control characters, quotes, ``$`` and backticks, and the
    names ``.`` and ``..``.

    Parameters
    ----------
    name : str
        Short name without the tins prefix

    Returns
    -------
    str
        The name unchanged

    Raises
    ------
    ValueError
        If the name is empty or contains a rejected character
    """
    if name in RESERVED_SHORT_NAMES or not SHORT_NAME_PATTERN.fullmatch(name):
        raise ValueError(
            f"Invalid instance name {name!r}: it must be non-empty and must not "
            "contain whitespace, slashes, quotes, '$' or backticks"
        )
    return name


def extract_ip_address(addresses: dict[str, list[dict[str, Any]]]) -> str | None:
    """Pick the address to reach an instance on.

    Records typed ``fixed`` or ``floating`` are preferred. Records without a
    type are accepted as a fallback; records of any other type are skipped.

    Parameters
    ----------
    addresses : dict[str, list[dict[str, Any]]]
        Network name to address records, as reported by the provider

    Returns
    -------
    str | None
        Selected address, or None if no usable record exists
    """
    fallback: str | None = None

    for records in addresses.values():
        for record in records:
            addr = record.get("addr")
            if not addr:
                continue

            address_type = record.get(ADDRESS_TYPE_KEY)
            if address_type in PREFERRED_ADDRESS_TYPES:
                return addr

            if address_type is None and fallback is None:
                fallback = addr

    return fallback


def build_startup_script(public_key: str) -> str:
    """Render the boot script installing a public key for the SSH user.

    Parameters
    ----------
    public_key : str
        OpenSSH public key line

    Returns
    -------
    str
        Shell script creating ``~/.ssh`` (0700) and appending the key to
        ``authorized_keys`` (0600)
    """
    return STARTUP_SCRIPT_TEMPLATE.format(
        home=SSH_USERNAME, public_key=public_key.strip()
    )


def format_created(created: datetime | None) -> str:
    """Format a creation timestamp for the list table.

    Parameters
    ----------
    created : datetime | None
        Timezone-aware creation time

    Returns
    -------
    str
        UTC time as ``YYYY-MM-DD HH:MM:SS``, or ``N/A`` when unknown
    """
    if created is None:
        return "N/A"

    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)

    return created.astimezone(timezone.utc).strftime(CREATED_TIME_FORMAT)

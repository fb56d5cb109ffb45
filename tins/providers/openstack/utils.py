"""OpenStack-specific utility functions for tins."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any

from tins.core.interfaces import Instance

logger = logging.getLogger(__name__)


def parse_created(value: str | None) -> datetime | None:
    """Parse an OpenStack ``created`` timestamp.

    Parameters
    ----------
    value : str | None
        ISO 8601 timestamp such as ``2024-05-01T10:20:30Z``

    Returns
    -------
    datetime | None
        Timezone-aware datetime (UTC when the string carries no offset), or
        None if the value is missing or unparsable
    """
    if not value:
        return None

    try:
        created = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        logger.debug("Unparsable created timestamp: %r", value)
        return None

    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)

    return created


def server_to_instance(server: Any) -> Instance:
    """Convert an SDK server resource into an Instance snapshot.

    Parameters
    ----------
    server : openstack.compute.v2.server.Server
        Server resource returned by the compute proxy

    Returns
    -------
    Instance
        Provider-agnostic snapshot of the server
    """
    return Instance(
        id=server.id,
        name=server.name or "",
        status=server.status or "UNKNOWN",
        metadata=dict(server.metadata or {}),
        addresses={
            network: list(records) for network, records in (server.addresses or {}).items()
        },
        created=parse_created(server.created_at),
    )


def encode_user_data(user_data: str) -> str:
    """Base64-encode user data as the compute API expects it.

    Parameters
    ----------
    user_data : str
        Plain-text startup script

    Returns
    -------
    str
        Base64 representation of the UTF-8 encoded script
    """
    return base64.b64encode(user_data.encode("utf-8")).decode("ascii")


def get_openstack_credentials_error_message() -> str:
    """Get standard OpenStack credentials error message.

    Returns
    -------
    str
        Formatted credentials help text
    """
    return (
        "OpenStack authentication failed\n\n"
        "Check your credentials:\n"
        "  export OS_AUTH_URL=https://keystone.example.com:5000/v3\n"
        "  export OS_USERNAME=...\n"
        "  export OS_PASSWORD=...\n"
        "  export OS_PROJECT_ID=...\n\n"
        "Or set auth_url, username and project_id in ~/.config/tint/tint.yaml"
    )

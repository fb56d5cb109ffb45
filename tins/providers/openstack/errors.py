"""Translation of OpenStack SDK errors into provider exceptions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from keystoneauth1 import exceptions as ksa_exceptions
from openstack import exceptions as os_exceptions

from tins.providers.exceptions import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS = 401


@contextmanager
def handle_openstack_errors(operation: str) -> Iterator[None]:
    """Translate SDK and keystoneauth exceptions raised inside the block.

    Parameters
    ----------
    operation : str
        Short description of the call, used as message prefix
        (e.g. "delete server")

    Yields
    ------
    None
        Control to the wrapped block

    Raises
    ------
    ProviderCredentialsError
        If the identity service rejected the credentials
    ProviderConnectionError
        If an endpoint could not be reached
    ResourceNotFoundError
        If the API answered 404
    ProviderAPIError
        For any other SDK or HTTP failure
    """
    try:
        yield
    except ksa_exceptions.Unauthorized as e:
        raise ProviderCredentialsError(f"Failed to {operation}: {e}") from e
    except ksa_exceptions.ConnectionError as e:
        raise ProviderConnectionError(f"Failed to {operation}: {e}") from e
    except ksa_exceptions.ClientException as e:
        raise ProviderAPIError(f"Failed to {operation}: {e}") from e
    except os_exceptions.NotFoundException as e:
        raise ResourceNotFoundError(f"Failed to {operation}: {e}") from e
    except os_exceptions.HttpException as e:
        status_code = getattr(e, "status_code", None)
        logger.debug("OpenStack HTTP error during %s: status=%s", operation, status_code)
        if status_code == UNAUTHORIZED_STATUS:
            raise ProviderCredentialsError(f"Failed to {operation}: {e}") from e
        raise ProviderAPIError(
            f"Failed to {operation}: {e}",
            error_code=str(status_code) if status_code is not None else None,
        ) from e
    except os_exceptions.SDKException as e:
        raise ProviderAPIError(f"Failed to {operation}: {e}") from e

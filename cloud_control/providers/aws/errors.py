"""Translation of botocore failures into provider exceptions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from cloud_control.constants import DRY_RUN_ERROR_CODE
from cloud_control.providers.exceptions import (
    ProviderCallError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
)

logger = logging.getLogger(__name__)


def is_dry_run_acknowledgment(error: ClientError) -> bool:
    """Check whether a client error only acknowledges a dry-run request.

    Parameters
    ----------
    error : ClientError
        Error raised by a boto3 client call

    Returns
    -------
    bool
        True if the request was well formed and deliberately not executed
    """
    return error.response.get("Error", {}).get("Code", "") == DRY_RUN_ERROR_CODE


@contextmanager
def handle_aws_errors(tolerate_dry_run: bool = False) -> Iterator[None]:
    """Convert botocore exceptions raised in the block to provider exceptions.

    Parameters
    ----------
    tolerate_dry_run : bool
        Swallow the ``DryRunOperation`` error instead of raising it

    Raises
    ------
    ProviderCredentialsError
        If credentials are missing or incomplete
    ProviderConnectionError
        If the endpoint cannot be reached or the connection times out
    ProviderCallError
        For any other client error
    ProviderError
        For any other botocore failure, e.g. an invalid region name
    """
    try:
        yield
    except ClientError as e:
        if tolerate_dry_run and is_dry_run_acknowledgment(e):
            logger.info("Dry run succeeded: request is valid and was not executed")
            return

        error = e.response.get("Error", {})
        raise ProviderCallError(
            error.get("Message") or str(e),
            error_code=error.get("Code"),
            operation=e.operation_name,
        ) from e
    except (NoCredentialsError, PartialCredentialsError) as e:
        raise ProviderCredentialsError(str(e)) from e
    except (BotoConnectionError, HTTPClientError) as e:
        raise ProviderConnectionError(str(e)) from e
    except BotoCoreError as e:
        raise ProviderError(str(e)) from e

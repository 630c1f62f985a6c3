"""
Error boundary shared by all resolvers.

Domain errors are logged and re-raised unchanged; SQLAlchemy failures are
logged and re-raised as StoreError with the original message. Strawberry then
renders whatever propagates as a GraphQL error.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ChatlineError, StoreError
from ..logging import get_logger

logger = get_logger(__name__)


@contextmanager
def resolver_boundary(operation: str, **log_fields: Any) -> Iterator[None]:
    try:
        yield
    except ChatlineError as e:
        logger.warning(
            "GraphQL operation failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
            **log_fields,
        )
        raise
    except SQLAlchemyError as e:
        logger.error(
            "Store operation failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
            **log_fields,
        )
        raise StoreError(str(e)) from e

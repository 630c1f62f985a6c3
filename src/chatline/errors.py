"""
Domain errors surfaced by the GraphQL resolvers.

Strawberry renders any exception raised from a resolver as a GraphQL error
whose message is ``str(exc)``, so the messages here are what clients see.
"""


class ChatlineError(Exception):
    """Base class for errors raised at the resolver boundary."""

    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AuthorizationError(ChatlineError):
    """Raised when a request or subscription carries no authenticated user."""

    default_message = "Not authorized"


class NotFoundError(ChatlineError):
    """Raised when a record required by an operation does not exist."""

    default_message = "Not found"


class StoreError(ChatlineError):
    """Raised when the underlying persistence layer fails.

    The message of the original exception is passed through unchanged.
    """

    default_message = "Store operation failed"


class InvalidArgumentError(ChatlineError):
    """Raised when operation arguments are unusable."""

    default_message = "Invalid argument"

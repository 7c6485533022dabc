"""Error kinds raised by the API clients and handled by exploration flows.

Every error carries a ``user_message``: the single line a flow shows to the
user when it fails. Flows catch ``ExplorerError`` and never let it escape.
"""


class ExplorerError(Exception):
    """Base class for all explorer failures."""

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class NetworkError(ExplorerError):
    """Transport failure or non-success HTTP status.

    ``status`` is None when no response was received at all.
    """

    def __init__(self, user_message: str, status: int | None = None):
        super().__init__(user_message)
        self.status = status


class NotFound(NetworkError):
    """A referenced id could not be resolved by the server."""

    def __init__(self, user_message: str = "Not found"):
        super().__init__(user_message, status=404)


class MalformedResponse(ExplorerError):
    """A success response whose body does not match the expected shape."""


class NoPath(ExplorerError):
    """The server reported the two nodes as unreachable."""

    def __init__(self, user_message: str = "No path found (unreachable)"):
        super().__init__(user_message)


class EmptySearch(ExplorerError):
    """A search query matched nothing."""

    def __init__(self, user_message: str = "No results found"):
        super().__init__(user_message)


class ValidationError(ExplorerError):
    """Missing or empty required user input, detected before any fetch."""

"""lochub exception classes.

Every error a request can end with derives from ``LocHubError`` and carries
the HTTP status it maps to. The app installs a single handler for the base
class, so raising one of these anywhere in a pipeline short-circuits the
request with the matching response.
"""


class LocHubError(Exception):
    """Base exception for all lochub errors."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(LocHubError):
    """Raised at startup when required settings are missing or invalid."""


# ----------------------------
# Client errors (4xx)
# ----------------------------

class ClientError(LocHubError):
    status_code = 400


class InvalidStateError(ClientError):
    """Login state is unknown, expired or already consumed."""

    def __init__(self, detail: str = "Invalid State") -> None:
        super().__init__(detail)


class ExchangeRejectedError(ClientError):
    """The platform refused the code exchange.

    ``detail`` is either the HTTP status the platform answered with, or the
    ``error`` value from its form-encoded body.
    """


# ----------------------------
# Access errors (Authorization Gate outcomes)
# ----------------------------

class AccessError(ClientError):
    pass


class RepositoryNotFoundError(AccessError):
    status_code = 404

    def __init__(self, detail: str = "Repo not found") -> None:
        super().__init__(detail)


class UnauthenticatedError(AccessError):
    status_code = 401

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail)


class ForbiddenError(AccessError):
    status_code = 403

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail)


# ----------------------------
# Transient / internal errors (5xx)
# ----------------------------

class InternalError(LocHubError):
    status_code = 500


class TransientError(InternalError):
    """Network failure while talking to the platform. Never retried."""


class MalformedCredentialError(InternalError):
    """The Authorization header could not be decoded."""


class FetchError(InternalError):
    """The repository could not be cloned into the workspace."""


class StatisticsError(InternalError):
    """The line count scan failed."""


class WorkspaceError(InternalError):
    """A workspace could not be created."""


class MalformedResponseError(InternalError):
    """The token endpoint answered with a body that is not key=value pairs."""

    def __init__(self, detail: str = "Invalid response from github") -> None:
        super().__init__(detail)

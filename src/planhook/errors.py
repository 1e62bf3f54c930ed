"""Exception hierarchy for planhook."""


class PlanhookError(Exception):
    """Base exception for all planhook errors."""


class ConfigError(PlanhookError):
    """Missing or invalid configuration."""


class EnqueueError(PlanhookError):
    """A precondition of a single enqueue attempt was not met."""


class CredentialsNotConfiguredError(EnqueueError):
    """GitHub App id or private key is not configured."""

    def __init__(self) -> None:
        super().__init__("credentials not configured")


class MissingInstallationError(EnqueueError):
    """The event payload carries no installation id."""

    def __init__(self) -> None:
        super().__init__("missing installation id")


class InvalidPayloadError(EnqueueError):
    """The event payload lacks fields needed to build a plan job."""


class ServiceError(PlanhookError):
    """Base for all external service communication errors."""

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"{service}: {message}")


class AuthenticationError(ServiceError):
    """Authentication failed (bad credentials or expired token)."""


class NotFoundError(ServiceError):
    """Requested resource was not found."""


class ApiResponseError(ServiceError):
    """Unexpected HTTP response from an external service."""

    def __init__(self, service: str, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(service, f"HTTP {status_code}: {body[:200]}")

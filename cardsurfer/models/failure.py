"""
Failure classification for domain errors.

Every error the service raises on purpose derives from `KnownError`, which
carries a classification, a user-appropriate message, and the HTTP status the
API layer should answer with:

- Caller input problems (bad deck URL, unknown deck): 400
- Backend or upstream problems (missing credentials, Shopify or deck API
  failures, sync failures): 500
- A sync requested while another one is running: 409
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Service failures
    CONFIGURATION = "configuration"
    UPSTREAM_AUTH = "upstream_auth"
    EXTERNAL_API_ERROR = "external_api_error"

    # Sync job failures
    SYNC_FAILED = "sync_failed"
    SYNC_IN_PROGRESS = "sync_in_progress"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(KnownError):
    """
    Required configuration is missing.

    Fatal to the operation; retrying without fixing the environment is pointless.
    """

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            kind=FailureKind.CONFIGURATION,
            message="Missing Shopify credentials in environment variables",
            detail=f"Missing: {', '.join(missing)}",
            status_code=500,
        )


class UpstreamError(KnownError):
    """An external API returned a non-success or malformed response."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str | None = None,
        kind: FailureKind = FailureKind.EXTERNAL_API_ERROR,
    ):
        self.status = status
        self.body = body
        super().__init__(kind=kind, message=message, detail=body, status_code=500)


class UpstreamAuthError(UpstreamError):
    """The Shopify token exchange was rejected."""

    def __init__(self, status: int, body: str):
        super().__init__(
            f"Failed to get access token: {status} - {body}",
            status=status,
            body=body,
            kind=FailureKind.UPSTREAM_AUTH,
        )


class InvalidUrlError(KnownError):
    """A deck URL does not have the shape its provider expects."""

    def __init__(self, message: str):
        super().__init__(kind=FailureKind.INVALID_INPUT, message=message, status_code=400)


class DeckNotFoundError(KnownError):
    """The deck provider reports that the deck does not exist (or is private)."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=(
                f"Deck not found on {provider}. "
                "Make sure the deck is public and the URL is correct."
            ),
            status_code=400,
        )


class SyncError(KnownError):
    """
    An inventory sync failed.

    The underlying cause is chained as ``__cause__``. Any writes made by the
    failed run have been rolled back and the failure is recorded in sync_log.
    """

    def __init__(self, message: str, sync_run_id: int | None = None):
        self.sync_run_id = sync_run_id
        super().__init__(
            kind=FailureKind.SYNC_FAILED,
            message=f"Inventory sync failed: {message}",
            status_code=500,
        )


class SyncInProgressError(KnownError):
    """A sync was requested while another sync is still running."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.SYNC_IN_PROGRESS,
            message="An inventory sync is already in progress",
            status_code=409,
        )

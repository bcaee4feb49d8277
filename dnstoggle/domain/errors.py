from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain-level errors."""

    retryable: bool = False
    recovery: str = "Please try again or contact support if the issue persists"


class InvalidCredential(DomainError):
    """Missing or malformed API token. Detected before any network call."""

    recovery = "Please check your API key in settings"

    def __init__(self, reason: str = "invalid API key") -> None:
        self.reason = reason
        super().__init__(f"invalid credential: {reason}")


class NetworkError(DomainError):
    """Transport-level failure (timeout, no route, DNS, dropped connection)."""

    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    CONNECTION_LOST = "connection_lost"
    DNS_FAILURE = "dns_failure"

    retryable = True
    recovery = "Please check your internet connection and try again"

    def __init__(self, kind: str = UNAVAILABLE, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        msg = f"network error: {kind}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class Unauthorized(DomainError):
    """The server rejected the token; it has to be re-entered."""

    recovery = "Please verify your API key in settings"

    def __init__(self) -> None:
        super().__init__("API authentication failed")


class NotFound(DomainError):
    """The requested resource does not exist."""

    recovery = "The requested resource may have been deleted or moved"

    def __init__(self, path: str = "") -> None:
        self.path = path
        super().__init__(f"resource not found: {path}" if path else "resource not found")


class ProfileNotFound(NotFound):
    """The selected profile is not in the account's profile list."""

    recovery = "Please select a valid profile from settings"

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        DomainError.__init__(self, f"profile not found: {profile_id}")
        self.path = f"/profiles/{profile_id}"


class ServerError(DomainError):
    """Unexpected HTTP status. Only 5xx is worth retrying."""

    recovery = "Please try again later or contact support"

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error ({status_code}): {body[:200]}")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code >= 500


class RateLimited(DomainError):
    """HTTP 429. `retry_after` is in seconds when the server sent one."""

    retryable = True
    recovery = "Please wait a moment before trying again"

    def __init__(self, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            msg = f"rate limited, retry after {retry_after:g}s"
        else:
            msg = "rate limited"
        super().__init__(msg)


class DecodingError(DomainError):
    """Response body did not match the expected schema."""

    def __init__(self, cause: str) -> None:
        self.cause = cause
        super().__init__(f"failed to decode response: {cause}")


class VerificationFailed(DomainError):
    """
    The profile status read back after an update does not match the intended
    transition. The update itself most likely went through.
    """

    recovery = "Refresh the profile list; the change may take a moment to apply"

    def __init__(self, profile_id: str, expected_disabled: bool) -> None:
        self.profile_id = profile_id
        self.expected_disabled = expected_disabled
        want = "disabled" if expected_disabled else "enabled"
        super().__init__(f"profile {profile_id} was not observed {want} after update")


class ConfigurationMissing(DomainError):
    """Required configuration (e.g. a selected profile) is not set."""

    recovery = "Please complete the configuration in settings"

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"configuration missing: {what}")


class SecretStoreError(DomainError):
    """The secret storage backend failed."""

    recovery = "Please try resetting your settings"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"secret store error: {reason}")

import math

from fastapi import HTTPException, status

from dnstoggle.domain.errors import (
    ConfigurationMissing,
    DecodingError,
    DomainError,
    InvalidCredential,
    NetworkError,
    NotFound,
    RateLimited,
    ServerError,
    Unauthorized,
)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (InvalidCredential, status.HTTP_401_UNAUTHORIZED),
    (Unauthorized, status.HTTP_401_UNAUTHORIZED),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ConfigurationMissing, status.HTTP_409_CONFLICT),
    (RateLimited, status.HTTP_429_TOO_MANY_REQUESTS),
    (ServerError, status.HTTP_502_BAD_GATEWAY),
    (DecodingError, status.HTTP_502_BAD_GATEWAY),
    (NetworkError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_error(error: DomainError) -> HTTPException:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for kind, mapped in _STATUS_BY_ERROR:
        if isinstance(error, kind):
            code = mapped
            break

    headers = None
    if isinstance(error, RateLimited) and error.retry_after is not None:
        headers = {"Retry-After": str(math.ceil(error.retry_after))}

    return HTTPException(
        status_code=code,
        detail={
            "error": type(error).__name__,
            "message": str(error),
            "recovery": error.recovery,
        },
        headers=headers,
    )

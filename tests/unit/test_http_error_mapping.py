import pytest

from dnstoggle.domain.errors import (
    ConfigurationMissing,
    DecodingError,
    InvalidCredential,
    NetworkError,
    ProfileNotFound,
    RateLimited,
    SecretStoreError,
    ServerError,
    Unauthorized,
)
from dnstoggle.presentation.errors import to_http_error


@pytest.mark.parametrize(
    "error, status",
    [
        (InvalidCredential("empty"), 401),
        (Unauthorized(), 401),
        (ProfileNotFound("p1"), 404),
        (ConfigurationMissing("selected profile"), 409),
        (RateLimited(), 429),
        (ServerError(500), 502),
        (DecodingError("bad"), 502),
        (NetworkError(), 503),
        (SecretStoreError("down"), 500),
    ],
)
def test_status_codes(error, status):
    exc = to_http_error(error)
    assert exc.status_code == status
    assert exc.detail["error"] == type(error).__name__
    assert exc.detail["recovery"] == error.recovery


def test_retry_after_header_rounds_up():
    assert to_http_error(RateLimited(0.2)).headers == {"Retry-After": "1"}
    assert to_http_error(RateLimited()).headers is None

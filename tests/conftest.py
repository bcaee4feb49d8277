import pytest

from dnstoggle.domain.entities import Profile
from dnstoggle.infrastructure.cache.ttl_cache import TTLCache
from dnstoggle.infrastructure.resilience.retry import RetryPolicy
from tests.fakes import (
    KEY_NAME,
    VALID_KEY,
    FakeAuditLog,
    FakeClock,
    FakeNotifier,
    FakePreferences,
    FakeProfilesApi,
    FakeSecretStore,
    NoSleepRetry,
)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def api(clock):
    """Account with one enabled ("p1") and one disabled ("p2") profile."""
    return FakeProfilesApi(
        [
            Profile(id="p1", name="Work"),
            Profile(id="p2", name="Kids", disable_until=int(clock.now) + 600),
        ]
    )


@pytest.fixture()
def secrets():
    return FakeSecretStore({KEY_NAME: VALID_KEY})


@pytest.fixture()
def preferences():
    return FakePreferences(("p1", "Work"))


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def audit():
    return FakeAuditLog()


@pytest.fixture()
def cache(clock):
    return TTLCache(default_ttl=300, clock=clock)


@pytest.fixture()
def retry():
    return NoSleepRetry(RetryPolicy.DEFAULT)

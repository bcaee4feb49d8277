import pytest
from fastapi.testclient import TestClient

from dnstoggle.domain.entities import Profile
from dnstoggle.infrastructure.cache.ttl_cache import TTLCache
from dnstoggle.infrastructure.resilience.debounce import Throttler
from dnstoggle.infrastructure.resilience.retry import RetryPolicy
from dnstoggle.main import create_app
from dnstoggle.presentation.dependencies import (
    get_audit_log,
    get_cache,
    get_notifier,
    get_preferences,
    get_profiles_api,
    get_refresh_throttler,
    get_refresher,
    get_retry,
    get_secret_store,
)
from dnstoggle.settings import Settings, get_settings
from tests.fakes import (
    KEY_NAME,
    VALID_KEY,
    FakeAuditLog,
    FakeNotifier,
    FakePreferences,
    FakeProfilesApi,
    FakeSecretStore,
    NoSleepRetry,
)


class Deps:
    def __init__(self):
        self.api = FakeProfilesApi(
            [
                Profile(id="p1", name="Work"),
                Profile(id="p2", name="Kids", disable_until=4_000_000_000),
            ]
        )
        self.secrets = FakeSecretStore({KEY_NAME: VALID_KEY})
        self.preferences = FakePreferences(("p1", "Work"))
        self.notifier = FakeNotifier()
        self.audit = FakeAuditLog()
        self.cache = TTLCache(default_ttl=300)
        self.retry = NoSleepRetry(RetryPolicy.DEFAULT)
        self.throttler = Throttler(60)
        self.settings = Settings(
            secret_key_name=KEY_NAME,
            selected_profile_id="",
            profile_disable_duration_seconds=3600,
            verify_after_toggle=True,
        )


@pytest.fixture()
def app_and_deps():
    app = create_app()
    deps = Deps()

    app.dependency_overrides[get_profiles_api] = lambda: deps.api
    app.dependency_overrides[get_secret_store] = lambda: deps.secrets
    app.dependency_overrides[get_preferences] = lambda: deps.preferences
    app.dependency_overrides[get_notifier] = lambda: deps.notifier
    app.dependency_overrides[get_audit_log] = lambda: deps.audit
    app.dependency_overrides[get_cache] = lambda: deps.cache
    app.dependency_overrides[get_retry] = lambda: deps.retry
    app.dependency_overrides[get_refresh_throttler] = lambda: deps.throttler
    app.dependency_overrides[get_refresher] = lambda: None
    app.dependency_overrides[get_settings] = lambda: deps.settings

    try:
        yield app, deps
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def deps(app_and_deps) -> Deps:
    return app_and_deps[1]

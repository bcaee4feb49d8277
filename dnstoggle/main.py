from contextlib import asynccontextmanager
from fastapi import FastAPI

from dnstoggle.domain.services import CredentialPolicy
from dnstoggle.infrastructure.cache.ttl_cache import TTLCache
from dnstoggle.infrastructure.controld.api_client import (
    ControlDApiClient,
    ControlDProfilesApi,
)
from dnstoggle.infrastructure.db.pool import close_pool, open_pool
from dnstoggle.infrastructure.http.client import (
    close_http_client,
    get_http_client,
    open_http_client,
)
from dnstoggle.infrastructure.notify.webhook import HttpWebhookNotifier, LoggingNotifier
from dnstoggle.infrastructure.redis_store.pool import close_redis, get_redis
from dnstoggle.infrastructure.redis_store.preferences import RedisPreferences
from dnstoggle.infrastructure.redis_store.secret_store import RedisSecretStore
from dnstoggle.infrastructure.refresher.refresher import ProfileRefresher
from dnstoggle.infrastructure.resilience.debounce import Throttler
from dnstoggle.infrastructure.resilience.retry import RetryPolicy
from dnstoggle.logging import setup_logging
from dnstoggle.presentation.api import api
from dnstoggle.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    if settings.audit_enabled:
        await open_pool()

    await open_http_client(settings.request_timeout_seconds)
    redis = get_redis()

    # ONE shared adapter/cache per process, exposed to dependencies
    api_client = ControlDApiClient(
        settings.api_base_url,
        client=get_http_client(),
        resource_timeout=settings.resource_timeout_seconds,
    )
    profiles_api = ControlDProfilesApi(api_client)
    cache = TTLCache(
        default_ttl=settings.cache_default_ttl_seconds,
        max_entries=settings.cache_max_entries,
        sweep_interval=settings.cache_sweep_interval_seconds,
    )
    cache.start()
    retry = RetryPolicy.from_name(settings.retry_preset)
    notifier = (
        HttpWebhookNotifier(settings.notify_webhook_url, client=get_http_client())
        if settings.notify_webhook_url
        else LoggingNotifier()
    )
    refresher = ProfileRefresher(
        api=profiles_api,
        secrets=RedisSecretStore(redis),
        preferences=RedisPreferences(redis),
        notifier=notifier,
        cache=cache,
        retry=retry,
        key_name=settings.secret_key_name,
        policy=CredentialPolicy(
            prefix=settings.api_key_prefix,
            min_length=settings.api_key_min_length,
            max_length=settings.api_key_max_length,
        ),
        fallback_profile_id=settings.selected_profile_id,
        debounce_delay=settings.refresh_debounce_seconds,
    )

    app.state.profiles_api = profiles_api
    app.state.cache = cache
    app.state.retry = retry
    app.state.notifier = notifier
    app.state.refresher = refresher
    app.state.refresh_throttler = Throttler(settings.manual_refresh_interval_seconds)

    try:
        yield
    finally:
        # shutdown
        await refresher.aclose()
        await cache.aclose()
        await notifier.aclose()  # it won't close the shared client
        await api_client.aclose()
        await close_http_client()  # closes the shared client
        await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="DNS Toggle API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api)
    return app


app = create_app()

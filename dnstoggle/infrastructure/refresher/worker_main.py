from __future__ import annotations

import asyncio
import signal
from contextlib import suppress
import logging

from dnstoggle.domain.services import CredentialPolicy
from dnstoggle.logging import setup_logging
from dnstoggle.settings import get_settings
from dnstoggle.infrastructure.cache.ttl_cache import TTLCache
from dnstoggle.infrastructure.controld.api_client import (
    ControlDApiClient,
    ControlDProfilesApi,
)
from dnstoggle.infrastructure.notify.webhook import HttpWebhookNotifier, LoggingNotifier
from dnstoggle.infrastructure.redis_store.pool import get_redis, close_redis
from dnstoggle.infrastructure.redis_store.preferences import RedisPreferences
from dnstoggle.infrastructure.redis_store.secret_store import RedisSecretStore
from dnstoggle.infrastructure.refresher.refresher import ProfileRefresher
from dnstoggle.infrastructure.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)


async def _run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    redis = get_redis()
    client = ControlDApiClient(
        settings.api_base_url,
        request_timeout=settings.request_timeout_seconds,
        resource_timeout=settings.resource_timeout_seconds,
    )
    notifier = (
        HttpWebhookNotifier(settings.notify_webhook_url)
        if settings.notify_webhook_url
        else LoggingNotifier()
    )
    cache = TTLCache(
        default_ttl=settings.profiles_cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
        sweep_interval=settings.cache_sweep_interval_seconds,
    )
    cache.start()

    refresher = ProfileRefresher(
        api=ControlDProfilesApi(client),
        secrets=RedisSecretStore(redis),
        preferences=RedisPreferences(redis),
        notifier=notifier,
        cache=cache,
        retry=RetryPolicy.from_name(settings.retry_preset),
        key_name=settings.secret_key_name,
        policy=CredentialPolicy(
            prefix=settings.api_key_prefix,
            min_length=settings.api_key_min_length,
            max_length=settings.api_key_max_length,
        ),
        fallback_profile_id=settings.selected_profile_id,
        poll_interval=settings.refresh_interval_seconds,
        debounce_delay=settings.refresh_debounce_seconds,
    )

    stop = asyncio.Event()

    def _on_signal(*_: object) -> None:
        logger.info("refresher: stop signal received")
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)

    worker_task = asyncio.create_task(refresher.run_forever())
    logger.info("refresher: started run_forever loop")

    await stop.wait()

    worker_task.cancel()
    with suppress(asyncio.CancelledError):
        await worker_task

    await refresher.aclose()
    await cache.aclose()
    await notifier.aclose()
    await client.aclose()
    await close_redis()
    logger.info("refresher: stopped cleanly")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()

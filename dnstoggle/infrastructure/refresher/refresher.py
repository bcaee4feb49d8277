from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from dnstoggle.application.list_profiles import get_profile_status
from dnstoggle.application.manage_credential import load_credential
from dnstoggle.application.select_profile import selected_profile_id
from dnstoggle.application.side_effects import notify_safely
from dnstoggle.domain.entities import ProfileStatus
from dnstoggle.domain.errors import DomainError
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.notifier import NotifierPort
from dnstoggle.domain.ports.preferences import PreferencesPort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort
from dnstoggle.domain.ports.secret_store import SecretStorePort
from dnstoggle.domain.services import CredentialPolicy
from dnstoggle.infrastructure.resilience.debounce import Debouncer

logger = logging.getLogger(__name__)


class ProfileRefresher:
    """
    Periodically re-reads the selected profile so the cache stays warm, and
    notifies when a disable period runs out on its own.
    """

    def __init__(
        self,
        *,
        api: ProfilesApiPort,
        secrets: SecretStorePort,
        preferences: PreferencesPort,
        notifier: NotifierPort,
        cache: Optional[ResponseCachePort] = None,
        retry: Optional[RetryPort] = None,
        key_name: str = "controld-api-key",
        policy: CredentialPolicy = CredentialPolicy(),
        fallback_profile_id: str = "",
        poll_interval: float = 60.0,
        debounce_delay: float = 0.5,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.api = api
        self.secrets = secrets
        self.preferences = preferences
        self.notifier = notifier
        self.cache = cache
        self.retry = retry
        self.key_name = key_name
        self.policy = policy
        self.fallback_profile_id = fallback_profile_id
        self.poll_interval = poll_interval
        self._clock = clock
        self._debouncer = Debouncer(debounce_delay)
        # profile id -> disable_until seen on the previous pass
        self._last_seen: dict[str, Optional[int]] = {}

    async def run_forever(self) -> None:
        logger.info("refresher started", extra={"poll_interval": self.poll_interval})
        while True:
            await self._process_once()
            await asyncio.sleep(self.poll_interval)

    def request_refresh(self) -> None:
        """Schedule a refresh; bursts of requests collapse into one pass."""
        self._debouncer.debounce(self._process_once)

    async def _process_once(self) -> Optional[ProfileStatus]:
        try:
            credential = await load_credential(
                self.secrets, key_name=self.key_name, policy=self.policy
            )
            profile_id = await selected_profile_id(
                self.preferences, self.fallback_profile_id
            )
        except DomainError as e:
            # missing configuration or a failing store; retried on the next pass
            logger.info("refresh skipped", extra={"reason": str(e)})
            return None

        try:
            status = await get_profile_status(
                self.api,
                credential,
                profile_id,
                cache=self.cache,
                retry=self.retry,
                force_refresh=True,
                clock=self._clock,
            )
        except DomainError as e:
            logger.warning(
                "refresh failed", extra={"profile_id": profile_id, "error": str(e)}
            )
            return None

        now = self._clock()
        previous_until = self._last_seen.get(profile_id)
        # expired on its own, not re-enabled early by the user
        if previous_until and previous_until <= now and not status.disabled:
            await notify_safely(
                lambda: self.notifier.disable_expired(status.profile.name),
                "disable_expired",
            )
        self._last_seen[profile_id] = status.disable_until if status.disabled else None
        logger.debug(
            "profile refreshed",
            extra={"profile_id": profile_id, "status": status.description},
        )
        return status

    async def aclose(self) -> None:
        await self._debouncer.aclose()

import logging
import time
from typing import Callable, Optional

from dnstoggle.application.list_profiles import (
    find_profile,
    list_profiles,
    profiles_cache_key,
)
from dnstoggle.application.side_effects import audit_safely, notify_safely
from dnstoggle.domain.entities import AuditEvent, ToggleResult
from dnstoggle.domain.errors import ConfigurationMissing, DomainError, VerificationFailed
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.notifier import NotifierPort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort
from dnstoggle.domain.services import format_duration, next_disable_ttl

logger = logging.getLogger(__name__)


async def toggle_profile(
    api: ProfilesApiPort,
    credential: str,
    profile_id: str,
    *,
    duration_seconds: float = 3600,
    cache: Optional[ResponseCachePort] = None,
    retry: Optional[RetryPort] = None,
    notifier: Optional[NotifierPort] = None,
    audit: Optional[AuditLogPort] = None,
    verify: bool = True,
    clock: Callable[[], float] = time.time,
) -> ToggleResult:
    """
    Flip the profile between enabled and disabled.

    Disabled means disable_until > now. A disabled profile is re-enabled with
    disable_ttl=0; an enabled one is disabled until now + duration_seconds.
    A failed read-back produces a result with `warning` set; the update is
    not undone.
    """
    if not profile_id:
        raise ConfigurationMissing("selected profile")

    profiles = await list_profiles(api, credential, cache=cache, retry=retry)
    profile = find_profile(profiles, profile_id)

    now = clock()
    was_disabled = profile.is_disabled(now)
    new_ttl = next_disable_ttl(was_disabled, now, duration_seconds)
    action = "enabled" if was_disabled else "disabled"
    audit_kind = "PROFILE_ENABLED" if was_disabled else "PROFILE_DISABLED"
    details = {"profile_id": profile.id, "profile_name": profile.name}

    logger.info(
        "toggling profile",
        extra={"profile_id": profile.id, "action": action, "disable_ttl": new_ttl},
    )

    async def update():
        return await api.set_disable_until(credential, profile.id, new_ttl)

    try:
        message = await (retry.execute(update) if retry is not None else update())
    except DomainError as e:
        logger.error(
            "toggle failed",
            extra={"profile_id": profile.id, "action": action, "error": str(e)},
        )
        await audit_safely(
            audit,
            AuditEvent(
                event=audit_kind,
                success=False,
                details={**details, "error": type(e).__name__},
            ),
        )
        raise
    finally:
        if cache is not None:
            cache.remove(profiles_cache_key(credential))

    result = ToggleResult(
        profile_id=profile.id,
        profile_name=profile.name,
        action=action,
        disable_until=new_ttl,
        message=message,
    )

    if verify:
        expected_disabled = action == "disabled"
        try:
            refreshed = await list_profiles(api, credential, cache=cache, retry=retry)
            observed = find_profile(refreshed, profile.id).is_disabled(clock())
        except DomainError as e:
            result.warning = VerificationFailed(profile.id, expected_disabled)
            result.warning.__cause__ = e
            logger.warning(
                "could not verify toggle",
                extra={"profile_id": profile.id, "error": str(e)},
            )
        else:
            if observed == expected_disabled:
                result.verified = True
            else:
                result.warning = VerificationFailed(profile.id, expected_disabled)
                logger.warning(
                    "profile status change verification failed",
                    extra={"profile_id": profile.id, "expected_disabled": expected_disabled},
                )

    if notifier is not None:
        if action == "disabled":
            await notify_safely(
                lambda: notifier.profile_disabled(profile.name, duration_seconds),
                "profile_disabled",
            )
        else:
            await notify_safely(
                lambda: notifier.profile_enabled(profile.name), "profile_enabled"
            )

    if action == "disabled":
        details["duration"] = format_duration(duration_seconds)
    details["disable_until"] = str(new_ttl)
    await audit_safely(audit, AuditEvent(event=audit_kind, success=True, details=details))

    return result

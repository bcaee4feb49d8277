from typing import Optional

from dnstoggle.application.list_profiles import find_profile, list_profiles
from dnstoggle.application.side_effects import audit_safely
from dnstoggle.domain.entities import AuditEvent, Profile
from dnstoggle.domain.errors import ConfigurationMissing
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.preferences import PreferencesPort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort


async def select_profile(
    api: ProfilesApiPort,
    credential: str,
    preferences: PreferencesPort,
    profile_id: str,
    *,
    cache: Optional[ResponseCachePort] = None,
    retry: Optional[RetryPort] = None,
    audit: Optional[AuditLogPort] = None,
) -> Profile:
    profiles = await list_profiles(api, credential, cache=cache, retry=retry)
    profile = find_profile(profiles, profile_id.strip())
    await preferences.set_selected_profile(profile.id, profile.name)
    await audit_safely(
        audit,
        AuditEvent(
            event="PROFILE_SELECTED",
            success=True,
            details={"profile_id": profile.id, "profile_name": profile.name},
        ),
    )
    return profile


async def selected_profile_id(preferences: PreferencesPort, fallback: str = "") -> str:
    """Stored selection first, then the configured fallback."""
    stored = await preferences.get_selected_profile()
    if stored:
        return stored[0]
    if fallback:
        return fallback
    raise ConfigurationMissing("selected profile")

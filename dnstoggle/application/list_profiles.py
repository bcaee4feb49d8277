import time
from typing import Callable, Optional

from dnstoggle.domain.entities import Profile, ProfileStatus
from dnstoggle.domain.errors import ProfileNotFound
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort
from dnstoggle.domain.services import fingerprint

PROFILES_ENDPOINT = "/profiles"


def profiles_cache_key(credential: str) -> str:
    return f"{PROFILES_ENDPOINT}|account={fingerprint(credential)}"


async def list_profiles(
    api: ProfilesApiPort,
    credential: str,
    *,
    cache: Optional[ResponseCachePort] = None,
    retry: Optional[RetryPort] = None,
    cache_ttl: Optional[float] = None,
    force_refresh: bool = False,
) -> list[Profile]:
    async def fetch() -> list[Profile]:
        if retry is None:
            return await api.list_profiles(credential)
        return await retry.execute(lambda: api.list_profiles(credential))

    if cache is None:
        return await fetch()

    key = profiles_cache_key(credential)
    if force_refresh:
        cache.remove(key)
    return await cache.get_or_load(key, fetch, cache_ttl)


def find_profile(profiles: list[Profile], profile_id: str) -> Profile:
    for profile in profiles:
        if profile.id == profile_id:
            return profile
    raise ProfileNotFound(profile_id)


async def get_profile_status(
    api: ProfilesApiPort,
    credential: str,
    profile_id: str,
    *,
    cache: Optional[ResponseCachePort] = None,
    retry: Optional[RetryPort] = None,
    force_refresh: bool = False,
    clock: Callable[[], float] = time.time,
) -> ProfileStatus:
    profiles = await list_profiles(
        api, credential, cache=cache, retry=retry, force_refresh=force_refresh
    )
    return ProfileStatus.of(find_profile(profiles, profile_id), clock())

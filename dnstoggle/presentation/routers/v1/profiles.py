import time
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from dnstoggle.application.list_profiles import get_profile_status, list_profiles
from dnstoggle.application.select_profile import select_profile, selected_profile_id
from dnstoggle.application.toggle_profile import toggle_profile
from dnstoggle.domain.errors import DomainError
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.notifier import NotifierPort
from dnstoggle.domain.ports.preferences import PreferencesPort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort
from dnstoggle.infrastructure.refresher.refresher import ProfileRefresher
from dnstoggle.infrastructure.resilience.debounce import Throttler
from dnstoggle.presentation.dependencies import (
    get_audit_log,
    get_cache,
    get_credential,
    get_notifier,
    get_preferences,
    get_profiles_api,
    get_refresh_throttler,
    get_refresher,
    get_retry,
)
from dnstoggle.presentation.errors import to_http_error
from dnstoggle.schemas.requests import SelectProfileIn
from dnstoggle.schemas.responses import ProfileOut, RefreshOut, StatusOut, ToggleOut
from dnstoggle.settings import Settings, get_settings

router = APIRouter(tags=["Profiles"])


@router.get("/profiles", response_model=list[ProfileOut])
async def get_profiles(
    credential: Annotated[str, Depends(get_credential)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    retry: Annotated[RetryPort, Depends(get_retry)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    try:
        profiles = await list_profiles(
            api,
            credential,
            cache=cache,
            retry=retry,
            cache_ttl=settings.profiles_cache_ttl_seconds,
        )
    except DomainError as e:
        raise to_http_error(e) from e
    now = time.time()
    return [ProfileOut.from_entity(p, now) for p in profiles]


@router.post("/profiles/refresh", response_model=RefreshOut)
async def post_refresh_profiles(
    credential: Annotated[str, Depends(get_credential)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    retry: Annotated[RetryPort, Depends(get_retry)],
    throttler: Annotated[Throttler, Depends(get_refresh_throttler)],
):
    try:
        refreshed = await throttler.throttle(
            list_profiles, api, credential, cache=cache, retry=retry, force_refresh=True
        )
    except DomainError as e:
        raise to_http_error(e) from e
    return RefreshOut(refreshed=refreshed)


@router.put("/profiles/selected", response_model=ProfileOut)
async def put_selected_profile(
    body: SelectProfileIn,
    credential: Annotated[str, Depends(get_credential)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    preferences: Annotated[PreferencesPort, Depends(get_preferences)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    retry: Annotated[RetryPort, Depends(get_retry)],
    audit: Annotated[Optional[AuditLogPort], Depends(get_audit_log)],
):
    try:
        profile = await select_profile(
            api,
            credential,
            preferences,
            body.profile_id,
            cache=cache,
            retry=retry,
            audit=audit,
        )
    except DomainError as e:
        raise to_http_error(e) from e
    return ProfileOut.from_entity(profile, time.time())


@router.get("/status", response_model=StatusOut)
async def get_status(
    credential: Annotated[str, Depends(get_credential)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    preferences: Annotated[PreferencesPort, Depends(get_preferences)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    retry: Annotated[RetryPort, Depends(get_retry)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    try:
        profile_id = await selected_profile_id(preferences, settings.selected_profile_id)
        status = await get_profile_status(
            api, credential, profile_id, cache=cache, retry=retry
        )
    except DomainError as e:
        raise to_http_error(e) from e
    return StatusOut.from_status(status)


@router.post("/toggle", response_model=ToggleOut)
async def post_toggle(
    credential: Annotated[str, Depends(get_credential)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    preferences: Annotated[PreferencesPort, Depends(get_preferences)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    retry: Annotated[RetryPort, Depends(get_retry)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
    audit: Annotated[Optional[AuditLogPort], Depends(get_audit_log)],
    refresher: Annotated[Optional[ProfileRefresher], Depends(get_refresher)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    try:
        profile_id = await selected_profile_id(preferences, settings.selected_profile_id)
        result = await toggle_profile(
            api,
            credential,
            profile_id,
            duration_seconds=settings.profile_disable_duration_seconds,
            cache=cache,
            retry=retry,
            notifier=notifier,
            audit=audit,
            verify=settings.verify_after_toggle,
        )
    except DomainError as e:
        raise to_http_error(e) from e

    if refresher is not None:
        refresher.request_refresh()
    return ToggleOut.from_result(result)

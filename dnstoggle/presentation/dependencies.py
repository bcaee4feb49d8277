from typing import Optional

from fastapi import Depends, Request

from dnstoggle.application.manage_credential import load_credential
from dnstoggle.domain.errors import DomainError
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.notifier import NotifierPort
from dnstoggle.domain.ports.preferences import PreferencesPort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.resilience import RetryPort
from dnstoggle.domain.ports.secret_store import SecretStorePort
from dnstoggle.domain.services import CredentialPolicy
from dnstoggle.infrastructure.db.audit_repo import PgAuditLog
from dnstoggle.infrastructure.db.pool import get_pool
from dnstoggle.infrastructure.redis_store.pool import get_redis
from dnstoggle.infrastructure.redis_store.preferences import RedisPreferences
from dnstoggle.infrastructure.redis_store.secret_store import RedisSecretStore
from dnstoggle.infrastructure.refresher.refresher import ProfileRefresher
from dnstoggle.infrastructure.resilience.debounce import Throttler
from dnstoggle.presentation.errors import to_http_error
from dnstoggle.settings import Settings, get_settings


def get_secret_store() -> SecretStorePort:
    return RedisSecretStore(get_redis())


def get_preferences() -> PreferencesPort:
    return RedisPreferences(get_redis())


def get_audit_log() -> Optional[AuditLogPort]:
    if not get_settings().audit_enabled:
        return None
    return PgAuditLog(get_pool())


def get_credential_policy() -> CredentialPolicy:
    settings = get_settings()
    return CredentialPolicy(
        prefix=settings.api_key_prefix,
        min_length=settings.api_key_min_length,
        max_length=settings.api_key_max_length,
    )


# These are set in dnstoggle.main lifespan()
def get_profiles_api(request: Request) -> ProfilesApiPort:
    return request.app.state.profiles_api


def get_cache(request: Request) -> ResponseCachePort:
    return request.app.state.cache


def get_retry(request: Request) -> RetryPort:
    return request.app.state.retry


def get_notifier(request: Request) -> NotifierPort:
    return request.app.state.notifier


def get_refresh_throttler(request: Request) -> Throttler:
    return request.app.state.refresh_throttler


def get_refresher(request: Request) -> Optional[ProfileRefresher]:
    return getattr(request.app.state, "refresher", None)


async def get_credential(
    secrets: SecretStorePort = Depends(get_secret_store),
    policy: CredentialPolicy = Depends(get_credential_policy),
    settings: Settings = Depends(get_settings),
) -> str:
    try:
        return await load_credential(
            secrets, key_name=settings.secret_key_name, policy=policy
        )
    except DomainError as e:
        raise to_http_error(e) from e

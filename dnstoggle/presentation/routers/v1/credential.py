from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from dnstoggle.application.manage_credential import remove_credential, save_credential
from dnstoggle.domain.errors import DomainError
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.secret_store import SecretStorePort
from dnstoggle.domain.services import CredentialPolicy
from dnstoggle.presentation.dependencies import (
    get_audit_log,
    get_cache,
    get_credential_policy,
    get_profiles_api,
    get_secret_store,
)
from dnstoggle.presentation.errors import to_http_error
from dnstoggle.schemas.requests import CredentialIn
from dnstoggle.schemas.responses import CredentialOut, OkOut
from dnstoggle.settings import Settings, get_settings

router = APIRouter(prefix="/credential", tags=["Credential"])


@router.put("", response_model=CredentialOut)
async def put_credential(
    body: CredentialIn,
    secrets: Annotated[SecretStorePort, Depends(get_secret_store)],
    policy: Annotated[CredentialPolicy, Depends(get_credential_policy)],
    api: Annotated[ProfilesApiPort, Depends(get_profiles_api)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    audit: Annotated[Optional[AuditLogPort], Depends(get_audit_log)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    try:
        redacted = await save_credential(
            secrets,
            body.api_key,
            key_name=settings.secret_key_name,
            policy=policy,
            api=api if body.validate_remote else None,
            audit=audit,
        )
    except DomainError as e:
        raise to_http_error(e) from e
    # a new key may belong to another account
    cache.remove_matching("account=")
    return CredentialOut(api_key=redacted)


@router.delete("", response_model=OkOut)
async def delete_credential(
    secrets: Annotated[SecretStorePort, Depends(get_secret_store)],
    cache: Annotated[ResponseCachePort, Depends(get_cache)],
    audit: Annotated[Optional[AuditLogPort], Depends(get_audit_log)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    try:
        await remove_credential(
            secrets, key_name=settings.secret_key_name, cache=cache, audit=audit
        )
    except DomainError as e:
        raise to_http_error(e) from e
    return OkOut()

import logging
from typing import Optional

from dnstoggle.application.side_effects import audit_safely
from dnstoggle.domain.entities import AuditEvent
from dnstoggle.domain.errors import DomainError
from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.domain.ports.cache import ResponseCachePort
from dnstoggle.domain.ports.profiles_api import ProfilesApiPort
from dnstoggle.domain.ports.secret_store import SecretStorePort
from dnstoggle.domain.services import CredentialPolicy, redact

logger = logging.getLogger(__name__)


async def save_credential(
    secrets: SecretStorePort,
    token: str,
    *,
    key_name: str,
    policy: CredentialPolicy = CredentialPolicy(),
    api: Optional[ProfilesApiPort] = None,
    audit: Optional[AuditLogPort] = None,
) -> str:
    """
    Validate and store the API key. With `api`, the key is also checked
    against the server (one GET /profiles) before it is stored.
    Returns the redacted key.
    """
    token = policy.validate(token)

    if api is not None:
        try:
            await api.list_profiles(token)
        except DomainError as e:
            await audit_safely(
                audit,
                AuditEvent(
                    event="API_KEY_VALIDATED",
                    success=False,
                    details={"error": type(e).__name__},
                ),
            )
            raise
        await audit_safely(audit, AuditEvent(event="API_KEY_VALIDATED", success=True))

    existed = await secrets.get(key_name) is not None
    await secrets.set(key_name, token)
    logger.info(
        "credential stored", extra={"token": redact(token), "replaced": existed}
    )
    await audit_safely(
        audit,
        AuditEvent(event="API_KEY_UPDATED" if existed else "API_KEY_ADDED", success=True),
    )
    return redact(token)


async def load_credential(
    secrets: SecretStorePort,
    *,
    key_name: str,
    policy: CredentialPolicy = CredentialPolicy(),
) -> str:
    """The stored key, format-checked. Raises InvalidCredential when absent/bad."""
    return policy.validate(await secrets.get(key_name))


async def remove_credential(
    secrets: SecretStorePort,
    *,
    key_name: str,
    cache: Optional[ResponseCachePort] = None,
    audit: Optional[AuditLogPort] = None,
) -> None:
    await secrets.delete(key_name)
    if cache is not None:
        cache.remove_matching("account=")
    logger.info("credential removed")
    await audit_safely(audit, AuditEvent(event="API_KEY_REMOVED", success=True))

import logging
from typing import Awaitable, Callable, Optional

from dnstoggle.domain.entities import AuditEvent
from dnstoggle.domain.ports.audit_log import AuditLogPort

logger = logging.getLogger(__name__)


async def notify_safely(call: Callable[[], Awaitable[None]], what: str) -> None:
    """Notification failures are logged and dropped; they never fail the caller."""
    try:
        await call()
    except Exception as e:  # noqa: BLE001
        logger.warning("notification failed", extra={"what": what, "error": str(e)})


async def audit_safely(audit: Optional[AuditLogPort], event: AuditEvent) -> None:
    if audit is None:
        return
    try:
        await audit.record(event)
    except Exception as e:  # noqa: BLE001
        logger.warning(
            "audit write failed", extra={"event": event.event, "error": str(e)}
        )

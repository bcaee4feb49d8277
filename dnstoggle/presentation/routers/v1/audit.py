from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from dnstoggle.domain.ports.audit_log import AuditLogPort
from dnstoggle.presentation.dependencies import get_audit_log
from dnstoggle.schemas.responses import AuditEventOut

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=list[AuditEventOut])
async def get_audit_events(
    audit: Annotated[Optional[AuditLogPort], Depends(get_audit_log)],
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
):
    # audit disabled in settings
    if audit is None:
        return []
    events = await audit.recent(limit)
    return [AuditEventOut.from_entity(e) for e in events]

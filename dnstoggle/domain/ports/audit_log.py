from __future__ import annotations

from typing import Protocol

from dnstoggle.domain.entities import AuditEvent


class AuditLogPort(Protocol):
    async def record(self, event: AuditEvent) -> None:
        """Append an audit event."""

    async def recent(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events first."""

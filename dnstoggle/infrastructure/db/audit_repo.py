from __future__ import annotations

from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from dnstoggle.domain.entities import AuditEvent
from dnstoggle.domain.ports.audit_log import AuditLogPort

MAX_EVENTS = 1000


class PgAuditLog(AuditLogPort):
    """
    Postgres implementation of AuditLogPort.

    Each record() runs in its own short transaction and trims the table to
    the newest MAX_EVENTS rows.
    """

    def __init__(self, pool: AsyncConnectionPool, *, max_events: int = MAX_EVENTS) -> None:
        self._pool = pool
        self._max_events = max_events

    async def record(self, event: AuditEvent) -> None:
        insert_sql = """
        INSERT INTO audit_events (event, success, details, occurred_at)
        VALUES (%s, %s, %s, %s)
        RETURNING id;
        """
        trim_sql = """
        DELETE FROM audit_events
        WHERE id IN (
            SELECT id FROM audit_events
            ORDER BY occurred_at DESC, id DESC
            OFFSET %s
        );
        """
        async with self._pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(
                        insert_sql,
                        (event.event, event.success, Jsonb(event.details), event.occurred_at),
                    )
                    row = await cur.fetchone()
                    await cur.execute(trim_sql, (self._max_events,))
        if row:
            event.id = int(row[0])

    async def recent(self, limit: int = 50) -> list[AuditEvent]:
        sql = """
        SELECT id, event, success, details, occurred_at
        FROM audit_events
        ORDER BY occurred_at DESC, id DESC
        LIMIT %s;
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (limit,))
                rows = await cur.fetchall()

        events: list[AuditEvent] = []
        for r in rows or ():
            events.append(
                AuditEvent(
                    id=int(r[0]),
                    event=r[1],
                    success=bool(r[2]),
                    details={str(k): str(v) for k, v in (r[3] or {}).items()},
                    occurred_at=r[4],
                )
            )
        return events

"""
SQLite persistence layer for reports and comments.

One ``ReportStore`` owns one long-lived aiosqlite connection. Every
statement runs under the store's lock, so concurrent requests are
serialized here rather than in the service. Password hashing runs in a
worker thread, never on the event loop or under the lock. The
close transition is a guarded UPDATE that only matches an open row, so
at most one close can ever win.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

import aiosqlite

from reportdesk.core.errors import InvalidState, NotFound, Unauthorized
from reportdesk.core.security import hash_password, verify_password

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS reports (
    id              TEXT PRIMARY KEY,
    title           TEXT NOT NULL CHECK (length(trim(title)) > 0),
    description     TEXT NOT NULL CHECK (length(trim(description)) > 0),
    location        TEXT NOT NULL CHECK (length(trim(location)) > 0),
    password_salt   TEXT NOT NULL,
    password_hash   TEXT NOT NULL,
    status          TEXT NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'closed')),
    created_at      TEXT NOT NULL,
    closed_at       TEXT
);

CREATE INDEX IF NOT EXISTS idx_reports_status ON reports(status, created_at);

CREATE TABLE IF NOT EXISTS comments (
    id          TEXT PRIMARY KEY,
    report_id   TEXT NOT NULL REFERENCES reports(id),
    body        TEXT NOT NULL,
    extra_json  TEXT NOT NULL DEFAULT '{}',
    created_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_comments_report ON comments(report_id, created_at);
"""

# Keys the store assigns itself; caller-supplied copies are dropped
RESERVED_COMMENT_KEYS = frozenset({"id", "body", "reportId", "report_id", "createdAt", "created_at"})


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _comment_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "report_id": row["report_id"],
        "body": row["body"],
        "created_at": row["created_at"],
        "extra": json.loads(row["extra_json"] or "{}"),
    }


class ReportStore:
    """Async persistence collaborator for the report lifecycle."""

    def __init__(self, path: str, password_iterations: int = 120000):
        self.path = path
        self.password_iterations = password_iterations
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "ReportStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        """Open the connection and create tables if they don't exist."""
        if self._conn is not None:
            return
        conn = await aiosqlite.connect(self.path, timeout=5.0)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        await conn.executescript(SCHEMA)
        await conn.commit()
        self._conn = conn
        logger.info("Report store ready at %s", self.path)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("Report store closed")

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is None:
            raise RuntimeError("Report store is not connected")
        async with self._lock:
            try:
                yield self._conn
                await self._conn.commit()
            except BaseException:
                await self._conn.rollback()
                raise

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def _fetch_report(self, conn: aiosqlite.Connection, report_id: str) -> Optional[Dict[str, Any]]:
        async with conn.execute("SELECT * FROM reports WHERE id = ?", (report_id,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        report = dict(row)
        report["comments"] = await self._fetch_comments(conn, report_id)
        return report

    async def _fetch_comments(self, conn: aiosqlite.Connection, report_id: str) -> List[Dict[str, Any]]:
        async with conn.execute(
            "SELECT * FROM comments WHERE report_id = ? ORDER BY created_at",
            (report_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_comment_row(r) for r in rows]

    async def get_report(self, report_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a single report with its comments, or None."""
        async with self._transaction() as conn:
            return await self._fetch_report(conn, report_id)

    async def fetch_open_reports(self) -> List[Dict[str, Any]]:
        """All open reports, oldest first, each with its comments attached."""
        async with self._transaction() as conn:
            async with conn.execute(
                "SELECT * FROM reports WHERE status = 'open' ORDER BY created_at, id"
            ) as cursor:
                reports = [dict(r) for r in await cursor.fetchall()]

            async with conn.execute(
                """
                SELECT c.* FROM comments c
                JOIN reports r ON r.id = c.report_id
                WHERE r.status = 'open'
                ORDER BY c.created_at
            """
            ) as cursor:
                comment_rows = await cursor.fetchall()

        by_report: Dict[str, List[Dict[str, Any]]] = {r["id"]: [] for r in reports}
        for row in comment_rows:
            by_report.setdefault(row["report_id"], []).append(_comment_row(row))
        for report in reports:
            report["comments"] = by_report[report["id"]]
        return reports

    # ── Writes ────────────────────────────────────────────────────────────────

    async def create_report(self, data: Mapping[str, str]) -> Dict[str, Any]:
        """Insert an open report. Returns the stored row (including password columns)."""
        rid = uuid.uuid4().hex
        salt, digest = await asyncio.to_thread(hash_password, data["password"], self.password_iterations)
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO reports
                    (id, title, description, location, password_salt, password_hash,
                     status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 'open', ?)
            """,
                (rid, data["title"], data["description"], data["location"], salt, digest, _now()),
            )
            report = await self._fetch_report(conn, rid)
        logger.info("Report %s created", rid)
        return report

    async def close_report(self, report_id: str, password: str) -> Dict[str, Any]:
        """
        Verify the password and move the report from open to closed.

        Raises NotFound, Unauthorized or InvalidState; nothing is written
        unless all checks pass. The password is verified in a worker thread
        outside the lock; the guarded UPDATE decides which close wins.
        """
        async with self._transaction() as conn:
            async with conn.execute(
                "SELECT password_salt, password_hash, status FROM reports WHERE id = ?",
                (report_id,),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            raise NotFound(f"Report {report_id} does not exist", details={"report_id": report_id})

        matches = await asyncio.to_thread(
            verify_password, password, row["password_salt"], row["password_hash"], self.password_iterations
        )
        if not matches:
            raise Unauthorized(
                "Password incorrect for this report, please try again",
                details={"report_id": report_id},
            )

        if row["status"] != "open":
            raise InvalidState("This report has already been closed", details={"report_id": report_id})

        async with self._transaction() as conn:
            cursor = await conn.execute(
                "UPDATE reports SET status = 'closed', closed_at = ? WHERE id = ? AND status = 'open'",
                (_now(), report_id),
            )
            changed = cursor.rowcount
            await cursor.close()
            if changed != 1:
                raise InvalidState("This report has already been closed", details={"report_id": report_id})

        logger.info("Report %s closed", report_id)
        return await self.get_report(report_id)

    async def create_comment(self, report_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Attach a comment to an existing report. Raises NotFound before any write."""
        cid = uuid.uuid4().hex
        extra = {k: v for k, v in fields.items() if k not in RESERVED_COMMENT_KEYS}
        async with self._transaction() as conn:
            async with conn.execute("SELECT 1 FROM reports WHERE id = ?", (report_id,)) as cursor:
                exists = await cursor.fetchone()
            if exists is None:
                raise NotFound(f"Report {report_id} does not exist", details={"report_id": report_id})

            created_at = _now()
            await conn.execute(
                """
                INSERT INTO comments (id, report_id, body, extra_json, created_at)
                VALUES (?, ?, ?, ?, ?)
            """,
                (cid, report_id, fields["body"], json.dumps(extra), created_at),
            )
        logger.info("Comment %s added to report %s", cid, report_id)
        return {
            "id": cid,
            "report_id": report_id,
            "body": fields["body"],
            "created_at": created_at,
            "extra": extra,
        }


"""Report lifecycle service.

Validates input, delegates to the store, and turns store rows into public
models. Holds no state of its own beyond the store reference.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from reportdesk.core.errors import PersistenceFailure, ValidationFailure, wrap_persistence_error
from reportdesk.models.comment_model import Comment
from reportdesk.models.database import ReportStore
from reportdesk.models.report_model import Report

logger = logging.getLogger(__name__)

REPORT_TEXT_FIELDS = ("title", "description", "location")
SECRET_FIELDS = ("password", "password_hash", "password_salt")


def _to_comment(row: Mapping[str, Any]) -> Comment:
    payload = dict(row.get("extra") or {})
    payload.update(
        id=row["id"],
        report_id=row["report_id"],
        body=row["body"],
        created_at=row["created_at"],
    )
    return Comment.model_validate(payload)


def _to_report(row: Mapping[str, Any]) -> Report:
    public = {k: v for k, v in row.items() if k not in SECRET_FIELDS}
    public["comments"] = [_to_comment(c) for c in row.get("comments") or []]
    return Report.model_validate(public)


def _require_text(value: Any, strip: bool = True) -> bool:
    if not isinstance(value, str):
        return False
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        # lone surrogates from JSON escapes like "\ud800"
        return False
    return bool(value.strip() if strip else value)


class ReportService:
    def __init__(self, store: ReportStore):
        self.store = store

    async def _call(self, context: str, operation, *args):
        try:
            result = await operation(*args)
        except Exception as exc:
            error = wrap_persistence_error(exc, context)
            if error is exc:
                raise
            logger.exception("%s failed", context)
            raise error from exc
        if result is None:
            raise PersistenceFailure(f"{context}: store returned no result")
        return result

    async def list_open_reports(self) -> List[Report]:
        rows = await self._call("fetch open reports", self.store.fetch_open_reports)
        return [_to_report(r) for r in rows]

    async def submit_report(
        self,
        title: Optional[str],
        description: Optional[str],
        location: Optional[str],
        password: Optional[str],
    ) -> Report:
        data = {"title": title, "description": description, "location": location}
        missing = [name for name in REPORT_TEXT_FIELDS if not _require_text(data[name])]
        if not _require_text(password, strip=False):
            missing.append("password")
        if missing:
            raise ValidationFailure(
                "Reports need a non-empty title, description, location and password",
                details={"fields": missing},
            )

        data = {name: data[name].strip() for name in REPORT_TEXT_FIELDS}
        data["password"] = password
        row = await self._call("create report", self.store.create_report, data)
        return _to_report(row)

    async def close_report(self, report_id: str, password: Optional[str]) -> Report:
        if not _require_text(password, strip=False):
            raise ValidationFailure("A password is required to close a report", details={"fields": ["password"]})
        row = await self._call("close report", self.store.close_report, report_id, password)
        return _to_report(row)

    async def add_comment(self, report_id: str, fields: Optional[Mapping[str, Any]]) -> Comment:
        if not isinstance(fields, Mapping) or not _require_text(fields.get("body")):
            raise ValidationFailure("Comments need a non-empty body", details={"fields": ["body"]})
        payload: Dict[str, Any] = dict(fields)
        payload["body"] = payload["body"].strip()
        row = await self._call("create comment", self.store.create_comment, report_id, payload)
        return _to_comment(row)

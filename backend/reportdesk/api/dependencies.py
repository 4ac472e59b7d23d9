"""
Shared API dependencies.

The store is created once in the application lifespan and kept on
``app.state``; routes get a service bound to it per request.
"""

from __future__ import annotations

from fastapi import Request

from reportdesk.core.errors import PersistenceFailure
from reportdesk.models.database import ReportStore
from reportdesk.services.report_service import ReportService


def get_store(request: Request) -> ReportStore:
    store = getattr(request.app.state, "store", None)
    if store is None or not store.connected:
        raise PersistenceFailure("Report store is not available")
    return store


def get_report_service(request: Request) -> ReportService:
    return ReportService(get_store(request))

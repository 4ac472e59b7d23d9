"""API router composition.

REST endpoints live under the configured prefix (``/api`` by default).
"""

from fastapi import APIRouter

from reportdesk.api.routes.reports import router as reports_router


api_router = APIRouter()

api_router.include_router(reports_router, tags=["reports"])

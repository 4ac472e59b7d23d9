"""Report request/response models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from reportdesk.models.comment_model import Comment


class ReportStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ReportCreate(BaseModel):
    # Left optional so missing fields surface as ValidationFailure from the service
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    password: Optional[str] = None


class ReportClose(BaseModel):
    password: Optional[str] = None


class Report(BaseModel):
    """Public view of a report. Never carries the password or its digest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    location: str
    status: ReportStatus
    created_at: str = Field(alias="createdAt")
    closed_at: Optional[str] = Field(default=None, alias="closedAt")
    comments: List[Comment] = []
"""Comment request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Comment body; any extra keys are kept and echoed back."""

    model_config = ConfigDict(extra="allow")

    body: Optional[str] = None


class Comment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    report_id: str = Field(alias="reportId")
    body: str
    created_at: str = Field(alias="createdAt")

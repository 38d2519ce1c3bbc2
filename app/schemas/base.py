"""Shared schema bases and the response envelope."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Reads attributes off ORM rows."""
    model_config = ConfigDict(from_attributes=True)


class RecordSchema(BaseSchema):
    """Columns every stored row carries."""
    id: UUID
    created_at: datetime
    updated_at: datetime


class ResponseSchema(BaseSchema):
    """Envelope of file and account endpoints: ``{status, message, data}``."""
    status: str
    message: Optional[str] = None
    data: Optional[Any] = None

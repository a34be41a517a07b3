"""
Request and response models for the profile HTTP adapter.
"""

from pydantic import BaseModel, field_validator
from typing import Any, Dict, List, Optional


class RowResponse(BaseModel):
    label: str
    value: Any = None


class FieldEdit(BaseModel):
    label: str
    value: str

    @field_validator('label')
    @classmethod
    def label_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('label cannot be empty')
        return v


class ProfileEditRequest(BaseModel):
    edits: List[FieldEdit]


class PreviewRequest(BaseModel):
    draft: Dict[str, Any]


class PreviewResponse(BaseModel):
    rows: List[RowResponse]
    previewable: bool


class ProfileView(BaseModel):
    rows: List[RowResponse]
    avatar: str
    gallery: List[str]


class DeleteResponse(BaseModel):
    success: bool
    connections_removed: int


class ConnectionAddResponse(BaseModel):
    result: str
    size: int


class ConnectionEntry(BaseModel):
    identity: Optional[str] = None
    rows: List[RowResponse]


class ConnectionListResponse(BaseModel):
    connections: List[ConnectionEntry]


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    storage_usage: int

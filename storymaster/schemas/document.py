"""Document request/response schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field


class DocumentCreate(BaseModel):
    project_id: str = Field(..., max_length=64)
    filename: str = Field(..., max_length=256)
    content: str = ""
    metadata: dict[str, Any] = {}


class DocumentUpdate(BaseModel):
    content: str
    commit_message: str = "Updated content"
    metadata: dict[str, Any] = {}


class DocumentRevert(BaseModel):
    version: int = Field(..., ge=1)
    commit_message: str | None = None


class DocumentResponse(BaseModel):
    id: str
    project_id: str
    filename: str
    content: str
    version: int
    metadata: dict[str, Any] = Field(validation_alias=AliasChoices("meta", "metadata"))
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DocumentVersionResponse(BaseModel):
    id: str
    document_id: str
    version: int
    content: str
    metadata: dict[str, Any] = Field(validation_alias=AliasChoices("meta", "metadata"))
    created_by: str
    commit_message: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class DiffChange(BaseModel):
    type: Literal["add", "delete", "modify"]
    line_number: int  # 1-based
    content: str


class DocumentDiff(BaseModel):
    additions: int = 0
    deletions: int = 0
    changes: list[DiffChange] = []

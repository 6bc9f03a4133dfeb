"""Workspace schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class WorkspaceRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class WorkspaceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    creator: UserRef
    created_at: datetime
    updated_at: datetime

"""Pydantic schemas for issues.

Learn: Separate schemas for create/update/read keeps the API clean.
- IssueCreate: what you POST (title, description, priority required)
- IssueUpdate: what you PUT — only the fields you send are applied
- IssueRead: what the API returns

Unknown body fields (owner_id, id, created_at...) are ignored, which is
how the owner stays fixed to the authenticated caller.
"""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from issuetracker.enums import IssuePriority, IssueSeverity, IssueStatus
from issuetracker.schemas.common import Pagination
from issuetracker.schemas.sanitize import sanitize_string

Title = Annotated[str, BeforeValidator(sanitize_string), Field(min_length=3, max_length=200)]
Description = Annotated[str, BeforeValidator(sanitize_string), Field(min_length=10)]

# Fields that may be omitted from an update but never explicitly nulled.
_NON_NULLABLE = ("title", "description", "status", "priority")


class IssueCreate(BaseModel):
    title: Title
    description: Description
    priority: IssuePriority
    severity: Optional[IssueSeverity] = None
    status: IssueStatus = IssueStatus.OPEN


class IssueUpdate(BaseModel):
    """Partial update — only fields present in the request body are applied."""
    title: Optional[Title] = None
    description: Optional[Description] = None
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    severity: Optional[IssueSeverity] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in _NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class IssueRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    status: IssueStatus
    priority: IssuePriority
    severity: Optional[IssueSeverity] = None
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class IssuePage(BaseModel):
    success: bool = True
    message: str
    data: list[IssueRead]
    pagination: Pagination

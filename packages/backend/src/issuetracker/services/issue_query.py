"""Issue query builder — filter, sort and paginate issue listings.

Learn: A listing request becomes two statements that share one WHERE
clause: a page query (ORDER BY / OFFSET / LIMIT) and a COUNT(*) query.
Every filter is ANDed; there is no OR across fields.

Enumerated filters are parsed up front so a typo like status=Opne fails
with a 400 instead of silently matching nothing.

Ties on the sort key are not broken by a secondary key, so the order of
issues with equal sort values is whatever the database returns.
"""

import enum
import math
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, and_, func, or_, select, true

from issuetracker.config import settings
from issuetracker.db.models import Issue
from issuetracker.enums import IssuePriority, IssueSeverity, IssueStatus, SortOrder
from issuetracker.errors import ValidationError

# API name → column. snake_case aliases are accepted too.
SORTABLE_FIELDS = {
    "createdAt": Issue.created_at,
    "updatedAt": Issue.updated_at,
    "title": Issue.title,
    "status": Issue.status,
    "priority": Issue.priority,
    "severity": Issue.severity,
}
_SORT_ALIASES = {"created_at": "createdAt", "updated_at": "updatedAt"}

# OFFSET is bound as a signed 64-bit integer by every supported driver.
MAX_OFFSET = 2**63 - 1


def _parse_enum(enum_cls: type[enum.Enum], field: str, raw: Optional[str]):
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field} value '{raw}'. Allowed: {allowed}")


@dataclass
class IssueQuery:
    """A validated listing request."""

    search: Optional[str] = None
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    severity: Optional[IssueSeverity] = None
    owner_id: Optional[uuid.UUID] = None
    page: int = 1
    limit: int = 10
    sort_by: str = "createdAt"
    order: SortOrder = SortOrder.DESC

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        severity: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
    ) -> "IssueQuery":
        """Parse raw request parameters. Raises ValidationError on bad input."""
        page = 1 if page is None else page
        limit = settings.default_page_size if limit is None else limit
        if page < 1:
            raise ValidationError("page must be at least 1")
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        limit = min(limit, settings.max_page_size)
        if (page - 1) * limit > MAX_OFFSET:
            raise ValidationError("page is out of range")

        sort_by = _SORT_ALIASES.get(sort_by, sort_by) if sort_by else "createdAt"
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Invalid sortBy value '{sort_by}'. Allowed: {', '.join(SORTABLE_FIELDS)}"
            )

        return cls(
            search=search.strip() if search and search.strip() else None,
            status=_parse_enum(IssueStatus, "status", status),
            priority=_parse_enum(IssuePriority, "priority", priority),
            severity=_parse_enum(IssueSeverity, "severity", severity),
            owner_id=owner_id,
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=_parse_enum(SortOrder, "order", order.lower() if order else None)
            or SortOrder.DESC,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def where_clause(self):
        conditions = []
        if self.owner_id is not None:
            conditions.append(Issue.owner_id == self.owner_id)
        if self.status is not None:
            conditions.append(Issue.status == self.status)
        if self.priority is not None:
            conditions.append(Issue.priority == self.priority)
        if self.severity is not None:
            conditions.append(Issue.severity == self.severity)
        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            conditions.append(
                or_(
                    Issue.title.ilike(pattern, escape="\\"),
                    Issue.description.ilike(pattern, escape="\\"),
                )
            )
        return and_(true(), *conditions)

    def page_statement(self) -> Select:
        column = SORTABLE_FIELDS[self.sort_by]
        ordering = column.asc() if self.order == SortOrder.ASC else column.desc()
        return (
            select(Issue)
            .where(self.where_clause())
            .order_by(ordering)
            .offset(self.offset)
            .limit(self.limit)
        )

    def count_statement(self) -> Select:
        return select(func.count()).select_from(Issue).where(self.where_clause())


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_pagination(page: int, limit: int, total: int) -> dict:
    """Pagination metadata for a page of `limit` items out of `total`."""
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
        "items_per_page": limit,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }

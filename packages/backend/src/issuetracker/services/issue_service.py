"""Issue service — business logic for the issue lifecycle.

Learn: Routes translate HTTP to service calls; the service owns every
rule about issues:
1. Owner is always the authenticated caller, never the request body
2. Updates apply only the fields the client sent
3. resolve/close are unconditional: any status may move to Resolved or Closed
4. Listing goes through IssueQuery (filters, sort, pagination)

There is no terminal status. A Closed issue can be reopened through
update_issue().
"""

import uuid
from typing import Union

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker.db.models import Issue
from issuetracker.enums import IssueStatus
from issuetracker.errors import NotFound
from issuetracker.schemas.issue import IssueCreate, IssueUpdate
from issuetracker.services.issue_query import IssueQuery, build_pagination

logger = structlog.get_logger()


def _parse_id(issue_id: Union[str, uuid.UUID]) -> uuid.UUID:
    """Malformed ids can't match anything, so they're reported as not found."""
    if isinstance(issue_id, uuid.UUID):
        return issue_id
    try:
        return uuid.UUID(str(issue_id))
    except ValueError:
        raise NotFound("Issue not found")


class IssueService:
    """Business logic for issue CRUD, status transitions and listing."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_issue(self, fields: IssueCreate, owner_id: uuid.UUID) -> Issue:
        """Persist a new issue owned by `owner_id`. Status defaults to Open."""
        issue = Issue(
            title=fields.title,
            description=fields.description,
            priority=fields.priority,
            severity=fields.severity,
            status=fields.status,
            owner_id=owner_id,
        )
        self.db.add(issue)
        await self.db.commit()
        await self.db.refresh(issue)

        logger.info(
            "issue.created",
            issue_id=str(issue.id),
            owner_id=str(owner_id),
            priority=issue.priority.value,
        )
        return issue

    # ─── Read ────────────────────────────────────────────

    async def get_issue(self, issue_id: Union[str, uuid.UUID]) -> Issue:
        issue = await self.db.get(Issue, _parse_id(issue_id))
        if issue is None:
            raise NotFound("Issue not found")
        return issue

    async def list_issues(self, query: IssueQuery) -> tuple[list[Issue], dict]:
        """Return one page of issues plus pagination metadata.

        Learn: The count and the page are two statements on the same
        session, so they run back-to-back rather than concurrently
        (an AsyncSession can't multiplex queries). Within one
        transaction on a snapshot-isolated database they see the same data.
        """
        total = (await self.db.execute(query.count_statement())).scalar_one()
        result = await self.db.execute(query.page_statement())
        issues = list(result.scalars().all())
        return issues, build_pagination(query.page, query.limit, total)

    async def status_counts(self, owner_id: uuid.UUID) -> dict[str, int]:
        """Count the owner's issues per status. Every status is present, even at 0."""
        result = await self.db.execute(
            select(Issue.status, func.count())
            .where(Issue.owner_id == owner_id)
            .group_by(Issue.status)
        )
        counts = {status.value: 0 for status in IssueStatus}
        for status, count in result.all():
            counts[IssueStatus(status).value] = count
        counts["total"] = sum(counts.values())
        return counts

    # ─── Update ──────────────────────────────────────────

    async def update_issue(
        self, issue_id: Union[str, uuid.UUID], changes: IssueUpdate
    ) -> Issue:
        """Apply only the supplied fields. id and owner are not updatable."""
        issue = await self.get_issue(issue_id)

        applied = changes.changes()
        for name, value in applied.items():
            setattr(issue, name, value)

        await self.db.commit()
        await self.db.refresh(issue)

        if applied:
            logger.info(
                "issue.updated",
                issue_id=str(issue.id),
                fields=sorted(applied),
            )
        return issue

    # ─── Status transitions ──────────────────────────────

    async def resolve_issue(self, issue_id: Union[str, uuid.UUID]) -> Issue:
        return await self._set_status(issue_id, IssueStatus.RESOLVED)

    async def close_issue(self, issue_id: Union[str, uuid.UUID]) -> Issue:
        return await self._set_status(issue_id, IssueStatus.CLOSED)

    async def _set_status(
        self, issue_id: Union[str, uuid.UUID], new_status: IssueStatus
    ) -> Issue:
        issue = await self.get_issue(issue_id)
        old_status = IssueStatus(issue.status)
        issue.status = new_status
        await self.db.commit()
        await self.db.refresh(issue)

        logger.info(
            "issue.status_changed",
            issue_id=str(issue.id),
            from_status=old_status.value,
            to_status=new_status.value,
        )
        return issue

    # ─── Delete ──────────────────────────────────────────

    async def delete_issue(self, issue_id: Union[str, uuid.UUID]) -> None:
        issue = await self.get_issue(issue_id)
        deleted_id = str(issue.id)
        await self.db.delete(issue)
        await self.db.commit()
        logger.info("issue.deleted", issue_id=deleted_id)

"""Issue API routes.

Learn: These routes are the HTTP interface to IssueService. The service
handles all rules (validation of enumerated filters, ownership, status
changes); routes just translate HTTP to service calls and wrap results
in the {success, message, data} envelope.

Key patterns:
- PUT for partial updates (only the fields sent are applied)
- PATCH /resolve and /close for the two dedicated status transitions
- Query params for filtering, sorting and pagination
- /counts is declared before /{issue_id} so it isn't captured as an id
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker.auth.dependencies import CurrentIdentity, get_current_user
from issuetracker.config import settings
from issuetracker.db.engine import get_db
from issuetracker.schemas.common import Envelope, ok
from issuetracker.schemas.issue import IssueCreate, IssuePage, IssueRead, IssueUpdate
from issuetracker.services.issue_query import IssueQuery
from issuetracker.services.issue_service import IssueService

router = APIRouter(prefix="/issues")


def _issue_svc(db: AsyncSession = Depends(get_db)) -> IssueService:
    return IssueService(db)


@router.post(
    "",
    response_model=Envelope[IssueRead],
    response_model_exclude_none=True,
    status_code=201,
)
async def create_issue(
    body: IssueCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IssueService = Depends(_issue_svc),
):
    """Create a new issue owned by the caller. Status defaults to Open."""
    issue = await svc.create_issue(body, owner_id=identity.user_id)
    return ok("Issue created successfully", IssueRead.model_validate(issue))


@router.get("", response_model=IssuePage, response_model_exclude_none=True)
async def list_issues(
    search: Optional[str] = Query(None, description="Free text over title and description"),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    severity: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: Optional[str] = Query(None, description="asc or desc"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IssueService = Depends(_issue_svc),
):
    """List issues with filters and pagination."""
    query = IssueQuery.from_params(
        search=search,
        status=status,
        priority=priority,
        severity=severity,
        owner_id=identity.user_id if settings.scope_issues_to_owner else None,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
    )
    issues, pagination = await svc.list_issues(query)
    return {
        "success": True,
        "message": "Issues retrieved successfully",
        "data": [IssueRead.model_validate(i) for i in issues],
        "pagination": pagination,
    }


@router.get("/counts", response_model=Envelope[dict[str, int]])
async def status_counts(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IssueService = Depends(_issue_svc),
):
    """Issue counts per status for the caller, plus a total."""
    counts = await svc.status_counts(identity.user_id)
    return ok("Status counts retrieved successfully", counts)


@router.get("/{issue_id}", response_model=Envelope[IssueRead], response_model_exclude_none=True)
async def get_issue(issue_id: str, svc: IssueService = Depends(_issue_svc)):
    issue = await svc.get_issue(issue_id)
    return ok("Issue retrieved successfully", IssueRead.model_validate(issue))


@router.put("/{issue_id}", response_model=Envelope[IssueRead], response_model_exclude_none=True)
async def update_issue(
    issue_id: str,
    body: IssueUpdate,
    svc: IssueService = Depends(_issue_svc),
):
    """Partially update an issue. Owner and id can't be changed."""
    issue = await svc.update_issue(issue_id, body)
    return ok("Issue updated successfully", IssueRead.model_validate(issue))


@router.patch(
    "/{issue_id}/resolve",
    response_model=Envelope[IssueRead],
    response_model_exclude_none=True,
)
async def resolve_issue(issue_id: str, svc: IssueService = Depends(_issue_svc)):
    """Mark an issue Resolved, whatever its current status."""
    issue = await svc.resolve_issue(issue_id)
    return ok("Issue marked as resolved", IssueRead.model_validate(issue))


@router.patch(
    "/{issue_id}/close",
    response_model=Envelope[IssueRead],
    response_model_exclude_none=True,
)
async def close_issue(issue_id: str, svc: IssueService = Depends(_issue_svc)):
    """Mark an issue Closed, whatever its current status."""
    issue = await svc.close_issue(issue_id)
    return ok("Issue marked as closed", IssueRead.model_validate(issue))


@router.delete("/{issue_id}", response_model=Envelope[None], response_model_exclude_none=True)
async def delete_issue(issue_id: str, svc: IssueService = Depends(_issue_svc)):
    await svc.delete_issue(issue_id)
    return ok("Issue deleted successfully")

"""
Change log API endpoints: the admin review queue.
"""

from fastapi import APIRouter, Depends

from finance_review.api.dependencies import (
    get_current_user_id,
    get_workflow,
    require_roles,
)
from finance_review.api.errors import to_http
from finance_review.exceptions import WorkflowError
from finance_review.models.enums import AppRole, ChangeLogStatus
from finance_review.schemas.change_log import (
    ChangeLogResponse,
    CommentCreate,
    CommentCreatedResponse,
    CommentResponse,
    ReviewResponse,
)
from finance_review.services.change_workflow import ChangeWorkflowService

router = APIRouter(prefix="/change-logs", tags=["Change Logs"])

admins = require_roles(AppRole.ADMIN)


@router.get("", response_model=list[ChangeLogResponse])
def list_change_logs(
    record_id: int | None = None,
    status: ChangeLogStatus | None = None,
    user_id: str = Depends(get_current_user_id),
    workflow: ChangeWorkflowService = Depends(get_workflow),
):
    """List change logs newest first."""
    return workflow.list_change_logs(record_id=record_id, status=status)


@router.post("/{change_log_id}/approve", response_model=ReviewResponse)
def approve_change(
    change_log_id: int,
    user_id: str = Depends(admins),
    workflow: ChangeWorkflowService = Depends(get_workflow),
):
    """
    Approve a pending change. Approving a change that is not
    pending returns 409.
    """
    try:
        result = workflow.approve(change_log_id, user_id)
    except WorkflowError as e:
        raise to_http(e)

    return ReviewResponse(
        change_log=ChangeLogResponse.model_validate(result.entry),
        notifications_sent=len(result.notifications.delivered),
        notifications_failed=len(result.notifications.failed),
    )


@router.post(
    "/{change_log_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=201,
)
def add_comment(
    change_log_id: int,
    request: CommentCreate,
    user_id: str = Depends(admins),
    workflow: ChangeWorkflowService = Depends(get_workflow),
):
    """Comment on a change; a pending change is sent back for revision."""
    try:
        result = workflow.add_comment(
            change_log_id, user_id, request.content, request.scope
        )
    except WorkflowError as e:
        raise to_http(e)

    return CommentCreatedResponse(
        comment=CommentResponse.model_validate(result.comment),
        change_log=ChangeLogResponse.model_validate(result.entry),
        reopened=result.reopened,
        notifications_sent=len(result.notifications.delivered),
        notifications_failed=len(result.notifications.failed),
    )


@router.get(
    "/{change_log_id}/comments",
    response_model=list[CommentResponse],
)
def list_comments(
    change_log_id: int,
    user_id: str = Depends(get_current_user_id),
    workflow: ChangeWorkflowService = Depends(get_workflow),
):
    try:
        return workflow.list_comments(change_log_id)
    except WorkflowError as e:
        raise to_http(e)

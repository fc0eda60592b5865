"""
Notification API endpoints.

Every route acts on the caller's own notifications. Marking
someone else's notification read returns 403.
"""

from fastapi import APIRouter, Depends, Query

from finance_review.api.dependencies import get_current_user_id, get_dispatcher
from finance_review.api.errors import to_http
from finance_review.exceptions import WorkflowError
from finance_review.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from finance_review.services.notification_dispatcher import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """The caller's notifications, newest first."""
    try:
        return dispatcher.list_for_user(user_id, limit)
    except WorkflowError as e:
        raise to_http(e)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return UnreadCountResponse(
        user_id=user_id, unread=dispatcher.unread_count(user_id)
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    try:
        marked = dispatcher.mark_all_read(user_id)
    except WorkflowError as e:
        raise to_http(e)
    return MarkAllReadResponse(user_id=user_id, marked=marked)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    user_id: str = Depends(get_current_user_id),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    try:
        return dispatcher.mark_read(notification_id, user_id)
    except WorkflowError as e:
        raise to_http(e)

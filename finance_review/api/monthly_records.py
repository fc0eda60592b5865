"""
Monthly record API endpoints.

The API layer only handles HTTP concerns. Month setup goes
to MonthlyRecordService; edits go to the review workflow.
"""

from fastapi import APIRouter, Depends, HTTPException

from finance_review.api.dependencies import (
    get_current_user_id,
    get_monthly_records,
    get_workflow,
    require_roles,
)
from finance_review.api.errors import to_http
from finance_review.exceptions import WorkflowError
from finance_review.models.enums import AppRole
from finance_review.schemas.change_log import ChangeLogResponse, EditResponse
from finance_review.schemas.monthly_record import (
    MonthInitializeRequest,
    MonthlyRecordEdit,
    MonthlyRecordResponse,
    parse_month,
)
from finance_review.services.change_workflow import ChangeWorkflowService
from finance_review.services.monthly_record_service import MonthlyRecordService

router = APIRouter(prefix="/monthly-records", tags=["Monthly Records"])

editors = require_roles(AppRole.FINANCE, AppRole.ADMIN)


@router.post(
    "/initialize",
    response_model=list[MonthlyRecordResponse],
    status_code=201,
)
def initialize_month(
    request: MonthInitializeRequest,
    user_id: str = Depends(editors),
    service: MonthlyRecordService = Depends(get_monthly_records),
):
    """
    Create pending records for every listed member that has
    no record for the month yet. Returns only new records.
    """
    try:
        return service.initialize_month(request, created_by=user_id)
    except WorkflowError as e:
        raise to_http(e)


@router.get("", response_model=list[MonthlyRecordResponse])
def list_month(
    month: str,
    user_id: str = Depends(get_current_user_id),
    service: MonthlyRecordService = Depends(get_monthly_records),
):
    """List a month's records (month as YYYY-MM)."""
    try:
        month_start = parse_month(month)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return service.list_month(month_start)


@router.get("/{record_id}", response_model=MonthlyRecordResponse)
def get_record(
    record_id: int,
    user_id: str = Depends(get_current_user_id),
    service: MonthlyRecordService = Depends(get_monthly_records),
):
    try:
        return service.get_record(record_id)
    except WorkflowError as e:
        raise to_http(e)


@router.patch("/{record_id}", response_model=EditResponse)
def edit_record(
    record_id: int,
    request: MonthlyRecordEdit,
    user_id: str = Depends(editors),
    workflow: ChangeWorkflowService = Depends(get_workflow),
):
    """
    Submit an edit for review.

    Each changed field becomes a pending change log and admins
    are notified. Unchanged values produce no change logs.
    """
    try:
        result = workflow.submit_edit(record_id, user_id, request.field_values())
    except WorkflowError as e:
        raise to_http(e)

    return EditResponse(
        record=MonthlyRecordResponse.model_validate(result.record),
        changes=[ChangeLogResponse.model_validate(e) for e in result.entries],
        notifications_sent=len(result.notifications.delivered),
        notifications_failed=len(result.notifications.failed),
    )

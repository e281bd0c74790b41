import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from broker_portal.api import deps
from broker_portal.core.errors import INTERNAL_SERVER_ERROR
from broker_portal.db.session import get_db
from broker_portal.models import Broker
from broker_portal.schemas.applications import (
    ApplicationCreate,
    ApplicationCreateResponse,
    ApplicationDTO,
    ApplicationListResponse,
    ApplicationStatus,
    TaskDTO,
)
from broker_portal.schemas.common import ErrorEnvelope
from broker_portal.services import application_filters, application_ingestion, application_queries
from broker_portal.services.application_store import ApplicationStoreError
from broker_portal.services.query_filters import InvalidDateRangeError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brokers/applications", tags=["Broker API"])

_INTERNAL_ERROR_RESPONSE = {
    "model": ErrorEnvelope,
    "description": f"Returns `{INTERNAL_SERVER_ERROR}` when the result could not be computed",
}


def _internal_error(exc: ApplicationStoreError) -> HTTPException:
    logger.error("Application store failure during %s", exc.operation, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": exc.code, "message": INTERNAL_SERVER_ERROR, "details": {}},
    )


def _application_payload(item: application_queries.ApplicationWithTask) -> ApplicationDTO:
    application = item.application
    return ApplicationDTO(
        id=application.id,
        broker_id=application.broker_id,
        status=application.status,
        loan_amount=application.loan_amount,
        applicant_name=application.applicant_name,
        applicant_email=application.applicant_email,
        notes=application.notes,
        created_at=application.created_at,
        updated_at=application.updated_at,
        task=TaskDTO.model_validate(item.task) if item.task is not None else None,
    )


@router.get(
    "/list-applications",
    response_model=ApplicationListResponse,
    summary="Finds applications belonging to a broker",
    description=(
        "Fetches the applications that the broker has submitted. The applications are "
        "optionally filtered by creation date, by application status, and by the status "
        "of the broker's task being pending or complete."
    ),
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorEnvelope,
            "description": "Returns `invalid_date_range` when minimumDate is after maximumDate",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: _INTERNAL_ERROR_RESPONSE,
    },
)
async def list_applications(
    current_broker: Broker = Depends(deps.require_broker),
    db: AsyncSession = Depends(get_db),
    minimum_date: datetime | None = Query(default=None, alias="minimumDate"),
    maximum_date: datetime | None = Query(default=None, alias="maximumDate"),
    completed: bool = Query(default=False),
    status_filter: list[ApplicationStatus] | None = Query(default=None, alias="status"),
) -> ApplicationListResponse:
    try:
        application_filter = application_filters.compose_application_filter(
            current_broker.id,
            minimum_date=minimum_date,
            maximum_date=maximum_date,
            completed=completed,
            statuses=status_filter,
        )
    except InvalidDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": exc.code, "message": exc.message, "details": exc.details},
        ) from exc

    try:
        items = await application_queries.find_applications(db, application_filter)
    except ApplicationStoreError as exc:
        raise _internal_error(exc) from exc
    return ApplicationListResponse(
        success=True,
        applications=[_application_payload(item) for item in items],
    )


@router.post(
    "/create-applications",
    response_model=ApplicationCreateResponse,
    status_code=status.HTTP_200_OK,
    summary="Create applications",
    description=(
        "Creates an application on behalf of the broker and reports whether its loan "
        "amount is above, below or at the average of existing applications. The amount "
        "is echoed back only when it differs from that average."
    ),
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: _INTERNAL_ERROR_RESPONSE,
    },
)
async def create_application(
    payload: ApplicationCreate,
    current_broker: Broker = Depends(deps.require_broker),
    db: AsyncSession = Depends(get_db),
) -> ApplicationCreateResponse:
    try:
        classification = await application_ingestion.submit_application(
            db, current_broker.id, payload
        )
    except ApplicationStoreError as exc:
        raise _internal_error(exc) from exc
    return ApplicationCreateResponse(
        success=True,
        loan_amount=classification.loan_amount,
        message=classification.message,
    )

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from broker_portal.core.logging import get_audit_logger
from broker_portal.models.application import Application
from broker_portal.schemas.applications import (
    ApplicationCreate,
    ApplicationStatus,
    LoanAmountPosition,
)
from broker_portal.services import application_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoanAmountClassification:
    position: LoanAmountPosition
    average: Decimal
    # None when the submitted amount equals the average.
    loan_amount: Decimal | None

    @property
    def message(self) -> str:
        return f"Loan amount is {self.position.value} average"


def classify_loan_amount(loan_amount: Decimal, average: Decimal) -> LoanAmountClassification:
    if loan_amount > average:
        position = LoanAmountPosition.ABOVE
    elif loan_amount < average:
        position = LoanAmountPosition.BELOW
    else:
        position = LoanAmountPosition.AT
    echoed = None if position is LoanAmountPosition.AT else loan_amount
    return LoanAmountClassification(position=position, average=average, loan_amount=echoed)


async def submit_application(
    db: AsyncSession,
    broker_id: UUID,
    payload: ApplicationCreate,
) -> LoanAmountClassification:
    """Persist a new SUBMITTED application and classify its loan amount.

    The average is read before the insert, so the classification never counts
    the new application's own amount.
    """
    average = await application_store.average_loan_amount(db)
    application = Application(
        **payload.model_dump(),
        status=ApplicationStatus.SUBMITTED.value,
        broker_id=broker_id,
    )
    await application_store.insert_application(db, application)

    classification = classify_loan_amount(payload.loan_amount, average)
    logger.debug(
        "Classified loan amount %s against average %s as %s",
        payload.loan_amount,
        average,
        classification.position.value,
    )
    get_audit_logger().info(
        "application.submitted application_id=%s loan_amount=%s position=%s",
        application.id,
        payload.loan_amount,
        classification.position.value,
    )
    return classification

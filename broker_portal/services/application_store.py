from __future__ import annotations

from decimal import Decimal

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from broker_portal.models.application import Application
from broker_portal.models.task import Task
from broker_portal.services.application_filters import (
    ApplicationFilter,
    ApplicationPredicate,
    JoinRequirement,
    TaskJoinClause,
)

# AVG over an empty table is NULL; callers see zero instead.
EMPTY_AVERAGE = Decimal("0")


class ApplicationStoreError(RuntimeError):
    """Any failure reading or writing applications. Never retried here."""

    code = "internal_server_error"

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Application store failure during {operation}")


def application_conditions(predicate: ApplicationPredicate) -> list:
    conditions = [Application.broker_id == predicate.broker_id]
    created_range = predicate.created_range
    if created_range.minimum is not None:
        conditions.append(Application.created_at >= created_range.minimum)
    if created_range.maximum is not None:
        conditions.append(Application.created_at <= created_range.maximum)
    if predicate.statuses:
        conditions.append(
            Application.status.in_(sorted(status.value for status in predicate.statuses))
        )
    return conditions


def task_join_condition(clause: TaskJoinClause):
    return and_(
        Task.application_id == Application.id,
        Task.status == clause.status.value,
        Task.assigned_to_broker_id == clause.assigned_to_broker_id,
    )


def build_application_query(application_filter: ApplicationFilter) -> Select:
    on_clause = task_join_condition(application_filter.task_join)
    stmt = select(Application, Task)
    if application_filter.task_join.requirement is JoinRequirement.MANDATORY:
        stmt = stmt.join(Task, on_clause)
    else:
        stmt = stmt.outerjoin(Task, on_clause)
    return stmt.where(*application_conditions(application_filter.predicate)).order_by(
        Application.created_at.desc()
    )


async def query_applications(
    db: AsyncSession, application_filter: ApplicationFilter
) -> list[tuple[Application, Task | None]]:
    stmt = build_application_query(application_filter)
    try:
        result = await db.execute(stmt)
        return [(application, task) for application, task in result.all()]
    except SQLAlchemyError as exc:
        raise ApplicationStoreError("query_applications") from exc


async def average_loan_amount(db: AsyncSession) -> Decimal:
    try:
        result = await db.execute(select(func.avg(Application.loan_amount)))
        value = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise ApplicationStoreError("average_loan_amount") from exc
    if value is None:
        return EMPTY_AVERAGE
    return value if isinstance(value, Decimal) else Decimal(str(value))


async def insert_application(db: AsyncSession, application: Application) -> Application:
    db.add(application)
    try:
        # Commit last: nothing may fail after the row becomes visible.
        await db.flush()
        await db.refresh(application)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise ApplicationStoreError("insert_application") from exc
    return application

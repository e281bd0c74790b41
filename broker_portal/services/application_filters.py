"""Compose the broker-scoped filter used to list applications.

The result is a plain value object. Turning it into SQL is the job of
``application_store``, so the same filter can be compared, logged and cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

from broker_portal.schemas.applications import ApplicationStatus, TaskStatus
from broker_portal.services.query_filters import DateRange, create_date_filter

logger = logging.getLogger(__name__)


class JoinRequirement(str, Enum):
    MANDATORY = "MANDATORY"
    OPTIONAL = "OPTIONAL"


@dataclass(frozen=True, slots=True)
class ApplicationPredicate:
    broker_id: UUID
    created_range: DateRange
    statuses: frozenset[ApplicationStatus] | None = None


@dataclass(frozen=True, slots=True)
class TaskJoinClause:
    status: TaskStatus
    assigned_to_broker_id: UUID
    requirement: JoinRequirement


@dataclass(frozen=True, slots=True)
class ApplicationFilter:
    predicate: ApplicationPredicate
    task_join: TaskJoinClause

    def describe(self) -> dict[str, Any]:
        created_range = self.predicate.created_range
        return {
            "broker_id": str(self.predicate.broker_id),
            "created_from": created_range.minimum.isoformat() if created_range.minimum else None,
            "created_to": created_range.maximum.isoformat() if created_range.maximum else None,
            "statuses": sorted(status.value for status in self.predicate.statuses or ()),
            "task_status": self.task_join.status.value,
            "task_join": self.task_join.requirement.value,
        }


def _normalize_statuses(
    statuses: Iterable[ApplicationStatus | str] | None,
) -> frozenset[ApplicationStatus] | None:
    if not statuses:
        return None
    normalized = frozenset(ApplicationStatus(status) for status in statuses)
    return normalized or None


def _task_join_clause(broker_id: UUID, completed: bool) -> TaskJoinClause:
    if completed:
        return TaskJoinClause(
            status=TaskStatus.COMPLETED,
            assigned_to_broker_id=broker_id,
            requirement=JoinRequirement.MANDATORY,
        )
    return TaskJoinClause(
        status=TaskStatus.PENDING,
        assigned_to_broker_id=broker_id,
        requirement=JoinRequirement.OPTIONAL,
    )


def compose_application_filter(
    broker_id: UUID | str,
    *,
    minimum_date: datetime | None = None,
    maximum_date: datetime | None = None,
    completed: bool = False,
    statuses: Iterable[ApplicationStatus | str] | None = None,
) -> ApplicationFilter:
    """Build the filter for a broker's application list.

    Applications are always restricted to ``broker_id``, and the task join is
    always restricted to tasks assigned to that broker. ``completed`` selects
    completed tasks and makes the join mandatory; otherwise pending tasks are
    joined optionally so applications without one are still returned.

    Raises ``InvalidDateRangeError`` when ``minimum_date`` is after ``maximum_date``.
    """
    broker_id = broker_id if isinstance(broker_id, UUID) else UUID(str(broker_id))
    application_filter = ApplicationFilter(
        predicate=ApplicationPredicate(
            broker_id=broker_id,
            created_range=create_date_filter(minimum_date, maximum_date),
            statuses=_normalize_statuses(statuses),
        ),
        task_join=_task_join_clause(broker_id, completed),
    )
    logger.debug("Composed application filter %s", application_filter.describe())
    return application_filter

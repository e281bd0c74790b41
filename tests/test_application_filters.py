from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from broker_portal.schemas.applications import ApplicationStatus, TaskStatus
from broker_portal.services.application_filters import (
    JoinRequirement,
    compose_application_filter,
)
from broker_portal.services.query_filters import DateRange, InvalidDateRangeError, create_date_filter

JAN_1 = datetime(2026, 1, 1, tzinfo=timezone.utc)
FEB_1 = datetime(2026, 2, 1, tzinfo=timezone.utc)


def test_broker_scope_is_applied_to_predicate_and_task_join():
    broker_id = uuid4()
    application_filter = compose_application_filter(broker_id)

    assert application_filter.predicate.broker_id == broker_id
    assert application_filter.task_join.assigned_to_broker_id == broker_id


def test_string_broker_id_is_coerced_to_uuid():
    broker_id = uuid4()
    application_filter = compose_application_filter(str(broker_id))
    assert application_filter.predicate.broker_id == broker_id


def test_different_brokers_never_share_scope():
    broker_a, broker_b = uuid4(), uuid4()
    filter_a = compose_application_filter(broker_a, completed=True, statuses=["APPROVED"])

    assert broker_b not in {
        filter_a.predicate.broker_id,
        filter_a.task_join.assigned_to_broker_id,
    }
    assert filter_a != compose_application_filter(broker_b, completed=True, statuses=["APPROVED"])


def test_default_joins_pending_tasks_optionally():
    application_filter = compose_application_filter(uuid4())

    assert application_filter.task_join.status is TaskStatus.PENDING
    assert application_filter.task_join.requirement is JoinRequirement.OPTIONAL


def test_completed_joins_completed_tasks_mandatorily():
    application_filter = compose_application_filter(uuid4(), completed=True)

    assert application_filter.task_join.status is TaskStatus.COMPLETED
    assert application_filter.task_join.requirement is JoinRequirement.MANDATORY


def test_no_dates_means_unbounded_range():
    application_filter = compose_application_filter(uuid4())
    assert application_filter.predicate.created_range.is_unbounded


@pytest.mark.parametrize(
    "minimum, maximum",
    [(JAN_1, None), (None, FEB_1), (JAN_1, FEB_1), (JAN_1, JAN_1)],
)
def test_date_bounds_are_kept_as_given(minimum, maximum):
    application_filter = compose_application_filter(
        uuid4(), minimum_date=minimum, maximum_date=maximum
    )
    assert application_filter.predicate.created_range == DateRange(minimum=minimum, maximum=maximum)


def test_inverted_range_raises_invalid_date_range():
    with pytest.raises(InvalidDateRangeError) as exc_info:
        compose_application_filter(uuid4(), minimum_date=FEB_1, maximum_date=JAN_1)

    assert exc_info.value.code == "invalid_date_range"
    assert exc_info.value.details == {
        "minimumDate": FEB_1.isoformat(),
        "maximumDate": JAN_1.isoformat(),
    }


def test_naive_dates_are_treated_as_utc():
    date_range = create_date_filter(datetime(2026, 1, 1), FEB_1)
    assert date_range.minimum == JAN_1


def test_naive_and_aware_bounds_still_detect_inversion():
    with pytest.raises(InvalidDateRangeError):
        create_date_filter(FEB_1, datetime(2026, 1, 1))


def test_statuses_are_normalized_to_a_frozenset():
    application_filter = compose_application_filter(
        uuid4(), statuses=["APPROVED", ApplicationStatus.REJECTED, "APPROVED"]
    )
    assert application_filter.predicate.statuses == frozenset(
        {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
    )


@pytest.mark.parametrize("statuses", [None, [], ()])
def test_missing_or_empty_statuses_apply_no_constraint(statuses):
    application_filter = compose_application_filter(uuid4(), statuses=statuses)
    assert application_filter.predicate.statuses is None


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        compose_application_filter(uuid4(), statuses=["ARCHIVED"])


def test_composition_is_deterministic():
    broker_id = uuid4()
    kwargs = dict(
        minimum_date=JAN_1,
        maximum_date=JAN_1 + timedelta(days=30),
        completed=True,
        statuses=["SUBMITTED", "IN_REVIEW"],
    )
    first = compose_application_filter(broker_id, **kwargs)
    second = compose_application_filter(broker_id, **kwargs)

    assert first == second
    assert hash(first) == hash(second)


def test_describe_is_json_friendly():
    broker_id = uuid4()
    application_filter = compose_application_filter(
        broker_id, minimum_date=JAN_1, statuses=["REJECTED", "APPROVED"]
    )
    assert application_filter.describe() == {
        "broker_id": str(broker_id),
        "created_from": JAN_1.isoformat(),
        "created_to": None,
        "statuses": ["APPROVED", "REJECTED"],
        "task_status": "PENDING",
        "task_join": "OPTIONAL",
    }


def test_debug_logging_does_not_change_result(caplog):
    broker_id = uuid4()
    quiet = compose_application_filter(broker_id, completed=True)
    with caplog.at_level("DEBUG", logger="broker_portal.services.application_filters"):
        logged = compose_application_filter(broker_id, completed=True)

    assert quiet == logged
    assert any("Composed application filter" in record.getMessage() for record in caplog.records)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


class InvalidDateRangeError(ValueError):
    """Raised when a caller supplies a minimum date after the maximum date."""

    code = "invalid_date_range"

    def __init__(self, minimum: datetime, maximum: datetime) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.message = "minimumDate must be on or before maximumDate"
        self.details = {
            "minimumDate": minimum.isoformat(),
            "maximumDate": maximum.isoformat(),
        }
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive bounds on a timestamp column. Either side may be open."""

    minimum: datetime | None = None
    maximum: datetime | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.minimum is None and self.maximum is None


def _as_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def create_date_filter(minimum: datetime | None, maximum: datetime | None) -> DateRange:
    minimum = _as_aware(minimum)
    maximum = _as_aware(maximum)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidDateRangeError(minimum, maximum)
    return DateRange(minimum=minimum, maximum=maximum)

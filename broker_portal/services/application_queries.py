from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from sqlalchemy.ext.asyncio import AsyncSession

from broker_portal.models.application import Application
from broker_portal.models.task import Task
from broker_portal.services import application_store
from broker_portal.services.application_filters import ApplicationFilter


@dataclass(frozen=True, slots=True)
class ApplicationWithTask:
    application: Application
    task: Task | None = None


async def find_applications(
    db: AsyncSession, application_filter: ApplicationFilter
) -> Iterator[ApplicationWithTask]:
    """Run the filter and yield each application with its joined task, if any.

    Store failures surface as ``ApplicationStoreError`` before anything is yielded.
    """
    rows = await application_store.query_applications(db, application_filter)
    return (ApplicationWithTask(application=application, task=task) for application, task in rows)

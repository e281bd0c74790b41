from broker_portal.models.application import Application
from broker_portal.models.broker import Broker
from broker_portal.models.task import Task

__all__ = [
    "Application",
    "Broker",
    "Task",
]

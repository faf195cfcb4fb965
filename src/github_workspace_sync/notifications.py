from logging import Logger
from typing import Literal, Protocol

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

NotificationVariant = Literal["default", "destructive"]


class Notification(BaseModel):
    """A short user facing message about the outcome of an operation."""

    title: str = Field(description="The headline of the notification.")
    description: str = Field(description="The details of the notification.")
    variant: NotificationVariant = Field(default="default", description="Whether the notification reports a problem.")


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Deliver notifications to the log, warnings for destructive ones."""

    def __init__(self, logger: Logger | None = None):
        self.logger: Logger = logger or get_logger(name=__name__)

    def notify(self, notification: Notification) -> None:
        log = self.logger.warning if notification.variant == "destructive" else self.logger.info
        log(f"{notification.title}: {notification.description}")

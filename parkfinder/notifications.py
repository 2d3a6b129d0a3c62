from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    # Runs once the user dismisses the notification
    on_ack: Callable[[], None] | None = None

    def acknowledge(self) -> None:
        if self.on_ack is not None:
            self.on_ack()


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class ConsoleNotifier:
    """Prints notifications and treats them as acknowledged straight away."""

    def notify(self, notification: Notification) -> None:
        print(f"[{notification.title}] {notification.message}")
        notification.acknowledge()

"""
Notifiers - sinks for user-facing cart error messages.

A notifier never affects control flow: CartStore calls `notify_error` and moves
on. Messages come from the shopcart.i18n catalogue.
"""
from typing import List, Protocol

from shopcart.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def notify_error(self, message: str) -> None: ...


class LoggingNotifier:
    """Writes messages to the log. Default when no UI sink is wired."""

    def notify_error(self, message: str) -> None:
        logger.warning(f"Cart notification: {message}")


class CollectingNotifier:
    """Keeps messages in order so a UI can drain them as toasts."""

    def __init__(self):
        self.messages: List[str] = []

    def notify_error(self, message: str) -> None:
        self.messages.append(message)

    def drain(self) -> List[str]:
        """Return pending messages and clear the queue."""
        pending, self.messages = self.messages, []
        return pending

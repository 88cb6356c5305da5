"""Admin notifications for data mutations."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from loguru import logger

DEFAULT_HISTORY_SIZE = 50


class NotificationLevel(Enum):
    """Notification severity levels."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notification:
    """One message shown to an admin after a mutation."""

    title: str
    level: NotificationLevel
    description: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert notification to dictionary."""
        return {
            "title": self.title,
            "level": self.level.value,
            "description": self.description,
            "timestamp": self.timestamp,
        }


class Notifier:
    """Logs notifications and keeps the most recent ones for the admin feed."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE):
        """
        Initialize notifier.

        Args:
            history_size: Number of notifications kept in memory
        """
        self._history: Deque[Notification] = deque(maxlen=history_size)

    def notify(
        self,
        title: str,
        level: NotificationLevel = NotificationLevel.SUCCESS,
        description: Optional[str] = None,
    ) -> Notification:
        """
        Record a notification.

        Args:
            title: Short message
            level: Severity
            description: Optional detail line

        Returns:
            Recorded notification
        """
        notification = Notification(title=title, level=level, description=description or "")
        self._history.append(notification)

        log_msg = f"{title}: {description}" if description else title
        if level is NotificationLevel.ERROR:
            logger.error(log_msg)
        else:
            logger.info(log_msg)
        return notification

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, NotificationLevel.SUCCESS, description)

    def error(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, NotificationLevel.ERROR, description)

    @property
    def history(self) -> List[Notification]:
        """Recorded notifications, oldest first."""
        return list(self._history)

    def clear(self) -> None:
        self._history.clear()

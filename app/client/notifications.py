import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass
class Notification:
    level: str
    message: str


@dataclass
class NotificationLog:
    """Transient user-facing notices, newest last."""

    items: List[Notification] = field(default_factory=list)

    def success(self, message: str):
        logger.info(message)
        self.items.append(Notification(SUCCESS, message))

    def error(self, message: str):
        logger.warning(message)
        self.items.append(Notification(ERROR, message))

    def messages(self, level: str = None) -> List[str]:
        return [n.message for n in self.items if level is None or n.level == level]

    def clear(self):
        self.items.clear()

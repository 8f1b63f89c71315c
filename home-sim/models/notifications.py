import itertools
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .types import Severity

NOTIFICATION_LIMIT = 50


@dataclass
class Notification:
    """A single entry in the household notification log."""
    id: int
    message: str
    severity: Severity = Severity.INFO
    timestamp: datetime = field(default_factory=datetime.now)
    read: bool = False

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'message': self.message,
            'severity': self.severity.value,
            'timestamp': self.timestamp.isoformat(),
            'read': self.read,
        }


class NotificationLog:
    """
    Bounded, newest-first notification log.
    Once the log holds NOTIFICATION_LIMIT entries, every insert evicts the
    oldest one.
    """

    def __init__(self, limit: int = NOTIFICATION_LIMIT):
        self._entries: deque = deque(maxlen=limit)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, message: str, severity: Severity = Severity.INFO,
            timestamp: Optional[datetime] = None) -> Notification:
        with self._lock:
            notification = Notification(
                id=next(self._ids),
                message=message,
                severity=severity,
                timestamp=timestamp or datetime.now(),
            )
            # maxlen drops from the right end, which holds the oldest entry
            self._entries.appendleft(notification)
        return notification

    def mark_read(self, notification_id: int) -> bool:
        with self._lock:
            for notification in self._entries:
                if notification.id == notification_id:
                    notification.read = True
                    return True
        return False

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._entries if not n.read)

    @property
    def limit(self) -> int:
        return self._entries.maxlen

    def copy(self) -> Tuple[Notification, ...]:
        """Detached copies, newest first."""
        with self._lock:
            return tuple(replace(n) for n in self._entries)

    def to_list(self) -> List[Dict]:
        return [n.to_dict() for n in self.copy()]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.copy())

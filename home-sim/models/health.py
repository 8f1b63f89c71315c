import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .notifications import NotificationLog
from .parameters import get_simulation_parameters
from .types import DeviceStatus, Severity

logger = logging.getLogger("DeviceHealth")

DEVICE_ROSTER = ("HVAC", "Lights", "Security", "Windows", "Doors")


@dataclass
class DeviceHealth:
    """Health record for one device category."""
    status: DeviceStatus = DeviceStatus.OK
    last_check: Optional[datetime] = None
    error_count: int = 0
    next_maintenance: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'status': self.status.value,
            'lastCheck': self.last_check.isoformat() if self.last_check else None,
            'errorCount': self.error_count,
            'nextMaintenance': self.next_maintenance.isoformat() if self.next_maintenance else None,
        }


class DeviceHealthMonitor:
    """
    Checks the fixed device roster after every processed command.

    Entries are created on first check and never removed. A device that
    flips to WARNING stays there; there is no recovery transition.
    """

    def __init__(self, health: Dict[str, DeviceHealth], notifications: NotificationLog,
                 rng: random.Random = None, roster: List[str] = None):
        self._health = health
        self._notifications = notifications
        self._random = rng or random.Random()
        self._roster = tuple(roster or DEVICE_ROSTER)

    @property
    def roster(self):
        return self._roster

    def check(self, now: datetime) -> List[str]:
        """Run one health pass. Returns the devices that raised a warning."""
        params = get_simulation_parameters()
        probability = params.get('device_warning_probability')
        maintenance = timedelta(days=params.get('maintenance_interval_days'))

        warned = []
        for device in self._roster:
            entry = self._health.get(device)
            if entry is None:
                entry = DeviceHealth()
                self._health[device] = entry
            entry.last_check = now

            if self._random.random() < probability:
                entry.status = DeviceStatus.WARNING
                entry.error_count += 1
                entry.next_maintenance = now + maintenance
                self._notifications.add(
                    f"{device} requires maintenance (error #{entry.error_count})",
                    Severity.WARNING,
                    now,
                )
                logger.warning(f"Device {device} raised a warning, maintenance due {entry.next_maintenance:%Y-%m-%d}")
                warned.append(device)
        return warned

    def report(self) -> Dict[str, Dict]:
        return {name: entry.to_dict() for name, entry in self._health.items()}

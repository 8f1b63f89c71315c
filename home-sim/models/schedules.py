import logging
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

logger = logging.getLogger("CommandPipeline")


def parse_time_of_day(value: Any) -> Optional[time]:
    """Parse 'HH:MM' into a time, or None."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        return None


class ScheduleBook:
    """
    Per-device schedules kept in the shared state.

    A payload with a 'time' ('HH:MM') and a 'command' object is runnable:
    the command fires on the first tick whose simulated clock passes that
    time of day. Other payloads are only stored.
    """

    def __init__(self, schedules: Dict[str, Dict[str, Any]]):
        self._schedules = schedules

    def store(self, device: str, payload: Dict[str, Any]) -> None:
        self._schedules[device] = dict(payload)
        logger.info(f"Schedule stored for {device}: {payload}")

    def due(self, previous: datetime, current: datetime) -> List[Dict[str, Any]]:
        """Commands whose time of day falls in (previous, current]."""
        if current <= previous:
            return []
        commands = []
        for device, payload in self._schedules.items():
            at = parse_time_of_day(payload.get('time'))
            command = payload.get('command')
            if at is None or not isinstance(command, dict):
                continue
            if self._crossed(at, previous, current):
                logger.info(f"Schedule for {device} due at {at:%H:%M}")
                commands.append(command)
        return commands

    @staticmethod
    def _crossed(at: time, previous: datetime, current: datetime) -> bool:
        candidate = datetime.combine(previous.date(), at)
        if candidate <= previous:
            candidate += timedelta(days=1)
        return candidate <= current

"""
Canonical mutable record of the simulated home.

Every bounded field is clamped on assignment, so every range limit holds
after any write, whether it comes from a simulation tick, a command, a
scene or a mode change.
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from .health import DeviceHealth
from .notifications import Notification, NotificationLog
from .types import DoorState, FanSpeed, HomeMode, SecurityStatus

# field -> (min, max, type)
BOUNDED_FIELDS = {
    'temperature': (15.0, 35.0, float),
    'target_temperature': (15.0, 35.0, float),
    'humidity': (30.0, 70.0, float),
    'light': (0.0, 1000.0, float),
    'air_quality': (0.0, 100.0, float),
    'light_level': (0, 255, int),
    'window_opening': (0, 100, int),
    'battery_level': (0.0, 100.0, float),
    'comfort_index': (0.0, 100.0, float),
    'energy_consumption': (0.0, float('inf'), float),
    'solar_production': (0.0, float('inf'), float),
}


def clamp(value, low, high):
    return max(low, min(high, value))


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value) -> bool:
    # ints are never converted, arbitrarily large ones included
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _coerce(name: str, value):
    low, high, kind = BOUNDED_FIELDS[name]
    if kind is int:
        value = int(round(value))
    else:
        value = float(value)
    return clamp(value, low, high)


@dataclass
class SystemState:
    """Single shared state of sensors, actuators and derived metrics."""
    # Sensors
    temperature: float = 22.0
    humidity: float = 45.0
    light: float = 500.0
    air_quality: float = 95.0
    motion: bool = False
    occupancy: bool = False

    # Actuators
    fan_speed: FanSpeed = FanSpeed.OFF
    light_level: int = 0
    window_opening: int = 0
    door_state: DoorState = DoorState.LOCKED
    security_status: SecurityStatus = SecurityStatus.DISARMED
    target_temperature: float = 22.0

    # Derived / operational
    energy_consumption: float = 0.0
    solar_production: float = 0.0
    battery_level: float = 50.0
    comfort_index: float = 100.0

    # Collections
    notifications: NotificationLog = field(default_factory=NotificationLog)
    device_health: Dict[str, DeviceHealth] = field(default_factory=dict)
    schedules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    active_modes: set = field(default_factory=set)
    active_scene: Optional[str] = None

    def __setattr__(self, name, value):
        if name in BOUNDED_FIELDS:
            value = _coerce(name, value)
        super().__setattr__(name, value)

    def snapshot(self, timestamp: datetime = None) -> 'StateSnapshot':
        """Return an immutable copy of the current state."""
        return StateSnapshot(
            timestamp=timestamp or datetime.now(),
            temperature=self.temperature,
            humidity=self.humidity,
            light=self.light,
            air_quality=self.air_quality,
            motion=self.motion,
            occupancy=self.occupancy,
            fan_speed=self.fan_speed,
            light_level=self.light_level,
            window_opening=self.window_opening,
            door_state=self.door_state,
            security_status=self.security_status,
            target_temperature=self.target_temperature,
            energy_consumption=self.energy_consumption,
            solar_production=self.solar_production,
            battery_level=self.battery_level,
            comfort_index=self.comfort_index,
            notifications=self.notifications.copy(),
            device_health=MappingProxyType(
                {name: copy.copy(entry) for name, entry in self.device_health.items()}
            ),
            schedules=MappingProxyType(copy.deepcopy(self.schedules)),
            active_modes=frozenset(self.active_modes),
            active_scene=self.active_scene,
        )


@dataclass(frozen=True)
class StateSnapshot:
    """Point-in-time copy of SystemState, as sent to observers."""
    timestamp: datetime
    temperature: float
    humidity: float
    light: float
    air_quality: float
    motion: bool
    occupancy: bool
    fan_speed: FanSpeed
    light_level: int
    window_opening: int
    door_state: DoorState
    security_status: SecurityStatus
    target_temperature: float
    energy_consumption: float
    solar_production: float
    battery_level: float
    comfort_index: float
    notifications: Tuple[Notification, ...]
    device_health: Mapping[str, DeviceHealth]
    schedules: Mapping[str, Dict[str, Any]]
    active_modes: FrozenSet[HomeMode]
    active_scene: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, ISO-8601 timestamp)."""
        return {
            'temperature': round(self.temperature, 2),
            'humidity': round(self.humidity, 2),
            'light': round(self.light, 1),
            'airQuality': round(self.air_quality, 2),
            'motion': self.motion,
            'occupancy': self.occupancy,
            'fanSpeed': self.fan_speed.value,
            'lightLevel': self.light_level,
            'windowOpening': self.window_opening,
            'doorState': self.door_state.value,
            'securityStatus': self.security_status.value,
            'targetTemperature': round(self.target_temperature, 2),
            'energyConsumption': round(self.energy_consumption, 1),
            'solarProduction': round(self.solar_production, 1),
            'batteryLevel': round(self.battery_level, 2),
            'comfortIndex': round(self.comfort_index, 1),
            'notifications': [n.to_dict() for n in self.notifications],
            'deviceHealth': {name: entry.to_dict() for name, entry in self.device_health.items()},
            'schedules': copy.deepcopy(dict(self.schedules)),
            'activeModes': sorted(mode.value for mode in self.active_modes),
            'activeScene': self.active_scene,
            'timestamp': self.timestamp.isoformat(),
        }

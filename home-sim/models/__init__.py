from .parameters import SimulationParameters, get_simulation_parameters
from .types import (
    FanSpeed, DoorState, SecurityStatus, Severity, DeviceStatus, HomeMode,
    CommandType, MessageType
)
from .notifications import Notification, NotificationLog, NOTIFICATION_LIMIT
from .health import DeviceHealth, DeviceHealthMonitor, DEVICE_ROSTER
from .state import SystemState, StateSnapshot, BOUNDED_FIELDS, clamp
from .analytics import AnalyticsWindow, Sample, EnergySample
from .simulation import simulation_step
from .commands import (
    Command, CommandParseError, command_from_dict,
    SetTemperature, SetFan, SetLight, SetWindow, SetDoor,
    CreateSchedule, CreateScene, ActivateScene, SetMode, TextCommand, UnknownCommand
)
from .sources import JsonCommandSource, FreeTextCommandSource, KeywordCommandMapper
from .scenes import Scene, SceneManager, MAX_SCENES, DEFAULT_SCENES_FILE
from .schedules import ScheduleBook
from .pipeline import CommandPipeline
from .engine import HomeEngine

__all__ = [
    'SimulationParameters', 'get_simulation_parameters',
    'FanSpeed', 'DoorState', 'SecurityStatus', 'Severity', 'DeviceStatus', 'HomeMode',
    'CommandType', 'MessageType',
    'Notification', 'NotificationLog', 'NOTIFICATION_LIMIT',
    'DeviceHealth', 'DeviceHealthMonitor', 'DEVICE_ROSTER',
    'SystemState', 'StateSnapshot', 'BOUNDED_FIELDS', 'clamp',
    'AnalyticsWindow', 'Sample', 'EnergySample',
    'simulation_step',
    'Command', 'CommandParseError', 'command_from_dict',
    'SetTemperature', 'SetFan', 'SetLight', 'SetWindow', 'SetDoor',
    'CreateSchedule', 'CreateScene', 'ActivateScene', 'SetMode', 'TextCommand', 'UnknownCommand',
    'JsonCommandSource', 'FreeTextCommandSource', 'KeywordCommandMapper',
    'Scene', 'SceneManager', 'MAX_SCENES', 'DEFAULT_SCENES_FILE',
    'ScheduleBook',
    'CommandPipeline',
    'HomeEngine'
]

import logging
from datetime import datetime
from typing import Callable

from .commands import (
    ActivateScene, Command, CreateScene, CreateSchedule, SetDoor, SetFan,
    SetLight, SetMode, SetTemperature, SetWindow, TextCommand, UnknownCommand
)
from .health import DeviceHealthMonitor
from .scenes import SceneManager
from .schedules import ScheduleBook
from .state import BOUNDED_FIELDS, SystemState, is_integer, is_number
from .types import DoorState, FanSpeed, HomeMode, SecurityStatus, Severity

logger = logging.getLogger("CommandPipeline")


def _in_range(value, name: str) -> bool:
    low, high, _ = BOUNDED_FIELDS[name]
    return low <= value <= high


class CommandPipeline:
    """
    Validates and applies one command against the shared state.

    Invalid values are dropped and logged, never reported to the sender.
    The device health check runs after every command, whether or not it
    was applied.
    """

    def __init__(self, state: SystemState, scenes: SceneManager,
                 health: DeviceHealthMonitor, clock: Callable[[], datetime]):
        self._state = state
        self._scenes = scenes
        self._health = health
        self._clock = clock
        self._schedules = ScheduleBook(state.schedules)
        self._handlers = {
            SetTemperature: self._set_temperature,
            SetFan: self._set_fan,
            SetLight: self._set_light,
            SetWindow: self._set_window,
            SetDoor: self._set_door,
            CreateSchedule: self._create_schedule,
            CreateScene: self._create_scene,
            ActivateScene: self._activate_scene,
            SetMode: self._set_mode,
            TextCommand: self._unresolved_text,
            UnknownCommand: self._unknown,
        }

    @property
    def schedules(self) -> ScheduleBook:
        return self._schedules

    def apply(self, command: Command) -> bool:
        """Apply a command. Returns True if the state was changed."""
        handler = self._handlers.get(type(command), self._unknown)
        try:
            applied = handler(command)
            if applied:
                logger.info(f"Applied {command.type} = {command.value!r}")
            return applied
        finally:
            self._health.check(self._clock())

    def _notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self._state.notifications.add(message, severity, self._clock())

    def _ignore(self, command: Command, reason: str) -> bool:
        logger.warning(f"Ignoring {command.type} with value {command.value!r}: {reason}")
        return False

    # --- Actuator commands ---

    def _set_temperature(self, command: Command) -> bool:
        value = command.value
        if not is_number(value) or not _in_range(value, 'temperature'):
            return self._ignore(command, "temperature must be a number in [15, 35]")
        self._state.temperature = value
        self._state.target_temperature = value
        self._notify(f"Temperature set to {float(value):.1f}°C")
        return True

    def _set_fan(self, command: Command) -> bool:
        try:
            speed = FanSpeed(command.value)
        except ValueError:
            return self._ignore(command, "unknown fan speed")
        self._state.fan_speed = speed
        self._notify(f"Fan speed set to {speed.value}")
        return True

    def _set_light(self, command: Command) -> bool:
        value = command.value
        if not is_integer(value) or not _in_range(value, 'light_level'):
            return self._ignore(command, "light level must be an integer in [0, 255]")
        self._state.light_level = value
        self._notify(f"Light level set to {int(value)}")
        return True

    def _set_window(self, command: Command) -> bool:
        value = command.value
        if not is_integer(value) or not _in_range(value, 'window_opening'):
            return self._ignore(command, "window opening must be an integer in [0, 100]")
        self._state.window_opening = value
        self._notify(f"Window opening set to {int(value)}%")
        return True

    def _set_door(self, command: Command) -> bool:
        try:
            door = DoorState(command.value)
        except ValueError:
            return self._ignore(command, "door state must be LOCKED or UNLOCKED")
        self._state.door_state = door
        severity = Severity.WARNING if door == DoorState.UNLOCKED else Severity.INFO
        self._notify(f"Door {door.value.lower()}", severity)
        return True

    # --- Schedules and scenes ---

    def _create_schedule(self, command: CreateSchedule) -> bool:
        if not isinstance(command.device, str) or not command.device:
            return self._ignore(command, "schedule needs a device")
        if not isinstance(command.value, dict):
            return self._ignore(command, "schedule payload missing")
        self._schedules.store(command.device, command.value)
        self._notify(f"Schedule created for {command.device}")
        return True

    def _create_scene(self, command: Command) -> bool:
        if command.value is None:
            return self._ignore(command, "scene payload missing")
        scene = self._scenes.create(command.value)
        if scene is None:
            return self._ignore(command, "scene failed validation or limit reached")
        self._notify(f"Scene '{scene.name}' saved")
        return True

    def _activate_scene(self, command: Command) -> bool:
        if not isinstance(command.value, str):
            return self._ignore(command, "scene name missing")
        scene = self._scenes.get(command.value)
        if scene is None:
            return self._ignore(command, "no such scene")

        state = self._state
        state.temperature = scene.temperature
        state.target_temperature = scene.temperature
        state.light_level = scene.light_level
        state.fan_speed = scene.fan_speed
        state.window_opening = scene.window_opening
        if scene.door_state is not None:
            state.door_state = scene.door_state
        state.active_scene = scene.name
        self._notify(f"Scene '{scene.name}' activated")
        return True

    # --- Home modes ---

    def _set_mode(self, command: Command) -> bool:
        value = command.value
        enabled = True
        if isinstance(value, dict):
            enabled = bool(value.get('enabled', True))
            value = value.get('mode')
        try:
            mode = HomeMode(value)
        except ValueError:
            return self._ignore(command, "unknown mode")

        state = self._state
        if not enabled:
            state.active_modes.discard(mode)
            if mode == HomeMode.VACATION:
                state.security_status = SecurityStatus.DISARMED
            self._notify(f"{mode.value.capitalize()} mode disabled")
            return True

        state.active_modes.add(mode)
        if mode == HomeMode.NIGHT:
            state.target_temperature = 20.0
            state.light_level = 30
        elif mode == HomeMode.VACATION:
            state.security_status = SecurityStatus.ARMED
            state.door_state = DoorState.LOCKED
        elif mode == HomeMode.PARTY:
            state.light_level = 255
            state.target_temperature = 22.0
        elif mode == HomeMode.ECO:
            state.target_temperature = 24.0
            state.fan_speed = FanSpeed.OFF
        self._notify(f"{mode.value.capitalize()} mode enabled")
        return True

    # --- Terminal variants ---

    def _unresolved_text(self, command: Command) -> bool:
        logger.warning(f"Text command not understood: {command.value!r}")
        return False

    def _unknown(self, command: Command) -> bool:
        logger.warning(f"Unknown command type: {command.type}")
        return False

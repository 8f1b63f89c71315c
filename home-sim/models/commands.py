"""
Structured control commands.

A command is one of a closed set of variants keyed by its wire `type` tag.
Tags outside the set become UnknownCommand, which the pipeline logs and
otherwise ignores. Values are carried as received; range and enum checks
belong to the pipeline handlers.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .types import CommandType


class CommandParseError(ValueError):
    """Raised when a payload cannot be read as a command at all."""


@dataclass(frozen=True)
class Command:
    type: str
    value: Any = None


@dataclass(frozen=True)
class SetTemperature(Command):
    pass


@dataclass(frozen=True)
class SetFan(Command):
    pass


@dataclass(frozen=True)
class SetLight(Command):
    pass


@dataclass(frozen=True)
class SetWindow(Command):
    pass


@dataclass(frozen=True)
class SetDoor(Command):
    pass


@dataclass(frozen=True)
class CreateSchedule(Command):
    device: Optional[str] = None


@dataclass(frozen=True)
class CreateScene(Command):
    pass


@dataclass(frozen=True)
class ActivateScene(Command):
    pass


@dataclass(frozen=True)
class SetMode(Command):
    pass


@dataclass(frozen=True)
class TextCommand(Command):
    pass


@dataclass(frozen=True)
class UnknownCommand(Command):
    payload: Mapping[str, Any] = field(default_factory=dict)


COMMAND_CLASSES = {
    CommandType.SET_TEMPERATURE: SetTemperature,
    CommandType.SET_FAN: SetFan,
    CommandType.SET_LIGHT: SetLight,
    CommandType.SET_WINDOW: SetWindow,
    CommandType.SET_DOOR: SetDoor,
    CommandType.CREATE_SCHEDULE: CreateSchedule,
    CommandType.CREATE_SCENE: CreateScene,
    CommandType.ACTIVATE_SCENE: ActivateScene,
    CommandType.SET_MODE: SetMode,
    CommandType.TEXT_COMMAND: TextCommand,
}


def command_from_dict(data: Any) -> Command:
    """
    Build a command variant from a decoded message.

    Raises:
        CommandParseError: if data is not an object with a string `type`
    """
    if not isinstance(data, dict):
        raise CommandParseError("Command must be a JSON object")
    tag = data.get('type')
    if not isinstance(tag, str) or not tag:
        raise CommandParseError("Command is missing a 'type' field")

    try:
        command_type = CommandType(tag)
    except ValueError:
        return UnknownCommand(type=tag, value=data.get('value'), payload=dict(data))

    cls = COMMAND_CLASSES[command_type]
    if cls is CreateSchedule:
        return CreateSchedule(type=tag, value=data.get('value'), device=data.get('device'))
    return cls(type=tag, value=data.get('value'))

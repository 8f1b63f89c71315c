import json
import logging
import re
from typing import Any, Dict, Optional

from interfaces import CommandMapper, CommandSource
from .commands import Command, CommandParseError, TextCommand, command_from_dict
from .types import CommandType

logger = logging.getLogger("CommandPipeline")


class KeywordCommandMapper(CommandMapper):
    """
    Small keyword vocabulary for spoken/typed requests.
    Anything outside it maps to None.
    """

    _FAN = re.compile(r"\bfan\b.*\b(off|low|medium|high)\b")
    _TEMPERATURE = re.compile(r"\btemperature\b.*\bto\s+(-?\d+(?:\.\d+)?)")
    _LIGHT_LEVEL = re.compile(r"\blights?\b.*\bto\s+(\d{1,6})\b")
    _WINDOW = re.compile(r"\bwindows?\b.*\bto\s+(\d{1,6})\b")
    _OPEN_CLOSE_WINDOW = re.compile(r"\b(open|close)\s+(?:the\s+|all\s+)?windows?\b")
    _SCENE = re.compile(r"\b(?:activate|start)\s+(?:the\s+)?scene\s+(.+)$", re.IGNORECASE)

    def map(self, text: str) -> Optional[Dict[str, Any]]:
        phrase = " ".join(text.lower().split())

        if "lights on" in phrase or "turn on the lights" in phrase:
            return {'type': CommandType.SET_LIGHT.value, 'value': 255}
        if "lights off" in phrase or "turn off the lights" in phrase:
            return {'type': CommandType.SET_LIGHT.value, 'value': 0}

        match = self._LIGHT_LEVEL.search(phrase)
        if match:
            return {'type': CommandType.SET_LIGHT.value, 'value': int(match.group(1))}

        match = self._TEMPERATURE.search(phrase)
        if match:
            return {'type': CommandType.SET_TEMPERATURE.value, 'value': float(match.group(1))}

        match = self._WINDOW.search(phrase)
        if match:
            return {'type': CommandType.SET_WINDOW.value, 'value': int(match.group(1))}
        match = self._OPEN_CLOSE_WINDOW.search(phrase)
        if match:
            return {'type': CommandType.SET_WINDOW.value, 'value': 100 if match.group(1) == 'open' else 0}

        if "unlock" in phrase and "door" in phrase:
            return {'type': CommandType.SET_DOOR.value, 'value': 'UNLOCKED'}
        if "lock" in phrase and "door" in phrase:
            return {'type': CommandType.SET_DOOR.value, 'value': 'LOCKED'}

        match = self._FAN.search(phrase)
        if match:
            return {'type': CommandType.SET_FAN.value, 'value': match.group(1).upper()}

        # scene names keep their case
        match = self._SCENE.search(" ".join(text.split()))
        if match:
            return {'type': CommandType.ACTIVATE_SCENE.value, 'value': match.group(1).strip()}

        return None


class FreeTextCommandSource(CommandSource):
    """Turns free text into a command through an external mapper."""

    def __init__(self, mapper: CommandMapper = None):
        self._mapper = mapper or KeywordCommandMapper()

    def produce(self, raw: Any) -> Command:
        if not isinstance(raw, str) or not raw.strip():
            return TextCommand(type=CommandType.TEXT_COMMAND.value, value=raw)
        mapped = self._mapper.map(raw)
        if mapped is None:
            logger.info(f"No command understood in text: {raw!r}")
            return TextCommand(type=CommandType.TEXT_COMMAND.value, value=raw)
        try:
            command = command_from_dict(mapped)
        except CommandParseError as e:
            logger.warning(f"Mapper returned an unusable command for {raw!r}: {e}")
            return TextCommand(type=CommandType.TEXT_COMMAND.value, value=raw)
        logger.info(f"Text {raw!r} mapped to {command.type}")
        return command


class JsonCommandSource(CommandSource):
    """
    Decodes UTF-8 JSON text frames into commands.
    TEXT_COMMAND frames are handed to the free-text source.
    """

    def __init__(self, text_source: FreeTextCommandSource = None):
        self._text_source = text_source or FreeTextCommandSource()

    def produce(self, raw: Any) -> Command:
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode('utf-8')
            except UnicodeDecodeError:
                raise CommandParseError("Payload is not valid UTF-8")
        if isinstance(raw, str):
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise CommandParseError(f"Invalid JSON: {e.msg}")
            except (ValueError, RecursionError) as e:
                # digit limit on huge integer literals, or nesting too deep
                raise CommandParseError(f"Unreadable JSON: {type(e).__name__}")
        else:
            data = raw

        command = command_from_dict(data)
        if isinstance(command, TextCommand):
            return self._text_source.produce(command.value)
        return command

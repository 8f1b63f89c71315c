"""
Scenes: named bundles of actuator settings.
Presets are loaded from YAML files; observers can add more at runtime.
"""
import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .state import is_integer, is_number
from .types import DoorState, FanSpeed

logger = logging.getLogger("Scenes")

MAX_SCENES = 10
SCENE_TEMPERATURE_RANGE = (16.0, 30.0)
DEFAULT_SCENES_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'scenes', 'default.yaml')


@dataclass
class Scene:
    name: str
    temperature: float
    light_level: int
    fan_speed: FanSpeed
    window_opening: int = 0
    door_state: Optional[DoorState] = None
    description: str = ""

    @property
    def efficiency(self) -> float:
        """Energy-efficiency score, 100 = lights off, fan off, neutral temperature."""
        fan_index = list(FanSpeed).index(self.fan_speed)
        energy_use = self.light_level / 255.0 + fan_index / 3.0 + abs(self.temperature - 22.0) / 10.0
        return round(100.0 - energy_use * 33.33, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'temperature': self.temperature,
            'lightLevel': self.light_level,
            'fanSpeed': self.fan_speed.value,
            'windowOpening': self.window_opening,
            'doorState': self.door_state.value if self.door_state else None,
            'description': self.description,
            'efficiency': self.efficiency,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional['Scene']:
        """Build a scene from an observer/YAML payload; None if it fails validation."""
        if not isinstance(data, dict):
            return None
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            return None

        temperature = data.get('temperature')
        if not is_number(temperature):
            return None
        low, high = SCENE_TEMPERATURE_RANGE
        if not low <= temperature <= high:
            return None

        light_level = data.get('lightLevel', data.get('light_level', 0))
        if not is_integer(light_level) or not 0 <= light_level <= 255:
            return None

        try:
            fan_speed = FanSpeed(data.get('fanSpeed', data.get('fan_speed', 'OFF')))
        except ValueError:
            return None

        if 'windowsOpen' in data:
            window_opening = 100 if data['windowsOpen'] else 0
        else:
            window_opening = data.get('windowOpening', data.get('window_opening', 0))
        if not is_integer(window_opening) or not 0 <= window_opening <= 100:
            return None

        door_state = None
        door = data.get('doorState', data.get('door_state'))
        if door is not None:
            try:
                door_state = DoorState(door)
            except ValueError:
                return None

        return cls(
            name=name.strip(),
            temperature=float(temperature),
            light_level=int(light_level),
            fan_speed=fan_speed,
            window_opening=int(window_opening),
            door_state=door_state,
            description=str(data.get('description', '')),
        )


class SceneManager:
    """
    Keeps up to MAX_SCENES named scenes.
    Creating a scene under an existing name replaces it.
    """

    def __init__(self, scenes_file: str = None):
        self._scenes: Dict[str, Scene] = {}
        if scenes_file:
            self.load(scenes_file)

    def load(self, file_path: str) -> int:
        """Load scene presets from a YAML file. Returns the number loaded."""
        if not os.path.exists(file_path):
            logger.warning(f"Scenes file not found: {file_path}")
            return 0
        try:
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load scenes from {file_path}: {e}")
            return 0

        count = 0
        for entry in data.get('scenes', []):
            if self.create(entry):
                count += 1
            else:
                logger.warning(f"Skipping invalid scene preset in {file_path}: {entry!r}")
        logger.info(f"Loaded {count} scenes from {file_path}")
        return count

    def create(self, data: Any) -> Optional[Scene]:
        scene = Scene.from_dict(data)
        if scene is None:
            return None
        if scene.name not in self._scenes and len(self._scenes) >= MAX_SCENES:
            logger.warning(f"Scene limit of {MAX_SCENES} reached, '{scene.name}' not stored")
            return None
        self._scenes[scene.name] = scene
        logger.info(f"Scene stored: {scene.name}")
        return scene

    def get(self, name: str) -> Optional[Scene]:
        return self._scenes.get(name)

    def delete(self, name: str) -> bool:
        return self._scenes.pop(name, None) is not None

    @property
    def names(self) -> List[str]:
        return list(self._scenes)

    def __len__(self) -> int:
        return len(self._scenes)

    def to_list(self) -> List[Dict[str, Any]]:
        return [scene.to_dict() for scene in self._scenes.values()]

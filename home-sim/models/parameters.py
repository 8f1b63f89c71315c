import logging
import math
import threading
from typing import Dict

logger = logging.getLogger("HomeEngine")

class SimulationParameters:
    """
    Global simulation parameters that control the home model.
    These can be adjusted through the admin API to customize the simulation.
    """

    # Default parameter values
    DEFAULTS = {
        # Climate Parameters
        'base_temperature': {
            'value': 22.0,
            'min': 15.0,
            'max': 30.0,
            'unit': '°C',
            'description': 'Daily mean indoor temperature',
            'category': 'climate'
        },
        'diurnal_amplitude': {
            'value': 3.0,
            'min': 0.0,
            'max': 8.0,
            'unit': '°C',
            'description': 'Amplitude of the day/night temperature curve',
            'category': 'climate'
        },
        'temperature_noise': {
            'value': 0.5,
            'min': 0.0,
            'max': 2.0,
            'unit': '°C',
            'description': 'Random temperature variation amplitude',
            'category': 'climate'
        },
        'humidity_drift': {
            'value': 0.3,
            'min': 0.0,
            'max': 2.0,
            'unit': '%',
            'description': 'Random humidity drift per tick',
            'category': 'climate'
        },
        'humidity_occupancy_bias': {
            'value': 0.1,
            'min': 0.0,
            'max': 1.0,
            'unit': '%',
            'description': 'Humidity bias per tick (damper when occupied, drier when vacant)',
            'category': 'climate'
        },
        'air_quality_decay': {
            'value': 0.1,
            'min': 0.0,
            'max': 2.0,
            'unit': 'AQI',
            'description': 'Air quality lost per tick while occupied',
            'category': 'climate'
        },
        'air_quality_recovery': {
            'value': 0.05,
            'min': 0.0,
            'max': 2.0,
            'unit': 'AQI',
            'description': 'Air quality regained per tick while vacant',
            'category': 'climate'
        },

        # Occupancy Schedule Parameters
        'occupied_from_hour': {
            'value': 17.0,
            'min': 0.0,
            'max': 23.0,
            'unit': 'hour',
            'description': 'Hour the household comes home (24-hour format)',
            'category': 'occupancy'
        },
        'occupied_until_hour': {
            'value': 8.0,
            'min': 0.0,
            'max': 23.0,
            'unit': 'hour',
            'description': 'Hour the household leaves (24-hour format)',
            'category': 'occupancy'
        },
        'motion_probability_occupied': {
            'value': 0.3,
            'min': 0.0,
            'max': 1.0,
            'unit': '',
            'description': 'Chance of motion per tick while occupied',
            'category': 'occupancy'
        },
        'motion_probability_vacant': {
            'value': 0.05,
            'min': 0.0,
            'max': 1.0,
            'unit': '',
            'description': 'Chance of motion per tick while vacant',
            'category': 'occupancy'
        },

        # Energy Parameters
        'base_load_w': {
            'value': 200.0,
            'min': 0.0,
            'max': 2000.0,
            'unit': 'W',
            'description': 'Always-on household load',
            'category': 'energy'
        },
        'hvac_load_w': {
            'value': 500.0,
            'min': 0.0,
            'max': 5000.0,
            'unit': 'W',
            'description': 'HVAC load when temperature is outside the deadband',
            'category': 'energy'
        },
        'hvac_deadband': {
            'value': 2.0,
            'min': 0.5,
            'max': 5.0,
            'unit': '°C',
            'description': 'Distance from 22 °C before HVAC load is drawn',
            'category': 'energy'
        },
        'lighting_max_w': {
            'value': 200.0,
            'min': 0.0,
            'max': 1000.0,
            'unit': 'W',
            'description': 'Lighting load at full light level (255)',
            'category': 'energy'
        },
        'occupancy_load_w': {
            'value': 100.0,
            'min': 0.0,
            'max': 1000.0,
            'unit': 'W',
            'description': 'Additional plug load while occupied',
            'category': 'energy'
        },
        'baseline_consumption_w': {
            'value': 1000.0,
            'min': 100.0,
            'max': 10000.0,
            'unit': 'W',
            'description': 'Reference consumption used for savings percentage',
            'category': 'energy'
        },
        'battery_capacity_wh': {
            'value': 10000.0,
            'min': 1000.0,
            'max': 100000.0,
            'unit': 'Wh',
            'description': 'Home battery storage capacity',
            'category': 'energy'
        },

        # Solar Parameters
        'solar_peak_w': {
            'value': 1000.0,
            'min': 0.0,
            'max': 20000.0,
            'unit': 'W',
            'description': 'Solar array output at noon',
            'category': 'solar'
        },

        # Device Health Parameters
        'device_warning_probability': {
            'value': 0.01,
            'min': 0.0,
            'max': 1.0,
            'unit': '',
            'description': 'Chance per check that a device raises a warning',
            'category': 'health'
        },
        'maintenance_interval_days': {
            'value': 7.0,
            'min': 1.0,
            'max': 90.0,
            'unit': 'days',
            'description': 'Days until maintenance after a warning',
            'category': 'health'
        },

        # Analytics Parameters
        'retention_hours': {
            'value': 24.0,
            'min': 1.0,
            'max': 168.0,
            'unit': 'hours',
            'description': 'Age after which analytics samples are evicted',
            'category': 'analytics'
        },

        # Broadcast Parameters
        'tick_interval': {
            'value': 2.0,
            'min': 0.01,
            'max': 60.0,
            'unit': 's',
            'description': 'Seconds between state updates sent to each observer',
            'category': 'broadcast'
        },
    }

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Singleton pattern for global parameters."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._values: Dict[str, float] = {}
        self._values_lock = threading.Lock()
        self._reset_to_defaults()
        self._initialized = True

    def _reset_to_defaults(self):
        with self._values_lock:
            self._values = {key: spec['value'] for key, spec in self.DEFAULTS.items()}

    def get(self, key: str) -> float:
        """Current value of a parameter; unknown keys read as 0.0."""
        if key not in self.DEFAULTS:
            return 0.0
        return self._values[key]

    def set(self, key: str, value) -> bool:
        """
        Store a new value, clamped to the parameter's range.

        Returns False for unknown keys and for values that are not finite
        numbers; the stored value is left as it was.
        """
        spec = self.DEFAULTS.get(key)
        if spec is None:
            logger.warning(f"Unknown simulation parameter '{key}'")
            return False
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning(f"Rejected non-numeric value for '{key}': {value!r}")
            return False
        if isinstance(value, float) and not math.isfinite(value):
            logger.warning(f"Rejected non-finite value for '{key}': {value!r}")
            return False

        # exact comparison first, so huge ints never hit float()
        clamped = float(min(max(value, spec['min']), spec['max']))
        with self._values_lock:
            self._values[key] = clamped
        logger.info(f"Simulation parameter '{key}' set to {clamped}")
        return True

    def _describe(self, key: str) -> Dict:
        spec = self.DEFAULTS[key]
        entry = {name: spec[name] for name in ('min', 'max', 'unit', 'description', 'category')}
        entry['value'] = self.get(key)
        entry['default'] = spec['value']
        return entry

    def get_all(self) -> Dict[str, Dict]:
        """Every parameter with its current value, default, range and metadata."""
        return {key: self._describe(key) for key in self.DEFAULTS}

    def get_by_category(self) -> Dict[str, Dict]:
        grouped: Dict[str, Dict] = {}
        for key, entry in self.get_all().items():
            category = entry.pop('category')
            grouped.setdefault(category, {})[key] = entry
        return grouped

    def set_multiple(self, params: Dict[str, float]) -> Dict[str, bool]:
        """Apply several updates; each key reports whether it was stored."""
        return {key: self.set(key, value) for key, value in params.items()}

    def reset(self, key: str = None) -> bool:
        """Restore one parameter, or all of them when key is None."""
        if key is None:
            self._reset_to_defaults()
            logger.info("Simulation parameters reset to defaults")
            return True
        if key not in self.DEFAULTS:
            return False
        with self._values_lock:
            self._values[key] = self.DEFAULTS[key]['value']
        logger.info(f"Simulation parameter '{key}' reset to {self._values[key]}")
        return True


def get_simulation_parameters() -> SimulationParameters:
    """Process-wide parameter registry."""
    return SimulationParameters()

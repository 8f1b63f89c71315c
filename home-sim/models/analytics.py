import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from .parameters import get_simulation_parameters

logger = logging.getLogger("Analytics")


@dataclass(frozen=True)
class Sample:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class EnergySample:
    timestamp: datetime
    consumption: float  # W
    production: float  # W


def _integrate_kwh(samples: Sequence[EnergySample], attr: str) -> float:
    """Trapezoidal integration of a W series into kWh."""
    total = 0.0
    for prev, cur in zip(samples, samples[1:]):
        hours = (cur.timestamp - prev.timestamp).total_seconds() / 3600.0
        if hours <= 0:
            continue
        total += (getattr(prev, attr) + getattr(cur, attr)) / 2.0 * hours
    return total / 1000.0


def _stats(values: List[float]) -> Dict[str, Optional[float]]:
    if not values:
        return {'min': None, 'max': None, 'avg': None, 'latest': None}
    return {
        'min': round(min(values), 2),
        'max': round(max(values), 2),
        'avg': round(sum(values) / len(values), 2),
        'latest': round(values[-1], 2),
    }


class AnalyticsWindow:
    """
    Rolling per-metric history fed by every simulation tick.

    Each update appends one sample per metric and then drops every sample
    older than the retention horizon, so no stale sample survives an update.
    """

    def __init__(self, retention: timedelta = None):
        self._retention_override = retention
        self._energy: List[EnergySample] = []
        self._temperature: List[Sample] = []
        self._humidity: List[Sample] = []
        self._lock = threading.Lock()

    @property
    def retention(self) -> timedelta:
        if self._retention_override is not None:
            return self._retention_override
        return timedelta(hours=get_simulation_parameters().get('retention_hours'))

    def update(self, timestamp: datetime, consumption: float, production: float,
               temperature: float, humidity: float) -> None:
        with self._lock:
            self._energy.append(EnergySample(timestamp, consumption, production))
            self._temperature.append(Sample(timestamp, temperature))
            self._humidity.append(Sample(timestamp, humidity))
            self._evict(timestamp)

    def _evict(self, now: datetime) -> None:
        cutoff = now - self.retention
        before = len(self._energy)
        self._energy = [s for s in self._energy if s.timestamp >= cutoff]
        self._temperature = [s for s in self._temperature if s.timestamp >= cutoff]
        self._humidity = [s for s in self._humidity if s.timestamp >= cutoff]
        evicted = before - len(self._energy)
        if evicted:
            logger.debug(f"Evicted {evicted} samples older than {cutoff.isoformat()}")

    @property
    def energy(self) -> List[EnergySample]:
        with self._lock:
            return list(self._energy)

    @property
    def temperature(self) -> List[Sample]:
        with self._lock:
            return list(self._temperature)

    @property
    def humidity(self) -> List[Sample]:
        with self._lock:
            return list(self._humidity)

    def __len__(self) -> int:
        return len(self._energy)

    def energy_stats(self) -> Dict[str, float]:
        """Current draw, window totals and savings against the baseline load."""
        energy = self.energy
        baseline = get_simulation_parameters().get('baseline_consumption_w')
        current = energy[-1].consumption if energy else 0.0
        consumed = _integrate_kwh(energy, 'consumption')
        produced = _integrate_kwh(energy, 'production')
        savings = (baseline - current) / baseline * 100.0
        return {
            'currentConsumption': round(current, 1),
            'consumedKwh': round(consumed, 4),
            'producedKwh': round(produced, 4),
            'netKwh': round(consumed - produced, 4),
            'savingsPercentage': round(max(0.0, savings), 1),
        }

    def summary(self) -> Dict[str, Dict]:
        energy = self.energy
        return {
            'samples': len(energy),
            'retentionHours': self.retention.total_seconds() / 3600.0,
            'energy': self.energy_stats(),
            'consumption': _stats([s.consumption for s in energy]),
            'production': _stats([s.production for s in energy]),
            'temperature': _stats([s.value for s in self.temperature]),
            'humidity': _stats([s.value for s in self.humidity]),
        }

    def to_dict(self) -> Dict[str, List[Dict]]:
        """Full series, oldest first."""
        return {
            'energyUsage': [
                {'timestamp': s.timestamp.isoformat(), 'consumption': round(s.consumption, 1),
                 'production': round(s.production, 1)}
                for s in self.energy
            ],
            'temperature': [
                {'timestamp': s.timestamp.isoformat(), 'value': round(s.value, 2)}
                for s in self.temperature
            ],
            'humidity': [
                {'timestamp': s.timestamp.isoformat(), 'value': round(s.value, 2)}
                for s in self.humidity
            ],
        }

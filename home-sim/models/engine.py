import os
import threading
import logging
import random
from datetime import datetime, timedelta

from interfaces import SimulationEngine
from .analytics import AnalyticsWindow
from .commands import Command, CommandParseError, command_from_dict
from .health import DeviceHealthMonitor
from .parameters import get_simulation_parameters
from .pipeline import CommandPipeline
from .scenes import SceneManager
from .simulation import simulation_step
from .state import StateSnapshot, SystemState

logger = logging.getLogger("HomeEngine")


class HomeEngine(SimulationEngine):
    """
    Owns the shared home state and everything allowed to mutate it (SRP).
    Collaborators can be injected (DIP); defaults are built from the environment.

    Ticks and commands run to completion under one lock, so the REST thread
    and the event loop never observe a half-applied change.
    """

    def __init__(self,
                 state: SystemState = None,
                 analytics: AnalyticsWindow = None,
                 scenes: SceneManager = None,
                 rng: random.Random = None,
                 start: datetime = None):
        self._seed: str = os.environ.get("SEED", "")
        self._random = rng or random.Random(self._seed or None)
        self._simulation_speed: float = max(0.1, min(100.0, float(os.environ.get("SIMULATION_SPEED", "1.0"))))
        self._simulation_date: datetime = start or datetime.now().replace(microsecond=0)

        self._state = state if state is not None else SystemState()
        self._analytics = analytics if analytics is not None else AnalyticsWindow()
        self._scenes = scenes if scenes is not None else SceneManager()
        self._health = DeviceHealthMonitor(
            self._state.device_health, self._state.notifications, self._random
        )
        self._pipeline = CommandPipeline(
            self._state, self._scenes, self._health, clock=lambda: self._simulation_date
        )
        self._lock = threading.RLock()
        self._tick_count = 0

    @property
    def state(self) -> SystemState:
        return self._state

    @property
    def analytics(self) -> AnalyticsWindow:
        return self._analytics

    @property
    def scenes(self) -> SceneManager:
        return self._scenes

    @property
    def health(self) -> DeviceHealthMonitor:
        return self._health

    @property
    def simulation_date(self) -> datetime:
        return self._simulation_date

    @property
    def simulation_speed(self) -> float:
        return self._simulation_speed

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def set_simulation_date(self, new_date: datetime) -> None:
        """Set the simulated clock."""
        with self._lock:
            self._simulation_date = new_date
            logger.info(f"Simulation date set to {new_date}")

    def set_simulation_speed(self, speed: float) -> None:
        with self._lock:
            self._simulation_speed = max(0.1, min(100.0, float(speed)))
            logger.info(f"Simulation speed set to {self._simulation_speed}")

    def tick(self, dt: float = None) -> StateSnapshot:
        """
        Advance the simulated clock by dt wall seconds (scaled by the
        simulation speed) and run one simulation step.
        """
        if dt is None:
            dt = get_simulation_parameters().get('tick_interval')
        with self._lock:
            previous = self._simulation_date
            sim_seconds = dt * self._simulation_speed
            self._simulation_date = previous + timedelta(seconds=sim_seconds)
            snapshot = simulation_step(
                self._state, self._analytics, self._simulation_date, self._random, sim_seconds
            )
            self._tick_count += 1

            due = self._pipeline.schedules.due(previous, self._simulation_date)
            for message in due:
                self._run_scheduled(message)
            if due:
                snapshot = self._state.snapshot(self._simulation_date)

        logger.debug(f"Tick {self._tick_count} at {self._simulation_date.isoformat()}: "
                     f"{snapshot.temperature:.1f}°C, {snapshot.energy_consumption:.0f} W")
        return snapshot

    def _run_scheduled(self, message) -> None:
        try:
            command = command_from_dict(message)
        except CommandParseError as e:
            logger.warning(f"Scheduled command skipped: {e}")
            return
        self._pipeline.apply(command)

    def handle_command(self, command: Command) -> bool:
        """Run one command through the pipeline."""
        with self._lock:
            return self._pipeline.apply(command)

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return self._state.snapshot(self._simulation_date)

    def mark_notification_read(self, notification_id: int) -> bool:
        with self._lock:
            return self._state.notifications.mark_read(notification_id)

    def get_analytics(self) -> dict:
        with self._lock:
            return {
                'summary': self._analytics.summary(),
                'series': self._analytics.to_dict(),
            }

    def get_device_health(self) -> dict:
        with self._lock:
            return self._health.report()

    def get_notifications(self) -> dict:
        with self._lock:
            log = self._state.notifications
            return {
                'notifications': log.to_list(),
                'unread': log.unread_count,
                'limit': log.limit,
            }

    def get_scenes(self) -> list:
        with self._lock:
            return self._scenes.to_list()

    def delete_scene(self, name: str) -> bool:
        with self._lock:
            deleted = self._scenes.delete(name)
            if deleted and self._state.active_scene == name:
                self._state.active_scene = None
            return deleted

    def get_status(self) -> dict:
        """Engine metadata for the REST API."""
        with self._lock:
            return {
                'simulation_date': self._simulation_date.isoformat(),
                'simulation_speed': self._simulation_speed,
                'tick_count': self._tick_count,
                'seed': self._seed,
                'scenes': self._scenes.names,
                'analytics_samples': len(self._analytics),
            }

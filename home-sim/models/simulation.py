"""
One discrete simulation tick.

Each step reads the field values written by the previous steps of the same
tick, so later terms (energy, comfort) see the freshly drawn temperature and
light rather than the pre-tick values.
"""
import math
import random
from datetime import datetime

from .analytics import AnalyticsWindow
from .parameters import get_simulation_parameters
from .state import StateSnapshot, SystemState

DAYLIGHT_START_HOUR = 6
DAYLIGHT_END_HOUR = 18
NEUTRAL_TEMPERATURE = 22.0
DAY_LIGHT_RANGE = (500.0, 800.0)
NIGHT_LIGHT_RANGE = (50.0, 150.0)
SOLAR_MULTIPLIER_RANGE = (0.8, 1.2)
COMFORT_HUMIDITY = 50.0


def fractional_hour(now: datetime) -> float:
    return now.hour + now.minute / 60.0 + now.second / 3600.0


def is_daylight(now: datetime) -> bool:
    return DAYLIGHT_START_HOUR <= now.hour <= DAYLIGHT_END_HOUR


def is_occupied(now: datetime) -> bool:
    """Home schedule; the window may wrap past midnight."""
    params = get_simulation_parameters()
    start = int(params.get('occupied_from_hour'))
    end = int(params.get('occupied_until_hour'))
    if start == end:
        return True
    if start < end:
        return start <= now.hour < end
    return now.hour >= start or now.hour < end


def diurnal_temperature(now: datetime, rng: random.Random) -> float:
    params = get_simulation_parameters()
    hour = fractional_hour(now)
    noise = params.get('temperature_noise')
    return (params.get('base_temperature')
            + params.get('diurnal_amplitude') * math.sin(2 * math.pi * hour / 24)
            + rng.uniform(-noise, noise))


def energy_consumption(temperature: float, light_level: int, occupied: bool) -> float:
    """Household draw in W: base + HVAC + lighting + occupancy."""
    params = get_simulation_parameters()
    load = params.get('base_load_w')
    if abs(temperature - NEUTRAL_TEMPERATURE) > params.get('hvac_deadband'):
        load += params.get('hvac_load_w')
    load += light_level / 255.0 * params.get('lighting_max_w')
    if occupied:
        load += params.get('occupancy_load_w')
    return load


def solar_production(now: datetime, rng: random.Random) -> float:
    """Triangular daylight curve peaking at noon, with weather jitter."""
    if not is_daylight(now):
        return 0.0
    hour = fractional_hour(now)
    half_span = (DAYLIGHT_END_HOUR - DAYLIGHT_START_HOUR) / 2.0
    efficiency = max(0.0, 1.0 - abs(hour - 12.0) / half_span)
    return efficiency * rng.uniform(*SOLAR_MULTIPLIER_RANGE) * get_simulation_parameters().get('solar_peak_w')


def comfort_index(temperature: float, target: float, humidity: float, air_quality: float) -> float:
    temp_factor = 1.0 - abs(temperature - target) / 10.0
    humidity_factor = 1.0 - abs(humidity - COMFORT_HUMIDITY) / 30.0
    air_factor = air_quality / 100.0
    return (temp_factor + humidity_factor + air_factor) / 3.0 * 100.0


def simulation_step(state: SystemState, analytics: AnalyticsWindow, now: datetime,
                    rng: random.Random, dt: float = 0.0) -> StateSnapshot:
    """
    Advance the state by one tick at simulated time `now`.

    Args:
        state: Shared state, mutated in place
        analytics: Window receiving this tick's sample
        now: Simulated time of the tick
        rng: Random source
        dt: Simulated seconds covered by the tick (battery integration)
    """
    params = get_simulation_parameters()
    state.occupancy = is_occupied(now)
    occupied = state.occupancy

    # 1. Diurnal temperature
    state.temperature = diurnal_temperature(now, rng)

    # 2. Humidity drifts toward dampness when occupied
    drift = params.get('humidity_drift')
    bias = params.get('humidity_occupancy_bias')
    state.humidity = state.humidity + rng.uniform(-drift, drift) + (bias if occupied else -bias)

    # 3. Motion
    if occupied:
        threshold = 1.0 - params.get('motion_probability_occupied')
    else:
        threshold = 1.0 - params.get('motion_probability_vacant')
    state.motion = rng.random() > threshold

    # 4. Ambient light
    low, high = DAY_LIGHT_RANGE if is_daylight(now) else NIGHT_LIGHT_RANGE
    state.light = rng.uniform(low, high)

    # 5. Air quality
    if occupied:
        state.air_quality = state.air_quality - params.get('air_quality_decay')
    else:
        state.air_quality = state.air_quality + params.get('air_quality_recovery')

    # 6. Consumption
    state.energy_consumption = energy_consumption(state.temperature, state.light_level, occupied)

    # 7. Solar
    state.solar_production = solar_production(now, rng)

    # Battery absorbs the surplus and covers the deficit
    if dt > 0:
        net_wh = (state.solar_production - state.energy_consumption) * dt / 3600.0
        state.battery_level = state.battery_level + net_wh / params.get('battery_capacity_wh') * 100.0

    state.comfort_index = comfort_index(state.temperature, state.target_temperature,
                                        state.humidity, state.air_quality)

    # 8. Analytics
    analytics.update(now, state.energy_consumption, state.solar_production,
                     state.temperature, state.humidity)

    return state.snapshot(now)

import pytest

from models import (
    DeviceStatus, DoorState, FanSpeed, HomeMode, SecurityStatus, Severity, command_from_dict
)


def send(engine, type_, value=None, **extra):
    return engine.handle_command(command_from_dict({'type': type_, 'value': value, **extra}))


@pytest.fixture
def home(engine, quiet_devices):
    return engine


def test_set_temperature_updates_target_and_notifies(home):
    assert send(home, 'SET_TEMPERATURE', 25) is True
    state = home.state
    assert state.temperature == 25.0
    assert state.target_temperature == 25.0
    latest = state.notifications.copy()[0]
    assert latest.message == "Temperature set to 25.0°C"
    assert latest.severity == Severity.INFO


@pytest.mark.parametrize("value", [40, 10, "hot", None, True, 10 ** 400])
def test_invalid_temperature_is_ignored(home, value):
    assert send(home, 'SET_TEMPERATURE', value) is False
    assert home.state.temperature == 22.0
    assert len(home.state.notifications) == 0


def test_set_fan(home):
    assert send(home, 'SET_FAN', 'HIGH') is True
    assert home.state.fan_speed == FanSpeed.HIGH
    assert send(home, 'SET_FAN', 'TURBO') is False
    assert home.state.fan_speed == FanSpeed.HIGH


@pytest.mark.parametrize("value, applied, expected", [
    (128, True, 128),
    (0, True, 0),
    (255, True, 255),
    (256, False, 0),
    (-1, False, 0),
    (12.5, False, 0),
    ("bright", False, 0),
    (10 ** 400, False, 0),
])
def test_set_light(home, value, applied, expected):
    assert send(home, 'SET_LIGHT', value) is applied
    assert home.state.light_level == expected


@pytest.mark.parametrize("value, applied, expected", [(50, True, 50), (101, False, 0), ("half", False, 0), (10 ** 400, False, 0)])
def test_set_window(home, value, applied, expected):
    assert send(home, 'SET_WINDOW', value) is applied
    assert home.state.window_opening == expected


def test_unlocking_door_raises_warning(home):
    assert send(home, 'SET_DOOR', 'UNLOCKED') is True
    assert home.state.door_state == DoorState.UNLOCKED
    latest = home.state.notifications.copy()[0]
    assert latest.message == "Door unlocked"
    assert latest.severity == Severity.WARNING

    send(home, 'SET_DOOR', 'LOCKED')
    latest = home.state.notifications.copy()[0]
    assert latest.message == "Door locked"
    assert latest.severity == Severity.INFO


def test_invalid_door_state(home):
    assert send(home, 'SET_DOOR', 'AJAR') is False
    assert home.state.door_state == DoorState.LOCKED


def test_create_schedule(home):
    payload = {'time': '07:00', 'command': {'type': 'SET_LIGHT', 'value': 200}}
    assert send(home, 'CREATE_SCHEDULE', payload, device='Lights') is True
    assert home.state.schedules['Lights'] == payload

    assert send(home, 'CREATE_SCHEDULE', payload) is False
    assert send(home, 'CREATE_SCHEDULE', "07:00", device='Lights') is False


def test_unknown_command_is_ignored(home):
    # first command populates device health
    send(home, 'SELF_DESTRUCT', 1)
    before = home.snapshot().to_dict()
    assert send(home, 'SELF_DESTRUCT', 1) is False
    after = home.snapshot().to_dict()
    assert before == after


def test_health_check_runs_after_every_command(home):
    send(home, 'SELF_DESTRUCT')
    health = home.state.device_health
    assert set(health) == {"HVAC", "Lights", "Security", "Windows", "Doors"}
    assert all(entry.last_check == home.simulation_date for entry in health.values())


def test_health_warning_is_recorded(engine, reset_parameters):
    reset_parameters.set('device_warning_probability', 1.0)
    send(engine, 'SET_FAN', 'LOW')

    entry = engine.state.device_health['HVAC']
    assert entry.status == DeviceStatus.WARNING
    assert entry.error_count == 1
    assert (entry.next_maintenance - engine.simulation_date).days == 7
    messages = [n.message for n in engine.state.notifications]
    assert "HVAC requires maintenance (error #1)" in messages


# --- Scenes ---

MOVIE = {'name': 'Movie', 'temperature': 21, 'lightLevel': 40, 'fanSpeed': 'LOW', 'windowOpening': 0}


def test_create_and_activate_scene(home):
    assert send(home, 'CREATE_SCENE', MOVIE) is True
    send(home, 'SET_LIGHT', 255)

    assert send(home, 'ACTIVATE_SCENE', 'Movie') is True
    state = home.state
    assert state.light_level == 40
    assert state.fan_speed == FanSpeed.LOW
    assert state.target_temperature == 21.0
    assert state.active_scene == 'Movie'
    assert state.notifications.copy()[0].message == "Scene 'Movie' activated"


def test_activate_missing_scene(home):
    assert send(home, 'ACTIVATE_SCENE', 'Nope') is False
    assert home.state.active_scene is None


@pytest.mark.parametrize("patch", [
    {'temperature': 35},
    {'lightLevel': 300},
    {'lightLevel': 10 ** 400},
    {'fanSpeed': 'TURBO'},
    {'windowOpening': 150},
    {'name': ''},
])
def test_invalid_scene_is_rejected(home, patch):
    assert send(home, 'CREATE_SCENE', {**MOVIE, **patch}) is False
    assert len(home.scenes) == 0


# --- Modes ---

def test_night_mode(home):
    assert send(home, 'SET_MODE', 'night') is True
    assert home.state.target_temperature == 20.0
    assert home.state.light_level == 30
    assert HomeMode.NIGHT in home.state.active_modes


def test_vacation_mode_arms_and_disarms(home):
    send(home, 'SET_DOOR', 'UNLOCKED')
    send(home, 'SET_MODE', 'vacation')
    assert home.state.security_status == SecurityStatus.ARMED
    assert home.state.door_state == DoorState.LOCKED

    send(home, 'SET_MODE', {'mode': 'vacation', 'enabled': False})
    assert home.state.security_status == SecurityStatus.DISARMED
    assert HomeMode.VACATION not in home.state.active_modes


def test_party_and_eco_modes(home):
    send(home, 'SET_FAN', 'HIGH')
    send(home, 'SET_MODE', 'party')
    assert home.state.light_level == 255
    send(home, 'SET_MODE', 'eco')
    assert home.state.target_temperature == 24.0
    assert home.state.fan_speed == FanSpeed.OFF
    assert home.state.active_modes == {HomeMode.PARTY, HomeMode.ECO}


def test_unknown_mode(home):
    assert send(home, 'SET_MODE', 'disco') is False
    assert not home.state.active_modes


# --- Free text ---

def test_unresolved_text_command_is_ignored(home):
    assert send(home, 'TEXT_COMMAND', 'sing me a song') is False

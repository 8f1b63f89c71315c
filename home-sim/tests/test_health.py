import random
from datetime import datetime, timedelta

from models import DEVICE_ROSTER, DeviceHealthMonitor, DeviceStatus, NotificationLog, Severity

NOW = datetime(2024, 6, 1, 12, 0)


def _monitor(seed=0):
    health = {}
    notifications = NotificationLog()
    return DeviceHealthMonitor(health, notifications, random.Random(seed)), health, notifications


def test_entries_created_lazily(quiet_devices):
    monitor, health, _ = _monitor()
    assert health == {}
    monitor.check(NOW)
    assert list(health) == list(DEVICE_ROSTER)
    assert all(entry.status == DeviceStatus.OK for entry in health.values())


def test_entries_are_never_removed(quiet_devices):
    monitor, health, _ = _monitor()
    monitor.check(NOW)
    first = health['Lights']
    monitor.check(NOW + timedelta(minutes=1))
    assert health['Lights'] is first
    assert first.last_check == NOW + timedelta(minutes=1)


def test_warning_sticks(reset_parameters):
    monitor, health, notifications = _monitor()
    reset_parameters.set('device_warning_probability', 1.0)
    warned = monitor.check(NOW)
    assert warned == list(DEVICE_ROSTER)
    assert len(notifications) == len(DEVICE_ROSTER)
    assert all(n.severity == Severity.WARNING for n in notifications)

    reset_parameters.set('device_warning_probability', 0.0)
    monitor.check(NOW + timedelta(hours=1))
    assert all(entry.status == DeviceStatus.WARNING for entry in health.values())
    assert health['HVAC'].error_count == 1


def test_error_count_accumulates(reset_parameters):
    monitor, health, notifications = _monitor()
    reset_parameters.set('device_warning_probability', 1.0)
    monitor.check(NOW)
    monitor.check(NOW)
    assert health['Doors'].error_count == 2
    assert notifications.copy()[0].message == "Doors requires maintenance (error #2)"


def test_report_wire_format(quiet_devices):
    monitor, _, _ = _monitor()
    monitor.check(NOW)
    report = monitor.report()
    assert report['HVAC'] == {
        'status': 'OK',
        'lastCheck': NOW.isoformat(),
        'errorCount': 0,
        'nextMaintenance': None,
    }

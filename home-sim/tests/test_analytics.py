from datetime import datetime, timedelta

import pytest

from models import AnalyticsWindow

T0 = datetime(2024, 6, 1, 0, 0)


def test_samples_older_than_retention_are_evicted():
    window = AnalyticsWindow()
    window.update(T0, 500, 0, 21.0, 45.0)
    window.update(T0 + timedelta(hours=12), 500, 0, 22.0, 45.0)
    assert len(window) == 2

    window.update(T0 + timedelta(hours=24, minutes=1), 500, 0, 23.0, 45.0)
    timestamps = [s.timestamp for s in window.energy]
    assert T0 not in timestamps
    assert len(window) == 2
    assert len(window.temperature) == 2
    assert len(window.humidity) == 2


def test_sample_exactly_at_horizon_is_kept():
    window = AnalyticsWindow()
    window.update(T0, 500, 0, 21.0, 45.0)
    window.update(T0 + timedelta(hours=24), 500, 0, 21.0, 45.0)
    assert len(window) == 2


def test_retention_follows_parameter(reset_parameters):
    reset_parameters.set('retention_hours', 1)
    window = AnalyticsWindow()
    window.update(T0, 500, 0, 21.0, 45.0)
    window.update(T0 + timedelta(hours=2), 500, 0, 21.0, 45.0)
    assert len(window) == 1


def test_energy_stats_integrates_kwh():
    window = AnalyticsWindow()
    window.update(T0, 1000, 0, 21.0, 45.0)
    window.update(T0 + timedelta(hours=1), 1000, 500, 21.0, 45.0)

    stats = window.energy_stats()
    assert stats['currentConsumption'] == 1000
    assert stats['consumedKwh'] == pytest.approx(1.0)
    assert stats['producedKwh'] == pytest.approx(0.25)
    assert stats['netKwh'] == pytest.approx(0.75)
    assert stats['savingsPercentage'] == 0.0


def test_savings_against_baseline():
    window = AnalyticsWindow()
    window.update(T0, 400, 0, 21.0, 45.0)
    assert window.energy_stats()['savingsPercentage'] == 60.0


def test_empty_window():
    window = AnalyticsWindow()
    summary = window.summary()
    assert summary['samples'] == 0
    assert summary['temperature']['avg'] is None
    assert window.energy_stats()['consumedKwh'] == 0.0


def test_series_are_oldest_first():
    window = AnalyticsWindow()
    for minutes in range(3):
        window.update(T0 + timedelta(minutes=minutes), 300 + minutes, 0, 20.0 + minutes, 45.0)
    series = window.to_dict()
    assert [p['consumption'] for p in series['energyUsage']] == [300, 301, 302]
    assert window.summary()['temperature']['max'] == 22.0

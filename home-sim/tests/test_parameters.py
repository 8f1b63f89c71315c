import pytest

from models import SimulationParameters, get_simulation_parameters


def test_singleton():
    assert get_simulation_parameters() is SimulationParameters()


def test_set_clamps_to_range(reset_parameters):
    assert reset_parameters.set('tick_interval', 0) is True
    assert reset_parameters.get('tick_interval') == 0.01
    assert reset_parameters.set('tick_interval', 600) is True
    assert reset_parameters.get('tick_interval') == 60.0


def test_unknown_key_is_rejected(reset_parameters):
    assert reset_parameters.set('warp_factor', 9) is False
    assert 'warp_factor' not in reset_parameters.get_all()


def test_reset_single_key(reset_parameters):
    reset_parameters.set('solar_peak_w', 5000)
    reset_parameters.set('base_load_w', 300)
    reset_parameters.reset('solar_peak_w')
    assert reset_parameters.get('solar_peak_w') == 1000.0
    assert reset_parameters.get('base_load_w') == 300.0


def test_categories_cover_every_parameter(reset_parameters):
    grouped = reset_parameters.get_by_category()
    keys = {key for params in grouped.values() for key in params}
    assert keys == set(SimulationParameters.DEFAULTS)
    assert grouped['analytics']['retention_hours']['value'] == 24.0


@pytest.mark.parametrize("value", ["fast", None, True, float('nan'), float('inf'), [1]])
def test_invalid_values_are_rejected(reset_parameters, value):
    assert reset_parameters.set('tick_interval', value) is False
    assert reset_parameters.get('tick_interval') == 2.0


def test_huge_int_is_clamped(reset_parameters):
    assert reset_parameters.set('solar_peak_w', 10 ** 400) is True
    assert reset_parameters.get('solar_peak_w') == 20000.0


def test_reset_unknown_key(reset_parameters):
    assert reset_parameters.reset('warp_factor') is False


def test_get_all_entries_describe_each_parameter(reset_parameters):
    reset_parameters.set('base_load_w', 300)
    entry = reset_parameters.get_all()['base_load_w']
    assert entry['value'] == 300.0
    assert entry['default'] == 200.0
    assert set(entry) == {'value', 'default', 'min', 'max', 'unit', 'description', 'category'}
    assert 'category' not in reset_parameters.get_by_category()['energy']['base_load_w']

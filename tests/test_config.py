import math

import pytest

from modules.ConfigBase import ConfigError
from modules.fluid import DensitySeed, FalloffProfile, FluidConfig, PointerState, SimParams


# ---------- FluidConfig ----------

def test_defaults():
    config = FluidConfig()
    assert config.grid_size == 256
    assert config.dt == 0.25
    assert config.dissipation == 0.995
    assert config.jacobi_iterations == 40
    assert config.falloff is FalloffProfile.GAUSSIAN


@pytest.mark.parametrize("overrides", [
    {"dt": 0.0},
    {"dt": -1.0},
    {"viscosity": -0.1},
    {"dissipation": 0.0},
    {"dissipation": 1.01},
    {"radius": -1.0},
    {"jacobi_iterations": 0},
    {"grid_size": 0},
    {"vorticity": -2.0},
])
def test_out_of_range_values_are_rejected(overrides):
    with pytest.raises(ConfigError):
        FluidConfig(**overrides)


def test_dissipation_upper_bound_is_inclusive():
    assert FluidConfig(dissipation=1.0).dissipation == 1.0


def test_range_error_names_the_field():
    config = FluidConfig()
    config.dissipation = 2.0
    with pytest.raises(ConfigError, match=r"FluidConfig\.dissipation=2\.0 outside \(0\.0, 1\.0\]"):
        config.check_ranges()


def test_grid_size_is_fixed_after_init():
    config = FluidConfig(grid_size=32)
    with pytest.raises(AttributeError):
        config.grid_size = 64


def test_undeclared_attribute_is_rejected():
    config = FluidConfig()
    with pytest.raises(AttributeError):
        config.iterations = 10


def test_watch_attribute_and_unwatch():
    config = FluidConfig()
    seen = []
    unwatch = config.watch(seen.append, 'report_interval')

    config.report_interval = 25
    config.dt = 0.5
    unwatch()
    config.report_interval = 50

    assert seen == [25, 25]


def test_watch_any_change():
    config = FluidConfig()
    calls = []
    config.watch(lambda: calls.append(config.viscosity))
    config.viscosity = 0.3
    assert calls == [0.3]


def test_watch_unknown_attribute_raises():
    with pytest.raises(AttributeError):
        FluidConfig().watch(print, 'nope')


def test_info_lists_metadata_and_value():
    config = FluidConfig(dt=0.5)
    info = config.info()
    assert info['dt']['value'] == 0.5
    assert info['dt']['default'] == 0.25
    assert info['dt']['min'] == 0.0
    assert info['dt']['open_min'] is True
    assert info['grid_size']['fixed'] is True
    assert info['viscosity']['description']


# ---------- SimParams ----------

@pytest.mark.parametrize("overrides", [
    {"grid_size": 0},
    {"dt": 0.0},
    {"dt": math.inf},
    {"dt": math.nan},
    {"viscosity": -1.0},
    {"dissipation": 0.0},
    {"dissipation": 1.5},
    {"radius": -0.5},
    {"jacobi_iterations": 0},
    {"vorticity": -1.0},
    {"add_strength": math.nan},
])
def test_sim_params_rejects_invalid_records(overrides):
    values = {"grid_size": 8, "dt": 0.25}
    values.update(overrides)
    with pytest.raises(ConfigError):
        SimParams(**values)


def test_sim_params_is_immutable():
    params = SimParams(grid_size=8, dt=0.25)
    with pytest.raises(AttributeError):
        params.dt = 1.0


def test_sim_params_from_config_without_pointer():
    params = SimParams.from_config(FluidConfig(grid_size=16, viscosity=0.2, falloff=FalloffProfile.SMOOTH))
    assert params.grid_size == 16
    assert params.viscosity == 0.2
    assert params.falloff is FalloffProfile.SMOOTH
    assert not params.pointer_active
    assert params.pointer_delta == (0.0, 0.0)


def test_sim_params_with_pointer():
    params = SimParams(grid_size=8, dt=0.25)
    moved = params.with_pointer(PointerState(pos=(1, 2), delta=(0.5, -0.5), active=True))

    assert moved.pointer_active
    assert moved.pointer_pos == (1.0, 2.0)
    assert moved.pointer_delta == (0.5, -0.5)
    assert moved.dt == params.dt
    assert not params.pointer_active


def test_density_seed_rejects_negative_radius():
    with pytest.raises(ConfigError):
        DensitySeed(center=(0.0, 0.0), radius=-1.0)

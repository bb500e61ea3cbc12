import threading

import numpy as np
import pytest

from modules.fluid import (
    ConfigError, DensitySeed, FieldName, FluidConfig, FluidFlow, FluidUtil,
    PointerState, SimParams, TickCancelled,
)
from modules.fluid.kernels import Divergence


class CancelAfter:
    """Cancel flag that trips after a number of barrier checks."""

    def __init__(self, checks: int) -> None:
        self.remaining = checks

    def is_set(self) -> bool:
        self.remaining -= 1
        return self.remaining < 0


def make_flow(size=8, seed=None, **overrides) -> FluidFlow:
    return FluidFlow(FluidConfig(grid_size=size, **overrides), seed=seed)


def centre_seed(size, radius=2.0):
    c = (size - 1) * 0.5
    return DensitySeed(center=(c, c), radius=radius)


# ---------- construction and parameters ----------

def test_new_flow_is_at_rest():
    flow = make_flow(8)
    assert flow.tick == 0
    assert flow.velocity.shape == (8, 8, 2)
    assert not flow.velocity.any()
    assert not flow.density.any()


def test_seed_density_adds_blob():
    flow = make_flow(9, seed=centre_seed(9))
    assert flow.density[4, 4] == pytest.approx(1.0)
    assert flow.density[0, 0] == 0.0


def test_live_config_edit_is_rejected_at_construction():
    config = FluidConfig(grid_size=8)
    config.dt = 0.0
    with pytest.raises(ConfigError):
        FluidFlow(config)


def test_update_rejects_mismatched_grid():
    flow = make_flow(8)
    with pytest.raises(ConfigError):
        flow.update(SimParams(grid_size=4, dt=1.0))
    assert flow.tick == 0


def test_make_params_follows_live_config():
    flow = make_flow(8, dt=0.5)
    flow.config.viscosity = 0.1
    params = flow.make_params(PointerState(pos=(2.0, 3.0), delta=(1.0, 0.0), active=True))

    assert params.grid_size == 8
    assert params.dt == 0.5
    assert params.viscosity == 0.1
    assert params.pointer_active
    assert params.pointer_pos == (2.0, 3.0)

    flow.config.dissipation = 1.5
    with pytest.raises(ConfigError):
        flow.make_params()


def test_views_are_read_only():
    flow = make_flow(4)
    with pytest.raises(ValueError):
        flow.velocity[0, 0, 0] = 1.0
    with pytest.raises(ValueError):
        flow.density[0, 0] = 1.0


# ---------- pipeline behaviour ----------

def test_still_fluid_without_pointer_is_unchanged():
    flow = make_flow(8, seed=centre_seed(8), dissipation=1.0)
    before = flow.snapshot()

    for _ in range(5):
        flow.update(flow.make_params())

    after = flow.snapshot()
    assert flow.tick == 5
    assert np.array_equal(after[FieldName.DENSITY], before[FieldName.DENSITY])
    assert not after[FieldName.VELOCITY].any()


def test_dissipation_decays_density_geometrically():
    flow = make_flow(8, seed=centre_seed(8), dissipation=0.9, dt=1.0)
    start = flow.snapshot()[FieldName.DENSITY]

    for _ in range(3):
        flow.update(flow.make_params())

    assert np.allclose(flow.density, start * 0.9 ** 3, rtol=1e-5, atol=1e-7)


def test_pointer_tick_matches_hand_computed_values():
    flow = make_flow(4, dt=1.0, radius=1.0, dissipation=1.0, add_strength=1.0, jacobi_iterations=40)
    pointer = PointerState(pos=(1.0, 1.0), delta=(1.0, 0.0), active=True)

    stats = flow.update(flow.make_params(pointer))

    assert stats.tick == 1
    assert flow.tick == 1
    # divergence after force and advection, before projection
    assert flow.divergence[1, 1] == pytest.approx(0.1163, abs=1e-3)

    post = np.zeros((4, 4), dtype=np.float32)
    kernel = Divergence()
    kernel.allocate(4, 4)
    kernel.use(post, flow.velocity)
    assert abs(post[1, 1]) < abs(flow.divergence[1, 1])

    assert flow.density[1, 1] > 0.0
    assert np.isfinite(flow.velocity).all()


def test_projection_lowers_residual_divergence():
    size = 32
    flow = make_flow(size, dt=0.25, radius=4.0, dissipation=1.0)
    pointer = PointerState(pos=(15.5, 15.5), delta=(2.0, 0.0), active=True)

    stats = flow.update(flow.make_params(pointer))

    assert stats.divergence > 0.0
    assert flow.residual_divergence() < stats.divergence
    assert stats.elapsed_ms >= 0.0


def test_viscosity_smooths_velocity():
    pointer = PointerState(pos=(7.5, 7.5), delta=(1.0, 0.0), active=True)
    inviscid = make_flow(16, radius=2.0, dissipation=1.0)
    viscous = make_flow(16, radius=2.0, dissipation=1.0, viscosity=2.0)

    inviscid.update(inviscid.make_params(pointer))
    viscous.update(viscous.make_params(pointer))

    assert np.abs(viscous.velocity).max() < np.abs(inviscid.velocity).max()


def test_vorticity_confinement_stays_finite():
    flow = make_flow(16, radius=3.0, vorticity=0.5)
    for tick in range(10):
        angle = tick * 0.6
        pointer = PointerState(pos=(7.5 + 3.0 * np.cos(angle), 7.5 + 3.0 * np.sin(angle)),
                               delta=(-np.sin(angle), np.cos(angle)), active=True)
        flow.update(flow.make_params(pointer))

    assert flow.tick == 10
    assert np.isfinite(flow.velocity).all()
    assert np.isfinite(flow.density).all()


# ---------- cancellation ----------

def test_cancel_before_tick_changes_nothing():
    flow = make_flow(8, seed=centre_seed(8))
    before = flow.snapshot()
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(TickCancelled):
        flow.update(flow.make_params(PointerState(pos=(3.0, 3.0), delta=(1.0, 1.0), active=True)), cancel)

    assert flow.tick == 0
    after = flow.snapshot()
    assert np.array_equal(after[FieldName.DENSITY], before[FieldName.DENSITY])
    assert np.array_equal(after[FieldName.VELOCITY], before[FieldName.VELOCITY])


@pytest.mark.parametrize("checks", [1, 2, 4])
def test_cancel_mid_tick_rolls_back(checks):
    flow = make_flow(8, seed=centre_seed(8))
    flow.update(flow.make_params(PointerState(pos=(3.0, 3.0), delta=(1.0, 0.0), active=True)))
    before = flow.snapshot()

    with pytest.raises(TickCancelled):
        flow.update(flow.make_params(PointerState(pos=(4.0, 4.0), delta=(0.0, 2.0), active=True)),
                    CancelAfter(checks))

    assert flow.tick == 1
    after = flow.snapshot()
    assert np.array_equal(after[FieldName.DENSITY], before[FieldName.DENSITY])
    assert np.array_equal(after[FieldName.VELOCITY], before[FieldName.VELOCITY])

    stats = flow.update(flow.make_params())
    assert stats.tick == 2


def test_reset_returns_to_rest():
    flow = make_flow(8, seed=centre_seed(8))
    flow.update(flow.make_params(PointerState(pos=(3.0, 3.0), delta=(1.0, 0.0), active=True)))

    flow.reset()

    assert flow.tick == 0
    assert not flow.density.any()
    assert not flow.velocity.any()
    assert FluidUtil.interior_mean_abs(flow.pressure) == 0.0


def test_deallocate_stops_watching_config():
    flow = make_flow(8)
    flow.deallocate()
    flow.config.report_interval = 7
    assert flow._timer.report_interval == 100

    live = make_flow(8)
    live.config.report_interval = 7
    assert live._timer.report_interval == 7


def test_deallocated_flow_refuses_to_run():
    flow = make_flow(8, seed=centre_seed(8))
    pointer = PointerState(pos=(3.0, 3.0), delta=(1.0, 0.0), active=True)
    flow.update(flow.make_params(pointer))
    flow.update(flow.make_params(pointer))
    before = flow.snapshot()

    flow.deallocate()

    with pytest.raises(RuntimeError):
        flow.update(flow.make_params())
    with pytest.raises(RuntimeError):
        flow.seed_density(centre_seed(8))
    with pytest.raises(RuntimeError):
        flow.residual_divergence()

    assert flow.tick == 2
    after = flow.snapshot()
    assert np.array_equal(after[FieldName.DENSITY], before[FieldName.DENSITY])
    assert np.array_equal(after[FieldName.VELOCITY], before[FieldName.VELOCITY])


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_overflowing_fields_keep_ticking():
    flow = make_flow(8, dt=1.0, add_strength=1e38)
    pointer = PointerState(pos=(3.5, 3.5), delta=(1e30, 0.0), active=True)

    for _ in range(4):
        flow.update(flow.make_params(pointer))

    assert flow.tick == 4
    assert not np.isfinite(flow.velocity).all()

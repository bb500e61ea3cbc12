import sys
from threading import Event

import numpy as np
import pytest

import launcher
from modules.Settings import DriverConfig, Settings
from modules.fluid import FluidConfig


def small_settings(ticks=5):
    return Settings(
        fluid=FluidConfig(grid_size=16, radius=2.0),
        driver=DriverConfig(ticks=ticks, fps=0.0, seed_radius=3.0),
    )


def test_orbit_starts_right_of_centre():
    assert launcher.orbit(0, 60.0, 0.25, 0.5) == pytest.approx((0.75, 0.5))
    x, y = launcher.orbit(30, 60.0, 0.25, 0.5)
    assert (x, y) == pytest.approx((0.5, 0.75))


def test_run_advances_every_tick():
    flow = launcher.run(small_settings(ticks=5), Event())
    assert flow.tick == 5
    assert np.isfinite(flow.velocity).all()
    assert flow.density.sum() > 0.0


def test_run_stops_when_shutdown_is_set():
    shutdown = Event()
    shutdown.set()
    flow = launcher.run(small_settings(ticks=50), shutdown)
    assert flow.tick == 0


def test_main_writes_fields_and_settings(tmp_path, monkeypatch):
    output = tmp_path / "fields.npz"
    saved = tmp_path / "settings.json"
    monkeypatch.setattr(sys, "argv", [
        "gridfluid", "-n", "8", "-t", "3", "-fps", "0", "-i", "10",
        "-o", str(output), "--save-settings", str(saved),
    ])
    monkeypatch.setattr(launcher, "signal", lambda *args: None)

    launcher.main()

    with np.load(output) as fields:
        assert fields["density"].shape == (8, 8)
        assert fields["velocity"].shape == (8, 8, 2)

    settings = Settings.load(str(saved))
    assert settings.fluid.grid_size == 8
    assert settings.fluid.jacobi_iterations == 10
    assert settings.driver.ticks == 3

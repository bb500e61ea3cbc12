"""Fluid Flow - 2D incompressible grid fluid simulation.

Implements velocity and density fields with:
- Pointer force injection
- Semi-Lagrangian advection
- Viscous relaxation and multiplicative dissipation
- Vorticity confinement (optional)
- Pressure projection (incompressibility)
"""
import logging
import threading

import numpy as np

from modules.ConfigBase import ConfigError
from modules.utils.PerformanceTimer import PerformanceTimer
from .Definitions import DensitySeed, FieldName, PointerState, TickCancelled, TickStats
from .FieldStore import FieldStore
from .FluidConfig import FluidConfig
from .FluidUtil import FluidUtil
from .SimParams import SimParams
from .kernels import (
    AddForce, Advect, Dissipate, JacobiDiffusion,
    Divergence, JacobiPressure, Gradient, VorticityCurl, VorticityForce
)


class FluidFlow:
    """2D incompressible fluid on a fixed N x N grid.

    Fields (FieldStore, all double-buffered):
        - velocity (N, N, 2)
        - density (N, N)
        - pressure (N, N), per-tick working state
        - divergence (N, N), per-tick working state

    Update pipeline, one call = one tick, full-grid barrier between stages:
        1. Force injection (pointer active only)
        2. Velocity self-advection
        3. Density advection through the updated velocity
        4. Viscous relaxation (viscosity > 0)
        5. Dissipation of velocity and density (dissipation < 1)
        6. Vorticity confinement (vorticity > 0)
        7. Divergence
        8. Jacobi pressure solve
        9. Pressure gradient subtraction
    """

    def __init__(self, config: FluidConfig | None = None, seed: DensitySeed | None = None) -> None:
        self.config: FluidConfig = config or FluidConfig()
        # Live configs can be edited after construction, check again before allocating
        self.config.check_ranges()

        size: int = self.config.grid_size
        self._store: FieldStore = FieldStore(size)

        # Intermediate result (single buffer, no ping-pong)
        self._curl: np.ndarray = np.zeros((size, size), dtype=self._store.current(FieldName.DENSITY).dtype)

        # Kernels
        self._add_force: AddForce = AddForce()
        self._advect: Advect = Advect()
        self._dissipate: Dissipate = Dissipate()
        self._jacobi_diffusion: JacobiDiffusion = JacobiDiffusion()
        self._vorticity_curl: VorticityCurl = VorticityCurl()
        self._vorticity_force: VorticityForce = VorticityForce()
        self._divergence: Divergence = Divergence()
        self._jacobi_pressure: JacobiPressure = JacobiPressure()
        self._gradient: Gradient = Gradient()
        for kernel in self._kernels():
            kernel.allocate(size, size)

        self._timer: PerformanceTimer = PerformanceTimer(
            "FluidFlow", sample_count=self.config.report_interval)
        self._unwatch = self.config.watch(self._on_report_interval, 'report_interval')

        if seed is not None:
            self.seed_density(seed)

        logging.info(f"FluidFlow allocated {size}x{size}, {self.config.jacobi_iterations} pressure iterations")

    def _kernels(self) -> tuple:
        return (self._add_force, self._advect, self._dissipate, self._jacobi_diffusion,
                self._vorticity_curl, self._vorticity_force, self._divergence,
                self._jacobi_pressure, self._gradient)

    def _on_report_interval(self, value: int) -> None:
        self._timer.report_interval = value

    # ========== Properties (read-only views of committed state) ==========

    @property
    def size(self) -> int:
        return self._store.size

    @property
    def tick(self) -> int:
        return self._store.tick

    @property
    def store(self) -> FieldStore:
        return self._store

    @property
    def velocity(self) -> np.ndarray:
        """(N, N, 2) velocity field."""
        return self._store.field(FieldName.VELOCITY).view()

    @property
    def density(self) -> np.ndarray:
        """(N, N) density field."""
        return self._store.field(FieldName.DENSITY).view()

    @property
    def pressure(self) -> np.ndarray:
        """(N, N) pressure from the last projection."""
        return self._store.field(FieldName.PRESSURE).view()

    @property
    def divergence(self) -> np.ndarray:
        """(N, N) velocity divergence measured before the last projection."""
        return self._store.field(FieldName.DIVERGENCE).view()

    def snapshot(self) -> dict[FieldName, np.ndarray]:
        """Copies of the committed velocity and density."""
        return self._store.snapshot()

    # ========== Setup ==========

    def make_params(self, pointer: PointerState | None = None) -> SimParams:
        """Tick parameters from the live config and a pointer sample."""
        return SimParams.from_config(self.config, pointer)

    def seed_density(self, seed: DensitySeed) -> None:
        """Add a density blob to the committed density."""
        self._check_allocated()
        density = self._store.field(FieldName.DENSITY)
        weight: np.ndarray = self._add_force.weights(seed.center, seed.radius, seed.falloff)
        np.add(density.texture, weight * seed.amount, out=density.back)
        density.commit()

    def reset(self) -> None:
        """Reset all simulation fields to zero."""
        self._store.reset()
        self._curl.fill(0.0)
        self._timer.reset()

    def deallocate(self) -> None:
        self._unwatch()
        for kernel in self._kernels():
            kernel.deallocate()

    # ========== Update Pipeline ==========

    def update(self, params: SimParams, cancel: threading.Event | None = None) -> TickStats:
        """Advance exactly one tick.

        Args:
            params: Tick parameters, immutable for the whole tick
            cancel: Checked at every stage barrier; when set the tick is
                abandoned and the store rolled back

        Raises:
            ConfigError: If params.grid_size does not match the grid
            TickCancelled: If cancel was set before the final commit
            RuntimeError: If the flow was deallocated
        """
        if params.grid_size != self._store.size:
            raise ConfigError(
                f"params.grid_size={params.grid_size} does not match grid size {self._store.size}")
        self._check_allocated()

        with self._timer.measure(), self._store.transaction() as store:
            velocity = store.field(FieldName.VELOCITY)
            density = store.field(FieldName.DENSITY)
            pressure = store.field(FieldName.PRESSURE)
            divergence = store.field(FieldName.DIVERGENCE)
            dt: float = params.dt

            # ===== STEP 1: FORCE INJECTION =====
            if params.pointer_active:
                self._add_force.use(
                    velocity.back, density.back,
                    velocity.texture, density.texture,
                    params.pointer_pos, params.pointer_delta,
                    params.radius, params.add_strength, dt, params.falloff
                )
                velocity.commit()
                density.commit()
            FluidFlow._barrier(cancel)

            # ===== STEP 2: VELOCITY ADVECT =====
            self._advect.use(velocity.back, velocity.texture, velocity.texture, dt)
            velocity.commit()
            FluidFlow._barrier(cancel)

            # ===== STEP 3: DENSITY ADVECT (through the advected velocity) =====
            self._advect.use(density.back, density.texture, velocity.texture, dt)
            density.commit()
            FluidFlow._barrier(cancel)

            # ===== STEP 4: VELOCITY DIFFUSE (viscosity) =====
            if params.viscosity > 0.0:
                self._jacobi_diffusion.solve(velocity, params.viscosity * dt, params.jacobi_iterations)
                FluidFlow._barrier(cancel)

            # ===== STEP 5: DISSIPATE (once per tick per field) =====
            if params.dissipation != 1.0:
                self._dissipate.use(velocity.back, velocity.texture, params.dissipation)
                velocity.commit()
                self._dissipate.use(density.back, density.texture, params.dissipation)
                density.commit()
                FluidFlow._barrier(cancel)

            # ===== STEP 6: VORTICITY CONFINEMENT =====
            if params.vorticity > 0.0:
                self._vorticity_curl.use(self._curl, velocity.texture)
                self._vorticity_force.use(velocity.back, velocity.texture, self._curl, params.vorticity * dt)
                velocity.commit()
                FluidFlow._barrier(cancel)

            # ===== STEP 7: PRESSURE PROJECTION (make divergence-free) =====
            # 7a. Compute divergence
            self._divergence.use(divergence.back, velocity.texture)
            divergence.commit()
            divergence_in: float = FluidUtil.interior_mean_abs(divergence.texture)
            FluidFlow._barrier(cancel)

            # 7b. Solve Poisson equation for pressure (Jacobi iterations)
            self._jacobi_pressure.solve(pressure, divergence.texture, params.jacobi_iterations)
            FluidFlow._barrier(cancel)

            # 7c. Subtract pressure gradient from velocity
            self._gradient.use(velocity.back, velocity.texture, pressure.texture)
            velocity.commit()

        if not np.isfinite(divergence_in):
            logging.warning(f"FluidFlow: non-finite divergence at tick {self._store.tick}")

        return TickStats(tick=self._store.tick, divergence=divergence_in, elapsed_ms=self._timer.last)

    def residual_divergence(self) -> float:
        """Mean |divergence| of the committed velocity over interior cells."""
        self._check_allocated()
        result: np.ndarray = np.empty_like(self._curl)
        self._divergence.use(result, self._store.current(FieldName.VELOCITY))
        return FluidUtil.interior_mean_abs(result)

    def _check_allocated(self) -> None:
        if not all(kernel.allocated for kernel in self._kernels()):
            raise RuntimeError("FluidFlow used after deallocate()")

    @staticmethod
    def _barrier(cancel: threading.Event | None) -> None:
        if cancel is not None and cancel.is_set():
            raise TickCancelled("tick cancelled before final commit")

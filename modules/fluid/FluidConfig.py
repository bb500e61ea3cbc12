"""Configuration for the grid fluid solver."""

from dataclasses import dataclass

from modules.ConfigBase import ConfigBase, config_field
from .Definitions import DEFAULT_GRID_SIZE, FalloffProfile


@dataclass
class FluidConfig(ConfigBase):
    """Live solver settings. A SimParams record is built from these once per tick."""

    grid_size: int = config_field(
        DEFAULT_GRID_SIZE, min=1, fixed=True,
        description="Cells per side of the square simulation grid")

    # Time integration
    dt: float = config_field(
        0.25, min=0.0, open_min=True,
        description="Timestep per tick, in grid cells per unit velocity")

    # Diffusion
    viscosity: float = config_field(
        0.0, min=0.0,
        description="Kinematic viscosity, 0 disables viscous relaxation")
    dissipation: float = config_field(
        0.995, min=0.0, max=1.0, open_min=True,
        description="Per-tick multiplicative decay of velocity and density")

    # Forcing
    add_strength: float = config_field(
        1.0,
        description="Pointer impulse and density injection strength")
    radius: float = config_field(
        8.0, min=0.0,
        description="Pointer influence radius in cells")
    falloff: FalloffProfile = config_field(
        FalloffProfile.GAUSSIAN,
        description="Falloff profile of the pointer splat")
    vorticity: float = config_field(
        0.0, min=0.0,
        description="Vorticity confinement strength, 0 disables the stage")

    # Projection
    jacobi_iterations: int = config_field(
        40, min=1,
        description="Fixed Jacobi sweeps for pressure and viscous relaxation")

    # Reporting
    report_interval: int = config_field(
        100, min=1,
        description="Ticks between timing reports")

    def __post_init__(self) -> None:
        super().__post_init__()
        self.check_ranges()

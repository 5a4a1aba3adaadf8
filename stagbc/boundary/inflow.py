"""
Phase and temperature of markers entering the domain.

Markers created next to an inflow boundary inherit the phase and temperature
of the boundary instead of their nearest neighbor:

- window-face cells inside the window get the configured inflow temperature
- window-face cells inside the ramped window get the interval phase
- bottom cells get the plume or mantle phase and the (perturbed) bottom
  temperature, or the open-bottom inflow phase
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.special import erf

from stagbc.boundary.rules.window import BACK, FRONT, LEFT, RIGHT

if TYPE_CHECKING:
    from stagbc.boundary.schedule import Schedule
    from stagbc.config.core import BCConfig, PlumeConfig
    from stagbc.grid.staggered import StaggeredGrid


@dataclass
class Marker:
    """Marker position, phase and temperature."""

    x: float
    y: float
    z: float
    phase: int
    T: float


@dataclass(frozen=True)
class InflowTemperature:
    """
    Temperature of markers entering through the window.

    Attributes:
        mode: "nearest_marker", "constant" or "halfspace_cooling"
        top: Window top (plate surface for half-space cooling)
        constant: Temperature of the constant mode
        mantle, surface: Mantle and surface temperature of the cooling plate
        age: Plate age
        diffusivity: Thermal diffusivity
        adiabatic_gradient: Adiabatic gradient added to the inflow temperature
        reference_level: Level of zero adiabatic correction
    """

    mode: str
    top: float
    constant: float | None = None
    mantle: float | None = None
    surface: float | None = None
    age: float | None = None
    diffusivity: float = 1e-6
    adiabatic_gradient: float = 0.0
    reference_level: float = 0.0

    def __call__(self, z: float) -> float | None:
        """Inflow temperature at depth ``z``; None keeps the marker temperature."""
        if self.mode == "nearest_marker":
            return None
        dT = self.adiabatic_gradient * abs(z - self.reference_level) if self.adiabatic_gradient > 0.0 else 0.0
        if self.mode == "constant":
            return self.constant + dT
        depth = abs(z - self.top)
        plate = (self.mantle - self.surface) * erf(depth / (2.0 * np.sqrt(self.diffusivity * self.age)))
        return float(plate) + self.surface + dT


class MarkerInflowOverride:
    """
    Boundary phase and temperature for markers created in inflow cells.

    Example:
        >>> override = MarkerInflowOverride.from_config(config, grid)
        >>> phase, T = override.apply(marker, (0, 3, 7), t)
    """

    def __init__(
        self,
        grid: StaggeredGrid,
        face: str | None = None,
        bot: float = 0.0,
        top: float = 0.0,
        relax_dist: float = 0.0,
        temperature: InflowTemperature | None = None,
        phases: tuple[int, ...] = (),
        phase_interval: tuple[float, ...] = (),
        bottom_temperature: Schedule | None = None,
        plume: PlumeConfig | None = None,
        mantle_phase: int | None = None,
        bottom_open: bool = False,
    ):
        self.grid = grid
        self.face = face
        self.bot = bot
        self.top = top
        self.relax_dist = relax_dist
        self.temperature = temperature
        self.phases = tuple(phases)
        self.phase_interval = tuple(phase_interval)
        self.bottom_temperature = bottom_temperature
        self.plume = plume
        self.mantle_phase = mantle_phase
        self.bottom_open = bottom_open

    @classmethod
    def from_config(cls, config: BCConfig, grid: StaggeredGrid) -> MarkerInflowOverride:
        kwargs = {}
        window = config.window
        if window is not None:
            reference = config.top_reference_level
            kwargs.update(
                face=window.face,
                bot=window.bot,
                top=window.top,
                relax_dist=window.relax_dist,
                phases=tuple(window.phases),
                phase_interval=tuple(window.phase_interval),
                temperature=InflowTemperature(
                    mode=window.temperature_inflow,
                    top=window.top,
                    constant=window.constant_temperature,
                    mantle=window.mantle_temperature,
                    surface=window.top_temperature,
                    age=window.thermal_age,
                    diffusivity=window.thermal_diffusivity,
                    adiabatic_gradient=config.adiabatic_gradient,
                    reference_level=reference if reference is not None else grid.z.end,
                ),
            )
        bottom = config.temperature.bottom
        return cls(
            grid,
            bottom_temperature=bottom.to_schedule() if bottom is not None else None,
            plume=config.plume,
            mantle_phase=config.phase_inflow_bot,
            bottom_open=config.bottom_open,
            **kwargs,
        )

    @property
    def active(self) -> bool:
        return self.face is not None or self.plume is not None or self.bottom_open

    def on_window_face(self, cell: tuple[int, int, int]) -> bool:
        """Whether the global cell ``(i, j, k)`` touches the window face."""
        i, j, _ = cell
        ncx, ncy, _ = self.grid.num_cells
        return (
            (self.face == LEFT and i == 0)
            or (self.face == RIGHT and i == ncx - 1)
            or (self.face == FRONT and j == 0)
            or (self.face == BACK and j == ncy - 1)
        )

    def apply(self, marker: Marker, cell: tuple[int, int, int], t: float) -> tuple[int, float]:
        """
        Phase and temperature of a marker created in global cell ``(i, j, k)`` at time ``t``.

        Markers outside the inflow cells keep their own phase and temperature.
        """
        phase, T = marker.phase, marker.T
        if not self.active:
            return phase, T

        x, y, z = marker.x, marker.y, marker.z
        tbot = self.bottom_temperature.value(t) if self.bottom_temperature is not None else None

        if self.on_window_face(cell):
            if self.bot <= z <= self.top and self.temperature is not None:
                inflow_T = self.temperature(z)
                if inflow_T is not None:
                    T = inflow_T
            if self.bot - self.relax_dist <= z <= self.top + self.relax_dist:
                for ip, value in enumerate(self.phases):
                    if self.phase_interval[ip] <= z < self.phase_interval[ip + 1]:
                        phase = value

        if cell[2] == 0:
            plume = self.plume
            if plume is not None:
                xc, r2 = plume.center[0], plume.radius**2
                if plume.dimension == "2D":
                    dist2 = (x - xc) ** 2
                    inside = xc - plume.radius <= x <= xc + plume.radius
                else:
                    dist2 = (x - xc) ** 2 + (y - plume.center[1]) ** 2
                    inside = dist2 <= r2
                phase = plume.phase if inside else self.mantle_phase
                T = tbot + (plume.temperature - tbot) * np.exp(-dist2 / r2)
            elif self.bottom_open:
                phase = self.mantle_phase
                T = tbot if tbot is not None else T

        return phase, float(T)

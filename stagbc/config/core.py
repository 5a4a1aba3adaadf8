"""
Boundary-condition configuration models.

Every rule of the constraint engine is declared here as a pydantic model.
The models validate ranges, mutually exclusive options, per-mode required
parameters and region limits, so the appliers only ever see consistent,
already-scaled numbers.

Key Principle
-------------
- BCConfig (YAML/Python): WHAT is constrained (regions, faces, schedules)
- ConstraintAssembler (Python): HOW it is turned into per-DOF constraints
"""

from __future__ import annotations

from typing import Any, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stagbc.boundary.schedule import Schedule

# Limits on the number of declared entities
MAX_REGIONS = 5
MAX_PERIODS = 20
MAX_PATH_POINTS = 25
MAX_POLY_POINTS = 50
MAX_INFLOW_PHASES = 5

Point3 = tuple[float, float, float]
Point2 = tuple[float, float]


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ScheduleConfig(_StrictModel):
    """
    Piecewise-constant time schedule.

    A bare number is accepted as a single-period schedule.

    Attributes
    ----------
    values : list[float]
        Period values (1 to MAX_PERIODS entries)
    delims : list[float]
        Ascending time delimiters between periods (len(values) - 1 entries)
    """

    values: list[float] = Field(..., min_length=1, max_length=MAX_PERIODS)
    delims: list[float] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_scalar(cls, data: Any) -> Any:
        if isinstance(data, int | float):
            return {"values": [float(data)]}
        return data

    @model_validator(mode="after")
    def validate_delims(self) -> ScheduleConfig:
        if len(self.delims) != len(self.values) - 1:
            raise ValueError(
                f"{len(self.values)} periods need {len(self.values) - 1} time delimiters, got {len(self.delims)}"
            )
        if any(b <= a for a, b in zip(self.delims[:-1], self.delims[1:], strict=False)):
            raise ValueError(f"time delimiters must be strictly ascending: {self.delims}")
        return self

    def to_schedule(self) -> Schedule:
        return Schedule(tuple(self.values), tuple(self.delims))


class BackgroundStrainConfig(_StrictModel):
    """
    Background deformation: scheduled strain rates about a reference point.

    Attributes
    ----------
    exx, eyy : ScheduleConfig | None
        Normal strain rates (ezz follows from incompressibility)
    exy, exz, eyz : ScheduleConfig | None
        Shear strain rates
    ref_point : tuple[float, float, float]
        Point with zero background velocity
    """

    exx: ScheduleConfig | None = None
    eyy: ScheduleConfig | None = None
    exy: ScheduleConfig | None = None
    exz: ScheduleConfig | None = None
    eyz: ScheduleConfig | None = None
    ref_point: Point3 = (0.0, 0.0, 0.0)


class KinematicBlockConfig(_StrictModel):
    """
    Polygonal block moving along a path of timed poses.

    Attributes
    ----------
    times : list[float]
        Ascending times of the path points
    path : list[tuple[float, float]]
        Path point positions, one per time
    theta : list[float] | None
        Rotation angles in degrees at the path points (zero if omitted)
    polygon : list[tuple[float, float]]
        Polygon vertices at the first path pose
    bot, top : float
        Vertical extent of the block
    """

    times: list[float] = Field(..., min_length=2, max_length=MAX_PATH_POINTS)
    path: list[Point2]
    theta: list[float] | None = None
    polygon: list[Point2] = Field(..., min_length=3, max_length=MAX_POLY_POINTS)
    bot: float
    top: float

    @model_validator(mode="after")
    def validate_path(self) -> KinematicBlockConfig:
        if len(self.path) != len(self.times):
            raise ValueError(f"path needs one point per time: {len(self.path)} points, {len(self.times)} times")
        if self.theta is not None and len(self.theta) != len(self.times):
            raise ValueError(f"theta needs one angle per time: {len(self.theta)} angles, {len(self.times)} times")
        if any(b <= a for a, b in zip(self.times[:-1], self.times[1:], strict=False)):
            raise ValueError(f"path times must be strictly ascending: {self.times}")
        if self.bot > self.top:
            raise ValueError(f"block bottom {self.bot} lies above its top {self.top}")
        return self


class VelocityBoxConfig(_StrictModel):
    """
    Axis-aligned box with prescribed velocity components.

    Attributes
    ----------
    center, width : tuple[float, float, float]
        Box center and edge lengths
    vx, vy, vz : float | None
        Prescribed components (at least one)
    advect : bool
        Move the box with its own velocity
    """

    center: Point3
    width: Point3
    vx: float | None = None
    vy: float | None = None
    vz: float | None = None
    advect: bool = False

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: Point3) -> Point3:
        if any(w <= 0 for w in v):
            raise ValueError(f"box widths must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def validate_components(self) -> VelocityBoxConfig:
        if self.vx is None and self.vy is None and self.vz is None:
            raise ValueError("velocity box needs at least one of vx, vy, vz")
        return self


class VelocityCylinderConfig(_StrictModel):
    """
    Finite cylinder with prescribed velocity and radial profile.

    Attributes
    ----------
    base, cap : tuple[float, float, float]
        Axis end points
    radius : float
        Cylinder radius
    vx, vy, vz : float | None
        Prescribed components (exclusive with vmag)
    vmag : float | None
        Velocity magnitude along the base-to-cap axis
    profile : Literal["uniform", "parabolic"]
        Radial velocity profile
    advect : bool
        Move the cylinder with its own velocity
    """

    base: Point3
    cap: Point3
    radius: float = Field(..., gt=0.0)
    vx: float | None = None
    vy: float | None = None
    vz: float | None = None
    vmag: float | None = None
    profile: Literal["uniform", "parabolic"] = "uniform"
    advect: bool = False

    @model_validator(mode="after")
    def validate_components(self) -> VelocityCylinderConfig:
        components = (self.vx, self.vy, self.vz)
        has_components = any(c is not None for c in components)
        if self.vmag is not None and has_components:
            raise ValueError("velocity cylinder: vmag and vx/vy/vz are mutually exclusive")
        if self.vmag is None and not has_components:
            raise ValueError("velocity cylinder needs vmag or at least one of vx, vy, vz")
        if np.allclose(self.base, self.cap):
            raise ValueError("velocity cylinder base and cap coincide")
        return self

    def velocity(self) -> tuple[float | None, float | None, float | None]:
        """Prescribed components, with vmag split along the axis."""
        if self.vmag is None:
            return (self.vx, self.vy, self.vz)
        axis = np.subtract(self.cap, self.base)
        axis = axis / np.linalg.norm(axis)
        return tuple(float(self.vmag * a) for a in axis)


class BoundaryWindowConfig(_StrictModel):
    """
    Inflow/outflow window on one lateral face.

    Attributes
    ----------
    face : Literal["Left", "Right", "Front", "Back", "CompensatingInflow"]
        Inflow face; CompensatingInflow drives both x-faces inward
    face_out : Literal[-1, 0, 1]
        0: inflow face only; 1: outflow on the opposite face;
        -1: inflow on both faces with ramps and outflow below
    bot, top : float
        Vertical window
    velin : ScheduleConfig
        Inflow velocity (possibly scheduled)
    velout : float | None
        Outflow velocity; computed from mass balance if omitted
    relax_dist : float
        Ramp length above and below the window
    velbot, veltop : float | None
        Bottom/top normal velocity for CompensatingInflow
    phases, phase_interval : list
        Inflow phases and their depth bounds (len(phases) + 1 bounds)
    temperature_inflow : Literal["nearest_marker", "constant", "halfspace_cooling"]
        How inflowing markers get their temperature
    constant_temperature : float | None
        Temperature for the constant mode
    mantle_temperature, top_temperature, thermal_age : float | None
        Half-space cooling parameters
    thermal_diffusivity : float
        Diffusivity used by half-space cooling
    """

    face: Literal["Left", "Right", "Front", "Back", "CompensatingInflow"]
    face_out: Literal[-1, 0, 1] = 0
    bot: float
    top: float
    velin: ScheduleConfig
    velout: float | None = None
    relax_dist: float = Field(default=0.0, ge=0.0)
    velbot: float | None = None
    veltop: float | None = None
    phases: list[int] = Field(default_factory=list, max_length=MAX_INFLOW_PHASES)
    phase_interval: list[float] = Field(default_factory=list)
    temperature_inflow: Literal["nearest_marker", "constant", "halfspace_cooling"] = "nearest_marker"
    constant_temperature: float | None = None
    mantle_temperature: float | None = None
    top_temperature: float | None = None
    thermal_age: float | None = Field(default=None, gt=0.0)
    thermal_diffusivity: float = Field(default=1e-6, gt=0.0)

    @model_validator(mode="after")
    def validate_window(self) -> BoundaryWindowConfig:
        if self.bot >= self.top:
            raise ValueError(f"window bottom {self.bot} must lie below its top {self.top}")
        if self.phases and len(self.phase_interval) != len(self.phases) + 1:
            raise ValueError(
                f"{len(self.phases)} inflow phases need {len(self.phases) + 1} interval bounds, "
                f"got {len(self.phase_interval)}"
            )
        if self.temperature_inflow == "constant" and self.constant_temperature is None:
            raise ValueError("constant inflow temperature needs constant_temperature")
        if self.temperature_inflow == "halfspace_cooling":
            missing = [
                name
                for name in ("mantle_temperature", "top_temperature", "thermal_age")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"half-space cooling inflow temperature needs {', '.join(missing)}")
        if self.face != "CompensatingInflow" and (self.velbot is not None or self.veltop is not None):
            raise ValueError("velbot/veltop only apply to the CompensatingInflow face")
        return self


class PlumeConfig(_StrictModel):
    """
    Bottom-boundary plume.

    Attributes
    ----------
    type : Literal["Inflow_Type", "Permeable_Type"]
        Prescribed inflow profile, or an open (permeable) bottom
    velocity_profile : Literal["Poiseuille", "Gaussian"] | None
        Inflow profile (Inflow_Type only)
    inflow_velocity : float | None
        Peak inflow velocity (Inflow_Type only)
    area_fraction : float
        Fraction of the inflow flux balanced by the outflow
    dimension : Literal["2D", "3D"]
        Band footprint (2D) or disk footprint (3D)
    center : list[float]
        x (2D) or x, y (3D) of the plume axis
    phase : int
        Plume material phase
    temperature : float
        Plume temperature
    radius : float
        Plume radius
    mantle_phase : int | None
        Phase of material entering outside the plume
    """

    type: Literal["Inflow_Type", "Permeable_Type"]
    velocity_profile: Literal["Poiseuille", "Gaussian"] | None = None
    inflow_velocity: float | None = None
    area_fraction: float = Field(default=1.0, gt=0.0, le=1.0)
    dimension: Literal["2D", "3D"]
    center: list[float] = Field(..., min_length=1, max_length=2)
    phase: int
    temperature: float
    radius: float = Field(..., gt=0.0)
    mantle_phase: int | None = None

    @model_validator(mode="after")
    def validate_plume(self) -> PlumeConfig:
        expected = 1 if self.dimension == "2D" else 2
        if len(self.center) != expected:
            raise ValueError(f"{self.dimension} plume center needs {expected} coordinate(s), got {len(self.center)}")
        if self.type == "Inflow_Type":
            if self.velocity_profile is None:
                raise ValueError("inflow plume needs velocity_profile")
            if self.inflow_velocity is None:
                raise ValueError("inflow plume needs inflow_velocity")
        if self.mantle_phase is None:
            raise ValueError("plume needs mantle_phase")
        return self

    @property
    def is_inflow(self) -> bool:
        return self.type == "Inflow_Type"


class TemperatureBCConfig(_StrictModel):
    """
    Top/bottom temperature.

    Attributes
    ----------
    top : float | None
        Top temperature
    bottom : ScheduleConfig | None
        Bottom temperature (possibly scheduled)
    init_temp : bool
        Request a linear initial profile between bottom and top. The flag is
        only validated here; the solver reads it when it builds the initial
        temperature field.
    """

    top: float | None = None
    bottom: ScheduleConfig | None = None
    init_temp: bool = False

    @model_validator(mode="after")
    def validate_gradient(self) -> TemperatureBCConfig:
        if self.init_temp:
            if self.top is None or self.bottom is None:
                raise ValueError("init_temp needs both top and bottom temperatures")
            if self.bottom.values[0] == self.top:
                raise ValueError("init_temp needs a non-zero initial temperature gradient")
        return self


class PressureBCConfig(_StrictModel):
    """
    Top/bottom pressure.

    Attributes
    ----------
    top, bottom : float | None
        Boundary pressures
    init_pres : bool
        Request a linear initial profile between bottom and top. Validated
        here, read by the solver when it builds the initial pressure field.
    """

    top: float | None = None
    bottom: float | None = None
    init_pres: bool = False

    @model_validator(mode="after")
    def validate_init(self) -> PressureBCConfig:
        if self.init_pres and (self.top is None or self.bottom is None):
            raise ValueError("init_pres needs both top and bottom pressures")
        return self


class BCConfig(_StrictModel):
    """
    Complete boundary-condition setup.

    Attributes
    ----------
    background : BackgroundStrainConfig | None
        Background deformation
    blocks, boxes, cylinders : list
        Kinematic blocks, velocity boxes and velocity cylinders
    window : BoundaryWindowConfig | None
        Lateral inflow/outflow window
    plume : PlumeConfig | None
        Bottom plume
    open_top, open_bot : bool
        Open (stress-free) top/bottom boundaries
    permeable_phase_inflow : int | None
        Phase entering through an open bottom
    noslip : tuple of 6 bool
        No-slip faces, ordered left, right, front, back, bottom, top
    fix_phase : int | None
        Phase whose fully occupied cells are locked
    fix_cell : bool
        Lock cells flagged in the per-rank fixed-cell files
    fix_cell_file : str
        Base name of the fixed-cell files
    temperature, pressure
        Thermal and pressure boundary values
    adiabatic_gradient : float
        Adiabatic temperature gradient for inflowing markers
    top_reference_level : float | None
        Reference level of the adiabatic correction (domain top if omitted)
    """

    background: BackgroundStrainConfig | None = None
    blocks: list[KinematicBlockConfig] = Field(default_factory=list)
    boxes: list[VelocityBoxConfig] = Field(default_factory=list)
    cylinders: list[VelocityCylinderConfig] = Field(default_factory=list)
    window: BoundaryWindowConfig | None = None
    plume: PlumeConfig | None = None
    open_top: bool = False
    open_bot: bool = False
    permeable_phase_inflow: int | None = None
    noslip: tuple[bool, bool, bool, bool, bool, bool] = (False,) * 6
    fix_phase: int | None = None
    fix_cell: bool = False
    fix_cell_file: str = "./bc/cdb"
    temperature: TemperatureBCConfig = Field(default_factory=TemperatureBCConfig)
    pressure: PressureBCConfig = Field(default_factory=PressureBCConfig)
    adiabatic_gradient: float = Field(default=0.0, ge=0.0)
    top_reference_level: float | None = None

    @field_validator("blocks", "boxes", "cylinders")
    @classmethod
    def validate_region_count(cls, v: list, info) -> list:
        if len(v) > MAX_REGIONS:
            raise ValueError(f"Too many {info.field_name} specified! Max allowed: {MAX_REGIONS}")
        return v

    @model_validator(mode="after")
    def validate_boundaries(self) -> BCConfig:
        if self.open_top and self.noslip[5]:
            raise ValueError("No-slip condition is incompatible with open top boundary")
        if self.bottom_open and self.noslip[4]:
            raise ValueError("No-slip condition is incompatible with open bottom boundary")
        if self.bottom_open and self.phase_inflow_bot is None:
            raise ValueError("Open or permeable bottom boundary needs an inflow phase")
        if self.plume is not None and self.temperature.bottom is None:
            raise ValueError("Plume needs a bottom temperature")
        return self

    @property
    def bottom_open(self) -> bool:
        """Open bottom, either declared or implied by a permeable plume."""
        return self.open_bot or (self.plume is not None and not self.plume.is_inflow)

    @property
    def phase_inflow_bot(self) -> int | None:
        """Phase of material entering through the bottom boundary."""
        if self.plume is not None:
            return self.plume.mantle_phase
        return self.permeable_phase_inflow

    def active_noslip_faces(self) -> list[str]:
        names = ("left", "right", "front", "back", "bottom", "top")
        return [name for name, flag in zip(names, self.noslip, strict=True) if flag]

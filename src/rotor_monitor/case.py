"""
Single-propeller operating case.

Isolated 10 in propeller in forward flight. The default rotor approximates
the APC Thin Electric 10x7 propeller as used in McCrink, M. H., & Gregory,
J. W. (2017), *Blade Element Momentum Modeling of Low-Reynolds Electric
Propulsion Systems*.

This module turns the nondimensional operating point (advance ratio and
diameter-based Reynolds number) and the time-stepping schedule into the
dimensional quantities the external solver and the monitor consume.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import numpy as np

from .config import AmbientConditions, MonitorConfig

logger = logging.getLogger(__name__)


def calc_rpm(ReD: float, J: float, R: float, D: float, nu: float) -> float:
    """
    Rotational speed matching a diameter-based Reynolds number.

    The Reynolds number is built on the effective tip velocity,
    ``ReD = D·n·sqrt((2πR)² + (J·D)²) / ν``, with ``n`` in rev/s.

    Parameters
    ----------
    ReD : float
        Diameter-based Reynolds number.
    J : float
        Advance ratio V∞/(nD).
    R : float
        Rotor radius [m].
    D : float
        Reference diameter [m].
    nu : float
        Kinematic viscosity [m²/s].

    Returns
    -------
    float
        Rotational speed [RPM].
    """
    n = ReD * nu / (D * np.sqrt((2 * np.pi * R) ** 2 + (J * D) ** 2))
    return 60.0 * float(n)


@dataclass
class SinglePropCase:
    """
    Operating point and time-stepping schedule of a single-rotor run.

    Parameters
    ----------
    rotor_file : str
        Rotor geometry database entry handed to the external solver.
    rotor_radius : float
        Rotor radius R [m].
    n_blades : int
        Number of blades B.
    n_elements : int
        Blade elements per blade.
    pitch : float
        Collective pitch [deg].
    clockwise : bool
        Rotation direction.
    J : float
        Advance ratio V∞/(nD).
    ReD07 : float
        Diameter-based Reynolds number at 70% span.
    rho : float
        Air density [kg/m³].
    mu : float
        Air dynamic viscosity [kg/(m·s)].
    sound_speed : float
        Speed of sound [m/s].
    nrevs : int
        Number of revolutions simulated.
    nsteps_per_rev : int
        Time steps per revolution.
    p_per_step : int
        Particle sheds per time step.
    core_overlap : float
        Particle core overlap λ.
    shed_unsteady : bool
        Shed particles from unsteady loading.

    Raises
    ------
    ValueError
        If any parameter has an invalid value.
    """

    rotor_file: str = "apc10x7.csv"
    rotor_radius: float = 0.127
    n_blades: int = 2
    n_elements: int = 10
    pitch: float = 0.0
    clockwise: bool = False

    J: float = 0.6
    ReD07: float = 1.5e6
    rho: float = 1.225
    mu: float = 1.81e-5
    sound_speed: float = 343.0

    nrevs: int = 8
    nsteps_per_rev: int = 36
    p_per_step: int = 1
    core_overlap: float = 2.125
    shed_unsteady: bool = True

    def __post_init__(self):
        """Validate all configuration parameters."""
        positive_params = [
            ("rotor_radius", self.rotor_radius),
            ("n_blades", self.n_blades),
            ("n_elements", self.n_elements),
            ("ReD07", self.ReD07),
            ("rho", self.rho),
            ("mu", self.mu),
            ("sound_speed", self.sound_speed),
            ("nrevs", self.nrevs),
            ("nsteps_per_rev", self.nsteps_per_rev),
            ("p_per_step", self.p_per_step),
            ("core_overlap", self.core_overlap),
        ]
        for name, value in positive_params:
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.J < 0:
            raise ValueError(f"J must be non-negative, got {self.J}")

    # =========================================================================
    # Derived operating point
    # =========================================================================

    @property
    def diameter(self) -> float:
        return 2 * self.rotor_radius

    @property
    def ReD(self) -> float:
        """Diameter-based Reynolds number."""
        return self.ReD07 / 0.7

    @property
    def nu(self) -> float:
        """Kinematic viscosity [m²/s]."""
        return self.mu / self.rho

    @property
    def rpm(self) -> float:
        """Rotational speed [RPM]."""
        return calc_rpm(self.ReD, self.J, self.rotor_radius, self.diameter, self.nu)

    @property
    def freestream_speed(self) -> float:
        """Freestream velocity magnitude [m/s]."""
        return self.J * self.rpm / 60 * self.diameter

    @property
    def mach_inf(self) -> float:
        return self.freestream_speed / self.sound_speed

    @property
    def mach_tip(self) -> float:
        return 2 * np.pi * self.rpm / 60 * self.rotor_radius / self.sound_speed

    def freestream(self, X=None, t: float = 0.0) -> np.ndarray:
        """Freestream velocity vector [m/s] at position X and time t."""
        return self.freestream_speed * np.array([1.0, 0.0, 0.0])

    # =========================================================================
    # Time-stepping schedule
    # =========================================================================

    @property
    def total_time(self) -> float:
        """Total simulation time [s]."""
        return self.nrevs / (self.rpm / 60)

    @property
    def nsteps(self) -> int:
        return self.nrevs * self.nsteps_per_rev

    @property
    def overwrite_sigma(self) -> float:
        """Particle smoothing core size [m]."""
        return (
            self.core_overlap
            * 2
            * np.pi
            * self.rotor_radius
            / (self.nsteps_per_rev * self.p_per_step)
        )

    @property
    def surf_sigma(self) -> float:
        """Smoothing radius of the lifting surface [m]."""
        return self.rotor_radius / 10

    @property
    def max_particles(self) -> int:
        """Particle count for memory pre-allocation."""
        return (
            (2 * self.n_elements + 1)
            * self.n_blades
            * self.nrevs
            * self.nsteps_per_rev
            * self.p_per_step
        )

    # =========================================================================
    # Monitor wiring
    # =========================================================================

    def ambient(self) -> AmbientConditions:
        """Reference operating point for the monitor."""
        return AmbientConditions(
            rho=self.rho,
            J=self.J,
            nominal_rpm=self.rpm,
            total_steps=self.nsteps,
        )

    def monitor_config(
        self,
        output_path=None,
        run_name: str = "singlerotor",
        **options: Any,
    ) -> MonitorConfig:
        """
        Build the monitor configuration for this case.

        Parameters
        ----------
        output_path : str or Path, optional
            Output directory. ``None`` disables persistence.
        run_name : str
            Run identifier.
        **options
            Further :class:`MonitorConfig` options.
        """
        return MonitorConfig(
            output_path=output_path,
            run_name=run_name,
            ambient=self.ambient(),
            **options,
        )

    def log_summary(self, level: int = logging.INFO) -> None:
        """Log the operation parameters."""
        logger.log(level, "OPERATION PARAMETERS")
        logger.log(level, "  J:       %s", self.J)
        logger.log(level, "  ReD07:   %s", self.ReD07)
        logger.log(level, "  RPM:     %d", int(np.ceil(self.rpm)))
        logger.log(level, "  Mtip:    %.3f", self.mach_tip)
        logger.log(level, "  Minf:    %.3f", self.mach_inf)
        logger.log(
            level,
            "  Steps:   %d (%d revs x %d steps/rev), ttot = %.4e s",
            self.nsteps,
            self.nrevs,
            self.nsteps_per_rev,
            self.total_time,
        )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SinglePropCase":
        """
        Create SinglePropCase from a dictionary.

        Unknown keys raise ``ValueError``.
        """
        data = dict(data or {})
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown case parameters: {unknown}")
        return cls(**data)

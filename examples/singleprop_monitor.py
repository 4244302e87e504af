"""
Single propeller in forward flight, monitored with a synthetic rotor.

The vortex-particle solver is replaced here by a rotor whose blade loads
relax exponentially towards a steady state, which is enough to watch the
monitor color its curves from blue to red and fill the convergence record.

Usage:
    python examples/singleprop_monitor.py [output_dir]
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import List

import numpy as np

from rotor_monitor import SinglePropCase, make_monitor

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@dataclass
class Blade:
    circulation: np.ndarray


@dataclass
class SyntheticRotor:
    """Elliptic blade loading relaxing towards CT=0.09, CQ=0.04."""

    RPM: float
    n_blades: int
    n_elements: int
    relax: float = 0.0
    blades: List[Blade] = field(default_factory=list)
    normal_force: List[np.ndarray] = field(default_factory=list)
    tangential_force: List[np.ndarray] = field(default_factory=list)

    def advance(self, T: float, tau: float) -> None:
        self.relax = 1 - np.exp(-T / tau)
        r = np.linspace(0.15, 1.0, self.n_elements)
        shape = np.sqrt(np.clip(1 - r**2, 0, None)) * r
        gamma = 0.05 * self.relax * shape
        self.blades = [Blade(gamma.copy()) for _ in range(self.n_blades)]
        self.normal_force = [12.0 * gamma for _ in range(self.n_blades)]
        self.tangential_force = [3.0 * gamma for _ in range(self.n_blades)]

    def thrust_torque_coefficients(self, rho: float):
        return 0.09 * self.relax, 0.04 * self.relax + 1e-3


@dataclass
class Vehicle:
    rotor_systems: tuple


@dataclass
class ParticleField:
    completed_steps: int = 0


def main(save_path=None):
    case = SinglePropCase()
    case.log_summary()

    monitor = make_monitor(case.monitor_config(save_path, run_name="singlerotor"))

    rotor = SyntheticRotor(RPM=case.rpm, n_blades=case.n_blades, n_elements=case.n_elements)
    vehicle = Vehicle(rotor_systems=([rotor],))
    pfield = ParticleField()

    dt = case.total_time / case.nsteps
    for step in range(case.nsteps):
        T = (step + 1) * dt
        rotor.advance(T, tau=case.total_time / 4)
        pfield.completed_steps = step + 1
        if monitor(vehicle, pfield, T, dt):
            break

    return monitor


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)

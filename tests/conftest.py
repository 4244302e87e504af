"""
Shared fixtures for the rotor monitor tests.

The external solver is replaced by small stand-ins exposing the same
attributes as its rotor, vehicle and particle field objects.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import pytest

from rotor_monitor.config import AmbientConditions, MonitorConfig


@dataclass
class FakeBlade:
    circulation: Sequence[float]


@dataclass
class FakeRotor:
    """Rotor with fixed coefficients and per-blade distributions."""

    RPM: float = 5000.0
    CT: float = 0.12
    CQ: float = 0.05
    blades: List[FakeBlade] = field(default_factory=list)
    normal_force: List[Sequence[float]] = field(default_factory=list)
    tangential_force: List[Sequence[float]] = field(default_factory=list)
    rho_seen: List[float] = field(default_factory=list)
    failures: int = 0

    def thrust_torque_coefficients(self, rho: float) -> Tuple[float, float]:
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("coefficients unavailable")
        self.rho_seen.append(rho)
        return self.CT, self.CQ


def make_rotor(n_blades: int = 2, n_elements: int = 3, offset: float = 0.0, **kwargs) -> FakeRotor:
    """Rotor whose element values encode (blade, element) for order checks."""
    blades, Np, Tp = [], [], []
    for b in range(n_blades):
        values = [offset + 10 * b + e for e in range(n_elements)]
        blades.append(FakeBlade(circulation=values))
        Np.append([2 * v for v in values])
        Tp.append([3 * v for v in values])
    return FakeRotor(blades=blades, normal_force=Np, tangential_force=Tp, **kwargs)


@dataclass
class FakeVehicle:
    rotor_systems: Tuple[Sequence[FakeRotor], ...]


@dataclass
class FakeParticleField:
    completed_steps: int = 0


@pytest.fixture
def ambient():
    return AmbientConditions(rho=1.225, J=0.6, nominal_rpm=6000.0, total_steps=100)


@pytest.fixture
def single_rotor_vehicle():
    return FakeVehicle(rotor_systems=([make_rotor()],))


@pytest.fixture
def two_rotor_vehicle():
    return FakeVehicle(
        rotor_systems=(
            [make_rotor(n_blades=2, offset=0.0, RPM=5000.0)],
            [make_rotor(n_blades=3, offset=100.0, RPM=5200.0, CT=0.10, CQ=0.04)],
        )
    )


@pytest.fixture
def monitor_config(tmp_path, ambient):
    return MonitorConfig(
        output_path=tmp_path / "out",
        run_name="singlerotor",
        enable_plot=True,
        figure_name="monitor_rotor",
        snapshot_every_n_calls=10,
        ambient=ambient,
        figsize=(6.0, 4.0),
        snapshot_dpi=20,
    )

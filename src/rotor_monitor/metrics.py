"""
Rotor performance metrics.

This module provides the stateless calculations of the monitor:
- Thrust and torque coefficients of each rotor
- Propulsive efficiency
- Flattened blade-element distributions (circulation, Np, Tp)

Rotors are owned by the external solver and are accessed through the
:class:`RotatingBladeSystem` protocol only.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class RotorContractError(ValueError):
    """Rotor state handed over by the solver is inconsistent."""


class BladeSolution(Protocol):
    """Blade-element solution of one blade."""

    #: Circulation of each blade element [m²/s]
    circulation: Sequence[float]


class RotatingBladeSystem(Protocol):
    """Rotor handle owned by the external solver."""

    #: Current rotational speed [RPM]
    RPM: float
    blades: Sequence[BladeSolution]
    #: Plane-of-rotation normal force per blade element [N], one array per blade
    normal_force: Sequence[Sequence[float]]
    #: Plane-of-rotation tangential force per blade element [N], one array per blade
    tangential_force: Sequence[Sequence[float]]

    def thrust_torque_coefficients(self, rho: float) -> Tuple[float, float]:
        """Return (CT, CQ) nondimensionalized with rho, RPM and diameter."""
        ...


class VehicleState(Protocol):
    """Vehicle snapshot handed to the monitor by the solver."""

    rotor_systems: Sequence[Sequence[RotatingBladeSystem]]


@dataclass(frozen=True)
class RotorCoefficients:
    """
    Performance of a single rotor at one timestep.

    Attributes
    ----------
    RPM : float
        Rotational speed [RPM].
    CT : float
        Thrust coefficient.
    CQ : float
        Torque coefficient.
    eta : float
        Propulsive efficiency. May be non-finite when CQ is zero.
    """

    RPM: float
    CT: float
    CQ: float
    eta: float

    def values(self) -> Tuple[float, float, float, float]:
        return (self.RPM, self.CT, self.CQ, self.eta)


@dataclass(frozen=True)
class Distributions:
    """Blade-element distributions of all rotors, rotor-major and blade-minor."""

    circulation: np.ndarray
    Np: np.ndarray
    Tp: np.ndarray

    @property
    def element_index(self) -> np.ndarray:
        """1-based element index for plotting."""
        return np.arange(1, self.circulation.size + 1)


def propulsive_efficiency(J: float, CT: float, CQ: float) -> float:
    """
    Propulsive efficiency η = J·CT / (2π·CQ).

    No guard on CQ: a zero torque coefficient yields ±inf or nan, which
    is returned as is.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        eta = np.float64(J) * np.float64(CT) / (2 * np.pi * np.float64(CQ))
    return float(eta)


def compute_coefficients(rotor: RotatingBladeSystem, rho: float, J: float) -> RotorCoefficients:
    """
    Compute the performance coefficients of a rotor.

    Parameters
    ----------
    rotor : RotatingBladeSystem
        Rotor to evaluate.
    rho : float
        Air density [kg/m³].
    J : float
        Advance ratio.

    Returns
    -------
    RotorCoefficients
        RPM, CT, CQ and η of the rotor.
    """
    CT, CQ = rotor.thrust_torque_coefficients(rho)
    eta = propulsive_efficiency(J, CT, CQ)

    if not np.isfinite(eta):
        logger.warning("Non-finite propulsive efficiency (CT=%s, CQ=%s)", CT, CQ)

    return RotorCoefficients(RPM=float(rotor.RPM), CT=float(CT), CQ=float(CQ), eta=eta)


def collect_rotors(vehicle: VehicleState) -> List[RotatingBladeSystem]:
    """Flatten the rotor systems of a vehicle, preserving system order."""
    return [rotor for system in vehicle.rotor_systems for rotor in system]


def _concat(arrays: Iterable[Sequence[float]]) -> np.ndarray:
    arrays = [np.ravel(np.asarray(a, dtype=float)) for a in arrays]
    if not arrays:
        return np.empty(0)
    return np.concatenate(arrays)


def flatten_distributions(rotors: Sequence[RotatingBladeSystem]) -> Distributions:
    """
    Concatenate blade-element distributions across rotors.

    Circulation values are taken blade by blade, Np and Tp field arrays are
    taken array by array, all in rotor order.

    Parameters
    ----------
    rotors : Sequence[RotatingBladeSystem]
        Rotors in system iteration order.

    Returns
    -------
    Distributions
        Flattened circulation, Np and Tp.

    Raises
    ------
    RotorContractError
        If ``rotors`` is empty or a rotor's circulation, Np and Tp
        lengths differ.
    """
    if len(rotors) == 0:
        raise RotorContractError("Rotor collection is empty")

    gamma, Np, Tp = [], [], []
    for i, rotor in enumerate(rotors):
        rotor_gamma = _concat(blade.circulation for blade in rotor.blades)
        rotor_Np = _concat(rotor.normal_force)
        rotor_Tp = _concat(rotor.tangential_force)

        if not rotor_gamma.size == rotor_Np.size == rotor_Tp.size:
            raise RotorContractError(
                f"Rotor {i + 1} element arrays differ in length: "
                f"circulation={rotor_gamma.size}, Np={rotor_Np.size}, Tp={rotor_Tp.size}"
            )

        gamma.append(rotor_gamma)
        Np.append(rotor_Np)
        Tp.append(rotor_Tp)

    return Distributions(
        circulation=np.concatenate(gamma),
        Np=np.concatenate(Np),
        Tp=np.concatenate(Tp),
    )

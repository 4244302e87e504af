"""
Runtime performance monitor.

The external solver calls the monitor once per completed timestep. Each call
computes the performance of every rotor, updates the monitor figure and
appends one row to the convergence record.

Example
-------
::

    from rotor_monitor import SinglePropCase, make_monitor

    case = SinglePropCase()
    monitor = make_monitor(case.monitor_config("runs", run_name="singlerotor"))

    # Handed to the solver, which calls it after every step
    stop = monitor(vehicle, pfield, T, DT)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol, Union

import numpy as np

from .config import MonitorConfig
from .metrics import (
    RotorContractError,
    VehicleState,
    collect_rotors,
    compute_coefficients,
    flatten_distributions,
)
from .plotting import MonitorFigure
from .progress import progress_color, progress_ratio
from .record import PerformanceRecord, PerformanceRecordWriter

logger = logging.getLogger(__name__)


class ParticleFieldState(Protocol):
    """Particle field snapshot handed to the monitor by the solver."""

    #: Number of timesteps completed by the wake solver
    completed_steps: int


class MonitorStatus(Enum):
    """
    Lifecycle of a monitor.

    Attributes
    ----------
    UNINITIALIZED : str
        No call received yet; no file or figure exists.
    RUNNING : str
        Figure and record created on the first call.
    """

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"


class StepSignal(Enum):
    """Signal returned to the solver's loop controller."""

    CONTINUE = "continue"
    STOP = "stop"


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one monitor call.

    Attributes
    ----------
    signal : StepSignal
        Whether the solver should keep stepping.
    reason : Optional[str]
        Why the run should stop, when ``signal`` is STOP.
    record : Optional[PerformanceRecord]
        Performance computed during the call.
    """

    signal: StepSignal = StepSignal.CONTINUE
    reason: Optional[str] = None
    record: Optional[PerformanceRecord] = None

    @classmethod
    def continue_(cls, record: Optional[PerformanceRecord] = None) -> "StepResult":
        return cls(StepSignal.CONTINUE, None, record)

    @classmethod
    def stop(cls, reason: str, record: Optional[PerformanceRecord] = None) -> "StepResult":
        return cls(StepSignal.STOP, reason, record)

    @property
    def should_stop(self) -> bool:
        return self.signal is StepSignal.STOP


class RuntimeMonitor:
    """
    Stateful per-timestep observer of rotor performance.

    Parameters
    ----------
    config : MonitorConfig
        Monitor configuration.

    Attributes
    ----------
    call_count : int
        Number of completed calls.
    status : MonitorStatus
        Lifecycle state.
    figure : Optional[MonitorFigure]
        Owned figure, created on the first call when plotting is enabled.
    writer : Optional[PerformanceRecordWriter]
        Record writer, created on the first call when persistence is enabled.
    n_rotors : Optional[int]
        Rotor count fixed by the first call.
    last_snapshot : Optional[int]
        ``call_count`` at which the last snapshot was written.

    Notes
    -----
    Calls must come from a single thread in increasing time order. Two
    monitors running side by side need distinct output paths or run names.
    """

    def __init__(self, config: MonitorConfig):
        self.config = config
        self.call_count = 0
        self.status = MonitorStatus.UNINITIALIZED
        self.figure: Optional[MonitorFigure] = None
        self.writer: Optional[PerformanceRecordWriter] = None
        self.n_rotors: Optional[int] = None
        self.last_snapshot: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"RuntimeMonitor(run_name={self.config.run_name!r}, "
            f"status={self.status.value}, calls={self.call_count})"
        )

    def __call__(self, vehicle: VehicleState, pfield: ParticleFieldState, T: float, DT: float) -> bool:
        """Solver-facing entry point. Returns True when the run should stop."""
        return self.on_step(vehicle, pfield, T, DT).should_stop

    def azimuth(self, T: float) -> float:
        """Azimuth [deg] swept at the nominal rotational speed after time T."""
        return T * 360 * self.config.ambient.nominal_rpm / 60

    def _initialize(self, n_rotors: int) -> None:
        """
        Create the figure and record file.

        Runs while ``call_count`` is 0. Parts that already exist are kept,
        so a first call that failed after writing the header does not write
        it again when retried.
        """
        config = self.config

        if config.enable_plot and self.figure is None:
            self.figure = MonitorFigure(
                config.figure_name,
                figsize=config.figsize,
                alpha=config.alpha,
                live=config.live_display,
            )
            self.figure.show()

        if config.persist and self.writer is None:
            writer = PerformanceRecordWriter(
                config.record_file,
                separator=config.separator,
                float_format=config.float_format,
            )
            writer.write_header(n_rotors)
            self.writer = writer

        self.n_rotors = n_rotors
        self.status = MonitorStatus.RUNNING
        logger.info(
            "Monitor '%s' initialized: %d rotor(s), plot=%s, record=%s",
            config.run_name,
            n_rotors,
            config.enable_plot,
            config.record_file,
        )

    def _snapshot_due(self) -> bool:
        every = self.config.snapshot_every_n_calls
        return self.call_count > 0 and self.call_count % every == 0

    def on_step(self, vehicle: VehicleState, pfield: ParticleFieldState, T: float, DT: float) -> StepResult:
        """
        Process one completed solver timestep.

        Parameters
        ----------
        vehicle : VehicleState
            Vehicle snapshot exposing the rotor systems.
        pfield : ParticleFieldState
            Particle field snapshot exposing the completed-step counter.
        T : float
            Elapsed simulation time [s].
        DT : float
            Timestep size [s].

        Returns
        -------
        StepResult
            Always a CONTINUE result carrying the computed record.

        Raises
        ------
        RotorContractError
            If the rotor state is empty, inconsistent, or the rotor count
            changed since the first call.
        OSError
            If the record file cannot be created or written.
        """
        config = self.config
        ambient = config.ambient

        rotors = collect_rotors(vehicle)
        if not rotors:
            raise RotorContractError("Vehicle has no rotors")
        if self.n_rotors is not None and len(rotors) != self.n_rotors:
            raise RotorContractError(
                f"Rotor count changed from {self.n_rotors} to {len(rotors)}"
            )

        # Everything that can fail on bad rotor state runs before any output
        distributions = flatten_distributions(rotors)

        azimuth_deg = self.azimuth(T)
        ratio = progress_ratio(pfield.completed_steps, ambient.total_steps)
        color = progress_color(ratio)

        coefficients = tuple(compute_coefficients(rotor, ambient.rho, ambient.J) for rotor in rotors)
        record = PerformanceRecord(
            azimuth_deg=float(azimuth_deg),
            T=float(T),
            DT=float(DT),
            rotors=coefficients,
        )

        if self.call_count == 0:
            self._initialize(len(rotors))

        if self.figure is not None:
            self.figure.plot_distributions(distributions, color)
            self.figure.plot_coefficients(record.azimuth_deg, coefficients, color)
            self.figure.refresh()

        if self.writer is not None:
            self.writer.append(record)

        if self.figure is not None and config.persist and self._snapshot_due():
            self.figure.save(config.snapshot_file, dpi=config.snapshot_dpi)
            self.last_snapshot = self.call_count

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Monitor call %d: psi=%.2f deg, T=%.6e, progress=%.3f, CT=%s",
                self.call_count,
                azimuth_deg,
                T,
                ratio,
                np.array([c.CT for c in coefficients]),
            )

        self.call_count += 1
        return StepResult.continue_(record)


def make_monitor(config: Union[MonitorConfig, Mapping]) -> RuntimeMonitor:
    """
    Build a runtime monitor.

    No file or figure is created until the monitor is first called.

    Parameters
    ----------
    config : MonitorConfig or Mapping
        Monitor configuration, or a dictionary of :class:`MonitorConfig`
        options including an ``ambient`` section.

    Returns
    -------
    RuntimeMonitor
        Callable monitor for the solver.
    """
    if not isinstance(config, MonitorConfig):
        config = MonitorConfig.from_dict(config)
    return RuntimeMonitor(config)

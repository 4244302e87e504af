"""
Runtime Performance Monitor for Rotor Simulations.
==================================================

This package implements the per-timestep observer handed to an external
vortex-particle/blade-element solver. On every step it computes rotor
performance coefficients, appends them to a CSV convergence record and
updates a progress-colored six-panel figure.

The package is organized into submodules:

- **config**: Configuration dataclasses (MonitorConfig, AmbientConditions)
- **case**: Single-propeller operating point (SinglePropCase)
- **metrics**: Coefficients and blade-element distributions
- **progress**: Progress ratio and color coding
- **record**: Convergence record CSV writer
- **reader**: Convergence record reader
- **plotting**: Monitor figure
- **monitor**: RuntimeMonitor and make_monitor

Example Usage
-------------
::

    from rotor_monitor import SinglePropCase, make_monitor

    case = SinglePropCase(J=0.6, ReD07=1.5e6)
    monitor = make_monitor(case.monitor_config("runs", run_name="singlerotor"))

    run_simulation(..., extra_runtime_function=monitor)
"""

from .case import SinglePropCase, calc_rpm
from .config import AmbientConditions, MonitorConfig, load_config
from .metrics import (
    Distributions,
    RotorCoefficients,
    RotorContractError,
    collect_rotors,
    compute_coefficients,
    flatten_distributions,
    propulsive_efficiency,
)
from .monitor import (
    MonitorStatus,
    RuntimeMonitor,
    StepResult,
    StepSignal,
    make_monitor,
)
from .progress import progress_color, progress_ratio
from .record import PerformanceRecord, PerformanceRecordWriter

__all__ = [
    # Monitor
    "make_monitor",
    "RuntimeMonitor",
    "MonitorStatus",
    "StepResult",
    "StepSignal",
    # Configuration
    "MonitorConfig",
    "AmbientConditions",
    "SinglePropCase",
    "calc_rpm",
    "load_config",
    # Metrics
    "RotorCoefficients",
    "Distributions",
    "RotorContractError",
    "compute_coefficients",
    "propulsive_efficiency",
    "flatten_distributions",
    "collect_rotors",
    "progress_ratio",
    "progress_color",
    # Persistence
    "PerformanceRecord",
    "PerformanceRecordWriter",
]

"""
Configuration classes for the runtime performance monitor.

This module contains all configuration-related classes:
- AmbientConditions: reference operating point of the run
- MonitorConfig: monitor options with parameter validation
- load_config: YAML loader for a complete case + monitor description
"""

import logging
from dataclasses import MISSING, Field, asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)


def _check_keys(data: Mapping[str, Any], known: Tuple[Field, ...], section: str) -> None:
    """Reject unknown keys and missing required keys of a config section."""
    names = {f.name for f in known}
    unknown = sorted(set(data) - names)
    if unknown:
        raise ValueError(f"Unknown {section} parameters: {unknown}")
    required = [
        f.name for f in known if f.default is MISSING and f.default_factory is MISSING
    ]
    missing = [name for name in required if name not in data]
    if missing:
        raise ValueError(f"Missing {section} parameters: {missing}")


@dataclass
class AmbientConditions:
    """
    Reference operating point used by the monitor.

    Parameters
    ----------
    rho : float
        Air density [kg/m³].
    J : float
        Advance ratio V∞/(nD).
    nominal_rpm : float
        Reference rotational speed [RPM]. Used for the display azimuth.
    total_steps : int
        Expected number of solver timesteps. Used for progress coloring.

    Raises
    ------
    ValueError
        If any parameter has an invalid value.
    """

    J: float
    nominal_rpm: float
    total_steps: int
    rho: float = 1.225

    def __post_init__(self):
        """Validate all configuration parameters."""
        if self.rho <= 0:
            raise ValueError(f"rho must be positive, got {self.rho}")
        if self.J < 0:
            raise ValueError(f"J must be non-negative, got {self.J}")
        if self.nominal_rpm < 0:
            raise ValueError(f"nominal_rpm must be non-negative, got {self.nominal_rpm}")
        if int(self.total_steps) != self.total_steps or self.total_steps <= 0:
            raise ValueError(f"total_steps must be a positive integer, got {self.total_steps}")
        self.total_steps = int(self.total_steps)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AmbientConditions":
        """Create AmbientConditions from a dictionary.

        ``J``, ``nominal_rpm`` and ``total_steps`` are required; ``rho``
        defaults to sea-level air.
        """
        _check_keys(data, fields(cls), "ambient")
        return cls(
            J=data["J"],
            nominal_rpm=data["nominal_rpm"],
            total_steps=data["total_steps"],
            rho=data.get("rho", 1.225),
        )


@dataclass
class MonitorConfig:
    """
    Configuration dataclass for the runtime performance monitor.

    Parameters
    ----------
    output_path : Optional[Path]
        Directory receiving the convergence record and figure snapshots.
        ``None`` disables persistence and snapshots entirely.
    run_name : str
        Run identifier. Record and snapshot file names derive from it.
    enable_plot : bool
        Whether to build and update the monitor figure.
    figure_name : str
        Identity of the figure owned by the monitor.
    snapshot_every_n_calls : int
        Cadence (in callback invocations) of figure snapshots.
    live_display : bool
        Whether to attach the figure to the active matplotlib backend and
        show it. Without it the figure is only drawn for snapshots.
    ambient : AmbientConditions or Mapping
        Reference operating point. Required; a mapping is converted with
        :meth:`AmbientConditions.from_dict`.
    separator : str
        Column separator of the record file.
    float_format : str, optional
        Format spec applied to every numeric value of the record file.
        ``None`` writes the shortest text that reads back to the same float.
    alpha : float
        Line transparency of the plotted curves.
    figsize : Tuple[float, float]
        Figure size [in].
    snapshot_dpi : int
        Resolution of the saved snapshots.

    Raises
    ------
    ValueError
        If any parameter has an invalid value.
    """

    output_path: Optional[Path] = None
    run_name: str = "singlerotor"
    enable_plot: bool = True
    figure_name: str = "monitor_rotor"
    snapshot_every_n_calls: int = 10
    live_display: bool = True
    ambient: Optional[AmbientConditions] = None

    # =========================================================================
    # Output formatting
    # =========================================================================
    separator: str = ","
    float_format: Optional[str] = None
    alpha: float = 0.5
    figsize: Tuple[float, float] = (21.0, 10.0)
    snapshot_dpi: int = 100

    def __post_init__(self):
        """Validate all configuration parameters."""
        self._validate()

    def _validate(self):
        """Perform validation of all parameters."""
        if self.output_path is not None:
            self.output_path = Path(self.output_path)

        if not self.run_name:
            raise ValueError("run_name must be a non-empty string")
        if not self.figure_name:
            raise ValueError("figure_name must be a non-empty string")

        if (
            int(self.snapshot_every_n_calls) != self.snapshot_every_n_calls
            or self.snapshot_every_n_calls < 1
        ):
            raise ValueError(
                f"snapshot_every_n_calls must be a positive integer, "
                f"got {self.snapshot_every_n_calls}"
            )
        self.snapshot_every_n_calls = int(self.snapshot_every_n_calls)

        if isinstance(self.ambient, Mapping):
            self.ambient = AmbientConditions.from_dict(self.ambient)
        if not isinstance(self.ambient, AmbientConditions):
            raise ValueError("MonitorConfig requires ambient conditions")

        if len(self.separator) != 1 or self.separator in ".-+0123456789":
            raise ValueError(f"Invalid separator: '{self.separator}'")
        if self.float_format is not None:
            try:
                format(1.0, self.float_format)
            except ValueError:
                raise ValueError(f"Invalid float_format: '{self.float_format}'")

        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if len(self.figsize) != 2 or min(self.figsize) <= 0:
            raise ValueError(f"figsize must be two positive values, got {self.figsize}")
        self.figsize = tuple(float(v) for v in self.figsize)
        if self.snapshot_dpi <= 0:
            raise ValueError(f"snapshot_dpi must be positive, got {self.snapshot_dpi}")

        if self.output_path is None:
            logger.debug("No output_path given, convergence record disabled")

    @property
    def persist(self) -> bool:
        """Whether the convergence record is written."""
        return self.output_path is not None

    @property
    def record_file(self) -> Optional[Path]:
        """Path of the convergence record, or None if persistence is disabled."""
        if self.output_path is None:
            return None
        return self.output_path / f"{self.run_name}_convergence.csv"

    @property
    def snapshot_file(self) -> Optional[Path]:
        """Path of the figure snapshot, or None if persistence is disabled."""
        if self.output_path is None:
            return None
        return self.output_path / f"{self.run_name}_convergence.png"

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        base_path: Optional[Path] = None,
        ambient: Optional[AmbientConditions] = None,
    ) -> "MonitorConfig":
        """
        Create MonitorConfig from a dictionary.

        Parameters
        ----------
        data : Mapping
            Monitor options.
        base_path : Path, optional
            Base path for resolving a relative ``output_path``.
        ambient : AmbientConditions, optional
            Used when ``data`` has no ``ambient`` section.

        Returns
        -------
        MonitorConfig
            Validated configuration object.

        Raises
        ------
        ValueError
            On unknown keys, or when no ambient conditions are available.
        """
        _check_keys(data, fields(cls), "monitor")

        output_path = data.get("output_path", None)
        if output_path is not None:
            output_path = Path(output_path)
            if base_path is not None and not output_path.is_absolute():
                output_path = Path(base_path) / output_path

        if "ambient" in data:
            ambient = AmbientConditions.from_dict(data["ambient"])
        elif ambient is None:
            raise ValueError("Monitor configuration requires an 'ambient' section")

        return cls(
            output_path=output_path,
            run_name=data.get("run_name", "singlerotor"),
            enable_plot=data.get("enable_plot", True),
            figure_name=data.get("figure_name", "monitor_rotor"),
            snapshot_every_n_calls=data.get("snapshot_every_n_calls", 10),
            live_display=data.get("live_display", True),
            ambient=ambient,
            separator=data.get("separator", ","),
            float_format=data.get("float_format", None),
            alpha=data.get("alpha", 0.5),
            figsize=tuple(data.get("figsize", (21.0, 10.0))),
            snapshot_dpi=data.get("snapshot_dpi", 100),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a YAML-serializable dictionary."""
        data = asdict(self)
        data["output_path"] = None if self.output_path is None else str(self.output_path)
        data["figsize"] = list(self.figsize)
        return data


def load_config(yaml_path: Union[str, Path]):
    """Load a case and monitor configuration from a YAML file.

    Parameters
    ----------
    yaml_path : str or Path
        Path to the YAML configuration file. Recognized sections are
        ``case`` (see :class:`~rotor_monitor.case.SinglePropCase`) and
        ``monitor`` (see :class:`MonitorConfig`).

    Returns
    -------
    case : SinglePropCase or None
        Operating case, if a ``case`` section is present.
    monitor : MonitorConfig
        Validated monitor configuration. When ``monitor.ambient`` is
        omitted, the ambient conditions derive from the case.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the configuration is invalid.
    """
    from .case import SinglePropCase

    yaml_path = Path(yaml_path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping, got {type(data).__name__}")

    case = None
    if data.get("case") is not None:
        case = SinglePropCase.from_dict(data["case"])

    monitor = MonitorConfig.from_dict(
        data.get("monitor") or {},
        base_path=yaml_path.parent,
        ambient=None if case is None else case.ambient(),
    )
    return case, monitor

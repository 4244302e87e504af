"""
Monitor figure.

Six-panel matplotlib figure showing blade-element distributions and the
rotor coefficients against azimuth. The figure is a standalone
``matplotlib.figure.Figure`` owned by one monitor. For live display the
figure is attached to a manager of the active backend, but it is never
registered with pyplot, so ``plt.figure(num)`` and ``plt.close("all")``
do not see it.
"""

import logging
from itertools import cycle, islice
from pathlib import Path
from typing import Sequence, Tuple

import numpy as np
from matplotlib.backend_bases import NonGuiException
from matplotlib.figure import Figure

from .metrics import Distributions, RotorCoefficients
from .progress import RGB
from .record import rotor_count

logger = logging.getLogger(__name__)

#: Marker of each rotor in the coefficient panels, cycled
ROTOR_MARKERS = "o^*.px"

GRID_STYLE = {"color": "0.8", "linestyle": "--"}

AZIMUTH_LABEL = r"Age $\psi$ ($^\circ$)"

#: (title, xlabel, ylabel) of each panel, row-major
PANELS = (
    ("Circulation Distribution", "Element index", r"Circulation $\Gamma$ (m$^2$/s)"),
    ("Plane-of-rotation Normal Force", "Element index", r"Normal Force $N_p$ (N)"),
    ("Plane-of-rotation Tangential Force", "Element index", r"Tangential Force $T_p$ (N)"),
    ("Thrust Coefficient", AZIMUTH_LABEL, r"Thrust $C_T$"),
    ("Torque Coefficient", AZIMUTH_LABEL, r"Torque $C_Q$"),
    ("Propulsive Efficiency", AZIMUTH_LABEL, r"Propulsive efficiency $\eta$"),
)


def rotor_marker(index: int) -> str:
    """Marker of the rotor at 0-based ``index``."""
    return next(islice(cycle(ROTOR_MARKERS), index, None))


class MonitorFigure:
    """
    Persistent figure updated once per monitor call.

    Parameters
    ----------
    name : str
        Figure identity, shown as the figure title.
    figsize : Tuple[float, float]
        Figure size [in].
    alpha : float
        Transparency of all plotted curves.
    live : bool
        Attach the figure to a window of the active matplotlib backend.

    Attributes
    ----------
    figure : matplotlib.figure.Figure
        Owned figure handle.
    manager : matplotlib.backend_bases.FigureManagerBase or None
        Window manager of a live figure.
    axes : np.ndarray
        2x3 array of axes, panels in :data:`PANELS` order.
    """

    def __init__(
        self,
        name: str,
        figsize: Tuple[float, float] = (21.0, 10.0),
        alpha: float = 0.5,
        live: bool = False,
    ):
        self.name = name
        self.alpha = alpha
        self.manager = None
        if live:
            # Kept out of the pyplot registry
            import matplotlib.pyplot as plt

            self.manager = plt.new_figure_manager(id(self), figsize=figsize)
            self.manager.set_window_title(name)
            self.figure = self.manager.canvas.figure
        else:
            self.figure = Figure(figsize=figsize)
        self.figure.suptitle(name)
        self.axes = self.figure.subplots(2, 3)
        self._format_panels()

    def _format_panels(self) -> None:
        """Apply the fixed titles, labels and grids."""
        for ax, (title, xlabel, ylabel) in zip(self.axes.flat, PANELS):
            ax.set_title(title)
            ax.set_xlabel(xlabel)
            ax.set_ylabel(ylabel)
            ax.grid(True, **GRID_STYLE)

    @property
    def distribution_axes(self):
        return self.axes[0]

    @property
    def coefficient_axes(self):
        return self.axes[1]

    def plot_distributions(self, distributions: Distributions, color: RGB) -> None:
        """Overlay circulation, Np and Tp against the element index."""
        x = distributions.element_index
        data = (distributions.circulation, distributions.Np, distributions.Tp)
        for ax, y in zip(self.distribution_axes, data):
            ax.plot(x, y, "-", alpha=self.alpha, color=color)

    def plot_coefficients(
        self, azimuth_deg: float, rotors: Sequence[RotorCoefficients], color: RGB
    ) -> None:
        """Append one point per rotor to the CT, CQ and η panels."""
        ax_ct, ax_cq, ax_eta = self.coefficient_axes
        for i, coeffs in enumerate(rotors):
            marker = rotor_marker(i)
            ax_ct.plot([azimuth_deg], [coeffs.CT], marker, alpha=self.alpha, color=color)
            ax_cq.plot([azimuth_deg], [coeffs.CQ], marker, alpha=self.alpha, color=color)
            ax_eta.plot([azimuth_deg], [coeffs.eta], marker, alpha=self.alpha, color=color)

    def show(self) -> None:
        """Open the window of a live figure without blocking."""
        if self.manager is None:
            return
        try:
            self.manager.show()
        except NonGuiException:
            logger.debug("Backend has no GUI, figure %s is not displayed", self.name)

    def refresh(self) -> None:
        """Redraw and let a live window process its pending events."""
        canvas = self.figure.canvas
        canvas.draw_idle()
        canvas.flush_events()

    def save(self, path, dpi: int = 100) -> Path:
        """
        Render the current figure state to an image file.

        Parameters
        ----------
        path : str or Path
            Output image path. Overwritten if it exists.
        dpi : int
            Image resolution.
        """
        path = Path(path)
        self.figure.savefig(path, dpi=dpi, transparent=False)
        logger.info("Saved monitor snapshot: %s", path)
        return path

    def n_lines(self) -> np.ndarray:
        """Number of line artists on each panel, shape (2, 3)."""
        return np.array([[len(ax.lines) for ax in row] for row in self.axes])


def plot_record(df, path, dpi: int = 150) -> Path:
    """
    Plot the coefficient histories of a convergence record.

    Parameters
    ----------
    df : polars.DataFrame
        Record as returned by :func:`rotor_monitor.reader.read_convergence`.
    path : str or Path
        Output image path.
    dpi : int
        Image resolution.
    """
    n_rotors = rotor_count(df.columns)
    figure = Figure(figsize=(21.0, 5.0))
    axes = figure.subplots(1, 3)
    azimuth = df["age (deg)"].to_numpy()

    for ax, (title, xlabel, ylabel), name in zip(axes, PANELS[3:], ("CT", "CQ", "eta")):
        for i in range(1, n_rotors + 1):
            ax.plot(
                azimuth,
                df[f"{name}_{i}"].to_numpy(),
                rotor_marker(i - 1) + "-",
                label=f"Rotor {i}",
            )
        ax.set_title(title)
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.grid(True, **GRID_STYLE)
        ax.legend()

    figure.tight_layout()
    path = Path(path)
    figure.savefig(path, dpi=dpi)
    logger.info("Saved: %s", path)
    return path

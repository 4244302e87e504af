"""
Convergence record CSV writer.

This module handles persistence of the monitor's performance records,
including header generation and per-call row appends.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .metrics import RotorCoefficients

logger = logging.getLogger(__name__)

#: Leading columns of every record row
BASE_COLUMNS = ("age (deg)", "T", "DT")

#: Per-rotor columns, suffixed with the 1-based rotor index
ROTOR_COLUMNS = ("RPM", "CT", "CQ", "eta")


def record_columns(n_rotors: int) -> List[str]:
    """Column names of a record with ``n_rotors`` rotors."""
    columns = list(BASE_COLUMNS)
    for i in range(1, n_rotors + 1):
        columns.extend(f"{name}_{i}" for name in ROTOR_COLUMNS)
    return columns


def rotor_count(columns: Sequence[str]) -> int:
    """
    Number of rotors described by a record header.

    Raises
    ------
    ValueError
        If the columns do not follow the record layout.
    """
    columns = list(columns)
    n_base = len(BASE_COLUMNS)
    n_per_rotor = len(ROTOR_COLUMNS)

    if tuple(columns[:n_base]) != BASE_COLUMNS or (len(columns) - n_base) % n_per_rotor:
        raise ValueError(f"Unexpected convergence record columns: {columns}")

    n_rotors = (len(columns) - n_base) // n_per_rotor
    for i in range(1, n_rotors + 1):
        block = columns[n_base + (i - 1) * n_per_rotor : n_base + i * n_per_rotor]
        expected = [f"{name}_{i}" for name in ROTOR_COLUMNS]
        if block != expected:
            raise ValueError(f"Unexpected columns for rotor {i}: {block}")
    return n_rotors


def format_value(value: float, float_format: Optional[str] = None) -> str:
    """
    Text of one numeric record value.

    With ``float_format=None`` the shortest representation that parses back
    to the same float is used, e.g. ``0.000123456789012``. Non-finite values
    render as ``nan``, ``inf`` and ``-inf`` in either case.
    """
    value = float(value)
    if float_format is None:
        return repr(value)
    return format(value, float_format)


@dataclass(frozen=True)
class PerformanceRecord:
    """
    Performance of all rotors at one timestep.

    Attributes
    ----------
    azimuth_deg : float
        Display azimuth swept at the nominal rotational speed [deg].
    T : float
        Elapsed simulation time [s].
    DT : float
        Timestep size [s].
    rotors : Tuple[RotorCoefficients, ...]
        Coefficients of each rotor, in system order.
    """

    azimuth_deg: float
    T: float
    DT: float
    rotors: Tuple[RotorCoefficients, ...]

    @property
    def n_fields(self) -> int:
        return len(BASE_COLUMNS) + len(ROTOR_COLUMNS) * len(self.rotors)

    def values(self) -> List[float]:
        values = [self.azimuth_deg, self.T, self.DT]
        for coeffs in self.rotors:
            values.extend(coeffs.values())
        return values

    def to_row(self, separator: str = ",", float_format: Optional[str] = None) -> str:
        """Format the record as a single delimited line, without newline."""
        return separator.join(format_value(v, float_format) for v in self.values())


class PerformanceRecordWriter:
    """
    Writes performance records to a CSV file.

    The file is reopened in append mode for every write and closed before
    returning, so a crash between calls never leaves a partial line behind.

    Parameters
    ----------
    path : Path
        Record file path. Missing parent directories are created.
    separator : str
        Column separator character.
    float_format : str, optional
        Format spec of numeric values. ``None`` writes round-trip text.

    Example
    -------
    ::

        writer = PerformanceRecordWriter(path)
        writer.write_header(n_rotors=1)

        for step in simulation:
            writer.append(record)
    """

    def __init__(self, path, separator: str = ",", float_format: Optional[str] = None):
        self.path = Path(path)
        self.separator = separator
        self.float_format = float_format
        self.n_rotors = None
        self.rows_written = 0

    def write_header(self, n_rotors: int) -> None:
        """
        Create the record file if needed and write the column header.

        Raises
        ------
        OSError
            If the file cannot be created or written.
        """
        if n_rotors <= 0:
            raise ValueError(f"n_rotors must be positive, got {n_rotors}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write_line(self.separator.join(record_columns(n_rotors)))
        self.n_rotors = n_rotors
        logger.info("Convergence record: %s (%d rotors)", self.path, n_rotors)

    def append(self, record: PerformanceRecord) -> None:
        """
        Append one record row.

        Raises
        ------
        RuntimeError
            If the header has not been written.
        ValueError
            If the record's rotor count differs from the header's.
        OSError
            If the file cannot be written.
        """
        if self.n_rotors is None:
            raise RuntimeError("write_header() must be called before append()")
        if len(record.rotors) != self.n_rotors:
            raise ValueError(
                f"Record has {len(record.rotors)} rotors, header has {self.n_rotors}"
            )

        self._write_line(record.to_row(self.separator, self.float_format))
        self.rows_written += 1

    def _write_line(self, line: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()

"""
Convergence record reader.

Loads a convergence CSV written by the monitor back into a dataframe for
post-processing.

The monitor opens its record in append mode, so rerunning a case into the
same path leaves one header-led block per run in a single file. The reader
splits the file on those headers and loads one run at a time.
"""

import io
import logging
from pathlib import Path
from typing import List, Union

import polars as pl

from .record import BASE_COLUMNS, rotor_count

logger = logging.getLogger(__name__)

__all__ = ["read_convergence", "rotor_count", "split_runs"]


def split_runs(lines: List[str], separator: str = ",") -> List[List[str]]:
    """
    Split the lines of a record file into header-led run blocks.

    The first line always opens a block; its layout is checked by the
    caller.

    Parameters
    ----------
    lines : list of str
        File lines, without newlines. Blank lines are ignored.
    separator : str
        Column separator.

    Returns
    -------
    list of list of str
        One block per header line, each starting with its header.

    Raises
    ------
    ValueError
        If the file has no lines.
    """
    runs = []
    for line in lines:
        if not line.strip():
            continue
        if not runs or line.split(separator, 1)[0].strip() == BASE_COLUMNS[0]:
            runs.append([line])
        else:
            runs[-1].append(line)

    if not runs:
        raise ValueError("Convergence record is empty")
    return runs


def read_convergence(
    path: Union[str, Path],
    separator: str = ",",
    run: int = -1,
) -> pl.DataFrame:
    """
    Read a convergence record.

    Parameters
    ----------
    path : str or Path
        Record file.
    separator : str
        Column separator.
    run : int
        Run block to load when the file holds several appended runs.
        Indexes like a list, the default ``-1`` being the latest run.

    Returns
    -------
    pl.DataFrame
        One row per monitor call, every column as Float64.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the header does not follow the record layout, a value is not
        numeric, or ``run`` is out of range.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Convergence record not found: {path}")

    runs = split_runs(path.read_text(encoding="utf-8").splitlines(), separator)
    try:
        block = runs[run]
    except IndexError:
        raise ValueError(f"{path} holds {len(runs)} run(s), cannot select run {run}")

    if len(runs) > 1:
        logger.warning(
            "%s holds %d appended runs, reading run %d",
            path,
            len(runs),
            run % len(runs) + 1,
        )

    df = pl.read_csv(
        io.StringIO("\n".join(block) + "\n"),
        separator=separator,
        has_header=True,
        infer_schema_length=0,
    )
    rotor_count(df.columns)

    try:
        df = df.with_columns(pl.all().str.strip_chars().cast(pl.Float64))
    except pl.exceptions.InvalidOperationError as e:
        raise ValueError(f"Non-numeric value in convergence record {path}: {e}") from e
    logger.debug("Read %d rows from %s", df.height, path)
    return df

"""
Tests for the convergence record writer.
"""

import math

import pytest

from rotor_monitor.metrics import RotorCoefficients
from rotor_monitor.record import (
    PerformanceRecord,
    PerformanceRecordWriter,
    format_value,
    record_columns,
    rotor_count,
)


def _record(n_rotors=1, eta=0.25):
    rotors = tuple(RotorCoefficients(RPM=5000.0 + i, CT=0.12, CQ=0.05, eta=eta) for i in range(n_rotors))
    return PerformanceRecord(azimuth_deg=36.0, T=0.001, DT=0.001, rotors=rotors)


class TestRecordColumns:
    def test_single_rotor(self):
        assert record_columns(1) == ["age (deg)", "T", "DT", "RPM_1", "CT_1", "CQ_1", "eta_1"]

    def test_two_rotors_are_one_indexed(self):
        columns = record_columns(2)
        assert len(columns) == 11
        assert columns[-4:] == ["RPM_2", "CT_2", "CQ_2", "eta_2"]


class TestRotorCount:
    @pytest.mark.parametrize("n_rotors", [1, 2, 5])
    def test_from_header(self, n_rotors):
        assert rotor_count(record_columns(n_rotors)) == n_rotors

    def test_bad_base_columns(self):
        with pytest.raises(ValueError, match="Unexpected convergence record columns"):
            rotor_count(["time", "T", "DT", "RPM_1", "CT_1", "CQ_1", "eta_1"])

    def test_incomplete_rotor_block(self):
        with pytest.raises(ValueError, match="Unexpected"):
            rotor_count(record_columns(2)[:-1])

    def test_misnumbered_rotor(self):
        columns = record_columns(1) + ["RPM_3", "CT_3", "CQ_3", "eta_3"]
        with pytest.raises(ValueError, match="rotor 2"):
            rotor_count(columns)


class TestFormatValue:
    @pytest.mark.parametrize(
        "value",
        [0.123456789012345, 1.234567890123e-4, 1 / 3, 4.444444404444444, -2.5e-300, 6.02214076e23],
    )
    def test_default_reads_back_exactly(self, value):
        assert float(format_value(value)) == value

    def test_integral_values_stay_plain(self):
        assert format_value(5000.0) == "5000.0"
        assert format_value(0) == "0.0"

    def test_non_finite(self):
        assert format_value(math.inf) == "inf"
        assert format_value(-math.inf) == "-inf"
        assert format_value(math.nan) == "nan"
        assert format_value(math.inf, ".3e") == "inf"

    def test_explicit_format_truncates(self):
        assert format_value(0.123456789012345, ".4g") == "0.1235"


class TestPerformanceRecord:
    def test_n_fields(self):
        assert _record(1).n_fields == 7
        assert _record(3).n_fields == 15

    def test_row(self):
        row = _record(1).to_row()
        assert row == "36.0,0.001,0.001,5000.0,0.12,0.05,0.25"

    def test_non_finite_values(self):
        assert _record(eta=math.inf).to_row().endswith(",inf")
        assert _record(eta=-math.inf).to_row().endswith(",-inf")
        assert _record(eta=math.nan).to_row().endswith(",nan")

    def test_custom_format(self):
        row = _record(1).to_row(separator=";", float_format=".3e")
        assert row.split(";")[0] == "3.600e+01"


class TestPerformanceRecordWriter:
    def test_header_and_rows(self, tmp_path):
        path = tmp_path / "nested" / "run_convergence.csv"
        writer = PerformanceRecordWriter(path)
        writer.write_header(2)
        for _ in range(3):
            writer.append(_record(2))

        lines = path.read_text().splitlines()
        assert len(lines) == 4
        assert lines[0] == ",".join(record_columns(2))
        assert all(len(line.split(",")) == 11 for line in lines)
        assert writer.rows_written == 3

    def test_values_survive_the_file(self, tmp_path):
        path = tmp_path / "run_convergence.csv"
        rotor = RotorCoefficients(RPM=5183.4, CT=0.123456789012345, CQ=0.0456789012345678, eta=1 / 3)
        record = PerformanceRecord(azimuth_deg=4.444444404444444, T=1.234567890123e-4, DT=1e-4, rotors=(rotor,))
        writer = PerformanceRecordWriter(path)
        writer.write_header(1)
        writer.append(record)

        cells = path.read_text().splitlines()[1].split(",")
        assert [float(c) for c in cells] == record.values()

    def test_file_complete_after_each_append(self, tmp_path):
        path = tmp_path / "run_convergence.csv"
        writer = PerformanceRecordWriter(path)
        writer.write_header(1)
        writer.append(_record(1))
        assert path.read_text().endswith("\n")
        assert len(path.read_text().splitlines()) == 2

    def test_append_before_header_raises(self, tmp_path):
        writer = PerformanceRecordWriter(tmp_path / "x.csv")
        with pytest.raises(RuntimeError, match="write_header"):
            writer.append(_record(1))

    def test_rotor_count_mismatch_raises(self, tmp_path):
        writer = PerformanceRecordWriter(tmp_path / "x.csv")
        writer.write_header(1)
        with pytest.raises(ValueError, match="2 rotors"):
            writer.append(_record(2))

    def test_unwritable_path_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        writer = PerformanceRecordWriter(blocker / "run_convergence.csv")
        with pytest.raises(OSError):
            writer.write_header(1)

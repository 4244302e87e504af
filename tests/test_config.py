"""
Tests for monitor configuration validation and YAML loading.
"""

import re
from pathlib import Path

import pytest
import yaml

from rotor_monitor.case import SinglePropCase
from rotor_monitor.config import AmbientConditions, MonitorConfig, load_config


AMBIENT = {"J": 0.6, "nominal_rpm": 5000.0, "total_steps": 288}


class TestAmbientConditions:
    def test_default_density(self):
        ambient = AmbientConditions(**AMBIENT)
        assert ambient.rho == 1.225
        assert ambient.total_steps == 288

    def test_operating_point_has_no_defaults(self):
        with pytest.raises(TypeError):
            AmbientConditions()

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"rho": 0.0}, "rho"),
            ({"J": -0.1}, "J"),
            ({"nominal_rpm": -1.0}, "nominal_rpm"),
            ({"total_steps": 0}, "total_steps"),
            ({"total_steps": 2.5}, "total_steps"),
        ],
    )
    def test_invalid(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            AmbientConditions(**{**AMBIENT, **kwargs})

    def test_from_dict(self):
        ambient = AmbientConditions.from_dict({"J": 0.4, "nominal_rpm": 6000, "total_steps": 288.0})
        assert ambient.J == 0.4
        assert ambient.total_steps == 288
        assert isinstance(ambient.total_steps, int)

    @pytest.mark.parametrize("key", ["J", "nominal_rpm", "total_steps"])
    def test_from_dict_requires_operating_point(self, key):
        data = {k: v for k, v in AMBIENT.items() if k != key}
        with pytest.raises(ValueError, match=re.escape(f"Missing ambient parameters: ['{key}']")):
            AmbientConditions.from_dict(data)

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown ambient parameters"):
            AmbientConditions.from_dict({**AMBIENT, "nsteps": 10})


class TestMonitorConfig:
    def test_defaults(self):
        config = MonitorConfig(ambient=AMBIENT)
        assert config.output_path is None
        assert config.run_name == "singlerotor"
        assert config.enable_plot is True
        assert config.figure_name == "monitor_rotor"
        assert config.snapshot_every_n_calls == 10
        assert config.live_display is True
        assert config.float_format is None
        assert not config.persist
        assert config.record_file is None
        assert config.snapshot_file is None

    def test_file_names(self, tmp_path):
        config = MonitorConfig(output_path=str(tmp_path), run_name="apc", ambient=AMBIENT)
        assert isinstance(config.output_path, Path)
        assert config.record_file == tmp_path / "apc_convergence.csv"
        assert config.snapshot_file == tmp_path / "apc_convergence.png"

    def test_ambient_mapping_converted(self):
        config = MonitorConfig(ambient={"rho": 1.0, "J": 0.5, "nominal_rpm": 100.0, "total_steps": 5})
        assert isinstance(config.ambient, AmbientConditions)
        assert config.ambient.total_steps == 5

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"run_name": ""}, "run_name"),
            ({"figure_name": ""}, "figure_name"),
            ({"snapshot_every_n_calls": 0}, "snapshot_every_n_calls"),
            ({"separator": ".."}, "separator"),
            ({"separator": "."}, "separator"),
            ({"float_format": "d"}, "float_format"),
            ({"alpha": 0.0}, "alpha"),
            ({"figsize": (0.0, 4.0)}, "figsize"),
            ({"snapshot_dpi": 0}, "snapshot_dpi"),
            ({"ambient": None}, "ambient"),
        ],
    )
    def test_invalid(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            MonitorConfig(**{"ambient": AMBIENT, **kwargs})

    def test_from_dict_resolves_relative_path(self, tmp_path):
        config = MonitorConfig.from_dict(
            {"output_path": "runs", "ambient": AMBIENT}, base_path=tmp_path
        )
        assert config.output_path == tmp_path / "runs"

    def test_from_dict_requires_ambient(self):
        with pytest.raises(ValueError, match="ambient"):
            MonitorConfig.from_dict({"run_name": "x"})

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match=r"Unknown monitor parameters: \['snapshot_every'\]"):
            MonitorConfig.from_dict({"snapshot_every": 5, "ambient": AMBIENT})

    def test_from_dict_incomplete_ambient(self):
        with pytest.raises(ValueError, match="Missing ambient parameters"):
            MonitorConfig.from_dict({"ambient": {}})

    def test_to_dict_is_yaml_serializable(self, tmp_path):
        ambient = AmbientConditions(J=0.6, nominal_rpm=5000.0, total_steps=7)
        config = MonitorConfig(output_path=tmp_path, ambient=ambient)
        data = yaml.safe_load(yaml.dump(config.to_dict()))
        assert data["output_path"] == str(tmp_path)
        assert data["ambient"]["total_steps"] == 7
        assert MonitorConfig.from_dict(data).record_file == config.record_file


class TestLoadConfig:
    def test_case_and_monitor(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text(
            yaml.dump(
                {
                    "case": {"J": 0.5, "nrevs": 2, "nsteps_per_rev": 10},
                    "monitor": {"output_path": "out", "run_name": "apc", "snapshot_every_n_calls": 5},
                }
            )
        )
        case, monitor = load_config(path)

        assert isinstance(case, SinglePropCase)
        assert monitor.output_path == tmp_path / "out"
        assert monitor.snapshot_every_n_calls == 5
        assert monitor.ambient.J == 0.5
        assert monitor.ambient.total_steps == 20
        assert monitor.ambient.nominal_rpm == pytest.approx(case.rpm)

    def test_explicit_ambient_wins(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text(
            yaml.dump(
                {
                    "case": {},
                    "monitor": {"ambient": {"rho": 1.0, "J": 0.3, "nominal_rpm": 1000, "total_steps": 4}},
                }
            )
        )
        _, monitor = load_config(path)
        assert monitor.ambient.total_steps == 4
        assert monitor.output_path is None

    def test_typo_in_monitor_section(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text("case: {}\nmonitor:\n  snapshot_every: 5\n")
        with pytest.raises(ValueError, match="snapshot_every"):
            load_config(path)

    def test_monitor_only_requires_ambient(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text("monitor:\n  run_name: x\n")
        with pytest.raises(ValueError, match="ambient"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

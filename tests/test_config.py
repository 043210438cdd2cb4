from __future__ import annotations

import tomllib

import pytest

from pytnum.config import (
    CompareConfig,
    PyTnumConfig,
    RefuteConfig,
    find_config_file,
    generate_default_config,
    init_config,
    load_config,
)
from pytnum.core.exceptions import ConfigError


class TestDefaults:
    def test_compare_defaults(self):
        config = PyTnumConfig()
        assert config.compare.max_value == 4095
        assert config.compare.divisor_min == 0
        assert config.compare.divisor_max == 4095
        assert config.compare.workers == 1

    def test_refute_defaults(self):
        config = PyTnumConfig()
        assert config.refute.divisor_min == 1
        assert config.refute.divider_width == 64
        assert config.refute.symbolic_dividends is False
        assert config.output.format == "text"

    def test_defaults_are_valid(self):
        PyTnumConfig().validate()

    def test_toml_round_trip(self):
        data = tomllib.loads(generate_default_config())
        assert data == PyTnumConfig().to_dict()


class TestValidation:
    @pytest.mark.parametrize(
        "section",
        [
            CompareConfig(max_value=-1),
            CompareConfig(divisor_min=10, divisor_max=3),
            CompareConfig(workers=0),
            CompareConfig(chunk_size="64"),
            RefuteConfig(dividend_min=9, dividend_max=1),
            RefuteConfig(divider_width=16),
            RefuteConfig(timeout_ms=0),
            RefuteConfig(mask_max=True),
        ],
    )
    def test_invalid_values(self, section):
        with pytest.raises(ConfigError):
            section.validate()

    def test_error_names_the_key(self):
        with pytest.raises(ConfigError) as excinfo:
            CompareConfig(workers=0).validate()
        assert excinfo.value.key == "compare.workers"
        assert isinstance(excinfo.value, ValueError)


class TestLoading:
    def test_no_file_gives_defaults(self, isolated_home):
        config = load_config()
        assert config.config_file is None
        assert config.compare == CompareConfig()

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[compare]\nmax_value = 255\nworkers = 4\n[output]\nformat = \"json\"\n")
        config = load_config(path)
        assert config.config_file == path
        assert config.compare.max_value == 255
        assert config.compare.workers == 4
        assert config.compare.divisor_max == 4095
        assert config.output.format == "json"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[compare\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[refute]\ndivisor_min = 10\ndivisor_max = 2\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_section_must_be_a_table(self, tmp_path):
        path = tmp_path / "flat.toml"
        path.write_text("compare = 3\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_pyproject_tool_table(self, isolated_home):
        (isolated_home / "pyproject.toml").write_text(
            "[project]\nname = \"demo\"\n[tool.pytnum.refute]\ndividend_max = 16\n"
        )
        config = load_config()
        assert config.config_file.name == "pyproject.toml"
        assert config.refute.dividend_max == 16


class TestDiscovery:
    def test_pyproject_without_tool_table_is_skipped(self, isolated_home):
        (isolated_home / "pyproject.toml").write_text("[project]\nname = \"demo\"\n")
        assert find_config_file() is None

    def test_walks_up_to_parent(self, isolated_home):
        (isolated_home / "pytnum.toml").write_text("")
        nested = isolated_home / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (isolated_home / "pytnum.toml").resolve()

    def test_falls_back_to_home(self, isolated_home, tmp_path):
        home_config = tmp_path / "home" / ".pytnum.toml"
        home_config.write_text("")
        assert find_config_file() == home_config


class TestInit:
    def test_creates_default_file(self, tmp_path):
        path = init_config(tmp_path)
        assert path == tmp_path / "pytnum.toml"
        assert load_config(path).to_dict() == PyTnumConfig().to_dict()

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)

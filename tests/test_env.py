"""Tests for the .env loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from mvcstarter.core.env import EnvironmentMap, load_env, locate_env_file
from mvcstarter.core.errors import ConfigError, ConfigErrorReason


class TestLoadEnv:
    def test_last_assignment_wins(self, write_env) -> None:
        path = write_env("APP_ID=first\nAPP_NAME=name\nAPP_ID=second\n")
        env = load_env(path)

        assert env["APP_ID"] == "second"
        assert list(env) == ["APP_ID", "APP_NAME"]

    def test_blank_and_comment_lines_are_ignored(self, write_env) -> None:
        path = write_env("\n   \n# COMMENTED=1\n  # INDENTED=2\nREAL=yes\n\t\n")
        env = load_env(path)

        assert dict(env) == {"REAL": "yes"}

    def test_lines_without_equals_are_skipped(self, write_env) -> None:
        path = write_env("JUSTTEXT\nKEY=value\nexport\n")
        assert dict(load_env(path)) == {"KEY": "value"}

    def test_value_keeps_everything_after_first_equals(self, write_env) -> None:
        path = write_env("DSN=mysql:host=db;port=3306\nEMPTY=\n")
        env = load_env(path)

        assert env["DSN"] == "mysql:host=db;port=3306"
        assert env["EMPTY"] == ""

    def test_key_and_value_are_trimmed(self, write_env) -> None:
        path = write_env("   SPACED   =   some value   \n")
        assert load_env(path)["SPACED"] == "some value"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"double"', "double"),
            ("'single'", "single"),
            ('""nested""', '"nested"'),
            ("'\"mixed\"'", '"mixed"'),
            ("\"mismatched'", "\"mismatched'"),
            ('"unterminated', '"unterminated'),
            ('trailing"', 'trailing"'),
            ('"', '"'),
            ('""', ""),
            ("plain", "plain"),
        ],
    )
    def test_one_layer_of_matching_quotes_is_stripped(self, write_env, raw: str, expected: str) -> None:
        path = write_env(f"VALUE={raw}\n")
        assert load_env(path)["VALUE"] == expected

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as excinfo:
            load_env(tmp_path / "nope.env")
        assert excinfo.value.reason is ConfigErrorReason.MISSING_FILE

    def test_environment_map_is_read_only(self, write_env) -> None:
        env = load_env(write_env("KEY=value\n"))
        with pytest.raises(TypeError):
            env["KEY"] = "other"  # type: ignore[index]
        assert env.source is not None


class TestEnvironmentMap:
    @pytest.mark.parametrize(
        "raw, expected",
        [("1", True), ("true", True), ("YES", True), ("on", True), ("2", True),
         ("0", False), ("", False), ("no", False), ("false", False), ("garbage", False)],
    )
    def test_get_bool(self, raw: str, expected: bool) -> None:
        assert EnvironmentMap({"FLAG": raw}).get_bool("FLAG") is expected

    def test_get_bool_default(self) -> None:
        assert EnvironmentMap().get_bool("FLAG") is False
        assert EnvironmentMap().get_bool("FLAG", default=True) is True

    def test_require_missing_key(self) -> None:
        with pytest.raises(ConfigError) as excinfo:
            EnvironmentMap({"A": "1"}).require("B")
        assert excinfo.value.reason is ConfigErrorReason.MISSING_KEY
        assert excinfo.value.key == "B"


class TestLocateEnvFile:
    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV_FILE", str(tmp_path / "from-process.env"))
        assert locate_env_file(tmp_path / "explicit.env") == tmp_path / "explicit.env"

    def test_process_variable(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV_FILE", str(tmp_path / "from-process.env"))
        assert locate_env_file() == tmp_path / "from-process.env"

    def test_nearest_dotenv_from_working_directory(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("APP_ENV_FILE", raising=False)
        (tmp_path / ".env").write_text("APP_ID=x\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert locate_env_file().resolve() == (tmp_path / ".env").resolve()

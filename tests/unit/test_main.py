"""Smoke tests for the click entry point."""

from pathlib import Path

from click.testing import CliRunner

from main import cli


def _config_dir(tmp_path: Path) -> Path:
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    data_dir = tmp_path / "data"
    (cfg_dir / "settings.yaml").write_text(
        f"storage:\n  data_dir: {data_dir.as_posix()}\noracle:\n  provider: none\n"
    )
    return cfg_dir


def test_register_add_done_status(tmp_path: Path):
    cfg = str(_config_dir(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["--config-dir", cfg, "register", "Bob"], input="secret\nsecret\n")
    assert result.exit_code == 0, result.output
    assert "Welcome, hunter bob." in result.output

    result = runner.invoke(cli, ["--config-dir", cfg, "add", "bob", "Morning run"], input="secret\n")
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["--config-dir", cfg, "done", "bob", "1"], input="secret\n")
    assert result.exit_code == 0, result.output
    assert "+10 EXP" in result.output
    assert "[x] Morning run" in result.output

    result = runner.invoke(cli, ["--config-dir", cfg, "status", "bob"], input="secret\n")
    assert "Streak 1" in result.output
    assert (tmp_path / "data" / "bob.json").exists()


def test_errors_exit_nonzero(tmp_path: Path):
    cfg = str(_config_dir(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["--config-dir", cfg, "register", "bob"], input="ab\nab\n")
    assert result.exit_code == 1
    assert "at least 4 characters" in result.output

    result = runner.invoke(cli, ["--config-dir", cfg, "status", "ghost"], input="secret\n")
    assert result.exit_code == 1
    assert "invalid username or password" in result.output

    runner.invoke(cli, ["--config-dir", cfg, "register", "bob"], input="secret\nsecret\n")
    result = runner.invoke(cli, ["--config-dir", cfg, "reset-hour", "bob", "24"], input="secret\n")
    assert result.exit_code == 1
    assert "between 0 and 23" in result.output


def test_bad_config_is_reported(tmp_path: Path):
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    (cfg_dir / "settings.yaml").write_text("oracle:\n  provider: openai\n")

    result = CliRunner().invoke(cli, ["--config-dir", str(cfg_dir), "status", "bob"])
    assert result.exit_code == 1
    assert "oracle.provider" in result.output

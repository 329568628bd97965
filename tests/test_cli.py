"""Tests for the Typer command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from fetchpool import __version__
from fetchpool.cli import app as app_module
from fetchpool.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Points the CLI at a config file inside the test's temp directory."""
    config_file = tmp_path / "config" / "config.ini"
    monkeypatch.setattr(app_module, "CONFIG_DIR", config_file.parent)
    monkeypatch.setattr(app_module, "CONFIG_FILE", config_file)
    return config_file


def write_batch(path, urls):
    path.write_text(json.dumps({"urls": urls}))
    return path


class TestDownloadCommand:
    """Test `fetchpool download`."""

    def test_missing_input_file_argument_is_usage_error(self):
        result = runner.invoke(app, ["download"])

        assert result.exit_code == 2

    def test_unreadable_input_file(self, tmp_path, output_dir):
        result = runner.invoke(
            app, ["download", str(tmp_path / "nope.json"), "-o", str(output_dir)]
        )

        assert result.exit_code == 1
        assert "InputFileError" in result.output

    def test_malformed_input_file(self, tmp_path, output_dir):
        path = tmp_path / "images.json"
        path.write_text("{broken")

        result = runner.invoke(app, ["download", str(path), "-o", str(output_dir)])

        assert result.exit_code == 1

    def test_missing_output_dir(self, tmp_path, http_server):
        batch = write_batch(tmp_path / "images.json", [f"{http_server}/images/a.jpg"])

        result = runner.invoke(
            app, ["download", str(batch), "-o", str(tmp_path / "missing")]
        )

        assert result.exit_code == 1
        assert not (tmp_path / "missing").exists()

    def test_mkdir_creates_output_dir(self, tmp_path, http_server):
        batch = write_batch(tmp_path / "images.json", [f"{http_server}/images/a.jpg"])
        target = tmp_path / "created"

        result = runner.invoke(
            app, ["download", str(batch), "-o", str(target), "--mkdir"]
        )

        assert result.exit_code == 0, result.output
        assert (target / "0.jpg").read_bytes() == b"image:a.jpg"

    def test_successful_batch(self, tmp_path, output_dir, http_server):
        names = ["1.jpg", "2.jpg", "3.jpg"]
        batch = write_batch(
            tmp_path / "images.json", [f"{http_server}/images/{n}" for n in names]
        )

        result = runner.invoke(
            app, ["download", str(batch), "-o", str(output_dir), "-w", "3"]
        )

        assert result.exit_code == 0, result.output
        assert {p.name: p.read_bytes() for p in output_dir.iterdir()} == {
            "0.jpg": b"image:1.jpg",
            "1.jpg": b"image:2.jpg",
            "2.jpg": b"image:3.jpg",
        }
        assert "Run Complete" in result.output

    def test_custom_extension(self, tmp_path, output_dir, http_server):
        batch = write_batch(tmp_path / "images.json", [f"{http_server}/images/a"])

        result = runner.invoke(
            app, ["download", str(batch), "-o", str(output_dir), "--ext", ".png"]
        )

        assert result.exit_code == 0, result.output
        assert (output_dir / "0.png").exists()

    def test_failed_job_exits_non_zero(self, tmp_path, output_dir, http_server):
        batch = write_batch(
            tmp_path / "images.json",
            [f"{http_server}/missing/a.jpg"],
        )

        result = runner.invoke(app, ["download", str(batch), "-o", str(output_dir)])

        assert result.exit_code == 1
        assert "FetchError" in result.output
        assert not (output_dir / "0.jpg").exists()

    def test_write_failure_exits_non_zero(self, tmp_path, output_dir, http_server):
        batch = write_batch(tmp_path / "images.json", [f"{http_server}/images/a.jpg"])
        # A directory in the way of the output file makes the write fail
        (output_dir / "0.jpg").mkdir()

        result = runner.invoke(app, ["download", str(batch), "-o", str(output_dir)])

        assert result.exit_code == 1
        assert "WriteError" in result.output
        assert (output_dir / "0.jpg").is_dir()

    def test_keep_going_downloads_the_rest(self, tmp_path, output_dir, http_server):
        batch = write_batch(
            tmp_path / "images.json",
            [
                f"{http_server}/images/a.jpg",
                f"{http_server}/missing/b.jpg",
                f"{http_server}/images/c.jpg",
            ],
        )

        result = runner.invoke(
            app,
            ["download", str(batch), "-o", str(output_dir), "-w", "1", "--keep-going"],
        )

        assert result.exit_code == 1
        assert "BatchFailedError" in result.output
        assert {p.name for p in output_dir.iterdir()} == {"0.jpg", "2.jpg"}

    def test_invalid_worker_count(self, tmp_path, output_dir):
        batch = write_batch(tmp_path / "images.json", [])

        result = runner.invoke(
            app, ["download", str(batch), "-o", str(output_dir), "-w", "0"]
        )

        assert result.exit_code == 1
        assert "ConfigurationError" in result.output

    def test_empty_batch(self, tmp_path, output_dir):
        batch = write_batch(tmp_path / "images.json", [])

        result = runner.invoke(app, ["download", str(batch), "-o", str(output_dir)])

        assert result.exit_code == 0, result.output
        assert list(output_dir.iterdir()) == []


class TestOtherCommands:
    """Test `validate`, `init` and the global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_validate(self, tmp_path, isolated_config):
        out = tmp_path / "out"
        out.mkdir()
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(f"[DEFAULT]\noutput_dir = {out}\n")
        batch = write_batch(tmp_path / "images.json", ["http://a/1", "http://a/2"])

        result = runner.invoke(app, ["validate", str(batch)])

        assert result.exit_code == 0, result.output
        assert "Validated Settings" in result.output

    def test_validate_bad_batch(self, tmp_path, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(f"[DEFAULT]\noutput_dir = {tmp_path}\n")
        path = tmp_path / "images.json"
        path.write_text('{"urls": [1]}')

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1

    def test_init_and_show_config(self, isolated_config):
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0, result.output
        assert isolated_config.is_file()

        result = runner.invoke(app, ["--show-config"])

        assert result.exit_code == 0
        assert "max_workers" in result.output

    def test_show_config_without_file(self):
        result = runner.invoke(app, ["--show-config"])

        assert result.exit_code == 1

"""Tests for the command-line entry point."""

import logging

import pytest

from figma_export import cli
from figma_export.errors import RemoteCallError
from figma_export.exporter import ExportResult
from figma_export.models import DownloadReport


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    monkeypatch.setenv("FIGMA_TOKEN", "figd_test")
    monkeypatch.setenv("FIGMA_FILE_URL", "https://www.figma.com/file/AbC123/Library")
    return monkeypatch


@pytest.fixture
def captured(env):
    calls = []

    def fake_export(config):
        calls.append(config)
        return ExportResult(report=DownloadReport())

    env.setattr(cli, "export_components", fake_export)
    return calls


def test_builds_config_from_arguments(captured):
    code = cli.main(
        ["format=svg", "outputDir=out/", "scale=2", "bogus=1", "noequals",
         "--concurrency", "5", "--chunk-size", "50", "--keep-going"]
    )

    assert code == 0
    config = captured[0]
    assert config.file_id == "AbC123"
    assert config.image_format == "svg"
    assert str(config.output_dir) == "out"
    assert config.scale == "2"
    assert config.concurrency == 5
    assert config.chunk_size == 50
    assert config.fail_fast is False


@pytest.mark.parametrize("missing", ["FIGMA_TOKEN", "FIGMA_FILE_URL"])
def test_missing_environment_exits_before_export(captured, env, missing, capsys):
    env.delenv(missing)

    assert cli.main([]) == 1
    assert captured == []
    assert missing in capsys.readouterr().out


def test_failed_export_exits_non_zero(env, capsys):
    error = RemoteCallError("GET https://api.figma.com/v1/files/AbC123 failed", stage="document")
    env.setattr(
        cli,
        "export_components",
        lambda config: ExportResult(error=error, failed_stage="document"),
    )

    assert cli.main([]) == 1
    assert "Export failed during document stage" in capsys.readouterr().out


def test_overrides_may_follow_options(captured):
    code = cli.main(["format=svg", "--verbose", "scale=2", "--concurrency", "4", "outputDir=icons"])

    assert code == 0
    config = captured[0]
    assert config.image_format == "svg"
    assert config.scale == "2"
    assert str(config.output_dir) == "icons"
    assert config.concurrency == 4

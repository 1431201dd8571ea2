from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from pytest import LogCaptureFixture

from scan_rollup import __main__
from scan_rollup.scanerrors import CollaboratorFailure
from scan_rollup.scanerrors import CollaboratorUnavailable


def test_parse_args():
    args = __main__.parse_args(["config", "--root", "\\\\server\\share", "--parallel", "8"])
    assert args.config == "config"
    assert args.root == "\\\\server\\share"
    assert args.parallel == 8


def test_parse_args_defaults():
    args = __main__.parse_args(["config"])
    assert args.config == "config"
    assert args.root is None
    assert args.parallel is None
    assert args.debug is False


@pytest.mark.parametrize("value", ["0", "62", "many"])
def test_parse_args_rejects_bad_parallel(value: str):
    with pytest.raises(SystemExit):
        __main__.parse_args(["config", "--parallel", value])


def test_main_runs_once():
    cli_args = ["tests/test_config.ini"]

    with patch("scan_rollup.__main__.Scanner.run_once") as mock_scanner:
        result = __main__.main(cli_args=cli_args)

    assert result == 0
    assert mock_scanner.call_count == 1


def test_main_passes_overrides():
    cli_args = ["tests/test_config.ini", "--root", "\\\\other\\share", "--parallel", "2"]

    with patch("scan_rollup.__main__.Scanner") as mock_scanner:
        result = __main__.main(cli_args=cli_args)

    assert result == 0
    config, root = mock_scanner.call_args.args
    assert root == "\\\\other\\share"
    assert config.parallel == 2


def test_main_returns_one_on_collaborator_failure(caplog: LogCaptureFixture):
    cli_args = ["tests/test_config.ini"]
    failure = CollaboratorFailure(1, ["share not found"])

    with patch("scan_rollup.__main__.Scanner.run_once", side_effect=failure):
        result = __main__.main(cli_args=cli_args)

    assert result == 1
    assert "Scan failed" in caplog.text
    assert "share not found" in caplog.text


def test_main_returns_one_when_tool_missing():
    cli_args = ["tests/test_config.ini"]
    missing = CollaboratorUnavailable("Scanning tool 'xcp' was not found")

    with patch("scan_rollup.__main__.Scanner.run_once", side_effect=missing):
        result = __main__.main(cli_args=cli_args)

    assert result == 1


def test_main_returns_one_on_bad_root():
    cli_args = ["tests/test_config.ini", "--root", "C:\\data"]

    with patch("scan_rollup.scanner.ScanProcess.from_config") as mock_process:
        result = __main__.main(cli_args=cli_args)

    assert result == 1
    assert mock_process.call_count == 0


def test_main_create_config():
    cli_args = ["tests/new_test_config.ini", "--make-config"]

    with patch("scan_rollup.__main__.write_new_config") as mock_write:
        result = __main__.main(cli_args=cli_args)

    assert result == 0
    mock_write.assert_called_once_with("tests/new_test_config.ini")


def test_main_creates_log_file_with_config():
    cli_args = ["tests/test_config.ini", "--log-file"]

    try:
        with patch("scan_rollup.__main__.Scanner.run_once") as mock_scanner:
            result = __main__.main(cli_args=cli_args)

        assert result == 0
        assert mock_scanner.call_count == 1
        assert Path("tests/test_config.log").exists()

    finally:
        for handler in logging.root.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                logging.root.handlers.remove(handler)

        Path("tests/test_config.log").unlink(missing_ok=True)


def test_main_returns_one_on_out_of_range_parallel(
    tmp_path: Path,
    caplog: LogCaptureFixture,
):
    config_file = tmp_path / "rollup.ini"
    config_file.write_text(
        "[scanner]\n"
        "root_path = \\\\server\\share\\path\n"
        "parallel = 99\n",
        encoding="utf-8",
    )

    with patch("scan_rollup.scanner.ScanProcess.lines") as mock_lines:
        result = __main__.main(cli_args=[str(config_file)])

    assert result == 1
    assert mock_lines.call_count == 0
    assert "parallel must be between 1 and 61, got 99" in caplog.text

import logging
from pathlib import Path

import pytest

from dolphin_parser import logging_utils


@pytest.fixture
def fresh_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(logging_utils, "_configured", False)
    yield
    package_logger = logging.getLogger("dolphin_parser")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


def test_only_the_package_logger_is_configured() -> None:
    config = logging_utils._build_logging_config("INFO", Path("unused.log"))

    assert list(config["loggers"]) == ["dolphin_parser"]
    assert config["loggers"]["dolphin_parser"]["propagate"] is False
    assert set(config["loggers"]["dolphin_parser"]["handlers"]) == {"console", "client_file"}


def test_console_only_without_log_file() -> None:
    config = logging_utils._build_logging_config("DEBUG", None)

    assert list(config["handlers"]) == ["console"]


def test_log_directory_created_only_when_configured(fresh_logging, tmp_path: Path) -> None:
    logs_dir = tmp_path / "logs"
    assert not logs_dir.exists()

    logging_utils.configure_logging(level="INFO", logs_dir=logs_dir)

    assert (logs_dir / "dolphin_parser.log").exists()


def test_module_records_written_once(fresh_logging, tmp_path: Path) -> None:
    logging_utils.configure_logging(level="INFO", logs_dir=tmp_path)

    logging.getLogger("dolphin_parser.services.storage").info("stored archive once")
    for handler in logging.getLogger("dolphin_parser").handlers:
        handler.flush()

    text = (tmp_path / "dolphin_parser.log").read_text(encoding="utf-8")
    assert text.count("stored archive once") == 1


def test_configure_logging_runs_once(fresh_logging, tmp_path: Path) -> None:
    logging_utils.configure_logging(level="INFO", log_to_file=False)
    logging_utils.configure_logging(level="INFO", logs_dir=tmp_path / "second")

    assert not (tmp_path / "second").exists()


def test_log_timing_reports_failures(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.timing")

    with caplog.at_level(logging.INFO, logger="tests.timing"):
        with pytest.raises(RuntimeError):
            with logging_utils.log_timing(logger, "Upload"):
                raise RuntimeError("boom")

    assert "Upload failed after" in caplog.text

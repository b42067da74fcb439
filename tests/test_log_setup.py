"""
Logging setup tests: -v mapping, rich console handler, log files and
re-configuration.
"""

import logging

import pytest
from rich.logging import RichHandler

from hrm_interpreter.log_setup import setup_logging, verbosity_to_level


@pytest.fixture
def logger_name(request):
    name = f"hrm_test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _handlers(logger, kind):
    return [h for h in logger.handlers if type(h) is kind]


# ─── Verbosity ─────────────────────────────

class TestVerbosity:
    @pytest.mark.parametrize("count, level", [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
        (-1, logging.WARNING),
    ])
    def test_levels(self, count, level):
        assert verbosity_to_level(count) == level


# ─── Handlers ──────────────────────────────

class TestSetupLogging:
    def test_console_only_by_default(self, logger_name):
        logger = setup_logging(logger_name, console_level=logging.INFO)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        console = _handlers(logger, RichHandler)[0]
        assert console.level == logging.INFO
        assert console.console.stderr

    def test_log_file_captures_debug(self, logger_name, tmp_path):
        path = tmp_path / "logs" / "run.log"
        logger = setup_logging(logger_name, log_file=path)
        assert len(_handlers(logger, logging.FileHandler)) == 1

        logging.getLogger(f"{logger_name}.parser").debug("labels=%s", {"a": 0})
        text = path.read_text(encoding="utf-8")
        assert f"| DEBUG   | {logger_name}.parser | " in text
        assert "labels={'a': 0}" in text

    def test_log_dir_gets_timestamped_file(self, logger_name, tmp_path):
        setup_logging(logger_name, log_dir=tmp_path)
        assert len(list(tmp_path.glob(f"{logger_name}_*.log"))) == 1

    def test_second_setup_replaces_handlers(self, logger_name, tmp_path):
        first_file = tmp_path / "first.log"
        second_file = tmp_path / "second.log"
        first = setup_logging(logger_name, console_level=logging.WARNING, log_file=first_file)
        second = setup_logging(logger_name, console_level=logging.DEBUG, log_file=second_file)

        assert first is second
        assert len(_handlers(second, RichHandler)) == 1
        assert len(_handlers(second, logging.FileHandler)) == 1
        assert _handlers(second, RichHandler)[0].level == logging.DEBUG

        second.info("after reconfigure")
        assert "after reconfigure" in second_file.read_text(encoding="utf-8")
        assert "after reconfigure" not in first_file.read_text(encoding="utf-8")

    def test_second_setup_without_file_drops_it(self, logger_name, tmp_path):
        setup_logging(logger_name, log_file=tmp_path / "run.log")
        logger = setup_logging(logger_name)
        assert _handlers(logger, logging.FileHandler) == []
        assert len(logger.handlers) == 1

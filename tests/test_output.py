"""Tests for the output system.

Covers format resolution, colour disabling, stdout/stderr discipline,
quiet/verbose handling, the three renderers and log routing.
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from anidex.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture(autouse=True)
def _reset_global_output():
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("anidex.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("anidex.output._is_tty", lambda: True)


@pytest.fixture()
def anidex_logger():
    logger = logging.getLogger("anidex")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("hello")
        captured = capfd.readouterr()
        assert "hello" in captured.out
        assert captured.err == ""

    def test_diagnostics_go_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.info("some info")
        mgr.warning("careful")
        mgr.error("broken")
        mgr.debug("details")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "some info" in captured.err
        assert "Warning: careful" in captured.err
        assert "Error: broken" in captured.err
        assert "[debug] details" in captured.err


class TestQuietMode:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors_and_warnings(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.warning("w")
        mgr.error("e")
        err = capfd.readouterr().err
        assert "Warning: w" in err
        assert "Error: e" in err

    def test_progress_only_on_tty(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).progress("Loading")
        assert capfd.readouterr().err == ""


class TestRenderers:
    def test_json_response(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"files": 3})
        assert json.loads(capfd.readouterr().out) == {"files": 3}

    def test_plain_response_key_value(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            {"files": 3, "size": "1.0 KiB"}
        )
        assert capfd.readouterr().out.splitlines() == ["files\t3", "size\t1.0 KiB"]

    def test_json_table_is_array_of_objects(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(
            ["ID", "Title"], [["1", "Cowboy Bebop"], ["5", "Trigun"]]
        )
        assert json.loads(capfd.readouterr().out) == [
            {"ID": "1", "Title": "Cowboy Bebop"},
            {"ID": "5", "Title": "Trigun"},
        ]

    def test_plain_table_is_tab_separated(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(
            ["ID", "Title"], [["1", "Cowboy Bebop"]]
        )
        assert capfd.readouterr().out.splitlines() == ["ID\tTitle", "1\tCowboy Bebop"]

    def test_rich_table_renders(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            ["ID", "Title"], [["1", "Cowboy Bebop"]], title="Top rated"
        )
        out = capfd.readouterr().out
        assert "Cowboy Bebop" in out
        assert "Top rated" in out


class TestGlobalInstance:
    def test_get_output_creates_default(self, non_tty):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_manager(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_module_helpers_mirror_manager_methods(self):
        import anidex.output as output

        helpers = {
            "format_response", "print_data", "print_table",
            "info", "error", "success", "warning", "debug", "progress",
        }
        for name in helpers:
            assert callable(getattr(output, name))
            assert callable(getattr(OutputManager, name))
        assert not hasattr(output, "suggest")
        assert not hasattr(OutputManager, "suggest")


class TestConfigureLogging:
    def test_verbose_enables_debug(self, non_tty, anidex_logger):
        configure_logging(OutputManager(format=OutputFormat.PLAIN, verbose=True))
        assert anidex_logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in anidex_logger.handlers)

    def test_default_level_is_warning(self, non_tty, anidex_logger):
        configure_logging(OutputManager(format=OutputFormat.PLAIN))
        assert anidex_logger.level == logging.WARNING

    def test_quiet_raises_floor_to_error(self, non_tty, anidex_logger):
        configure_logging(OutputManager(format=OutputFormat.PLAIN, quiet=True))
        assert anidex_logger.level == logging.ERROR

    def test_reconfiguring_replaces_handler(self, non_tty, anidex_logger):
        configure_logging(OutputManager(format=OutputFormat.PLAIN))
        configure_logging(OutputManager(format=OutputFormat.PLAIN))
        rich_handlers = [h for h in anidex_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1

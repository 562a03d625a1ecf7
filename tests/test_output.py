"""Tests for the output formatting system.

Covers format resolution, colour disabling, the stdout/stderr split that
keeps response bodies pipeable, quiet and verbose modes, and the three
body renderers.
"""

from __future__ import annotations

import json

import pytest

from steadyhttp import output as output_module
from steadyhttp.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
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
    monkeypatch.setattr("steadyhttp.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("steadyhttp.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# Format resolution
# ------------------------------------------------------------------ #


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_is_rich_on_terminal(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_is_plain_on_terminal_without_colour(self, tty):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    @pytest.mark.parametrize("fmt", [OutputFormat.JSON, OutputFormat.PLAIN, OutputFormat.RICH])
    def test_explicit_format_kept(self, non_tty, fmt):
        assert OutputManager(format=fmt).format == fmt


class TestColorDisabling:
    def test_no_color_set(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_regular_terminal(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr
# ------------------------------------------------------------------ #


class TestStreams:
    def test_body_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"id": 1})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"id": 1}
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("retrying")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "retrying" in captured.err

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).error("Request failed")
        assert capfd.readouterr().err.strip() == "Error: Request failed"

    def test_warning_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).warning("slow")
        assert capfd.readouterr().err.strip() == "Warning: slow"

    def test_suggest_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("Increase --timeout")
        assert capfd.readouterr().err.strip() == "→ Increase --timeout"


class TestQuietAndVerbose:
    def test_quiet_hides_status_line(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("HTTP 200 OK")
        mgr.success("done")
        mgr.suggest("next")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors_and_body(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.error("bad")
        mgr.format_response("body")
        captured = capfd.readouterr()
        assert "bad" in captured.err
        assert captured.out == "body\n"

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("detail")
        assert capfd.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, verbose=True)
        mgr.debug("detail")
        assert capfd.readouterr().err.strip() == "[debug] detail"
        assert mgr.is_verbose


# ------------------------------------------------------------------ #
# Body renderers
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_indented(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"a": {"b": 1}})
        out = capfd.readouterr().out
        assert out.startswith("{\n  ")
        assert json.loads(out) == {"a": {"b": 1}}

    def test_json_string_reparsed(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response('{"k": "v"}')
        assert json.loads(capfd.readouterr().out) == {"k": "v"}

    def test_non_json_string_printed_raw(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response("plain text")
        assert capfd.readouterr().out == "plain text\n"

    def test_unicode_preserved(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"name": "Zoë"})
        assert "Zoë" in capfd.readouterr().out


class TestPlainFormat:
    def test_dict_tab_separated(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response({"id": 1, "name": "x"})
        assert capfd.readouterr().out == "id\t1\nname\tx\n"

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response([{"id": 1, "n": "a"}, {"id": 2, "n": "b"}])
        assert capfd.readouterr().out == "1\ta\n2\tb\n"

    def test_scalar(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response(42)
        assert capfd.readouterr().out == "42\n"


class TestRichFormat:
    def test_dict_rendered(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response({"key": "value"})
        out = capfd.readouterr().out
        assert "key" in out
        assert "value" in out

    def test_text_printed(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response("service ready", "text/plain")
        assert "service ready" in capfd.readouterr().out


class TestOutputFile:
    def test_body_written_to_file(self, tmp_path, capfd, non_tty):
        target = tmp_path / "out.json"
        OutputManager(output_file=str(target)).format_response({"a": 1})
        assert json.loads(target.read_text()) == {"a": 1}
        assert capfd.readouterr().out == ""

    def test_text_gets_trailing_newline(self, tmp_path, non_tty):
        target = tmp_path / "out.txt"
        OutputManager(output_file=str(target)).format_response("hello")
        assert target.read_text() == "hello\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_module_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        output_module.format_response("body")
        output_module.info("i")
        output_module.error("e")
        output_module.debug("d")
        captured = capfd.readouterr()
        assert captured.out == "body\n"
        assert "i" in captured.err
        assert "Error: e" in captured.err
        assert "[debug] d" in captured.err

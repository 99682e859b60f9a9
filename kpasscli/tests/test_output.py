"""Tests for output target resolution and the output handler."""

import sys
from unittest import mock

import pyperclip
import pytest

from kpasscli.config import Config
from kpasscli.exceptions import OutputError
from kpasscli.output import (
    Handler,
    OutputType,
    clear_clipboard_after,
    resolve_output_type,
)


@pytest.fixture(autouse=True)
def no_output_env(monkeypatch):
    monkeypatch.delenv("KPASSCLI_OUT", raising=False)


class TestOutputType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("stdout", OutputType.STDOUT),
            ("Clipboard", OutputType.CLIPBOARD),
            (" CLIPBOARD ", OutputType.CLIPBOARD),
            ("printer", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, value, expected):
        assert OutputType.parse(value) is expected


class TestResolveOutputType:
    """Flag, then --clipboard, then KPASSCLI_OUT, then config, then stdout."""

    def test_default_is_stdout(self):
        assert resolve_output_type(None, False, Config()) is OutputType.STDOUT

    def test_flag_wins(self, monkeypatch):
        monkeypatch.setenv("KPASSCLI_OUT", "clipboard")
        config = Config(default_output="clipboard")
        assert resolve_output_type("stdout", True, config) is OutputType.STDOUT

    def test_clipboard_flag(self, monkeypatch):
        monkeypatch.setenv("KPASSCLI_OUT", "stdout")
        assert resolve_output_type(None, True, Config()) is OutputType.CLIPBOARD

    def test_env_before_config(self, monkeypatch):
        monkeypatch.setenv("KPASSCLI_OUT", "clipboard")
        config = Config(default_output="stdout")
        assert resolve_output_type(None, False, config) is OutputType.CLIPBOARD

    def test_config(self):
        config = Config(default_output="clipboard")
        assert resolve_output_type(None, False, config) is OutputType.CLIPBOARD

    def test_invalid_values_fall_through(self, monkeypatch):
        monkeypatch.setenv("KPASSCLI_OUT", "bogus")
        config = Config(default_output="clipboard")
        assert resolve_output_type("nope", False, config) is OutputType.CLIPBOARD


class TestHandler:
    def test_stdout(self, capsys):
        Handler(OutputType.STDOUT).output("secret")
        assert capsys.readouterr().out == "secret\n"

    def test_clipboard_without_timeout(self):
        with mock.patch("kpasscli.output.pyperclip.copy") as copy, mock.patch(
            "kpasscli.output.subprocess.Popen"
        ) as popen:
            Handler(OutputType.CLIPBOARD, clipboard_timeout=0).output("secret")

        copy.assert_called_once_with("secret")
        popen.assert_not_called()

    def test_clipboard_schedules_clear(self, capsys):
        with mock.patch("kpasscli.output.pyperclip.copy") as copy, mock.patch(
            "kpasscli.output.subprocess.Popen"
        ) as popen:
            Handler(OutputType.CLIPBOARD, clipboard_timeout=10).output("secret")

        copy.assert_called_once_with("secret")
        cmd = popen.call_args.args[0]
        assert cmd == [
            sys.executable,
            "-m",
            "kpasscli.cli",
            "--clear-clipboard-after",
            "10",
        ]
        captured = capsys.readouterr()
        assert "cleared in 10 seconds" in captured.err
        assert "secret" not in captured.err
        assert captured.out == ""

    def test_clipboard_unavailable(self):
        with mock.patch(
            "kpasscli.output.pyperclip.copy",
            side_effect=pyperclip.PyperclipException("no clipboard"),
        ):
            with pytest.raises(OutputError, match="no clipboard"):
                Handler(OutputType.CLIPBOARD).output("secret")

    def test_spawn_failure(self):
        with mock.patch("kpasscli.output.pyperclip.copy"), mock.patch(
            "kpasscli.output.subprocess.Popen", side_effect=OSError("boom")
        ):
            with pytest.raises(OutputError, match="clipboard clearer"):
                Handler(OutputType.CLIPBOARD, clipboard_timeout=5).output("x")


class TestClearClipboardAfter:
    def test_sleeps_then_clears(self):
        with mock.patch("kpasscli.output.time.sleep") as sleep, mock.patch(
            "kpasscli.output.pyperclip.copy"
        ) as copy:
            clear_clipboard_after(7)

        sleep.assert_called_once_with(7)
        copy.assert_called_once_with("")

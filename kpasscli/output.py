"""Delivering a looked-up value to stdout or the system clipboard."""

import enum
import logging
import os
import subprocess
import sys
import time
from typing import Optional

import pyperclip

from kpasscli.config import Config
from kpasscli.exceptions import OutputError

logger = logging.getLogger(__name__)

OUTPUT_ENV = "KPASSCLI_OUT"


class OutputType(enum.Enum):
    STDOUT = "stdout"
    CLIPBOARD = "clipboard"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["OutputType"]:
        """Return the output type named by *value*, or None if unrecognised."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def resolve_output_type(
    flag_out: Optional[str], clipboard_flag: bool, config: Config
) -> OutputType:
    """Pick the output from --out, --clipboard, KPASSCLI_OUT, then the config.

    An unrecognised value at one level falls through to the next.
    """
    candidates = (
        flag_out,
        "clipboard" if clipboard_flag else None,
        os.environ.get(OUTPUT_ENV),
        config.default_output,
    )
    for candidate in candidates:
        output_type = OutputType.parse(candidate)
        if output_type is not None:
            return output_type
    return OutputType.STDOUT


def copy_to_clipboard(value: str) -> None:
    try:
        pyperclip.copy(value)
    except pyperclip.PyperclipException as exc:
        raise OutputError(f"Failed to copy to clipboard: {exc}") from exc


def clear_clipboard() -> None:
    copy_to_clipboard("")


def clear_clipboard_after(seconds: int) -> None:
    """Block for *seconds*, then empty the clipboard."""
    time.sleep(seconds)
    clear_clipboard()


class Handler:
    """Write values to the configured output.

    Args:
        output_type: Where values go.
        clipboard_timeout: Seconds after which a copied value is cleared by
            a detached helper process. None or 0 leaves the clipboard alone.
    """

    def __init__(self, output_type: OutputType, clipboard_timeout: Optional[int] = None):
        self.output_type = output_type
        self.clipboard_timeout = clipboard_timeout

    def output(self, value: str) -> None:
        if self.output_type is OutputType.STDOUT:
            sys.stdout.write(value + "\n")
            return

        copy_to_clipboard(value)
        logger.debug("Value copied to clipboard")
        self._spawn_background_clear()

    def _spawn_background_clear(self) -> None:
        if not self.clipboard_timeout or self.clipboard_timeout <= 0:
            return

        cmd = [
            sys.executable,
            "-m",
            "kpasscli.cli",
            "--clear-clipboard-after",
            str(self.clipboard_timeout),
        ]
        try:
            subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise OutputError(
                f"Failed to spawn background clipboard clearer: {exc}"
            ) from exc

        print(
            f"Clipboard will be cleared in {self.clipboard_timeout} seconds "
            "(running in background)...",
            file=sys.stderr,
        )

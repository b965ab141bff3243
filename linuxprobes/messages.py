"""Plugin status codes and the error raised when a check cannot go on."""

from __future__ import annotations

import os
from enum import IntEnum


class Status(IntEnum):
    """Monitoring plugin exit states."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3
    DEPENDENT = 4


class PluginError(Exception):
    """A fatal plugin error carrying the status the plugin should exit with."""

    def __init__(self, status: Status | int, message: str, errnum: int = 0) -> None:
        self.status = status
        self.message = message
        self.errnum = errnum
        text = message
        if errnum:
            text = f"{message} ({os.strerror(errnum)})"
        super().__init__(text)

    @property
    def exit_code(self) -> int:
        """The numeric process exit status for this error."""
        return int(self.status)


_STATE_TEXT = {
    Status.OK: "OK",
    Status.WARNING: "WARNING",
    Status.CRITICAL: "CRITICAL",
    Status.DEPENDENT: "DEPENDENT",
}


def state_text(result: Status | int) -> str:
    """Return the human readable name of a plugin status."""
    try:
        return _STATE_TEXT.get(Status(result), "UNKNOWN")
    except ValueError:
        return "UNKNOWN"
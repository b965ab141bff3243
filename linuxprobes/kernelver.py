"""Version number of the running Linux kernel."""

from __future__ import annotations

import os
import re

from .messages import PluginError, Status

_RELEASE = re.compile(
    r"\s*([+-]?\d+)(?:\.\s*([+-]?\d+)(?:\.\s*([+-]?\d+))?)?"
)


def kernel_version(major: int, minor: int, patch: int) -> int:
    """Pack a kernel version into a single comparable integer."""
    return (major << 16) + (minor << 8) + min(patch, 255)


def parse_release(release: str) -> tuple[int, int, int]:
    """Split a kernel release string into (major, minor, patch).

    Raises PluginError for releases that do not look like a kernel version.
    """
    match = _RELEASE.match(release)
    fields = [int(g) for g in match.groups() if g is not None] if match else []
    depth = len(fields)
    fields += [0] * (3 - depth)
    major, minor, patch = fields
    if depth < 2 or (depth < 3 and major < 3):
        raise PluginError(Status.UNKNOWN, f"non-standard kernel version: {release}")
    return major, minor, patch


def linux_version(release: str | None = None) -> int:
    """Return the packed version of ``release``, or of the running kernel."""
    if release is None:
        release = os.uname().release
    return kernel_version(*parse_release(release))
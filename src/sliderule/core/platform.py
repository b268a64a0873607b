# platform.py
# SPDX-License-Identifier: MIT
"""Host platform descriptor.

Line endings and external tool locations differ between Windows and POSIX
hosts. Rather than probing the OS wherever those values are needed, the
host is described once by :class:`PlatformInfo` and passed to the code
that cares.
"""

from __future__ import annotations

import platform as _platform
from dataclasses import dataclass

__all__ = ["PlatformInfo", "WINDOWS_NPM_EXECUTABLE"]

WINDOWS_NPM_EXECUTABLE = r"C:\Program Files\nodejs\npm.cmd"


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Facts about the host that sliderule output depends on.

    Attributes:
        os_name (str): ``platform.system()`` style name, e.g. ``Linux`` or
            ``Windows``.
        newline (str): Line terminator used for generated files.
        npm_executable (str): Command used to run npm.
    """

    os_name: str = "Linux"
    newline: str = "\n"
    npm_executable: str = "npm"

    @property
    def is_windows(self) -> bool:
        return self.os_name.lower() == "windows"

    @classmethod
    def for_os(cls, os_name: str) -> "PlatformInfo":
        """Build the descriptor sliderule uses for ``os_name``."""
        if os_name.lower() == "windows":
            return cls(os_name="Windows", newline="\r\n", npm_executable=WINDOWS_NPM_EXECUTABLE)
        return cls(os_name=os_name or "Linux", newline="\n", npm_executable="npm")

    @classmethod
    def detect(cls) -> "PlatformInfo":
        """Describe the running interpreter's host."""
        return cls.for_os(_platform.system())

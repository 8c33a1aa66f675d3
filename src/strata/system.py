"""Facts about the machine strata runs on.

The hostname selects the ``machine/<hostname>`` tier; the rest is only
shown by ``strata status``.
"""

import logging
import os
import platform
import socket
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

HOSTNAME_VARIABLE = "STRATA_HOSTNAME"
OS_RELEASE = Path("/etc/os-release")


class OS(Enum):
    LINUX = "linux"
    MACOS = "macos"
    UNKNOWN = "unknown"


def read_os_release(path: Path = OS_RELEASE) -> Dict[str, str]:
    """Parse an os-release file into a dict; missing files give {}."""
    if not path.exists():
        return {}
    data = {}
    with open(path) as f:
        for line in f:
            key, sep, value = line.rstrip().partition("=")
            if sep:
                data[key] = value.strip('"')
    return data


def short_hostname(name: Optional[str]) -> str:
    """First label of a host name, ``unknown`` if there is none."""
    name = (name or "").strip()
    if not name:
        logger.warning("Could not determine hostname, using 'unknown'")
        return "unknown"
    return name.split(".")[0]


class Environment:
    """Home directory, user, hostname and platform of this machine.

    Both ``home`` and ``hostname`` can be given explicitly; otherwise the
    hostname comes from ``$STRATA_HOSTNAME`` or the system host name.
    """

    def __init__(
        self,
        home: Optional[Path] = None,
        hostname: Optional[str] = None,
    ):
        self.home = Path(home) if home else Path.home()
        self.user = (
            os.environ.get("USER")
            or os.environ.get("LOGNAME")
            or self.home.name
        )
        self.hostname = hostname or short_hostname(
            os.environ.get(HOSTNAME_VARIABLE) or socket.gethostname()
        )
        self.os = {
            "linux": OS.LINUX,
            "darwin": OS.MACOS,
        }.get(platform.system().lower(), OS.UNKNOWN)
        self.os_info = self._platform_info()

    def _platform_info(self) -> Dict[str, str]:
        info = {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
            "pretty_name": platform.system() or "unknown",
        }
        if self.is_linux():
            info["pretty_name"] = read_os_release().get("PRETTY_NAME", "Linux")
        elif self.is_macos():
            info["pretty_name"] = f"macOS {platform.mac_ver()[0]}"
        return info

    def is_linux(self) -> bool:
        return self.os == OS.LINUX

    def is_macos(self) -> bool:
        return self.os == OS.MACOS

    def __repr__(self) -> str:
        return (
            f"Environment(os={self.os.value}, home={self.home}, "
            f"user={self.user}, hostname={self.hostname})"
        )

"""
Host operating system detection.

Public exports:
    OSInfo: Data class containing operating system information
    detect_os: Function to detect the current OS, Windows build and Linux distribution
    parse_windows_version: Split a Windows version string into numbers
"""

import platform
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

X64_MACHINES = ("AMD64", "x86_64", "X86_64", "x64")


@dataclass
class OSInfo:
    """
    Operating system information.

    Attributes:
        system: Operating system type ('Linux', 'Darwin', 'Windows')
        release: OS release ('10', '11', kernel release on Linux)
        machine: Machine architecture ('AMD64', 'x86_64', 'arm64', etc.)
        major: Windows major version number
        minor: Windows minor version number
        build: Windows build number
        distro_id: Linux distribution ID ('ubuntu', 'debian', etc.)
        distro_name: Full distribution name ('Ubuntu')
        distro_version: Distribution version ('24.04')
    """
    system: str
    release: str
    machine: str
    major: Optional[int] = None
    minor: Optional[int] = None
    build: Optional[int] = None
    distro_id: Optional[str] = None
    distro_name: Optional[str] = None
    distro_version: Optional[str] = None

    @property
    def is_windows(self) -> bool:
        return self.system == 'Windows'

    @property
    def is_x64(self) -> bool:
        return self.machine in X64_MACHINES

    def describe(self) -> str:
        if self.is_windows and self.major is not None:
            return f"Windows {self.major}.{self.minor}.{self.build}"
        if self.distro_name:
            return f"{self.system} ({self.distro_name} {self.distro_version or ''})".replace(" )", ")")
        return f"{self.system} {self.release}".strip()


def parse_windows_version(version: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Split a Windows version string into (major, minor, build).

    Examples:
        >>> parse_windows_version('10.0.22631')
        (10, 0, 22631)
        >>> parse_windows_version('garbage')
        (None, None, None)
    """
    parts = (version or '').split('.')
    try:
        numbers = [int(p) for p in parts[:3]]
    except ValueError:
        return None, None, None
    while len(numbers) < 3:
        numbers.append(None)
    return numbers[0], numbers[1], numbers[2]


def detect_os() -> OSInfo:
    """
    Detect the current operating system.

    On Windows the real version is read from ``sys.getwindowsversion()``,
    falling back to ``platform.version()``. On Linux the distribution is
    detected with the `distro` package, falling back to
    ``platform.freedesktop_os_release()``.

    Returns:
        OSInfo: Detected operating system information
    """
    info = OSInfo(
        system=platform.system(),
        release=platform.release(),
        machine=platform.machine(),
    )

    if info.is_windows:
        getwindowsversion = getattr(sys, 'getwindowsversion', None)
        if getwindowsversion is not None:
            winver = getwindowsversion()
            info.major, info.minor, info.build = winver.major, winver.minor, winver.build
        else:
            info.major, info.minor, info.build = parse_windows_version(platform.version())

    elif info.system == 'Linux':
        try:
            import distro
            info.distro_id = distro.id()
            info.distro_name = distro.name()
            info.distro_version = distro.version()
        except ImportError:
            if sys.version_info >= (3, 10):
                try:
                    os_release = platform.freedesktop_os_release()
                    info.distro_id = os_release.get('ID', '').lower() or None
                    info.distro_name = os_release.get('NAME', '') or None
                    info.distro_version = os_release.get('VERSION_ID', '') or None
                except OSError:
                    pass

    return info

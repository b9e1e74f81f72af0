"""
Host platform detection for the binary packaging tool.
Maps the identifiers Python reports to the platform and architecture tags
used in Node's prebuilt binary names.
"""
import platform
import sys
from typing import Dict, Optional

from loguru import logger

PLATFORM_TAGS = ("linux", "darwin", "win32")
ARCH_TAGS = ("x64", "arm64", "ia32", "arm", "s390x", "ppc64")

PLATFORM_ALIASES: Dict[str, str] = {
    "linux": "linux",
    "linux2": "linux",
    "darwin": "darwin",
    "win32": "win32",
    "cygwin": "win32",
}

ARCH_ALIASES: Dict[str, str] = {
    "x64": "x64",
    "x86_64": "x64",
    "amd64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "ia32": "ia32",
    "x86": "ia32",
    "i386": "ia32",
    "i686": "ia32",
    "arm": "arm",
    "armv6l": "arm",
    "armv7l": "arm",
    "s390x": "s390x",
    "ppc64": "ppc64",
    "ppc64le": "ppc64",
}


def normalize_platform(raw: str) -> str:
    """
    Map an OS identifier to one of PLATFORM_TAGS.
    Unknown identifiers are logged and returned unchanged.
    """
    tag = PLATFORM_ALIASES.get(raw.lower())
    if tag is None:
        logger.warning(f"Unknown platform: {raw}, using as-is")
        return raw
    return tag


def normalize_arch(raw: str) -> str:
    """
    Map a CPU architecture identifier to one of ARCH_TAGS.
    Unknown identifiers are logged and returned unchanged.
    """
    tag = ARCH_ALIASES.get(raw.lower())
    if tag is None:
        logger.warning(f"Unknown architecture: {raw}, using as-is")
        return raw
    return tag


class HostEnvironment:
    """
    Raw platform and architecture identifiers of the running host.
    Both can be pinned at construction, which tests use to fake a host.
    """
    def __init__(self, raw_platform: Optional[str] = None, raw_arch: Optional[str] = None):
        self.raw_platform = raw_platform if raw_platform is not None else sys.platform
        self.raw_arch = raw_arch if raw_arch is not None else platform.machine()

    def platform_tag(self) -> str:
        return normalize_platform(self.raw_platform)

    def arch_tag(self) -> str:
        return normalize_arch(self.raw_arch)

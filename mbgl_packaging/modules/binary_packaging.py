"""
Binary packaging module for the mbgl native addon
Creates one node-pre-gyp style tarball per ABI build found under lib/.
"""
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from mbgl_packaging.core.errors import ArchiveCreationFailed
from mbgl_packaging.modules.abi_discovery import (
    DEFAULT_ABI_PREFIX,
    DEFAULT_BINARY_NAME,
    AbiDirectory,
    discover_abi_directories,
)
from mbgl_packaging.modules.host_platform import HostEnvironment
from mbgl_packaging.scripts.config_parsing import PackagerConfig
from mbgl_packaging.scripts.manifest_parsing import PackageMetadata, read_manifest

TAR_EXECUTABLE = "tar"


@dataclass(frozen=True)
class Tarball:
    name: str
    path: Path
    abi: str
    platform: str
    arch: str
    contents: Tuple[str, ...] = field(default_factory=tuple)


def sanitize_package_name(name: str) -> str:
    """Make a package name filesystem-safe: '@scope/pkg' becomes '-scope-pkg'."""
    return name.replace("@", "-").replace("/", "-")


def build_tarball_name(clean_name: str, version: str, abi: str, platform: str, arch: str) -> str:
    return f"{clean_name}-v{version}-node-v{abi}-{platform}-{arch}.tar.gz"


def _run_tar(args: List[str], tarball_name: str) -> subprocess.CompletedProcess:
    cmd = [TAR_EXECUTABLE] + args
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        return subprocess.run(cmd, check=True, capture_output=True, text=True)
    except FileNotFoundError:
        raise ArchiveCreationFailed(tarball_name, f"'{TAR_EXECUTABLE}' executable not found")
    except subprocess.CalledProcessError as e:
        reason = (e.stderr or "").strip() or f"{TAR_EXECUTABLE} exited with status {e.returncode}"
        raise ArchiveCreationFailed(tarball_name, reason, returncode=e.returncode)


def create_tarball(
    abi_directory: AbiDirectory,
    tarball_name: str,
    output_dir=None,
    platform: str = "",
    arch: str = "",
) -> Tarball:
    """
    Compress the binary of one ABI directory into a tarball.
    The binary is stored at the archive root, not under lib/node-v<ABI>/.
    Args:
        abi_directory: Discovered ABI build directory.
        tarball_name: File name of the archive to create.
        output_dir: Directory to write the archive to, defaults to the working directory.
    Returns:
        Tarball: The created archive and its listed members.
    Raises:
        ArchiveCreationFailed: tar could not be run or exited non-zero.
    """
    output_dir = Path(output_dir) if output_dir is not None else Path(os.getcwd())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveCreationFailed(tarball_name, f"cannot create output directory {output_dir}: {e}")
    archive_path = output_dir / tarball_name

    logger.info(f"Creating tarball: {tarball_name}")
    logger.info(f"  Platform: {platform}, Arch: {arch}, ABI: {abi_directory.abi}")
    logger.info(f"  Binary: {abi_directory.binary_path}")

    _run_tar(
        ["-czf", str(archive_path), "-C", str(abi_directory.path), abi_directory.binary_name],
        tarball_name,
    )

    listing = _run_tar(["-tzf", str(archive_path)], tarball_name)
    contents = tuple(line for line in listing.stdout.splitlines() if line.strip())
    logger.info("  Tarball contents:")
    for member in contents:
        logger.info(f"    {member}")

    return Tarball(
        name=tarball_name,
        path=archive_path,
        abi=abi_directory.abi,
        platform=platform,
        arch=arch,
        contents=contents,
    )


class BinaryPackager:
    """
    Packages every ABI build of a native addon for the current host.
    """
    def __init__(
        self,
        metadata: PackageMetadata,
        lib_dir: str = "./lib",
        output_dir: Optional[str] = None,
        binary_name: str = DEFAULT_BINARY_NAME,
        abi_prefix: str = DEFAULT_ABI_PREFIX,
        host: Optional[HostEnvironment] = None,
    ):
        self.metadata = metadata
        self.lib_dir = Path(lib_dir)
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.binary_name = binary_name
        self.abi_prefix = abi_prefix
        self.host = host or HostEnvironment()
        self.tarballs: List[Tarball] = []
        self._host_tags: Optional[Tuple[str, str]] = None

    @classmethod
    def from_config(cls, config: PackagerConfig, host: Optional[HostEnvironment] = None) -> "BinaryPackager":
        return cls(
            read_manifest(config.manifest),
            lib_dir=config.lib_dir,
            output_dir=config.output_dir,
            binary_name=config.binary_name,
            abi_prefix=config.abi_prefix,
            host=host,
        )

    @property
    def clean_name(self) -> str:
        return sanitize_package_name(self.metadata.name)

    def host_tags(self) -> Tuple[str, str]:
        if self._host_tags is None:
            self._host_tags = (self.host.platform_tag(), self.host.arch_tag())
        return self._host_tags

    def plan(self) -> List[Tuple[AbiDirectory, str]]:
        """
        Discover ABI directories and name the tarball each one would produce.
        Returns:
            list: (AbiDirectory, tarball name) pairs in discovery order.
        """
        platform, arch = self.host_tags()
        logger.info(
            f"Packaging {self.metadata.name} for platform: {platform}, arch: {arch}, version: {self.metadata.version}"
        )
        abi_dirs = discover_abi_directories(self.lib_dir, self.abi_prefix, self.binary_name)
        return [
            (abi_dir, build_tarball_name(self.clean_name, self.metadata.version, abi_dir.abi, platform, arch))
            for abi_dir in abi_dirs
        ]

    def run(self) -> List[str]:
        """
        Create one tarball per discovered ABI directory, sequentially.
        A failure stops the run; tarballs already written stay on disk.
        Returns:
            list: Names of the created tarballs.
        """
        self.tarballs = []
        plan = self.plan()
        platform, arch = self.host_tags()
        for abi_dir, tarball_name in plan:
            tarball = create_tarball(
                abi_dir,
                tarball_name,
                output_dir=self.output_dir,
                platform=platform,
                arch=arch,
            )
            self.tarballs.append(tarball)

        names = [t.name for t in self.tarballs]
        logger.info(f"Successfully created {len(names)} tarballs:")
        for name in names:
            logger.info(f"  {name}")
        return names

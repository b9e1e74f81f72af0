"""
ABI directory discovery for the binary packaging tool
Finds the per-ABI build outputs (lib/node-v<ABI>/mbgl.node) to package.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from loguru import logger

from mbgl_packaging.core.errors import MissingOutputDirectory, NoAbiDirectoriesFound

DEFAULT_ABI_PREFIX = "node-v"
DEFAULT_BINARY_NAME = "mbgl.node"


@dataclass(frozen=True)
class AbiDirectory:
    name: str
    path: Path
    abi: str
    binary_name: str = DEFAULT_BINARY_NAME

    @property
    def binary_path(self) -> Path:
        return self.path / self.binary_name


def _abi_sort_key(entry: AbiDirectory):
    if entry.abi.isdigit():
        return (0, int(entry.abi), entry.abi)
    return (1, 0, entry.abi)


def discover_abi_directories(
    root: Union[str, Path],
    prefix: str = DEFAULT_ABI_PREFIX,
    binary_name: str = DEFAULT_BINARY_NAME,
) -> List[AbiDirectory]:
    """
    Scan the immediate children of root for ABI build directories.
    Args:
        root: Binary output directory, usually ./lib.
        prefix: Directory name prefix that carries the ABI number.
        binary_name: File every ABI directory must contain.
    Returns:
        list: AbiDirectory entries ordered by ABI.
    Raises:
        MissingOutputDirectory: root does not exist.
        NoAbiDirectoriesFound: no child directory qualifies.
    """
    root = Path(root)
    if not root.is_dir():
        raise MissingOutputDirectory(root)

    found = []
    for child in root.iterdir():
        if not child.name.startswith(prefix) or not child.is_dir():
            continue
        if not (child / binary_name).is_file():
            logger.debug(f"Skipping {child}: no {binary_name}")
            continue
        found.append(AbiDirectory(
            name=child.name,
            path=child,
            abi=child.name[len(prefix):],
            binary_name=binary_name,
        ))

    if not found:
        raise NoAbiDirectoriesFound(root, prefix, binary_name)

    found.sort(key=_abi_sort_key)
    logger.info(f"Found ABI directories: {', '.join(d.name for d in found)}")
    return found

"""
Error taxonomy for the binary packaging tool.
Every error here is fatal for the run; the CLI turns it into a diagnostic and an exit status.
"""
from typing import Optional


class PackagingError(Exception):
    """
    Base class for fatal packaging failures.
    """
    exit_code = 1

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}\nHint: {self.hint}"
        return message


class MissingOutputDirectory(PackagingError):
    def __init__(self, path):
        super().__init__(
            f"lib directory not found: {path}",
            hint="build the native addon before packaging it",
        )
        self.path = path


class NoAbiDirectoriesFound(PackagingError):
    def __init__(self, path, prefix: str, binary_name: str):
        super().__init__(f"No ABI directories with {binary_name} found in {path}")
        self.path = path
        self.prefix = prefix
        self.binary_name = binary_name


class ArchiveCreationFailed(PackagingError):
    def __init__(self, tarball_name: str, reason: str, returncode: Optional[int] = None):
        super().__init__(f"Failed to create tarball {tarball_name}: {reason}")
        self.tarball_name = tarball_name
        self.returncode = returncode


class ManifestError(PackagingError):
    pass


class ConfigError(PackagingError):
    pass

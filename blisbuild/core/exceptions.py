"""
Centralized exception hierarchy for blisbuild.

Every failure in blisbuild is fatal. Lower layers raise one of these
exceptions and only the CLI entry point turns it into an exit status.
Each exception carries a ``kind`` string so callers can tell failures
apart without matching on messages.
"""

from typing import Optional, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class BlisBuildError(Exception):
    """Base exception for all blisbuild errors."""

    kind = "error"


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(BlisBuildError):
    """Raised when the build configuration cannot be assembled."""

    kind = "configuration"


class ConfigurationConflictError(ConfigurationError):
    """Raised when mutually exclusive features are enabled together."""

    kind = "configuration-conflict"

    def __init__(self, first: str, second: str):
        self.features = (first, second)
        super().__init__(f"Features '{first}' and '{second}' are mutually exclusive.")


class MissingEnvironmentError(ConfigurationError):
    """Raised when a required environment value is not set."""

    kind = "missing-environment"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Required environment variable is not set: {key}")


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(BlisBuildError):
    """Raised when staging, cleanup or output writes fail."""

    kind = "filesystem"


# ============================================================================
# Build Exceptions
# ============================================================================


class BuildError(BlisBuildError):
    """Base exception for native build errors."""

    kind = "build"


class MissingSourceError(BuildError):
    """Raised when the vendored source tree is absent or empty."""

    kind = "missing-prerequisite"

    def __init__(self, source_dir):
        self.source_dir = source_dir
        super().__init__(
            f"{source_dir} directory can not be read. "
            "Consider running `git submodule update --init`."
        )


class SubprocessFailedError(BuildError):
    """Raised when a native configure or install step exits non-zero."""

    kind = "subprocess"

    def __init__(
        self, step: str, returncode: int, command: Optional[Sequence[str]] = None
    ):
        self.step = step
        self.returncode = returncode
        self.command = list(command) if command else []
        super().__init__(f"{step} step failed with exit code {returncode}")


class ToolNotFoundError(BuildError):
    """Raised when a native tool cannot be launched."""

    kind = "subprocess"

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} not found in PATH")


# ============================================================================
# Interface Generation Exceptions
# ============================================================================


class HeaderParseError(BlisBuildError):
    """Raised when declarations cannot be produced from a header."""

    kind = "header-parse"

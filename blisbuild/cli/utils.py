"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from blisbuild.core.config import BuildConfiguration
from blisbuild.core.environment import EnvironmentReader
from blisbuild.core.exceptions import BlisBuildError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "blisbuild.yaml"


# ============================================================================
# Configuration Management
# ============================================================================


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, or YAML
            parsing fails

    Example:
        >>> defaults = load_yaml_config(Path("blisbuild.yaml"))
        >>> defaults.get("features", [])
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        return config or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}")


def parse_env_assignment(value: str) -> List[str]:
    """Parse a ``KEY=VALUE`` command-line argument."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise ValueError(f"expected KEY=VALUE, got '{value}'")
    return [key, val]


def resolve_config_file(args) -> Optional[Path]:
    """
    Find the defaults file for a command.

    Returns:
        The explicit ``--config`` path, the project's blisbuild.yaml if it
        exists, or None
    """
    if getattr(args, "config", None):
        return Path(args.config)
    default = Path(args.project_root) / DEFAULT_CONFIG_FILE
    return default if default.exists() else None


def assemble_config(args) -> BuildConfiguration:
    """
    Assemble the build configuration for a command.

    ``--env`` assignments overlay the process environment; the process
    environment itself is left untouched.

    Raises:
        BlisBuildError: If the configuration cannot be assembled
    """
    environ = dict(os.environ)
    for key, value in getattr(args, "env", None) or []:
        environ[key] = value
        logger.debug(f"Set environment variable: {key}={value}")

    config_file = resolve_config_file(args)
    defaults = (
        load_yaml_config(config_file, required=True) if config_file else {}
    )

    return BuildConfiguration.assemble(
        EnvironmentReader(environ),
        defaults=defaults,
        project_root=Path(args.project_root).resolve(),
    )


def rerun_paths(args) -> List[Path]:
    """Paths whose change should make the invoking build system rerun us."""
    from blisbuild.link.directives import BUILD_LOGIC_PATH

    paths = [BUILD_LOGIC_PATH]
    config_file = resolve_config_file(args)
    if config_file is not None:
        paths.append(config_file.resolve())
    return paths


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def report_error(error: BlisBuildError) -> int:
    """Report a fatal error and return the exit code for it."""
    logger.debug(f"Fatal {error.kind} error", exc_info=error)
    print_error(str(error), f"({error.kind})")
    return 1

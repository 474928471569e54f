"""
Build configuration for blisbuild.

A BuildConfiguration is assembled once per invocation from the
environment (and an optional YAML defaults file) and handed to every
component. Nothing downstream reads the raw environment again.

Usage:
    from blisbuild.core.config import BuildConfiguration
    from blisbuild.core.environment import EnvironmentReader

    config = BuildConfiguration.assemble(EnvironmentReader())
    print(config.lib_dir)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional

from blisbuild.core import environment as env
from blisbuild.core.environment import EnvironmentReader
from blisbuild.core.exceptions import ConfigurationError, MissingEnvironmentError

logger = logging.getLogger(__name__)

PARALLEL_PTHREADS = "parallel-pthreads"
PARALLEL_OPENMP = "parallel-openmp"
STATIC = "static"
RUNTIME_DISPATCH = "runtime-dispatch"

FEATURES = (PARALLEL_PTHREADS, PARALLEL_OPENMP, STATIC, RUNTIME_DISPATCH)

LIBRARY_NAME = "blis"
DEFAULT_SOURCE_DIR = "upstream"

# Keys accepted in the YAML defaults file.
CONFIG_KEYS = frozenset(
    {
        "features",
        "target_arch",
        "target",
        "out_dir",
        "confname",
        "makeflags",
        "source_dir",
        "toolchain",
    }
)


@dataclass(frozen=True)
class BuildConfiguration:
    """
    Immutable per-invocation build configuration.

    Attributes:
        target_arch: Target CPU architecture (e.g., 'x86_64', 'aarch64')
        target: Target triple (e.g., 'x86_64-unknown-linux-gnu')
        out_dir: Output directory receiving lib/ and include/
        features: Enabled optional features
        toolchain: Toolchain overrides that are set, keyed by override name
        makeflags: Parallelism directive passed through to make, if any
        confname: Explicit BLIS configuration name overriding the arch mapping
        source_dir: Vendored BLIS source tree
    """

    target_arch: str
    target: str
    out_dir: Path
    features: FrozenSet[str] = frozenset()
    toolchain: Mapping[str, str] = field(default_factory=dict)
    makeflags: Optional[str] = None
    confname: Optional[str] = None
    source_dir: Path = Path(DEFAULT_SOURCE_DIR)

    def __post_init__(self):
        # Freeze the overrides mapping so the record stays immutable.
        object.__setattr__(
            self, "toolchain", MappingProxyType(dict(self.toolchain))
        )
        object.__setattr__(self, "features", frozenset(self.features))

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    @property
    def is_static(self) -> bool:
        return STATIC in self.features

    @property
    def lib_dir(self) -> Path:
        return self.out_dir / "lib"

    @property
    def include_dir(self) -> Path:
        return self.out_dir / "include"

    @property
    def header_path(self) -> Path:
        return self.include_dir / LIBRARY_NAME / "blis.h"

    @property
    def bindings_path(self) -> Path:
        return self.out_dir / "bindings.py"

    @property
    def staged_dir(self) -> Path:
        """Per-triple copy of the vendored tree the native build runs in."""
        return self.out_dir / f"{LIBRARY_NAME}_{self.target.lower()}"

    @classmethod
    def assemble(
        cls,
        reader: EnvironmentReader,
        defaults: Optional[Dict[str, Any]] = None,
        project_root: Optional[Path] = None,
    ) -> "BuildConfiguration":
        """
        Assemble the configuration from the environment.

        Environment values take precedence over the defaults file; features
        are the union of both.

        Args:
            reader: Environment reader for the invoking build system
            defaults: Parsed YAML defaults (optional)
            project_root: Base for relative paths (default: current directory)

        Returns:
            Assembled BuildConfiguration

        Raises:
            ConfigurationError: If the defaults are malformed
            MissingEnvironmentError: If a required value is missing
        """
        defaults = validate_defaults(defaults or {})
        root = Path(project_root) if project_root else Path.cwd()

        def pick(key: str, default_key: str) -> Optional[str]:
            value = reader.lookup(key)
            if value is None and defaults.get(default_key) is not None:
                value = str(defaults[default_key])
            return value

        def require(key: str, default_key: str) -> str:
            value = pick(key, default_key)
            if value is None:
                raise MissingEnvironmentError(key)
            return value

        target_arch = require(env.TARGET_ARCH, "target_arch")
        target = require(env.TARGET, "target")
        out_dir = _resolve(root, require(env.OUT_DIR, "out_dir"))

        features = set(defaults.get("features", []))
        features.update(f for f in FEATURES if reader.has_feature(f))

        toolchain = {}
        file_toolchain = defaults.get("toolchain", {})
        for name in env.TOOLCHAIN_OVERRIDES:
            value = reader.toolchain_override(name)
            if value is None and file_toolchain.get(name) is not None:
                value = str(file_toolchain[name])
            if value is not None:
                toolchain[name] = value

        source_dir = pick(env.SOURCE_DIR, "source_dir") or DEFAULT_SOURCE_DIR

        config = cls(
            target_arch=target_arch,
            target=target,
            out_dir=out_dir,
            features=frozenset(features),
            toolchain=toolchain,
            makeflags=pick(env.MAKEFLAGS, "makeflags"),
            confname=pick(env.CONFNAME, "confname"),
            source_dir=_resolve(root, source_dir),
        )
        logger.debug(f"Assembled configuration: {config}")
        return config


def validate_defaults(defaults: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check a parsed defaults file for unknown keys, features and overrides.

    Raises:
        ConfigurationError: If anything in the file is not recognized
    """
    if not isinstance(defaults, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    unknown = sorted(set(defaults) - CONFIG_KEYS)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}. "
            f"Supported keys: {', '.join(sorted(CONFIG_KEYS))}"
        )

    features = defaults.get("features", [])
    if not isinstance(features, list):
        raise ConfigurationError("'features' must be a list")
    for feature in features:
        if feature not in FEATURES:
            raise ConfigurationError(
                f"Unknown feature: {feature}. "
                f"Supported features: {', '.join(FEATURES)}"
            )

    toolchain = defaults.get("toolchain", {})
    if not isinstance(toolchain, dict):
        raise ConfigurationError("'toolchain' must be a mapping")
    for name in toolchain:
        if name not in env.TOOLCHAIN_OVERRIDES:
            raise ConfigurationError(
                f"Unknown toolchain override: {name}. "
                f"Supported overrides: {', '.join(env.TOOLCHAIN_OVERRIDES)}"
            )

    return defaults


def _resolve(root: Path, value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = root / path
    return path

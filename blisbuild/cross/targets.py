"""
Target architecture to BLIS configuration name mapping.

BLIS selects its microkernels through a configuration name passed as
the last positional argument of ``configure``. Only the x86_64 family
supports runtime CPU detection; on ARM and PowerPC BLIS configure must
pick the best static variant itself.
"""

from typing import Optional

# Build every microkernel and dispatch at runtime.
X86_64_DISPATCH = "x86_64"
# Let BLIS configure detect the best match for the build machine.
AUTO = "auto"
# Portable reference kernels.
GENERIC = "generic"

DISPATCH_ARCHES = frozenset({"x86_64"})

# Families without runtime dispatch in BLIS.
AUTO_ARCHES = {
    "arm": "cortexa9/cortexa15",
    "armv7": "cortexa9/cortexa15",
    "aarch64": "cortexa57/thunderx2",
    "powerpc64": "bgq/power9/power10",
}


def select_confname(
    target_arch: str, runtime_dispatch: bool = False, override: Optional[str] = None
) -> str:
    """
    Select the BLIS configuration name for a target architecture.

    An explicit override is used verbatim and the mapping is never
    consulted.

    Args:
        target_arch: Target CPU architecture
        runtime_dispatch: Whether the runtime-dispatch feature is enabled
        override: Explicit configuration name

    Returns:
        Configuration name token

    Example:
        >>> select_confname("x86_64", runtime_dispatch=True)
        'x86_64'
        >>> select_confname("aarch64", runtime_dispatch=True)
        'auto'
        >>> select_confname("riscv64")
        'generic'
    """
    if override:
        return override

    if target_arch in DISPATCH_ARCHES:
        return X86_64_DISPATCH if runtime_dispatch else AUTO
    if target_arch in AUTO_ARCHES:
        return AUTO
    return GENERIC

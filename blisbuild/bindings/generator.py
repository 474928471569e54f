"""
Interface generator.

Derives a Python module from the installed BLIS header: a cffi ``cdef``
source with every function and type the library declares, preceded by the
system type definitions those refer to, the names of those declarations,
and one typed assignment per macro constant. The module is regenerated
from scratch on every build.
"""

import keyword
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from blisbuild.bindings.macros import MACRO_EXCLUSION_SET, IgnoreMacros
from blisbuild.bindings.parser import (
    HeaderParser,
    InterfaceDescription,
    PycparserHeaderParser,
)
from blisbuild.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

# Names defined by the generated module itself.
RESERVED_NAMES = frozenset(
    {"HEADER", "CDEF", "FUNCTIONS", "TYPES", "VARIABLES", "load", "Any", "Tuple"}
)

_LOAD_FUNCTION = '''\
def load(path: str) -> Tuple[Any, Any]:
    """Open the library at ``path`` through cffi and return ``(ffi, lib)``."""
    import cffi

    ffi = cffi.FFI()
    ffi.cdef(CDEF)
    return ffi, ffi.dlopen(path)
'''


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def _name_tuple(name: str, values: Iterable[str]) -> List[str]:
    lines = [f"{name} = ("]
    lines.extend(f"    {value!r}," for value in values)
    lines.append(")")
    return lines


def _is_exportable(name: str) -> bool:
    return (
        name.isidentifier()
        and not keyword.iskeyword(name)
        and name not in RESERVED_NAMES
    )


def render_module(description: InterfaceDescription) -> str:
    """
    Render an InterfaceDescription as Python source.

    Args:
        description: Parsed header

    Returns:
        Module source text
    """
    lines = [
        f'"""Interface declarations generated from {description.header}.',
        "",
        "Regenerated by blisbuild on every build; do not edit.",
        '"""',
        "",
        "from typing import Any, Tuple",
        "",
        f"HEADER = {str(description.header)!r}",
        "",
        'CDEF = """',
    ]
    lines.extend(_escape(decl) for decl in description.dependencies)
    lines.extend(_escape(decl) for decl in description.declarations)
    lines.append('"""')
    lines.append("")
    lines.extend(_name_tuple("FUNCTIONS", description.functions))
    lines.append("")
    lines.extend(_name_tuple("TYPES", description.types))
    lines.append("")
    lines.extend(_name_tuple("VARIABLES", description.variables))
    lines.append("")

    constants = sorted(
        (name, value)
        for name, value in description.constants.items()
        if _is_exportable(name)
    )
    for name, value in constants:
        lines.append(f"{name}: {type(value).__name__} = {value!r}")
    if constants:
        lines.append("")

    lines.append("")
    lines.append(_LOAD_FUNCTION)
    return "\n".join(lines)


class InterfaceGenerator:
    """
    Generate the bindings module for a header.

    Args:
        parser: Header parsing engine (default: PycparserHeaderParser)
        exclusions: Macro names skipped during parsing
    """

    def __init__(
        self,
        parser: Optional[HeaderParser] = None,
        exclusions: Iterable[str] = MACRO_EXCLUSION_SET,
    ):
        self.parser = parser or PycparserHeaderParser()
        self.ignore = IgnoreMacros(exclusions)

    def generate(self, header: Path, output: Path) -> InterfaceDescription:
        """
        Parse ``header`` and write the bindings module to ``output``.

        Any previous output is replaced in full.

        Raises:
            HeaderParseError: If the header cannot be parsed
        """
        description = self.parser.parse(Path(header), self.ignore.will_parse_macro)
        atomic_write(output, render_module(description))
        logger.info(f"Wrote bindings to {output}")
        return description

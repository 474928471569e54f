"""
Header parsing for interface generation.

The header is run through the C preprocessor, the result is parsed with
pycparser, and every declaration that comes from the library's own
include tree is kept, together with the system type definitions those
declarations refer to. Object-like macros are collected separately from
``cc -dM -E`` and evaluated to constants.

Usage:
    from blisbuild.bindings.parser import PycparserHeaderParser
    from blisbuild.bindings.macros import IgnoreMacros, MACRO_EXCLUSION_SET

    parser = PycparserHeaderParser(include_dirs=[Path("/out/include")])
    description = parser.parse(
        Path("/out/include/blis/blis.h"),
        IgnoreMacros(MACRO_EXCLUSION_SET).will_parse_macro,
    )
"""

import logging
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from cffi import commontypes, model
from pycparser import c_ast, c_generator, c_parser

from blisbuild.bindings.macros import (
    MacroParsingBehavior,
    MacroTable,
    MacroValue,
    parse_defines,
)
from blisbuild.core.exceptions import HeaderParseError

logger = logging.getLogger(__name__)

MacroPredicate = Callable[[str], MacroParsingBehavior]

# Compiler extensions in system headers that pycparser does not understand.
GNU_EXTENSION_DEFINES = (
    "__attribute__(x)=",
    "__extension__=",
    "__asm__(x)=",
    "__asm(x)=",
    "__restrict=",
    "__restrict__=",
    "__inline=",
    "__inline__=",
    "__builtin_va_list=void*",
    "__declspec(x)=",
    "__int128=long long",
    "__float128=long double",
    "_Noreturn=",
    "_Static_assert(x,y)=",
)

# Interchange floating types gcc >= 7 provides natively; glibc's <math.h>
# uses them without declaring them. Under other compilers glibc typedefs
# them itself, and repeating a typedef is accepted.
FLOATN_TYPES = (
    ("_Float32", "float"),
    ("_Float64", "double"),
    ("_Float32x", "double"),
    ("_Float64x", "long double"),
    ("_Float128", "long double"),
)

BUILTIN_FILE = "<blisbuild-builtin>"

BUILTIN_PRELUDE = f'# 1 "{BUILTIN_FILE}"\n' + "".join(
    f"typedef {ctype} {name};\n" for name, ctype in FLOATN_TYPES
)

# Type names cffi resolves on its own; system declarations of these are
# never copied into the interface.
CFFI_KNOWN_TYPES = frozenset(commontypes.COMMON_TYPES) | frozenset(
    model.PrimitiveType.ALL_PRIMITIVE_TYPES
)


@dataclass
class InterfaceDescription:
    """
    Declarations derived from a header.

    Attributes:
        header: Header the description was derived from
        declarations: C declarations in source order
        dependencies: System declarations the library's declarations refer
            to, in source order
        functions: Function names
        types: Typedef, struct, union and enum names
        variables: Exported global variable names
        constants: Macro constants by name
    """

    header: Path
    declarations: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    variables: List[str] = field(default_factory=list)
    constants: Dict[str, MacroValue] = field(default_factory=dict)


class HeaderParser(ABC):
    """Engine converting a header plus a macro predicate into declarations."""

    @abstractmethod
    def parse(
        self, header: Path, will_parse_macro: MacroPredicate
    ) -> InterfaceDescription:
        """
        Parse a header.

        Args:
            header: Entry header
            will_parse_macro: Decides, per macro name, whether it is parsed

        Returns:
            InterfaceDescription of the header

        Raises:
            HeaderParseError: If the header cannot be parsed
        """
        pass


class CPreprocessor:
    """
    Runs the C preprocessor.

    Args:
        cc: Compiler command (may include arguments, e.g. 'ccache gcc')
        defines: ``-D`` definitions applied to every run
        std: C language standard; pycparser does not understand C23
    """

    def __init__(
        self,
        cc: Optional[str] = None,
        defines: Sequence[str] = GNU_EXTENSION_DEFINES,
        std: Optional[str] = "gnu11",
    ):
        self.cc = shlex.split(cc or "cc")
        self.defines = list(defines)
        self.std = std

    def preprocess(self, header: Path, include_dirs: Sequence[Path]) -> str:
        """Preprocess a header, keeping line markers."""
        return self._run(["-E"] + self._flags(include_dirs) + [str(header)])

    def defines_of(self, header: Path, include_dirs: Sequence[Path]) -> str:
        """List every macro defined after including a header."""
        return self._run(["-E", "-dM"] + self._flags(include_dirs) + [str(header)])

    def predefined(self) -> str:
        """List the macros the compiler defines on its own."""
        return self._run(["-E", "-dM"] + self._flags([]) + ["-x", "c", os.devnull])

    def _flags(self, include_dirs: Sequence[Path]) -> List[str]:
        flags = [f"-std={self.std}"] if self.std else []
        flags.extend(f"-D{define}" for define in self.defines)
        flags.extend(f"-I{path}" for path in include_dirs)
        return flags

    def _run(self, args: List[str]) -> str:
        cmd = self.cc + args
        logger.debug(f"Running: `{shlex.join(cmd)}`")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            raise HeaderParseError(f"C preprocessor not found: {self.cc[0]}")
        if result.returncode != 0:
            raise HeaderParseError(
                f"Preprocessing failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout


class PycparserHeaderParser(HeaderParser):
    """
    HeaderParser built on the C preprocessor and pycparser.

    Args:
        include_dirs: Include search path; the first entry is the library's
            include tree (default: the header's grandparent directory)
        preprocessor: Preprocessor to use (default: CPreprocessor())
        known_types: Type names the FFI layer already provides; system
            definitions of these are not copied as dependencies
    """

    def __init__(
        self,
        include_dirs: Optional[Sequence[Path]] = None,
        preprocessor: Optional[CPreprocessor] = None,
        known_types: FrozenSet[str] = CFFI_KNOWN_TYPES,
    ):
        self.include_dirs = [Path(p) for p in include_dirs or []]
        self.preprocessor = preprocessor or CPreprocessor()
        self.known_types = known_types

    def parse(
        self, header: Path, will_parse_macro: MacroPredicate
    ) -> InterfaceDescription:
        header = Path(header)
        if not header.is_file():
            raise HeaderParseError(f"Header not found: {header}")

        include_dirs = self.include_dirs or [header.parent.parent]
        logger.info(f"Parsing {header}")

        text = self.preprocessor.preprocess(header, include_dirs)
        try:
            ast = c_parser.CParser().parse(BUILTIN_PRELUDE + text, str(header))
        except c_parser.ParseError as e:
            raise HeaderParseError(f"Failed to parse {header}: {e}") from e

        description = InterfaceDescription(header=header)
        _DeclarationCollector(description, include_dirs[0], self.known_types).visit(
            ast
        )

        defines = parse_defines(self.preprocessor.defines_of(header, include_dirs))
        predefined = set(parse_defines(self.preprocessor.predefined()))

        parsed = {}
        for name, body in defines.items():
            if will_parse_macro(name) is MacroParsingBehavior.IGNORE:
                logger.debug(f"Ignoring macro {name}")
                continue
            parsed[name] = body

        constants = MacroTable(parsed).constants()
        description.constants = {
            name: value
            for name, value in constants.items()
            if name not in predefined
        }

        logger.info(
            f"Found {len(description.functions)} functions, "
            f"{len(description.types)} types, "
            f"{len(description.dependencies)} system dependencies, "
            f"{len(description.constants)} constants"
        )
        return description


class _DeclarationCollector(c_ast.NodeVisitor):
    """
    Collect top-level declarations owned by the library's include tree.

    Type definitions from elsewhere are indexed so the ones the owned
    declarations refer to can be emitted ahead of them as dependencies.
    """

    def __init__(
        self,
        description: InterfaceDescription,
        include_root: Path,
        known_types: FrozenSet[str] = CFFI_KNOWN_TYPES,
    ):
        self.description = description
        self.include_root = Path(os.path.abspath(include_root))
        self.known_types = known_types
        self.generator = c_generator.CGenerator()
        self._seen = set()
        self._owned: List[c_ast.Node] = []
        self._external: Dict[str, Tuple[int, c_ast.Node]] = {}

    def visit_FileAST(self, node):
        for position, ext in enumerate(node.ext):
            if self._is_owned(ext):
                self._owned.append(ext)
                self.visit(ext)
            else:
                for name in _defined_types(ext):
                    self._external.setdefault(name, (position, ext))
        self.description.dependencies = self._dependencies()

    def visit_Typedef(self, node):
        self._add(node, self.description.types, node.name)

    def visit_FuncDef(self, node):
        if "static" in node.decl.storage:
            return
        self.visit_Decl(node.decl)

    def visit_Decl(self, node):
        if "static" in node.storage:
            return

        if isinstance(node.type, c_ast.FuncDecl):
            self._add(node, self.description.functions, node.name)
        elif node.name is None and isinstance(
            node.type, (c_ast.Struct, c_ast.Union, c_ast.Enum)
        ):
            tag = node.type
            name = _tag_key(tag) if tag.name else None
            self._add(node, self.description.types, name, unique=False)
        elif node.name is not None:
            self._add(node, self.description.variables, node.name)

    def _add(
        self, node, names: List[str], name: Optional[str], unique: bool = True
    ):
        # Tags may be declared before they are defined.
        if unique and name in names:
            return
        text = self.generator.visit(node) + ";"
        if text in self._seen:
            return
        self._seen.add(text)
        self.description.declarations.append(text)
        if name and name not in names:
            names.append(name)

    def _dependencies(self) -> List[str]:
        owned = set(self.description.types)
        pending = [name for node in self._owned for name in _type_references(node)]
        needed: Dict[int, c_ast.Node] = {}

        while pending:
            name = pending.pop()
            if name in owned or name in self.known_types:
                continue
            if name not in self._external:
                continue
            position, node = self._external[name]
            if position in needed:
                continue
            needed[position] = node
            pending.extend(_type_references(node))

        return [self.generator.visit(needed[p]) + ";" for p in sorted(needed)]

    def _is_owned(self, node) -> bool:
        coord = node.coord
        if coord is None or not coord.file or coord.file.startswith("<"):
            return False
        path = Path(os.path.abspath(coord.file))
        try:
            path.relative_to(self.include_root)
        except ValueError:
            return False
        return True


class _TypeReferences(c_ast.NodeVisitor):
    """Collect the type names and tags a declaration mentions."""

    def __init__(self):
        self.names: List[str] = []

    def visit_IdentifierType(self, node):
        self.names.extend(node.names)

    def visit_Struct(self, node):
        if node.name:
            self.names.append(_tag_key(node))
        self.generic_visit(node)

    visit_Union = visit_Struct
    visit_Enum = visit_Struct


def _type_references(node) -> List[str]:
    references = _TypeReferences()
    references.visit(node)
    return references.names


def _tag_key(tag) -> str:
    return f"{type(tag).__name__.lower()} {tag.name}"


def _has_body(node) -> bool:
    if isinstance(node, c_ast.Enum):
        return node.values is not None
    if isinstance(node, (c_ast.Struct, c_ast.Union)):
        return node.decls is not None
    return False


def _defined_types(node) -> List[str]:
    """Names a top-level declaration defines: typedef names and tags."""
    names = []
    if isinstance(node, c_ast.Typedef):
        names.append(node.name)
        tag = getattr(node.type, "type", None)
    elif isinstance(node, c_ast.Decl):
        tag = node.type
    else:
        return names
    if _has_body(tag) and tag.name:
        names.append(_tag_key(tag))
    return names

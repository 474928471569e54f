"""
Macro handling for interface generation.

BLIS defines a few macros whose names collide with unrelated platform
macros (``<math.h>`` classification values, ``<netinet/in.h>`` port
numbers). Those names are ignored while parsing; every other object-like
macro whose body evaluates to a literal becomes a constant.
"""

import ast
import enum
import math
import operator
import re
from typing import Callable, Dict, Iterable, Optional, Union

MACRO_EXCLUSION_SET = frozenset(
    {
        "FP_INFINITE",
        "FP_NAN",
        "FP_NORMAL",
        "FP_SUBNORMAL",
        "FP_ZERO",
        "IPPORT_RESERVED",
    }
)

MacroValue = Union[int, float, str]


class MacroParsingBehavior(enum.Enum):
    """What the header parser should do with a macro."""

    DEFAULT = "default"
    IGNORE = "ignore"


class IgnoreMacros:
    """
    Macro predicate ignoring a fixed set of names.

    Example:
        >>> ignore = IgnoreMacros(MACRO_EXCLUSION_SET)
        >>> ignore.will_parse_macro("FP_NAN")
        <MacroParsingBehavior.IGNORE: 'ignore'>
    """

    def __init__(self, names: Iterable[str]):
        self.names = frozenset(names)

    def will_parse_macro(self, name: str) -> MacroParsingBehavior:
        if name in self.names:
            return MacroParsingBehavior.IGNORE
        return MacroParsingBehavior.DEFAULT

    def __repr__(self) -> str:
        return f"IgnoreMacros({sorted(self.names)})"


_DEFINE = re.compile(r"^\s*#\s*define\s+([A-Za-z_]\w*)(\()?(.*)$")

_TOKEN = re.compile(
    r"""
    \s*(?:
        (?P<string>(?:L|u8|u|U)?"(?:\\.|[^"\\])*")
      | (?P<char>(?:L|u|U)?'(?:\\.|[^'\\])+')
      | (?P<hex>0[xX][0-9a-fA-F]+)[uUlL]*
      | (?P<float>(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+)[fFlL]?
      | (?P<int>\d+)[uUlL]*
      | (?P<name>[A-Za-z_]\w*)
      | (?P<op><<|>>|[-+*/%&|^~()])
    )""",
    re.VERBOSE,
)

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Invert: operator.invert,
}


def parse_defines(text: str) -> Dict[str, str]:
    """
    Parse ``#define`` lines (as printed by ``cc -dM -E``).

    Function-like macros are dropped.

    Returns:
        Mapping of macro name to body, in definition order
    """
    defines = {}
    for line in text.splitlines():
        match = _DEFINE.match(line)
        if not match or match.group(2):
            continue
        defines[match.group(1)] = match.group(3).strip()
    return defines


def _literal_string(token: str) -> Optional[str]:
    token = token[token.index('"') :]
    try:
        value = ast.literal_eval(token)
    except (ValueError, SyntaxError):
        return None
    return value if isinstance(value, str) else None


def _literal_char(token: str) -> Optional[int]:
    token = token[token.index("'") :]
    try:
        value = ast.literal_eval(token)
    except (ValueError, SyntaxError):
        return None
    if isinstance(value, str) and len(value) == 1:
        return ord(value)
    return None


def _c_int(token: str) -> Optional[int]:
    if len(token) > 1 and token.startswith("0"):
        try:
            return int(token, 8)
        except ValueError:
            return None
    return int(token)


def _tokenize(body: str):
    pos = 0
    tokens = []
    body = body.rstrip()
    while pos < len(body):
        match = _TOKEN.match(body, pos)
        if not match or match.end() == pos:
            return None
        tokens.append((match.lastgroup, match.group(match.lastgroup)))
        pos = match.end()
    return tokens


def _truncating_div(left, right):
    if isinstance(left, int) and isinstance(right, int):
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    return left / right


def _truncating_mod(left, right):
    if isinstance(left, int) and isinstance(right, int):
        return left - _truncating_div(left, right) * right
    raise TypeError("modulo of non-integers")


def _eval_node(node):
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    if isinstance(node, ast.BinOp):
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Div):
            return _truncating_div(left, right)
        if isinstance(node.op, ast.Mod):
            return _truncating_mod(left, right)
        if type(node.op) in _BINARY_OPS:
            return _BINARY_OPS[type(node.op)](left, right)
    raise ValueError(f"unsupported expression: {ast.dump(node)}")


def evaluate_macro(
    body: str, lookup: Optional[Callable[[str], Optional[MacroValue]]] = None
) -> Optional[MacroValue]:
    """
    Evaluate an object-like macro body to a Python literal.

    Handles integer, floating and character literals (with C suffixes),
    string literals (adjacent ones concatenated), references to other
    numeric macros and arithmetic/bitwise operators. Anything else
    (casts, types, empty bodies) is not a constant.

    Args:
        body: Macro replacement text
        lookup: Resolves names referenced by the body to numeric values

    Returns:
        The value, or None if the body is not a constant expression

    Example:
        >>> evaluate_macro("(1U << 4)")
        16
        >>> evaluate_macro('"0.9" ".0"')
        '0.9.0'
    """
    tokens = _tokenize(body)
    if not tokens:
        return None

    if all(kind == "string" for kind, _ in tokens):
        parts = [_literal_string(text) for _, text in tokens]
        if any(part is None for part in parts):
            return None
        return "".join(parts)

    pieces = []
    for kind, text in tokens:
        if kind == "op":
            pieces.append(text)
            continue
        if kind == "hex":
            value = int(text, 16)
        elif kind == "int":
            value = _c_int(text)
        elif kind == "float":
            value = float(text)
        elif kind == "char":
            value = _literal_char(text)
        elif kind == "name" and lookup is not None:
            value = lookup(text)
        else:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        pieces.append(repr(value))

    try:
        result = _eval_node(ast.parse(" ".join(pieces), mode="eval"))
    except (SyntaxError, ValueError, TypeError, ZeroDivisionError, OverflowError):
        return None
    if isinstance(result, float) and not math.isfinite(result):
        return None
    return result


class MacroTable:
    """
    Lazily evaluated set of macro definitions.

    Macros may reference each other in any order; references that form a
    cycle or point at unknown names are not constants.
    """

    def __init__(self, definitions: Dict[str, str]):
        self.definitions = dict(definitions)
        self._values: Dict[str, Optional[MacroValue]] = {}
        self._resolving = set()

    def value(self, name: str) -> Optional[MacroValue]:
        if name in self._values:
            return self._values[name]
        if name not in self.definitions or name in self._resolving:
            return None

        self._resolving.add(name)
        try:
            value = evaluate_macro(self.definitions[name], self._numeric)
        finally:
            self._resolving.discard(name)
        self._values[name] = value
        return value

    def constants(self) -> Dict[str, MacroValue]:
        """Evaluate every definition, keeping the ones that are constants."""
        values = {}
        for name in self.definitions:
            value = self.value(name)
            if value is not None:
                values[name] = value
        return values

    def _numeric(self, name: str) -> Optional[MacroValue]:
        value = self.value(name)
        return value if isinstance(value, (int, float)) else None

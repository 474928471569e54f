"""
Interface generation from the installed BLIS header.
"""

from blisbuild.bindings.macros import (
    MACRO_EXCLUSION_SET,
    IgnoreMacros,
    MacroParsingBehavior,
    evaluate_macro,
)
from blisbuild.bindings.parser import (
    CPreprocessor,
    HeaderParser,
    InterfaceDescription,
    PycparserHeaderParser,
)
from blisbuild.bindings.generator import InterfaceGenerator, render_module

__all__ = [
    "MACRO_EXCLUSION_SET",
    "IgnoreMacros",
    "MacroParsingBehavior",
    "evaluate_macro",
    "CPreprocessor",
    "HeaderParser",
    "InterfaceDescription",
    "PycparserHeaderParser",
    "InterfaceGenerator",
    "render_module",
]

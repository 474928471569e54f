"""
Link directives for the invoking build system.
"""

from blisbuild.link.directives import (
    DIRECTIVE_PREFIX,
    LinkDirective,
    LinkDirectiveEmitter,
    link_directives,
    link_kind,
)

__all__ = [
    "DIRECTIVE_PREFIX",
    "LinkDirective",
    "LinkDirectiveEmitter",
    "link_directives",
    "link_kind",
]

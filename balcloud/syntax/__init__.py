"""
Ballerina syntax front end: tokenizer, lenient parser and tree node types.
"""

from .nodes import ModulePart, SyntaxKind
from .parser import parse_file, parse_module

__all__ = [
    "ModulePart",
    "SyntaxKind",
    "parse_file",
    "parse_module",
]

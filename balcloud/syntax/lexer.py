"""
Tokenizer for Ballerina source.

Only produces what the module-level parser needs: identifiers, literals and
punctuation. Comments (``//`` and documentation lines starting with ``#``)
are dropped. Characters the tokenizer does not understand are emitted as
single-character ``OTHER`` tokens so the parser can skip past them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List

IDENT = "IDENT"
QUOTED_IDENT = "QUOTED_IDENT"
NUMBER = "NUMBER"
STRING = "STRING"
TEMPLATE = "TEMPLATE"
PUNCT = "PUNCT"
OTHER = "OTHER"
EOF = "EOF"

KEYWORDS = {
    "import", "as", "public", "private", "isolated", "final", "configurable",
    "listener", "service", "on", "resource", "remote", "function", "returns",
    "const", "type", "class", "enum", "new", "check", "checkpanic", "true",
    "false", "null", "client", "readonly", "transactional", "annotation",
    "xmlns", "distinct", "object", "record", "var",
}

BUILTIN_TYPES = {
    "int", "string", "boolean", "float", "decimal", "byte", "json", "xml",
    "anydata", "any", "error", "map", "table", "stream", "future", "handle",
    "never", "typedesc", "var",
}

_TOKEN_SPEC = [
    ("WS", r"[ \t\r\n]+"),
    ("COMMENT", r"//[^\n]*|#[^\n]*"),
    (TEMPLATE, r"`(?:\\.|[^`\\])*`"),
    (STRING, r'"(?:\\.|[^"\\\n])*"'),
    (NUMBER, r"0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?[fFdD]?"),
    (QUOTED_IDENT, r"'[A-Za-z_$][A-Za-z0-9_$]*"),
    (IDENT, r"[A-Za-z_$][A-Za-z0-9_$]*"),
    (PUNCT, r"\.\.\.|\.\.<|=>|->|==|!=|<=|>=|&&|\|\||\{\||\|\}|[{}()\[\];,:.?=@<>!|&+\-*/%~^]"),
    (OTHER, r"."),
]

_MASTER = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))


@dataclass(frozen=True)
class Token:
    type: str
    text: str
    line: int

    def is_punct(self, *texts: str) -> bool:
        return self.type == PUNCT and self.text in texts

    def is_keyword(self, *words: str) -> bool:
        return self.type == IDENT and self.text in words

    @property
    def identifier(self) -> str:
        """Identifier text with the quoting apostrophe removed."""
        if self.type == QUOTED_IDENT:
            return self.text[1:]
        return self.text


def iter_tokens(text: str) -> Iterator[Token]:
    line = 1
    for match in _MASTER.finditer(text):
        kind = match.lastgroup
        value = match.group()
        if kind not in ("WS", "COMMENT"):
            yield Token(kind, value, line)
        line += value.count("\n")
    yield Token(EOF, "", line)


def tokenize(text: str) -> List[Token]:
    return list(iter_tokens(text))

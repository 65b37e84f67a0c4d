"""
Lenient module-level parser for Ballerina source.

Builds the node types in ``balcloud.syntax.nodes`` for declarations that
matter to deployment: imports, module variables, listeners, constants,
services (with resource accessors) and function definitions with their
annotations. Function bodies, type definitions, classes and anything the
parser does not understand are skipped. The parser never raises on bad input;
it resynchronizes at the next ``;`` or balanced ``}``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from . import nodes as n
from .lexer import (
    BUILTIN_TYPES,
    EOF,
    IDENT,
    KEYWORDS,
    NUMBER,
    PUNCT,
    QUOTED_IDENT,
    STRING,
    TEMPLATE,
    Token,
    tokenize,
)

logger = logging.getLogger(__name__)

OPENERS = {"(", "[", "{", "{|"}
CLOSERS = {")", "]", "}", "|}"}
EXPRESSION_DELIMITERS = {",", ";", ")", "]", "}", "|}"}

MODULE_QUALIFIERS = {"public", "private", "isolated", "final", "configurable", "transactional", "client"}
MEMBER_QUALIFIERS = {"public", "private", "isolated", "final", "resource", "remote", "transactional"}
SKIPPED_DECLARATIONS = {"type", "class", "enum", "annotation", "xmlns"}


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # -- token helpers ---------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.peek()
        if tok.type != EOF:
            self.pos += 1
        return tok

    def at_eof(self) -> bool:
        return self.peek().type == EOF

    def accept(self, text: str) -> bool:
        if self.peek().is_punct(text):
            self.advance()
            return True
        return False

    def _is_name(self, tok: Token) -> bool:
        if tok.type == QUOTED_IDENT:
            return True
        return tok.type == IDENT and (tok.text not in KEYWORDS or tok.text in BUILTIN_TYPES)

    def _text(self, start: int, end: Optional[int] = None) -> str:
        end = self.pos if end is None else end
        return " ".join(t.text for t in self.tokens[start:end])

    def _skip_group(self) -> None:
        """Skip a bracketed group starting at the current opener."""
        depth = 0
        while not self.at_eof():
            tok = self.advance()
            if tok.type == PUNCT and tok.text in OPENERS:
                depth += 1
            elif tok.type == PUNCT and tok.text in CLOSERS:
                depth -= 1
                if depth <= 0:
                    return

    def _skip_angle_group(self) -> None:
        depth = 0
        while not self.at_eof():
            tok = self.advance()
            if tok.is_punct("<"):
                depth += 1
            elif tok.is_punct(">"):
                depth -= 1
                if depth <= 0:
                    return

    def _skip_declaration(self) -> None:
        """Skip to the end of the current declaration.

        Stops after a ``;`` at depth zero, after a ``}`` that closes a block
        opened at depth zero, or before a closer that belongs to an enclosing
        block.
        """
        depth = 0
        while not self.at_eof():
            tok = self.peek()
            if tok.type == PUNCT and tok.text in CLOSERS:
                if depth == 0:
                    return
                depth -= 1
                self.advance()
                if depth == 0 and tok.text in ("}", "|}"):
                    self.accept(";")
                    return
                continue
            if tok.type == PUNCT and tok.text in OPENERS:
                depth += 1
            elif depth == 0 and tok.is_punct(";"):
                self.advance()
                return
            self.advance()

    # -- module level ----------------------------------------------------

    def parse_module(self, source_name: Optional[str] = None) -> n.ModulePart:
        members: List[n.ModuleMember] = []
        while not self.at_eof():
            start = self.pos
            member = self._parse_module_member()
            if member is not None:
                members.append(member)
            if self.pos == start:
                self.advance()
        return n.ModulePart(members=members, source_name=source_name)

    def _parse_module_member(self) -> Optional[n.ModuleMember]:
        tok = self.peek()
        if tok.is_keyword("import"):
            return self._parse_import()
        metadata = self._parse_metadata()
        qualifiers: List[str] = []
        while self.peek().is_keyword(*MODULE_QUALIFIERS):
            qualifiers.append(self.advance().text)

        tok = self.peek()
        if tok.is_keyword("listener"):
            return self._parse_listener(metadata)
        if tok.is_keyword("service"):
            return self._parse_service(metadata)
        if tok.is_keyword("function"):
            return self._parse_function(metadata, qualifiers)
        if tok.is_keyword("const"):
            return self._parse_const()
        if tok.is_keyword(*SKIPPED_DECLARATIONS):
            logger.debug(f"Skipping '{tok.text}' declaration at line {tok.line}")
            self._skip_declaration()
            return None
        if tok.type == EOF:
            return None
        return self._parse_module_var(metadata, qualifiers)

    def _parse_import(self) -> n.ImportDeclaration:
        line = self.advance().line
        parts: List[Token] = []
        while not self.at_eof() and not self.peek().is_punct(";"):
            parts.append(self.advance())
        self.accept(";")

        prefix = None
        if len(parts) >= 2 and parts[-2].is_keyword("as"):
            prefix = parts[-1].identifier
            parts = parts[:-2]
        org = None
        if len(parts) >= 2 and parts[1].is_punct("/"):
            org = parts[0].identifier
            parts = parts[2:]
        module_name = "".join(p.identifier for p in parts)
        return n.ImportDeclaration(org_name=org, module_name=module_name, prefix=prefix, line=line)

    def _parse_metadata(self) -> Optional[n.Metadata]:
        annotations: List[n.Annotation] = []
        while self.peek().is_punct("@"):
            line = self.advance().line
            tok = self.peek()
            if not self._is_name(tok):
                break
            if self.peek(1).is_punct(":") and self._is_name(self.peek(2)):
                self.advance()
                self.advance()
                ref = n.QualifiedNameReference(tok.identifier, self.advance().identifier, line=line)
            else:
                self.advance()
                ref = n.SimpleNameReference(tok.identifier, line=line)
            value = self._parse_mapping() if self.peek().is_punct("{") else None
            annotations.append(n.Annotation(annot_reference=ref, annot_value=value, line=line))
        if not annotations:
            return None
        return n.Metadata(annotations=annotations, line=annotations[0].line)

    def _parse_module_var(self, metadata, qualifiers: List[str]) -> Optional[n.ModuleVariableDeclaration]:
        line = self.peek().line
        type_desc = self._parse_type_descriptor()
        name_tok = self.peek()
        if type_desc is None or not self._is_name(name_tok):
            logger.debug(f"Skipping unrecognized module member at line {line}")
            self._skip_declaration()
            return None
        self.advance()
        if name_tok.text == "_":
            binding: Union[n.CaptureBindingPattern, n.WildcardBindingPattern] = n.WildcardBindingPattern(line=line)
        else:
            binding = n.CaptureBindingPattern(name_tok.identifier, line=line)

        initializer = None
        if self.accept("="):
            if self.peek().is_punct("?"):
                self.advance()
                initializer = n.OpaqueExpression("?", line=line)
            else:
                initializer = self._parse_expression()
        if not self.accept(";"):
            self._skip_declaration()
        return n.ModuleVariableDeclaration(
            typed_binding_pattern=n.TypedBindingPattern(type_desc, binding, line=line),
            initializer=initializer,
            qualifiers=qualifiers,
            metadata=metadata,
            line=line,
        )

    def _parse_listener(self, metadata) -> Optional[n.ListenerDeclaration]:
        line = self.advance().line
        type_desc = None
        if not self.peek(1).is_punct("="):
            type_desc = self._parse_type_descriptor()
        name_tok = self.peek()
        if not self._is_name(name_tok) or not self.peek(1).is_punct("="):
            self._skip_declaration()
            return None
        self.advance()
        self.advance()
        initializer = self._parse_expression()
        if not self.accept(";"):
            self._skip_declaration()
        return n.ListenerDeclaration(
            variable_name=name_tok.identifier,
            initializer=initializer,
            type_descriptor=type_desc,
            metadata=metadata,
            line=line,
        )

    def _parse_const(self) -> Optional[n.ConstantDeclaration]:
        line = self.advance().line
        type_desc = None
        if not self.peek(1).is_punct("="):
            type_desc = self._parse_type_descriptor()
        name_tok = self.peek()
        if not self._is_name(name_tok) or not self.peek(1).is_punct("="):
            self._skip_declaration()
            return None
        self.advance()
        self.advance()
        initializer = self._parse_expression()
        if not self.accept(";"):
            self._skip_declaration()
        return n.ConstantDeclaration(
            variable_name=name_tok.identifier,
            initializer=initializer,
            type_descriptor=type_desc,
            line=line,
        )

    def _parse_function(self, metadata, qualifiers: List[str], in_service: bool = False) -> Optional[n.FunctionDefinition]:
        line = self.advance().line
        name_tok = self.peek()
        if not self._is_name(name_tok):
            self._skip_declaration()
            return None
        self.advance()

        kind = n.SyntaxKind.FUNCTION_DEFINITION
        path: List[n.Node] = []
        if in_service and "resource" in qualifiers:
            kind = n.SyntaxKind.RESOURCE_ACCESSOR_DEFINITION
            path = self._parse_relative_resource_path()
        elif in_service:
            kind = n.SyntaxKind.OBJECT_METHOD_DEFINITION

        if self.peek().is_punct("("):
            self._skip_group()
        if self.peek().is_keyword("returns"):
            self.advance()
            self._parse_metadata()
            self._parse_type_descriptor()
        if self.peek().is_punct("{"):
            self._skip_group()
        else:
            self._skip_declaration()
        return n.FunctionDefinition(
            function_name=name_tok.identifier,
            definition_kind=kind,
            relative_resource_path=path,
            qualifiers=qualifiers,
            metadata=metadata,
            line=line,
        )

    def _parse_relative_resource_path(self) -> List[n.Node]:
        path: List[n.Node] = []
        while not self.at_eof() and not self.peek().is_punct("(", "{", ";"):
            tok = self.peek()
            if tok.is_punct("/"):
                path.append(n.SlashToken(line=tok.line))
            elif tok.is_punct("."):
                path.append(n.DotToken(line=tok.line))
            elif tok.type in (IDENT, QUOTED_IDENT):
                path.append(n.IdentifierToken(tok.identifier, line=tok.line))
            elif tok.is_punct("["):
                start = self.pos
                self._skip_group()
                path.append(n.ResourcePathParam(self._text(start), line=tok.line))
                continue
            self.advance()
        return path

    def _parse_service(self, metadata) -> Optional[n.ServiceDeclaration]:
        line = self.advance().line
        type_desc = None
        if self._is_name(self.peek()) and not self.peek().is_keyword("on"):
            type_desc = self._parse_type_descriptor()

        path: List[n.Node] = []
        if self.peek().type == STRING:
            tok = self.advance()
            path.append(n.BasicLiteral(tok.text, n.SyntaxKind.STRING_LITERAL, line=tok.line))
        else:
            while not self.at_eof() and not self.peek().is_keyword("on") and not self.peek().is_punct("{", ";"):
                tok = self.advance()
                if tok.is_punct("/"):
                    path.append(n.SlashToken(line=tok.line))
                elif tok.is_punct("."):
                    path.append(n.DotToken(line=tok.line))
                elif tok.type in (IDENT, QUOTED_IDENT):
                    path.append(n.IdentifierToken(tok.identifier, line=tok.line))

        if not self.peek().is_keyword("on"):
            logger.debug(f"Skipping service without 'on' clause at line {line}")
            self._skip_declaration()
            return None
        self.advance()

        expressions = [self._parse_expression(stop_at_brace=True)]
        while self.accept(","):
            expressions.append(self._parse_expression(stop_at_brace=True))

        members: List[n.Node] = []
        if self.accept("{"):
            while not self.at_eof() and not self.peek().is_punct("}"):
                start = self.pos
                member = self._parse_service_member()
                if member is not None:
                    members.append(member)
                if self.pos == start:
                    self.advance()
            self.accept("}")
            self.accept(";")
        else:
            self._skip_declaration()
        return n.ServiceDeclaration(
            absolute_resource_path=path,
            expressions=expressions,
            members=members,
            type_descriptor=type_desc,
            metadata=metadata,
            line=line,
        )

    def _parse_service_member(self) -> Optional[n.Node]:
        metadata = self._parse_metadata()
        qualifiers: List[str] = []
        while self.peek().is_keyword(*MEMBER_QUALIFIERS):
            qualifiers.append(self.advance().text)
        if self.peek().is_keyword("function"):
            return self._parse_function(metadata, qualifiers, in_service=True)
        start = self.pos
        line = self.peek().line
        self._skip_declaration()
        if self.pos == start:
            return None
        return n.ObjectField(self._text(start), line=line)

    # -- types -----------------------------------------------------------

    def _parse_type_descriptor(self) -> Optional[n.TypeDescriptor]:
        start = self.pos
        base = self._parse_type_atom()
        if base is None:
            return None
        compound = False
        while True:
            tok = self.peek()
            if tok.is_punct("?"):
                self.advance()
            elif tok.is_punct("["):
                self._skip_group()
            elif tok.is_punct("<"):
                self._skip_angle_group()
            elif tok.is_punct("|", "&"):
                self.advance()
                if self._parse_type_atom() is None:
                    return None
            else:
                break
            compound = True
        if compound:
            return n.OpaqueTypeDescriptor(self._text(start), line=tok.line)
        return base

    def _parse_type_atom(self) -> Optional[n.TypeDescriptor]:
        tok = self.peek()
        if tok.is_punct("("):
            start = self.pos
            self._skip_group()
            return n.OpaqueTypeDescriptor(self._text(start), line=tok.line)
        if tok.is_keyword("record", "object", "distinct", "service", "client"):
            start = self.pos
            while self.peek().is_keyword("record", "object", "distinct", "service", "client", "isolated"):
                self.advance()
            if self.peek().is_punct("{", "{|"):
                self._skip_group()
            return n.OpaqueTypeDescriptor(self._text(start), line=tok.line)
        if tok.type in (STRING, NUMBER):
            self.advance()
            return n.OpaqueTypeDescriptor(tok.text, line=tok.line)
        if not self._is_name(tok):
            return None
        if self.peek(1).is_punct(":") and self._is_name(self.peek(2)):
            self.advance()
            self.advance()
            return n.QualifiedNameReference(tok.identifier, self.advance().identifier, line=tok.line)
        self.advance()
        if tok.type == IDENT and tok.text in BUILTIN_TYPES:
            return n.BuiltinTypeDescriptor(tok.text, line=tok.line)
        return n.SimpleNameReference(tok.identifier, line=tok.line)

    # -- expressions -----------------------------------------------------

    def _parse_expression(self, stop_at_brace: bool = False) -> n.Expression:
        start = self.pos
        line = self.peek().line
        expr = self._parse_primary()
        if expr is not None and self._at_delimiter(stop_at_brace):
            return expr
        self._consume_until_delimiter(stop_at_brace)
        return n.OpaqueExpression(self._text(start), line=line)

    def _at_delimiter(self, stop_at_brace: bool) -> bool:
        tok = self.peek()
        if tok.type == EOF:
            return True
        if tok.type == PUNCT and tok.text in EXPRESSION_DELIMITERS:
            return True
        return stop_at_brace and tok.is_punct("{")

    def _consume_until_delimiter(self, stop_at_brace: bool) -> None:
        depth = 0
        while not self.at_eof():
            if depth == 0 and self._at_delimiter(stop_at_brace):
                return
            tok = self.advance()
            if tok.type == PUNCT and tok.text in OPENERS:
                depth += 1
            elif tok.type == PUNCT and tok.text in CLOSERS:
                depth -= 1

    def _parse_primary(self) -> Optional[n.Expression]:
        tok = self.peek()
        line = tok.line
        if tok.is_keyword("check", "checkpanic"):
            self.advance()
            inner = self._parse_primary()
            if inner is None:
                return None
            return n.CheckExpression(inner, panics=tok.text == "checkpanic", line=line)
        if tok.is_keyword("new"):
            self.advance()
            if self.peek().is_punct("("):
                return n.ImplicitNewExpression(self._parse_arguments(), line=line)
            if self._is_name(self.peek()):
                type_desc = self._parse_type_atom()
                args = self._parse_arguments() if self.peek().is_punct("(") else []
                return n.ExplicitNewExpression(type_desc, args, line=line)
            return n.ImplicitNewExpression(None, line=line)
        if tok.type == NUMBER:
            self.advance()
            return n.BasicLiteral(tok.text, n.SyntaxKind.NUMERIC_LITERAL, line=line)
        if tok.type == STRING:
            self.advance()
            return n.BasicLiteral(tok.text, n.SyntaxKind.STRING_LITERAL, line=line)
        if tok.is_keyword("true", "false"):
            self.advance()
            return n.BasicLiteral(tok.text, n.SyntaxKind.BOOLEAN_LITERAL, line=line)
        if tok.is_keyword("null") or (tok.is_punct("(") and self.peek(1).is_punct(")")):
            text = "null" if tok.text == "null" else "()"
            self.pos += 1 if text == "null" else 2
            return n.BasicLiteral(text, n.SyntaxKind.NIL_LITERAL, line=line)
        if tok.type == TEMPLATE:
            self.advance()
            return n.OpaqueExpression(tok.text, line=line)
        if tok.is_punct("{"):
            return self._parse_mapping()
        if tok.is_punct("["):
            return self._parse_list()
        if self._is_name(tok):
            if self.peek(1).is_punct(":") and self._is_name(self.peek(2)):
                self.advance()
                self.advance()
                return n.QualifiedNameReference(tok.identifier, self.advance().identifier, line=line)
            self.advance()
            return n.SimpleNameReference(tok.identifier, line=line)
        return None

    def _parse_arguments(self) -> List[n.FunctionArgument]:
        args: List[n.FunctionArgument] = []
        self.advance()  # (
        while not self.at_eof() and not self.peek().is_punct(")"):
            start = self.pos
            tok = self.peek()
            if tok.is_punct("..."):
                self.advance()
                args.append(n.RestArgument(self._parse_expression(), line=tok.line))
            elif self._is_name(tok) and self.peek(1).is_punct("="):
                self.advance()
                self.advance()
                args.append(n.NamedArgument(tok.identifier, self._parse_expression(), line=tok.line))
            else:
                args.append(n.PositionalArgument(self._parse_expression(), line=tok.line))
            if not self.accept(","):
                if self.peek().is_punct(")"):
                    break
                if self.pos == start or self.peek().type == PUNCT and self.peek().text in CLOSERS:
                    self.advance()
        self.accept(")")
        return args

    def _parse_mapping(self) -> n.MappingConstructor:
        line = self.advance().line  # {
        fields: List[n.MappingField] = []
        while not self.at_eof() and not self.peek().is_punct("}"):
            start = self.pos
            field = self._parse_mapping_field()
            if field is not None:
                fields.append(field)
            if not self.accept(","):
                if self.peek().is_punct("}"):
                    break
                if self.pos == start:
                    self.advance()
                else:
                    self._consume_until_delimiter(stop_at_brace=False)
                    if not self.accept(",") and not self.peek().is_punct("}"):
                        self.advance()
        self.accept("}")
        return n.MappingConstructor(fields=fields, line=line)

    def _parse_mapping_field(self) -> Optional[n.MappingField]:
        tok = self.peek()
        if tok.is_punct("..."):
            self.advance()
            return n.SpreadField(self._parse_expression(), line=tok.line)
        if tok.is_punct("["):
            self.advance()
            name_expr = self._parse_expression()
            self.accept("]")
            if not self.accept(":"):
                return None
            return n.ComputedNameField(name_expr, self._parse_expression(), line=tok.line)

        readonly = False
        if tok.is_keyword("readonly") and (self._is_name(self.peek(1)) or self.peek(1).type == STRING):
            self.advance()
            readonly = True
            tok = self.peek()
        if tok.type == STRING:
            name: Union[n.IdentifierToken, n.BasicLiteral] = n.BasicLiteral(
                tok.text, n.SyntaxKind.STRING_LITERAL, line=tok.line)
        elif tok.type in (IDENT, QUOTED_IDENT):
            name = n.IdentifierToken(tok.identifier, line=tok.line)
        else:
            return None
        self.advance()
        value = self._parse_expression() if self.accept(":") else None
        return n.SpecificField(field_name=name, value_expr=value, readonly=readonly, line=tok.line)

    def _parse_list(self) -> n.ListConstructor:
        line = self.advance().line  # [
        items: List[n.Expression] = []
        while not self.at_eof() and not self.peek().is_punct("]"):
            start = self.pos
            items.append(self._parse_expression())
            if not self.accept(","):
                if self.peek().is_punct("]"):
                    break
                if self.pos == start:
                    self.advance()
                elif self.peek().type == PUNCT and self.peek().text in CLOSERS:
                    self.advance()
        self.accept("]")
        return n.ListConstructor(expressions=items, line=line)


def parse_module(text: str, source_name: Optional[str] = None) -> n.ModulePart:
    """Parse Ballerina source text into a ``ModulePart``."""
    return Parser(tokenize(text)).parse_module(source_name=source_name)


def parse_file(path: str | Path) -> n.ModulePart:
    p = Path(path)
    return parse_module(p.read_text(encoding="utf-8"), source_name=p.name)

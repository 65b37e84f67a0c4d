"""
Syntax tree node types for the subset of Ballerina that the extractor reads.

Nodes are plain dataclasses. Every node exposes ``kind`` so recognizers can
branch on the shape of a node without isinstance chains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class SyntaxKind(str, Enum):
    MODULE_PART = "module_part"
    IMPORT_DECLARATION = "import_declaration"
    MODULE_VAR_DECL = "module_var_decl"
    LISTENER_DECLARATION = "listener_declaration"
    CONST_DECLARATION = "const_declaration"
    SERVICE_DECLARATION = "service_declaration"
    FUNCTION_DEFINITION = "function_definition"
    RESOURCE_ACCESSOR_DEFINITION = "resource_accessor_definition"
    OBJECT_METHOD_DEFINITION = "object_method_definition"
    OBJECT_FIELD = "object_field"
    METADATA = "metadata"
    ANNOTATION = "annotation"
    TYPED_BINDING_PATTERN = "typed_binding_pattern"
    CAPTURE_BINDING_PATTERN = "capture_binding_pattern"
    WILDCARD_BINDING_PATTERN = "wildcard_binding_pattern"
    QUALIFIED_NAME_REFERENCE = "qualified_name_reference"
    SIMPLE_NAME_REFERENCE = "simple_name_reference"
    BUILTIN_TYPE_DESC = "builtin_type_desc"
    OPAQUE_TYPE_DESC = "opaque_type_desc"
    NUMERIC_LITERAL = "numeric_literal"
    STRING_LITERAL = "string_literal"
    BOOLEAN_LITERAL = "boolean_literal"
    NIL_LITERAL = "nil_literal"
    CHECK_EXPRESSION = "check_expression"
    IMPLICIT_NEW_EXPRESSION = "implicit_new_expression"
    EXPLICIT_NEW_EXPRESSION = "explicit_new_expression"
    MAPPING_CONSTRUCTOR = "mapping_constructor"
    LIST_CONSTRUCTOR = "list_constructor"
    OPAQUE_EXPRESSION = "opaque_expression"
    POSITIONAL_ARG = "positional_arg"
    NAMED_ARG = "named_arg"
    REST_ARG = "rest_arg"
    SPECIFIC_FIELD = "specific_field"
    SPREAD_FIELD = "spread_field"
    COMPUTED_NAME_FIELD = "computed_name_field"
    IDENTIFIER_TOKEN = "identifier_token"
    SLASH_TOKEN = "slash_token"
    DOT_TOKEN = "dot_token"
    RESOURCE_PATH_PARAM = "resource_path_param"


@dataclass
class Node:
    kind = None  # overridden per node class
    line: int = field(default=0, kw_only=True, compare=False)


# ---------------------------------------------------------------------------
# Tokens that survive into the tree (path segments, field names)
# ---------------------------------------------------------------------------

@dataclass
class IdentifierToken(Node):
    kind = SyntaxKind.IDENTIFIER_TOKEN
    text: str


@dataclass
class SlashToken(Node):
    kind = SyntaxKind.SLASH_TOKEN
    text: str = "/"


@dataclass
class DotToken(Node):
    kind = SyntaxKind.DOT_TOKEN
    text: str = "."


@dataclass
class ResourcePathParam(Node):
    """Bracketed path parameter such as ``[string name]``; kept as raw text."""
    kind = SyntaxKind.RESOURCE_PATH_PARAM
    text: str


# ---------------------------------------------------------------------------
# Expressions and type descriptors
# ---------------------------------------------------------------------------

@dataclass
class BasicLiteral(Node):
    text: str
    literal_kind: SyntaxKind = SyntaxKind.NUMERIC_LITERAL

    @property
    def kind(self) -> SyntaxKind:  # type: ignore[override]
        return self.literal_kind


@dataclass
class SimpleNameReference(Node):
    kind = SyntaxKind.SIMPLE_NAME_REFERENCE
    name: str


@dataclass
class QualifiedNameReference(Node):
    kind = SyntaxKind.QUALIFIED_NAME_REFERENCE
    module_prefix: str
    identifier: str


@dataclass
class BuiltinTypeDescriptor(Node):
    kind = SyntaxKind.BUILTIN_TYPE_DESC
    name: str


@dataclass
class OpaqueTypeDescriptor(Node):
    """Any type descriptor the parser does not model (unions, arrays, records)."""
    kind = SyntaxKind.OPAQUE_TYPE_DESC
    text: str


@dataclass
class OpaqueExpression(Node):
    kind = SyntaxKind.OPAQUE_EXPRESSION
    text: str


@dataclass
class CheckExpression(Node):
    kind = SyntaxKind.CHECK_EXPRESSION
    expression: "Expression"
    panics: bool = False


@dataclass
class PositionalArgument(Node):
    kind = SyntaxKind.POSITIONAL_ARG
    expression: "Expression"


@dataclass
class NamedArgument(Node):
    kind = SyntaxKind.NAMED_ARG
    name: str
    expression: "Expression"


@dataclass
class RestArgument(Node):
    kind = SyntaxKind.REST_ARG
    expression: "Expression"


FunctionArgument = Union[PositionalArgument, NamedArgument, RestArgument]


@dataclass
class ImplicitNewExpression(Node):
    """``new`` or ``new (args)``; ``arguments`` is None when no parentheses follow."""
    kind = SyntaxKind.IMPLICIT_NEW_EXPRESSION
    arguments: Optional[List[FunctionArgument]] = None


@dataclass
class ExplicitNewExpression(Node):
    kind = SyntaxKind.EXPLICIT_NEW_EXPRESSION
    type_descriptor: "TypeDescriptor"
    arguments: List[FunctionArgument] = field(default_factory=list)


@dataclass
class SpecificField(Node):
    """``name: value`` or ``"name": value``; a bare ``name`` has no value."""
    kind = SyntaxKind.SPECIFIC_FIELD
    field_name: Union[IdentifierToken, BasicLiteral]
    value_expr: Optional["Expression"] = None
    readonly: bool = False


@dataclass
class SpreadField(Node):
    kind = SyntaxKind.SPREAD_FIELD
    expression: "Expression"


@dataclass
class ComputedNameField(Node):
    kind = SyntaxKind.COMPUTED_NAME_FIELD
    field_name_expr: "Expression"
    value_expr: "Expression"


MappingField = Union[SpecificField, SpreadField, ComputedNameField]


@dataclass
class MappingConstructor(Node):
    kind = SyntaxKind.MAPPING_CONSTRUCTOR
    fields: List[MappingField] = field(default_factory=list)


@dataclass
class ListConstructor(Node):
    kind = SyntaxKind.LIST_CONSTRUCTOR
    expressions: List["Expression"] = field(default_factory=list)


Expression = Union[
    BasicLiteral,
    SimpleNameReference,
    QualifiedNameReference,
    CheckExpression,
    ImplicitNewExpression,
    ExplicitNewExpression,
    MappingConstructor,
    ListConstructor,
    OpaqueExpression,
]

TypeDescriptor = Union[
    QualifiedNameReference,
    SimpleNameReference,
    BuiltinTypeDescriptor,
    OpaqueTypeDescriptor,
]


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

@dataclass
class Annotation(Node):
    kind = SyntaxKind.ANNOTATION
    annot_reference: Union[QualifiedNameReference, SimpleNameReference]
    annot_value: Optional[MappingConstructor] = None


@dataclass
class Metadata(Node):
    kind = SyntaxKind.METADATA
    annotations: List[Annotation] = field(default_factory=list)


@dataclass
class CaptureBindingPattern(Node):
    kind = SyntaxKind.CAPTURE_BINDING_PATTERN
    variable_name: str


@dataclass
class WildcardBindingPattern(Node):
    kind = SyntaxKind.WILDCARD_BINDING_PATTERN


@dataclass
class TypedBindingPattern(Node):
    kind = SyntaxKind.TYPED_BINDING_PATTERN
    type_descriptor: TypeDescriptor
    binding_pattern: Union[CaptureBindingPattern, WildcardBindingPattern]


@dataclass
class ImportDeclaration(Node):
    kind = SyntaxKind.IMPORT_DECLARATION
    org_name: Optional[str]
    module_name: str
    prefix: Optional[str] = None

    @property
    def effective_prefix(self) -> str:
        return self.prefix or self.module_name.split(".")[-1]


@dataclass
class ModuleVariableDeclaration(Node):
    kind = SyntaxKind.MODULE_VAR_DECL
    typed_binding_pattern: TypedBindingPattern
    initializer: Optional[Expression] = None
    qualifiers: List[str] = field(default_factory=list)
    metadata: Optional[Metadata] = None


@dataclass
class ListenerDeclaration(Node):
    kind = SyntaxKind.LISTENER_DECLARATION
    variable_name: str
    initializer: Expression
    type_descriptor: Optional[TypeDescriptor] = None
    metadata: Optional[Metadata] = None


@dataclass
class ConstantDeclaration(Node):
    kind = SyntaxKind.CONST_DECLARATION
    variable_name: str
    initializer: Expression
    type_descriptor: Optional[TypeDescriptor] = None


@dataclass
class FunctionDefinition(Node):
    """Module function, service resource accessor or service method.

    For resource accessors ``function_name`` holds the accessor (``get``,
    ``post``...) and ``relative_resource_path`` the path tokens that follow it.
    """
    function_name: str
    definition_kind: SyntaxKind = SyntaxKind.FUNCTION_DEFINITION
    relative_resource_path: List[Node] = field(default_factory=list)
    qualifiers: List[str] = field(default_factory=list)
    metadata: Optional[Metadata] = None

    @property
    def kind(self) -> SyntaxKind:  # type: ignore[override]
        return self.definition_kind


@dataclass
class ObjectField(Node):
    kind = SyntaxKind.OBJECT_FIELD
    text: str


@dataclass
class ServiceDeclaration(Node):
    kind = SyntaxKind.SERVICE_DECLARATION
    absolute_resource_path: List[Node] = field(default_factory=list)
    expressions: List[Expression] = field(default_factory=list)
    members: List[Node] = field(default_factory=list)
    type_descriptor: Optional[TypeDescriptor] = None
    metadata: Optional[Metadata] = None


ModuleMember = Union[
    ImportDeclaration,
    ModuleVariableDeclaration,
    ListenerDeclaration,
    ConstantDeclaration,
    ServiceDeclaration,
    FunctionDefinition,
]


@dataclass
class ModulePart(Node):
    kind = SyntaxKind.MODULE_PART
    members: List[ModuleMember] = field(default_factory=list)
    source_name: Optional[str] = None

    def imports(self) -> List[ImportDeclaration]:
        return [m for m in self.members if m.kind == SyntaxKind.IMPORT_DECLARATION]

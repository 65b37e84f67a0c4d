"""
Recognizers for listeners, listener configurations and their TLS blocks.

Every recognizer is total: it inspects a node and returns ``None`` when the
node does not have one of the recognized shapes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from balcloud.syntax import nodes as n
from balcloud.syntax.nodes import SyntaxKind

from .intent import Config, ListenerInfo, MutualSSLConfig, SecureSocketConfig

logger = logging.getLogger(__name__)

HTTP_MODULE = "http"
LISTENER_TYPE = "Listener"
LISTENER_CONFIGURATION_TYPE = "ListenerConfiguration"


# ---------------------------------------------------------------------------
# Small node helpers shared by the recognizers
# ---------------------------------------------------------------------------

def extract_string(expr: Optional[n.Node]) -> Optional[str]:
    """Value of a string literal without its quotes; None for anything else."""
    if expr is None or expr.kind != SyntaxKind.STRING_LITERAL:
        return None
    return expr.text[1:-1]


def parse_int_literal(expr: Optional[n.Node]) -> Optional[int]:
    if expr is None or expr.kind != SyntaxKind.NUMERIC_LITERAL:
        return None
    text = expr.text
    try:
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text)
    except ValueError:
        return None


def name_of_field(field_node: n.Node) -> Optional[str]:
    """Name of a specific field written as an identifier."""
    if field_node.kind != SyntaxKind.SPECIFIC_FIELD:
        return None
    name = field_node.field_name
    if name.kind == SyntaxKind.IDENTIFIER_TOKEN:
        return name.text
    return None


def specific_fields(mapping: n.MappingConstructor) -> List[Tuple[str, Optional[n.Expression]]]:
    """``(name, value)`` pairs for the identifier-named fields of a mapping."""
    pairs = []
    for f in mapping.fields:
        name = name_of_field(f)
        if name is not None:
            pairs.append((name, f.value_expr))
    return pairs


def qualified_type(type_desc: Optional[n.Node]) -> Optional[Tuple[str, str]]:
    if type_desc is None or type_desc.kind != SyntaxKind.QUALIFIED_NAME_REFERENCE:
        return None
    return type_desc.module_prefix, type_desc.identifier


# ---------------------------------------------------------------------------
# TLS configuration
# ---------------------------------------------------------------------------

def parse_http_config(mapping: n.Node) -> Optional[Config]:
    """Find ``secureSocket`` in a listener configuration record."""
    if mapping is None or mapping.kind != SyntaxKind.MAPPING_CONSTRUCTOR:
        return None
    for name, value in specific_fields(mapping):
        if name == "secureSocket" and value is not None and value.kind == SyntaxKind.MAPPING_CONSTRUCTOR:
            return parse_secure_socket(value)
    return None


def parse_secure_socket(mapping: n.MappingConstructor) -> Config:
    config = Config()
    for name, value in specific_fields(mapping):
        if value is None or value.kind != SyntaxKind.MAPPING_CONSTRUCTOR:
            continue
        if name == "key":
            config.secure_socket = _parse_key(value)
        elif name == "mutualSsl":
            config.mutual_ssl = _parse_mutual_ssl(value)
    return config


def _parse_key(mapping: n.MappingConstructor) -> SecureSocketConfig:
    key = SecureSocketConfig()
    for name, value in specific_fields(mapping):
        if name == "certFile":
            key.cert_file = extract_string(value)
        elif name == "keyFile":
            key.key_file = extract_string(value)
        elif name == "path":
            key.path = extract_string(value)
    return key


def _parse_mutual_ssl(mapping: n.MappingConstructor) -> MutualSSLConfig:
    mutual = MutualSSLConfig()
    for name, value in specific_fields(mapping):
        if name != "cert" or value is None:
            continue
        if value.kind == SyntaxKind.MAPPING_CONSTRUCTOR:
            for cert_name, cert_value in specific_fields(value):
                if cert_name == "path":
                    mutual.path = extract_string(cert_value)
        else:
            mutual.path = extract_string(value)
    return mutual


def resolve_config_argument(arg: n.Node, configs: Mapping[str, Config]) -> Optional[Config]:
    """TLS config from the second listener argument: inline record or a name."""
    if arg.kind not in (SyntaxKind.POSITIONAL_ARG, SyntaxKind.NAMED_ARG):
        return None
    expr = arg.expression
    if expr.kind == SyntaxKind.MAPPING_CONSTRUCTOR:
        return parse_http_config(expr)
    if expr.kind == SyntaxKind.SIMPLE_NAME_REFERENCE:
        config = configs.get(expr.name)
        if config is None:
            logger.warning(f"Listener configuration '{expr.name}' is not declared in this package")
        return config
    return None


# ---------------------------------------------------------------------------
# Recognizers
# ---------------------------------------------------------------------------

def recognize_listener_configuration(node: n.Node) -> Optional[Tuple[str, Config]]:
    """``http:ListenerConfiguration name = {...};`` with a ``secureSocket`` block."""
    if node.kind != SyntaxKind.MODULE_VAR_DECL:
        return None
    binding = node.typed_binding_pattern
    if qualified_type(binding.type_descriptor) != (HTTP_MODULE, LISTENER_CONFIGURATION_TYPE):
        return None
    if binding.binding_pattern.kind != SyntaxKind.CAPTURE_BINDING_PATTERN:
        return None
    config = parse_http_config(node.initializer)
    if config is None:
        return None
    return binding.binding_pattern.variable_name, config


def listener_from_new_expression(
    name: str,
    arguments: Optional[List[n.FunctionArgument]],
    configs: Mapping[str, Config],
) -> Optional[ListenerInfo]:
    """Build a listener from the arguments of ``new (port, config?)``."""
    if not arguments:
        return None
    first = arguments[0]
    if first.kind == SyntaxKind.NAMED_ARG and first.name != "port":
        return None
    if first.kind not in (SyntaxKind.POSITIONAL_ARG, SyntaxKind.NAMED_ARG):
        return None

    expr = first.expression
    if expr.kind == SyntaxKind.SIMPLE_NAME_REFERENCE:
        listener = ListenerInfo(name, 0, port_ref=expr.name)
    else:
        port = parse_int_literal(expr)
        if port is None:
            logger.debug(f"Listener '{name}' has a port expression that is not a literal; skipping")
            return None
        listener = ListenerInfo(name, port)

    if len(arguments) > 1:
        listener.config = resolve_config_argument(arguments[1], configs)
    return listener


def recognize_module_listener(node: n.Node, configs: Mapping[str, Config]) -> Optional[ListenerInfo]:
    """``http:Listener ep = check new (9090);`` or ``listener http:Listener ep = new (9090);``."""
    if node.kind == SyntaxKind.LISTENER_DECLARATION:
        initializer = node.initializer
        name = node.variable_name
    elif node.kind == SyntaxKind.MODULE_VAR_DECL:
        binding = node.typed_binding_pattern
        if qualified_type(binding.type_descriptor) != (HTTP_MODULE, LISTENER_TYPE):
            return None
        if binding.binding_pattern.kind != SyntaxKind.CAPTURE_BINDING_PATTERN:
            return None
        if node.initializer is None or node.initializer.kind != SyntaxKind.CHECK_EXPRESSION:
            return None
        initializer = node.initializer.expression
        name = binding.binding_pattern.variable_name
    else:
        return None

    if initializer.kind != SyntaxKind.IMPLICIT_NEW_EXPRESSION:
        return None
    return listener_from_new_expression(name, initializer.arguments, configs)


def recognize_int_constant(node: n.Node) -> Optional[Tuple[str, int]]:
    """``const PORT = 9090;`` or ``configurable int port = 9090;``."""
    if node.kind == SyntaxKind.CONST_DECLARATION:
        value = parse_int_literal(node.initializer)
        return (node.variable_name, value) if value is not None else None
    if node.kind == SyntaxKind.MODULE_VAR_DECL:
        binding = node.typed_binding_pattern
        if binding.binding_pattern.kind != SyntaxKind.CAPTURE_BINDING_PATTERN:
            return None
        type_desc = binding.type_descriptor
        if type_desc.kind != SyntaxKind.BUILTIN_TYPE_DESC or type_desc.name != "int":
            return None
        value = parse_int_literal(node.initializer)
        return (binding.binding_pattern.variable_name, value) if value is not None else None
    return None


def collect_listener_configurations(members: List[n.Node]) -> Dict[str, Config]:
    configs: Dict[str, Config] = {}
    for member in members:
        found = recognize_listener_configuration(member)
        if found:
            configs[found[0]] = found[1]
    return configs

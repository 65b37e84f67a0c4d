"""
Service declaration recognizer.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from balcloud.syntax import nodes as n
from balcloud.syntax.nodes import SyntaxKind

from .intent import Config, ListenerInfo, ResourceInfo, ServiceInfo
from .listeners import parse_int_literal, resolve_config_argument

logger = logging.getLogger(__name__)


def to_absolute_path(path_nodes: Sequence[n.Node]) -> str:
    """Concatenate ``/``, ``.`` and identifier tokens in source order."""
    parts: List[str] = []
    for node in path_nodes:
        if node.kind == SyntaxKind.SLASH_TOKEN:
            parts.append("/")
        elif node.kind == SyntaxKind.DOT_TOKEN:
            parts.append(".")
        elif node.kind == SyntaxKind.IDENTIFIER_TOKEN:
            parts.append(node.text)
    return "".join(parts)


def get_listener(name: str, listeners: Sequence[ListenerInfo]) -> ListenerInfo:
    for info in listeners:
        if info.name == name:
            return info
    logger.warning(f"Listener '{name}' could not be resolved; using port 0")
    return ListenerInfo(name, 0)


def _inline_listener(
    expr: n.ExplicitNewExpression,
    service_path: str,
    listeners: Sequence[ListenerInfo],
    configs: Mapping[str, Config],
) -> Tuple[ListenerInfo, bool]:
    """Listener for ``on new T(...)``; the flag tells whether it is a new one."""
    args = expr.arguments
    listener: Optional[ListenerInfo] = None
    created = False
    if args and args[0].kind == SyntaxKind.POSITIONAL_ARG:
        first = args[0].expression
        if first.kind == SyntaxKind.SIMPLE_NAME_REFERENCE:
            # on new graphql:Listener(httpListener)
            listener = next((l for l in listeners if l.name == first.name), None)
            if listener is None:
                listener = ListenerInfo(first.name, 0, port_ref=first.name)
                created = True
        else:
            port = parse_int_literal(first)
            if port is not None:
                listener = ListenerInfo(service_path, port)
                created = True
    if listener is None:
        logger.warning(f"Could not resolve the listener of service '{service_path}'; using port 0")
        return ListenerInfo(service_path, 0), False

    if len(args) > 1:
        config = resolve_config_argument(args[1], configs)
        if config is not None:
            listener.config = config
    return listener, created


def recognize_service(
    node: n.Node,
    listeners: Sequence[ListenerInfo],
    configs: Mapping[str, Config],
) -> Optional[Tuple[ServiceInfo, Optional[ListenerInfo]]]:
    """Service and, for inline ``new`` listeners, the listener it created."""
    if node.kind != SyntaxKind.SERVICE_DECLARATION or not node.expressions:
        return None
    service_path = to_absolute_path(node.absolute_resource_path)
    expr = node.expressions[0]

    new_listener = None
    if expr.kind == SyntaxKind.SIMPLE_NAME_REFERENCE:
        listener = get_listener(expr.name, listeners)
    elif expr.kind == SyntaxKind.EXPLICIT_NEW_EXPRESSION:
        listener, created = _inline_listener(expr, service_path, listeners, configs)
        if created:
            new_listener = listener
    else:
        logger.warning(f"Unrecognized listener expression for service '{service_path}' at line {node.line}")
        listener = ListenerInfo(service_path, 0)

    service = ServiceInfo(listener=listener, service_path=service_path)
    for member in node.members:
        if member.kind == SyntaxKind.RESOURCE_ACCESSOR_DEFINITION:
            service.add_resource(ResourceInfo(member.function_name, to_absolute_path(member.relative_resource_path)))
    return service, new_listener

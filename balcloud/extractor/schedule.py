"""
Recognizer for the ``@cloud:Task`` schedule on the program entry point.
"""

from __future__ import annotations

from typing import Optional

from balcloud.syntax import nodes as n
from balcloud.syntax.nodes import SyntaxKind

from .intent import Task
from .listeners import extract_string, specific_fields

ENTRY_POINT = "main"
TASK_ANNOTATION = ("cloud", "Task")

SCHEDULE_FIELDS = {
    "minutes": "minutes",
    "hours": "hours",
    "dayOfMonth": "day_of_month",
    "monthOfYear": "month_of_year",
    "daysOfWeek": "days_of_week",
}


def parse_schedule(expr: Optional[n.Node]) -> Optional[Task]:
    if expr is None or expr.kind != SyntaxKind.MAPPING_CONSTRUCTOR:
        return None
    task = Task()
    for name, value in specific_fields(expr):
        attr = SCHEDULE_FIELDS.get(name)
        if attr:
            setattr(task, attr, extract_string(value))
    return task


def recognize_schedule(node: n.Node) -> Optional[Task]:
    if node.kind != SyntaxKind.FUNCTION_DEFINITION or node.function_name != ENTRY_POINT:
        return None
    if node.metadata is None:
        return None

    task = None
    for annotation in node.metadata.annotations:
        ref = annotation.annot_reference
        if ref.kind != SyntaxKind.QUALIFIED_NAME_REFERENCE:
            continue
        if (ref.module_prefix, ref.identifier) != TASK_ANNOTATION or annotation.annot_value is None:
            continue
        for name, value in specific_fields(annotation.annot_value):
            if name == "schedule":
                task = parse_schedule(value) or task
    return task

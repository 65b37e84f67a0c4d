from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from balcloud.syntax.nodes import ModulePart

from .intent import (
    Config,
    DeploymentIntent,
    ListenerInfo,
    MutualSSLConfig,
    ResourceInfo,
    SecureSocketConfig,
    ServiceInfo,
    Task,
)
from .listeners import collect_listener_configurations, recognize_int_constant, recognize_module_listener
from .schedule import recognize_schedule
from .services import recognize_service

logger = logging.getLogger(__name__)


def extract_intent(modules: Union[ModulePart, Iterable[ModulePart]]) -> DeploymentIntent:
    """
    Scan parsed modules and return the deployment intent they express.

    Named declarations (constants, listener configurations, listeners) are
    collected across all modules before services and the task schedule are
    read, so a service may refer to a listener declared in another file or
    further down the same file. Unrecognized constructs are left out.
    """
    if isinstance(modules, ModulePart):
        modules = [modules]
    members = [m for module in modules for m in module.members]

    int_constants: Dict[str, int] = {}
    for member in members:
        found = recognize_int_constant(member)
        if found:
            int_constants[found[0]] = found[1]

    configs = collect_listener_configurations(members)

    listeners: List[ListenerInfo] = []
    for member in members:
        listener = recognize_module_listener(member, configs)
        if listener is not None:
            listeners.append(listener)

    services: List[ServiceInfo] = []
    task: Optional[Task] = None
    for member in members:
        found_service = recognize_service(member, listeners, configs)
        if found_service is not None:
            service, new_listener = found_service
            if new_listener is not None:
                listeners.append(new_listener)
            services.append(service)
            continue
        found_task = recognize_schedule(member)
        if found_task is not None:
            task = found_task

    logger.info(f"Extracted {len(listeners)} listener(s), {len(services)} service(s)"
                f"{', scheduled task' if task else ''}")
    return DeploymentIntent(
        listeners=tuple(listeners),
        services=tuple(services),
        listener_configs=configs,
        task=task,
        int_constants=int_constants,
    )


__all__ = [
    "Config",
    "DeploymentIntent",
    "ListenerInfo",
    "MutualSSLConfig",
    "ResourceInfo",
    "SecureSocketConfig",
    "ServiceInfo",
    "Task",
    "extract_intent",
]

"""
Model population: deployment-intent plus package identity into target models.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .constants import (
    DEPLOYMENT_POSTFIX,
    DOCKER_LATEST_TAG,
    DOCKER_WORK_DIR,
    EXECUTABLE_JAR,
    JOB_POSTFIX,
    KUBERNETES_SELECTOR_KEY,
    SECRET_POSTFIX,
    SVC_POSTFIX,
)
from .context import BuildContext
from .extractor import Config, DeploymentIntent, ListenerInfo
from .models import CopyFileModel, DeploymentModel, DockerModel, JobModel, SecretModel, ServiceModel
from .utils import get_valid_name, is_blank, read_file_content

logger = logging.getLogger(__name__)


def resolve_port(listener: ListenerInfo, int_constants: Mapping[str, int]) -> int:
    """Literal port, or the default of the constant the listener refers to; 0 if unknown."""
    if listener.port:
        return listener.port
    if listener.port_ref and listener.port_ref in int_constants:
        return int_constants[listener.port_ref]
    return 0


def _service_path_for(listener: ListenerInfo, intent: DeploymentIntent) -> Optional[str]:
    for service in intent.services:
        if service.listener is listener or service.listener.name == listener.name:
            return service.service_path
    return None


def build_service_models(intent: DeploymentIntent, base_name: str) -> List[ServiceModel]:
    """One Service per distinct listener port, in declaration order."""
    listeners: List[ListenerInfo] = list(intent.listeners)
    for service in intent.services:
        if not any(service.listener is l for l in listeners):
            listeners.append(service.listener)

    models: List[ServiceModel] = []
    seen_ports = set()
    used_names = set()
    for listener in listeners:
        port = resolve_port(listener, intent.int_constants)
        if port <= 0:
            logger.warning(f"Listener '{listener.name}' has no resolvable port; no Service is generated for it")
            continue
        if port in seen_ports:
            continue
        seen_ports.add(port)

        name = get_valid_name(_service_path_for(listener, intent) or "")
        if is_blank(name):
            name = get_valid_name(listener.name)
        if is_blank(name):
            name = get_valid_name(base_name)
        if name in used_names:
            name = f"{name}-{port}"
        used_names.add(name)

        models.append(ServiceModel(
            name=name + SVC_POSTFIX,
            port=port,
            target_port=port,
            port_name=get_valid_name(f"port-{len(models) + 1}-{name}"),
            selector={KUBERNETES_SELECTOR_KEY: base_name},
        ))
    return models


def mount_path_of(file_path: str) -> str:
    """Directory the file is expected at inside the container."""
    parent = PurePosixPath(file_path.replace("\\", "/")).parent
    if parent.is_absolute():
        return str(parent)
    if str(parent) in ("", "."):
        return DOCKER_WORK_DIR
    return str(PurePosixPath(DOCKER_WORK_DIR) / parent)


def build_secret_models(
    tls_configs: Mapping[str, Config],
    project_dir: Path,
    base_name: str = "",
) -> List[SecretModel]:
    """
    Secrets carrying the key stores and certificates named in TLS configs.

    Files are grouped by the directory they are mounted at across all
    listeners, so listeners sharing a configuration share a secret and a
    certificate and key living side by side end up in one secret.
    """
    by_mount: Dict[str, Tuple[str, Dict[str, bytes]]] = {}
    for listener_name, config in tls_configs.items():
        for file_path in config.files():
            source = Path(file_path)
            if not source.is_absolute():
                source = project_dir / source
            _, data = by_mount.setdefault(mount_path_of(file_path), (listener_name, {}))
            data[source.name] = read_file_content(source)

    secrets: List[SecretModel] = []
    used_names = set()
    for mount_path, (owner, data) in by_mount.items():
        base = get_valid_name(owner)
        if is_blank(base):
            base = get_valid_name(base_name)
        name = base + SECRET_POSTFIX
        index = 0
        while name in used_names:
            index += 1
            name = f"{base}-{index}{SECRET_POSTFIX}"
        used_names.add(name)
        secrets.append(SecretModel(name=name, mount_path=mount_path, data=data))
    return secrets


def build_job_model(ctx: BuildContext) -> JobModel:
    deployment = ctx.deployment_model
    return JobModel(
        name=get_valid_name(ctx.base_name) + JOB_POSTFIX,
        image=deployment.image,
        labels=dict(deployment.labels),
        schedule=ctx.intent.task.to_cron(),
        image_pull_policy=deployment.image_pull_policy,
        base_image=deployment.base_image,
        registry=deployment.registry,
        cmd=deployment.cmd,
        single_yaml=deployment.single_yaml,
    )


def split_image(image: str) -> Tuple[Optional[str], str, str]:
    """``registry/name:tag`` into its parts; the first path segment is a registry only when it looks like a host."""
    remainder, tag = image, DOCKER_LATEST_TAG[1:]
    last = image.rsplit("/", 1)[-1]
    if ":" in last:
        remainder, tag = image.rsplit(":", 1)
    registry = None
    if "/" in remainder:
        head, rest = remainder.split("/", 1)
        if "." in head or ":" in head or head == "localhost":
            registry, remainder = head, rest
    return registry, remainder, tag


def to_docker_model(
    model: Union[DeploymentModel, JobModel],
    jar_file_name: str,
    copy_files: Iterable[CopyFileModel] = (),
) -> DockerModel:
    """Image build description matching the workload's image and ports."""
    registry, name, tag = split_image(model.image)
    ports = {p.container_port for p in getattr(model, "ports", [])}
    return DockerModel(
        name=name,
        tag=tag,
        registry=registry,
        base_image=model.base_image,
        ports=ports,
        copy_files=set(copy_files),
        jar_file_name=jar_file_name,
        cmd=model.cmd,
        push=model.push,
        build_image=model.build_image,
        is_service=isinstance(model, DeploymentModel),
    )


def populate_deployment_model(ctx: BuildContext) -> DeploymentModel:
    """
    Fill in the defaults of the deployment model and derive the other models.

    The deployment name and image are only assigned when unset. Service,
    secret and job models and the initial docker model are derived here so
    the override merger sees a complete picture.
    """
    base = ctx.base_name
    deployment = ctx.deployment_model
    if is_blank(deployment.name):
        deployment.name = get_valid_name(base) + DEPLOYMENT_POSTFIX
    if is_blank(deployment.image):
        deployment.image = base + DOCKER_LATEST_TAG
    deployment.add_label(KUBERNETES_SELECTOR_KEY, base)

    ctx.service_models = build_service_models(ctx.intent, base)
    deployment.secrets = build_secret_models(ctx.intent.tls_configs(), ctx.project_dir, base)

    if ctx.intent.task is not None:
        ctx.job_model = build_job_model(ctx)
        logger.info(f"Scheduled task found; generating job '{ctx.job_model.name}' ({ctx.job_model.schedule})")

    ctx.docker_model = to_docker_model(ctx.job_model or deployment, base + EXECUTABLE_JAR)
    logger.info(f"Populated deployment '{deployment.name}' with {len(ctx.service_models)} service(s)")
    return deployment

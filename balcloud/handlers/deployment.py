"""
Kubernetes Deployment generation.

The deployment handler is where the ports of the generated Services meet the
container: every Service target port is registered as a container port, and
the docker model is refreshed from the final deployment so the image exposes
exactly those ports under the same image name.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from balcloud.constants import DEPLOYMENT_FILE_POSTFIX, EXECUTABLE_JAR
from balcloud.context import BuildContext
from balcloud.models import ContainerPort, DeploymentModel, ProbeModel, SecretModel
from balcloud.populate import to_docker_model

from .base import Artifact, ArtifactHandler, env_entries, metadata

logger = logging.getLogger(__name__)


def register_service_ports(ctx: BuildContext) -> None:
    """Add a container port per Service and rebuild the docker model from the deployment."""
    deployment = ctx.deployment_model
    for service in ctx.service_models:
        deployment.add_port(ContainerPort(
            name=service.port_name,
            container_port=service.target_port,
            protocol=service.protocol,
        ))
    docker = ctx.docker_model
    ctx.docker_model = to_docker_model(
        deployment,
        docker.jar_file_name or ctx.base_name + EXECUTABLE_JAR,
        copy_files=docker.copy_files,
    )


def _probe(probe: ProbeModel) -> Dict[str, Any]:
    return {
        "httpGet": {"path": probe.path, "port": probe.port},
        "initialDelaySeconds": probe.initial_delay_seconds,
        "periodSeconds": probe.period_seconds,
    }


def _resources(deployment: DeploymentModel) -> Dict[str, Dict[str, str]]:
    resources: Dict[str, Dict[str, str]] = {}
    requests = {k: v for k, v in (("memory", deployment.min_memory), ("cpu", deployment.min_cpu)) if v}
    limits = {k: v for k, v in (("memory", deployment.max_memory), ("cpu", deployment.max_cpu)) if v}
    if requests:
        resources["requests"] = requests
    if limits:
        resources["limits"] = limits
    return resources


def secret_mounts(secret: SecretModel) -> List[Dict[str, Any]]:
    """One subPath mount per file; the rest of the directory in the image stays visible."""
    return [
        {
            "name": f"{secret.name}-volume",
            "mountPath": str(PurePosixPath(secret.mount_path) / file_name),
            "subPath": file_name,
            "readOnly": secret.read_only,
        }
        for file_name in sorted(secret.data)
    ]


def container_spec(deployment: DeploymentModel) -> Dict[str, Any]:
    container: Dict[str, Any] = {
        "name": deployment.name,
        "image": deployment.image,
        "imagePullPolicy": deployment.image_pull_policy,
    }
    if deployment.ports:
        container["ports"] = [
            {"name": p.name, "containerPort": p.container_port, "protocol": p.protocol}
            for p in deployment.ports
        ]
    if deployment.env_vars:
        container["env"] = env_entries(deployment.env_vars)
    resources = _resources(deployment)
    if resources:
        container["resources"] = resources
    if deployment.readiness_probe:
        container["readinessProbe"] = _probe(deployment.readiness_probe)
    if deployment.liveness_probe:
        container["livenessProbe"] = _probe(deployment.liveness_probe)

    mounts: List[Dict[str, Any]] = []
    for claim in deployment.volume_claims:
        mounts.append({"name": f"{claim.name}-volume", "mountPath": claim.mount_path, "readOnly": claim.read_only})
    for secret in deployment.secrets:
        mounts.extend(secret_mounts(secret))
    if mounts:
        container["volumeMounts"] = mounts
    return container


def pod_volumes(deployment: DeploymentModel) -> List[Dict[str, Any]]:
    volumes = [
        {"name": f"{claim.name}-volume", "persistentVolumeClaim": {"claimName": claim.name}}
        for claim in deployment.volume_claims
    ]
    volumes.extend(
        {"name": f"{secret.name}-volume", "secret": {"secretName": secret.name}}
        for secret in deployment.secrets
    )
    return volumes


class DeploymentHandler(ArtifactHandler):
    kind = "Deployment"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        deployment = ctx.deployment_model
        self.require(deployment.name, "name")
        self.require(deployment.image, "image")
        register_service_ports(ctx)

        pod_spec: Dict[str, Any] = {"containers": [container_spec(deployment)]}
        volumes = pod_volumes(deployment)
        if volumes:
            pod_spec["volumes"] = volumes

        manifest = {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": metadata(deployment.name, deployment.labels),
            "spec": {
                "replicas": deployment.replicas,
                "selector": {"matchLabels": dict(deployment.labels)},
                "template": {
                    "metadata": {"labels": dict(deployment.labels)},
                    "spec": pod_spec,
                },
            },
        }
        logger.info(f"Generated Deployment '{deployment.name}' with {len(deployment.ports)} container port(s)")
        return Artifact(kind=self.kind, file_suffix=DEPLOYMENT_FILE_POSTFIX, documents=[manifest])

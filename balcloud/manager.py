"""
Build orchestration: mode selection, population, overrides, handlers, writing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .constants import CLOUD_DOCKER, CLOUD_K8S, DEPLOYMENT_POSTFIX
from .context import BuildContext
from .errors import BuildError
from .handlers import DockerHandler, build_image, handlers_for, push_image, register_service_ports
from .overrides import apply_overrides
from .populate import populate_deployment_model
from .utils import delete_directory
from .writer import ArtifactWriter

logger = logging.getLogger(__name__)

SUPPORTED_CLOUD_OPTIONS = (CLOUD_K8S, CLOUD_DOCKER)


@dataclass
class BuildResult:
    files: List[Path] = field(default_factory=list)
    instructions: List[Tuple[str, str]] = field(default_factory=list)
    image: str = ""


class ArtifactManager:
    """Runs one build for a context in either ``k8s`` or ``docker`` mode."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx

    def create_artifacts(self, cloud_type: str) -> BuildResult:
        if cloud_type not in SUPPORTED_CLOUD_OPTIONS:
            raise BuildError("Unsupported cloud option")
        ctx = self.ctx

        delete_directory(ctx.k8s_artifact_output_path)
        delete_directory(ctx.docker_output_path)

        populate_deployment_model(ctx)
        apply_overrides(ctx)

        writer = ArtifactWriter(ctx)
        if cloud_type == CLOUD_K8S:
            self._create_kubernetes_artifacts(writer)
        else:
            self._create_docker_artifacts(writer)

        docker = ctx.docker_model
        if docker.build_image:
            build_image(docker, ctx.docker_output_path)
            if docker.push:
                push_image(docker)
        elif docker.push:
            logger.warning(f"Image {docker.image} is not pushed because it is not built")

        logger.info(f"Generated {len(writer.written)} file(s) under {ctx.output_dir}")
        return BuildResult(files=list(writer.written), instructions=list(writer.instructions), image=docker.image)

    def _create_kubernetes_artifacts(self, writer: ArtifactWriter) -> None:
        ctx = self.ctx
        for handler in handlers_for(ctx):
            artifact = handler.create_artifacts(ctx)
            if artifact is not None:
                writer.write(artifact)

        writer.add_instruction(
            "\tExecute the below command to deploy the Kubernetes artifacts: ",
            f"\tkubectl apply -f {ctx.k8s_artifact_output_path.resolve()}",
        )
        if not ctx.is_job and ctx.service_models:
            name = ctx.deployment_model.name
            writer.add_instruction(
                "\tExecute the below command to access service via NodePort: ",
                f"\tkubectl expose deployment {name} --type=NodePort "
                f"--name={name.replace(DEPLOYMENT_POSTFIX, '-svc-local')}",
            )

    def _create_docker_artifacts(self, writer: ArtifactWriter) -> None:
        ctx = self.ctx
        if not ctx.is_job:
            register_service_ports(ctx)
        artifact = DockerHandler().create_artifacts(ctx)
        if artifact is not None:
            writer.write(artifact)

        docker = ctx.docker_model
        command = ["docker", "run", "-d"]
        for port in sorted(docker.ports):
            command.append(f"-p {port}:{port}")
        command.append(docker.image)
        writer.add_instruction(
            "\tExecute the below command to run the generated docker image: ",
            "\t" + " ".join(command),
        )

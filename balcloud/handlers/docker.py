"""
Dockerfile and build context generation, plus the optional local image build.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from balcloud.constants import DOCKER_WORK_DIR, DOCKERFILE
from balcloud.context import BuildContext
from balcloud.errors import BuildError
from balcloud.models import DockerModel

from .base import Artifact, ArtifactHandler

logger = logging.getLogger(__name__)

MAINTAINER = "dev@ballerina.io"


def default_command(jar_file_name: str) -> str:
    return f'java -Xdiag -jar "{jar_file_name}"'


def generate_dockerfile(docker: DockerModel, copy_targets: Dict[str, str]) -> str:
    """
    Render the Dockerfile text.

    Args:
        docker: DockerModel after overrides
        copy_targets: build-context path -> path inside the image
    """
    lines: List[str] = [
        "# Auto Generated Dockerfile",
        f"FROM {docker.base_image}",
        f'LABEL maintainer="{MAINTAINER}"',
        "",
        f"WORKDIR {DOCKER_WORK_DIR}",
        f"COPY {docker.jar_file_name} {DOCKER_WORK_DIR}",
    ]
    for context_path, target in copy_targets.items():
        lines.append(f"COPY {context_path} {target}")
    lines.append("")
    if docker.ports:
        lines.append("EXPOSE  " + " ".join(str(p) for p in sorted(docker.ports)))
    lines.append(f"CMD {docker.cmd or default_command(docker.jar_file_name)}")
    return "\n".join(lines) + "\n"


class DockerHandler(ArtifactHandler):
    kind = "Dockerfile"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        docker = ctx.docker_model
        self.require(docker.name, "image name")
        self.require(docker.base_image, "base image")
        self.require(docker.jar_file_name, "executable")

        context_files: Dict[str, str] = {}
        if ctx.jar_path is not None and Path(ctx.jar_path).is_file():
            context_files[str(ctx.jar_path)] = docker.jar_file_name
        else:
            logger.warning(f"Executable {ctx.jar_path} not found; build the package before building the image")

        copy_targets: Dict[str, str] = {}
        for copy in sorted(docker.copy_files, key=lambda c: (c.source, c.target)):
            context_path = Path(copy.source).name
            context_files[copy.source] = context_path
            copy_targets[context_path] = copy.target

        logger.info(f"Generated Dockerfile for image {docker.image}")
        return Artifact(
            kind=self.kind,
            file_suffix=DOCKERFILE,
            text=generate_dockerfile(docker, copy_targets),
            context_files=context_files,
        )


def build_image(docker: DockerModel, context_dir: Path) -> None:
    """Run ``docker build`` on a written build context."""
    logger.info(f"Building docker image {docker.image}")
    try:
        subprocess.run(
            ["docker", "build", "--force-rm", "-t", docker.image, str(context_dir)],
            check=True,
        )
    except FileNotFoundError as e:
        raise BuildError("unable to build the docker image: docker is not installed", e) from e
    except subprocess.CalledProcessError as e:
        raise BuildError(f"unable to build the docker image {docker.image}", e) from e


def push_image(docker: DockerModel) -> None:
    """Run ``docker push`` for an image built by :func:`build_image`."""
    logger.info(f"Pushing docker image {docker.image}")
    try:
        subprocess.run(["docker", "push", docker.image], check=True)
    except FileNotFoundError as e:
        raise BuildError("unable to push the docker image: docker is not installed", e) from e
    except subprocess.CalledProcessError as e:
        raise BuildError(f"unable to push the docker image {docker.image}", e) from e

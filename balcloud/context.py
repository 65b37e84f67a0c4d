"""
Per-build state shared by the populator, the override merger and the handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import CloudToml
from .constants import DOCKER_DIR, KUBERNETES_DIR
from .extractor import DeploymentIntent, extract_intent
from .models import DeploymentModel, DockerModel, JobModel, SecretModel, ServiceModel
from .project import PackageIdentity, Project
from .utils import extract_jar_name

DEFAULT_OUTPUT_DIR = Path("target")


@dataclass
class BuildContext:
    """
    Everything one build knows about the package and its target models.

    A context is created for a single build and passed explicitly through
    every stage; nothing about a build is kept at module level.
    """
    project_dir: Path
    output_dir: Path
    package: PackageIdentity
    intent: DeploymentIntent = field(default_factory=DeploymentIntent)
    cloud_toml: CloudToml = field(default_factory=CloudToml)
    jar_path: Optional[Path] = None
    build_image: Optional[bool] = None  # None defers to settings.buildImage

    deployment_model: DeploymentModel = field(default_factory=DeploymentModel)
    job_model: Optional[JobModel] = None
    docker_model: DockerModel = field(default_factory=DockerModel)
    service_models: List[ServiceModel] = field(default_factory=list)

    @classmethod
    def from_project(
        cls,
        project: Project,
        output_dir: Optional[str | Path] = None,
        jar_path: Optional[str | Path] = None,
        build_image: Optional[bool] = None,
    ) -> "BuildContext":
        out = Path(output_dir) if output_dir else project.path / DEFAULT_OUTPUT_DIR
        jar = Path(jar_path) if jar_path else project.default_jar_path
        return cls(
            project_dir=project.path,
            output_dir=out.resolve(),
            package=project.package,
            intent=extract_intent(project.modules),
            cloud_toml=project.cloud_toml,
            jar_path=jar,
            build_image=build_image,
        )

    @property
    def base_name(self) -> str:
        """Executable base name, falling back to the package name."""
        return extract_jar_name(self.jar_path) or self.package.name

    @property
    def secret_models(self) -> List[SecretModel]:
        return self.deployment_model.secrets

    @property
    def is_job(self) -> bool:
        return self.job_model is not None

    @property
    def k8s_artifact_output_path(self) -> Path:
        return self.output_dir / KUBERNETES_DIR / self.base_name

    @property
    def docker_output_path(self) -> Path:
        return self.output_dir / DOCKER_DIR / self.base_name

"""
Base handler interface and manifest helpers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from balcloud.context import BuildContext
from balcloud.errors import BuildError
from balcloud.models import EnvVarModel
from balcloud.utils import is_blank


@dataclass
class Artifact:
    """Output of one handler, written out by the ArtifactWriter."""
    kind: str                       # "Service", "Deployment", "Dockerfile", ...
    file_suffix: str                # "_svc", "_deployment"; Dockerfile artifacts ignore it
    documents: List[Dict[str, Any]] = field(default_factory=list)   # Kubernetes manifests
    text: Optional[str] = None      # non-YAML content such as a Dockerfile
    context_files: Dict[str, str] = field(default_factory=dict)     # source path -> path inside the output dir


class ArtifactHandler(ABC):
    """Turns the models of a build context into zero or one artifact."""

    kind: str = ""

    @abstractmethod
    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        """
        Build the artifact for this resource kind.

        Args:
            ctx: BuildContext of the current build, after population and overrides

        Returns:
            The artifact, or None when the build has nothing of this kind
        """
        pass

    def require(self, value: Any, field_name: str) -> Any:
        if value is None or (isinstance(value, str) and is_blank(value)):
            raise BuildError(f"error while generating {self.kind}: '{field_name}' is not set")
        return value


def metadata(name: str, labels: Dict[str, str]) -> Dict[str, Any]:
    return {"name": name, "labels": dict(labels)}


def env_entries(env_vars: List[EnvVarModel]) -> List[Dict[str, Any]]:
    entries = []
    for env in env_vars:
        if env.config_map_name:
            entries.append({"name": env.name, "valueFrom": {
                "configMapKeyRef": {"name": env.config_map_name, "key": env.key}}})
        elif env.secret_name:
            entries.append({"name": env.name, "valueFrom": {
                "secretKeyRef": {"name": env.secret_name, "key": env.key}}})
        else:
            entries.append({"name": env.name, "value": env.value or ""})
    return entries

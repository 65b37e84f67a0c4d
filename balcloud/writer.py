"""
Artifact serialization and post-build instructions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import yaml

from .constants import DOCKERFILE, YAML
from .context import BuildContext
from .errors import BuildError
from .handlers.base import Artifact
from .utils import copy_file_or_directory

logger = logging.getLogger(__name__)

Instruction = Tuple[str, str]


def dump_documents(documents: Sequence[Dict[str, Any]]) -> str:
    return yaml.safe_dump_all(documents, explicit_start=True, sort_keys=False, default_flow_style=False)


def write_to_file(content: str, path: Path) -> None:
    """Append to ``path``, creating it and its parent directories when missing."""
    try:
        if path.exists():
            with open(path, "a", encoding="utf-8") as f:
                f.write(content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise BuildError(f"error while writing {path}", e) from e


def format_instructions(instructions: Sequence[Instruction]) -> str:
    """Each title and command on its own line, followed by a blank line."""
    return "".join(f"{title}\n{command}\n\n" for title, command in instructions)


class ArtifactWriter:
    """Writes the artifacts of one build and collects the instructions to show after it."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx
        self.written: List[Path] = []
        self.instructions: List[Instruction] = []

    @property
    def single_yaml(self) -> bool:
        if self.ctx.job_model is not None:
            return self.ctx.job_model.single_yaml
        return self.ctx.deployment_model.single_yaml

    def yaml_path(self, artifact: Artifact) -> Path:
        base = self.ctx.base_name
        file_name = base + YAML if self.single_yaml else base + artifact.file_suffix + YAML
        return self.ctx.k8s_artifact_output_path / file_name

    def write(self, artifact: Artifact) -> List[Path]:
        paths: List[Path] = []
        if artifact.documents:
            path = self.yaml_path(artifact)
            write_to_file(dump_documents(artifact.documents), path)
            paths.append(path)
        if artifact.text is not None:
            docker_dir = self.ctx.docker_output_path
            path = docker_dir / DOCKERFILE
            write_to_file(artifact.text, path)
            paths.append(path)
            for source, target in artifact.context_files.items():
                copy_file_or_directory(source, docker_dir / target)
                paths.append(docker_dir / target)
        for path in paths:
            if path not in self.written:
                self.written.append(path)
        logger.debug(f"Wrote {artifact.kind} to {', '.join(str(p) for p in paths)}")
        return paths

    def add_instruction(self, title: str, command: str) -> None:
        self.instructions.append((title, command))

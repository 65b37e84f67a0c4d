"""
Container image build model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set

from balcloud.constants import DEFAULT_BASE_IMAGE


@dataclass(frozen=True)
class CopyFileModel:
    source: str
    target: str


@dataclass
class DockerModel:
    name: Optional[str] = None
    tag: str = "latest"
    registry: Optional[str] = None
    base_image: str = DEFAULT_BASE_IMAGE
    ports: Set[int] = field(default_factory=set)
    copy_files: Set[CopyFileModel] = field(default_factory=set)
    jar_file_name: Optional[str] = None
    cmd: Optional[str] = None
    push: bool = False
    build_image: bool = False
    is_service: bool = True

    @property
    def image(self) -> str:
        if self.registry:
            return f"{self.registry}/{self.name}:{self.tag}"
        return f"{self.name}:{self.tag}"

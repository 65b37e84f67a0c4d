"""
Ballerina package loading: identity from Ballerina.toml, parsed sources, Cloud.toml.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import CLOUD_TOML, CloudToml, load_cloud_toml
from .constants import EXECUTABLE_JAR
from .errors import BuildError
from .syntax import ModulePart, parse_file

logger = logging.getLogger(__name__)

BALLERINA_TOML = "Ballerina.toml"
SOURCE_EXTENSION = ".bal"
TARGET_BIN_DIR = Path("target") / "bin"

IGNORE_DIRS = {"target", "tests", "resources", ".git"}


@dataclass
class PackageIdentity:
    org: Optional[str]
    name: str
    version: Optional[str] = None


@dataclass
class Project:
    path: Path
    package: PackageIdentity
    modules: List[ModulePart] = field(default_factory=list)
    cloud_toml: CloudToml = field(default_factory=CloudToml)

    @property
    def default_jar_path(self) -> Path:
        return self.path / TARGET_BIN_DIR / f"{self.package.name}{EXECUTABLE_JAR}"


def read_package_identity(project_dir: Path) -> PackageIdentity:
    toml_path = project_dir / BALLERINA_TOML
    if not toml_path.is_file():
        # single-file programs have no manifest
        logger.warning(f"No {BALLERINA_TOML} in {project_dir}; using the directory name as package name")
        return PackageIdentity(org=None, name=project_dir.name)
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise BuildError(f"unable to read {toml_path}", e) from e

    package = data.get("package", {})
    name = package.get("name")
    if not isinstance(name, str) or not name.strip():
        raise BuildError(f"'package.name' is missing in {toml_path}")
    return PackageIdentity(org=package.get("org"), name=name, version=package.get("version"))


def find_sources(project_dir: Path) -> List[Path]:
    """Default module sources plus ``modules/*`` sources, sorted for stable output."""
    sources = sorted(project_dir.glob(f"*{SOURCE_EXTENSION}"))
    modules_dir = project_dir / "modules"
    if modules_dir.is_dir():
        for module_dir in sorted(p for p in modules_dir.iterdir() if p.is_dir() and p.name not in IGNORE_DIRS):
            sources.extend(sorted(module_dir.glob(f"*{SOURCE_EXTENSION}")))
    return sources


def load_project(project_path: str | Path, cloud_toml_path: Optional[str | Path] = None) -> Project:
    """
    Load a package directory, or a single ``.bal`` file, ready for extraction.

    The override document defaults to ``Cloud.toml`` beside the sources.
    """
    path = Path(project_path).resolve()
    if path.is_file():
        if path.suffix != SOURCE_EXTENSION:
            raise BuildError(f"not a Ballerina source file: {path}")
        project_dir = path.parent
        package = PackageIdentity(org=None, name=path.stem)
        sources = [path]
    elif path.is_dir():
        project_dir = path
        package = read_package_identity(project_dir)
        sources = find_sources(project_dir)
    else:
        raise BuildError(f"project path does not exist: {path}")

    if not sources:
        logger.warning(f"No {SOURCE_EXTENSION} files found in {project_dir}")

    modules = []
    for source in sources:
        try:
            modules.append(parse_file(source))
        except OSError as e:
            raise BuildError(f"unable to read {source}", e) from e
    logger.info(f"Parsed {len(modules)} source file(s) of package '{package.name}'")

    toml_path = Path(cloud_toml_path) if cloud_toml_path else project_dir / CLOUD_TOML
    return Project(
        path=project_dir,
        package=package,
        modules=modules,
        cloud_toml=load_cloud_toml(toml_path),
    )

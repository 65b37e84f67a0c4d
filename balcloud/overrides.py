"""
Merge of the Cloud.toml override document onto the populated target models.

Keys that are present win over the populated defaults; absent keys leave the
models untouched. Applying the same document twice gives the same models.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .config import CloudToml
from .constants import PVC_POSTFIX
from .context import BuildContext
from .errors import BuildError
from .models import (
    CopyFileModel,
    DeploymentModel,
    DockerModel,
    EnvVarModel,
    JobModel,
    PersistentVolumeClaimModel,
    ProbeModel,
)
from .utils import get_valid_name, is_blank

logger = logging.getLogger(__name__)

IMAGE_NAME = "container.image.name"
IMAGE_REPOSITORY = "container.image.repository"
IMAGE_TAG = "container.image.tag"
IMAGE_BASE = "container.image.base"
COPY_FILES = "container.copy.files"
COPY_SOURCE = "sourceFile"
COPY_TARGET = "target"

DEPLOYMENT = "cloud.deployment"
AUTOSCALING = "cloud.deployment.autoscaling"
PROBES = "cloud.deployment.probes"
VOLUMES = "cloud.deployment.storage.volumes"
CONFIG_ENVS = "cloud.config.envs"
SECRET_ENVS = "cloud.secret.envs"

SINGLE_YAML = "settings.singleYAML"
BUILD_IMAGE = "settings.buildImage"
PUSH_IMAGE = "settings.pushImage"


def apply_image_overrides(docker: DockerModel, toml: CloudToml) -> None:
    name = toml.get_string(IMAGE_NAME)
    if not is_blank(name):
        docker.name = name
    repository = toml.get_string(IMAGE_REPOSITORY)
    if not is_blank(repository):
        docker.registry = repository
    tag = toml.get_string(IMAGE_TAG)
    if not is_blank(tag):
        docker.tag = tag
    base = toml.get_string(IMAGE_BASE)
    if not is_blank(base):
        docker.base_image = base


def _entry_string(entry: dict, key: str, table: str) -> Optional[str]:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise BuildError(f"invalid value for '{key}' in [[{table}]]: expected a string")
    return value


def resolve_copy_files(toml: CloudToml, project_dir: Path) -> List[CopyFileModel]:
    """Validated copy directives; a missing source or an empty target is fatal."""
    copies = []
    for entry in toml.get_tables(COPY_FILES):
        source = _entry_string(entry, COPY_SOURCE, COPY_FILES)
        target = _entry_string(entry, COPY_TARGET, COPY_FILES)
        if is_blank(source):
            raise BuildError(f"'{COPY_SOURCE}' is required in [[{COPY_FILES}]]")
        if is_blank(target):
            raise BuildError(f"'{COPY_TARGET}' is required in [[{COPY_FILES}]] for {source}")
        source_path = Path(source)
        if not source_path.is_absolute():
            source_path = project_dir / source_path
        if not source_path.exists():
            raise BuildError(f"error while copying file: {source_path} does not exist")
        copies.append(CopyFileModel(source=str(source_path.resolve()), target=target))
    return copies


def apply_deployment_overrides(deployment: DeploymentModel, toml: CloudToml) -> None:
    for key in ("min_memory", "max_memory", "min_cpu", "max_cpu"):
        value = toml.get_string(f"{DEPLOYMENT}.{key}")
        if value is not None:
            setattr(deployment, key, value)

    autoscaler = deployment.pod_autoscaler
    autoscaler.enabled = toml.get_bool(f"{AUTOSCALING}.enable", autoscaler.enabled)
    autoscaler.min_replicas = toml.get_int(f"{AUTOSCALING}.min_replicas", autoscaler.min_replicas)
    autoscaler.max_replicas = toml.get_int(f"{AUTOSCALING}.max_replicas", autoscaler.max_replicas)
    autoscaler.cpu_percentage = toml.get_int(f"{AUTOSCALING}.cpu", autoscaler.cpu_percentage)
    autoscaler.memory_percentage = toml.get_int(f"{AUTOSCALING}.memory", autoscaler.memory_percentage)
    if autoscaler.min_replicas is not None:
        deployment.replicas = autoscaler.min_replicas

    for probe in ("readiness", "liveness"):
        key = f"{PROBES}.{probe}"
        if not toml.contains(key):
            continue
        port = toml.get_int(f"{key}.port")
        if port is None:
            raise BuildError(f"'{key}.port' is required when the {probe} probe is configured")
        setattr(deployment, f"{probe}_probe", ProbeModel(port=port, path=toml.get_string(f"{key}.path", "/")))

    for entry in toml.get_tables(VOLUMES):
        name = _entry_string(entry, "name", VOLUMES)
        mount_path = _entry_string(entry, "local_path", VOLUMES)
        if is_blank(name) or is_blank(mount_path):
            raise BuildError(f"'name' and 'local_path' are required in [[{VOLUMES}]]")
        claim = PersistentVolumeClaimModel(name=get_valid_name(name) + PVC_POSTFIX, mount_path=mount_path)
        size = _entry_string(entry, "size", VOLUMES)
        if size:
            claim.size = size
        deployment.volume_claims = [c for c in deployment.volume_claims if c.name != claim.name]
        deployment.volume_claims.append(claim)


def resolve_env_vars(toml: CloudToml) -> List[EnvVarModel]:
    env_vars = []
    for table, ref_key, attr in ((CONFIG_ENVS, "config_name", "config_map_name"),
                                 (SECRET_ENVS, "secret_name", "secret_name")):
        for entry in toml.get_tables(table):
            key_ref = _entry_string(entry, "key_ref", table)
            ref_name = _entry_string(entry, ref_key, table)
            if is_blank(key_ref) or is_blank(ref_name):
                raise BuildError(f"'key_ref' and '{ref_key}' are required in [[{table}]]")
            name = _entry_string(entry, "name", table) or key_ref
            env_var = EnvVarModel(name=name, key=key_ref)
            setattr(env_var, attr, ref_name)
            env_vars.append(env_var)
    return env_vars


def _merge_env_vars(model: Union[DeploymentModel, JobModel], env_vars: List[EnvVarModel]) -> None:
    names = {e.name for e in env_vars}
    model.env_vars = [e for e in model.env_vars if e.name not in names] + list(env_vars)


def _sync_image(model: Union[DeploymentModel, JobModel], docker: DockerModel) -> None:
    model.image = docker.image
    model.registry = docker.registry
    model.base_image = docker.base_image


def apply_overrides(ctx: BuildContext) -> None:
    """Apply ``ctx.cloud_toml`` to the docker, deployment and job models."""
    toml = ctx.cloud_toml
    docker = ctx.docker_model
    deployment = ctx.deployment_model
    job = ctx.job_model

    apply_image_overrides(docker, toml)
    docker.copy_files.update(resolve_copy_files(toml, ctx.project_dir))
    apply_deployment_overrides(deployment, toml)

    env_vars = resolve_env_vars(toml)
    single_yaml = toml.get_bool(SINGLE_YAML, True)
    build_image = ctx.build_image if ctx.build_image is not None else toml.get_bool(BUILD_IMAGE, False)
    push = toml.get_bool(PUSH_IMAGE, False)
    docker.build_image = build_image
    docker.push = push

    for model in (deployment, job):
        if model is None:
            continue
        _sync_image(model, docker)
        _merge_env_vars(model, env_vars)
        model.single_yaml = single_yaml
        model.build_image = build_image
        model.push = push

    if toml:
        logger.info(f"Applied overrides; image is {docker.image}")

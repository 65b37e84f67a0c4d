"""
Target models for the Kubernetes artifacts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from balcloud.constants import (
    DEFAULT_BASE_IMAGE,
    DEFAULT_HPA_CPU_PERCENTAGE,
    DEFAULT_IMAGE_PULL_POLICY,
    DEFAULT_PVC_ACCESS_MODE,
    DEFAULT_PVC_SIZE,
    DEFAULT_SERVICE_TYPE,
    KUBERNETES_SVC_PROTOCOL,
)


@dataclass
class ContainerPort:
    name: str
    container_port: int
    protocol: str = KUBERNETES_SVC_PROTOCOL


@dataclass
class EnvVarModel:
    """Plain value, or a key reference into a config map or secret."""
    name: str
    value: Optional[str] = None
    config_map_name: Optional[str] = None
    secret_name: Optional[str] = None
    key: Optional[str] = None


@dataclass
class ProbeModel:
    port: int
    path: str = "/"
    initial_delay_seconds: int = 30
    period_seconds: int = 5


@dataclass
class PersistentVolumeClaimModel:
    name: str
    mount_path: str
    size: str = DEFAULT_PVC_SIZE
    access_mode: str = DEFAULT_PVC_ACCESS_MODE
    read_only: bool = False


@dataclass
class SecretModel:
    name: str
    mount_path: str
    data: Dict[str, bytes] = field(default_factory=dict)
    read_only: bool = True


@dataclass
class ServiceModel:
    name: str
    port: int
    target_port: int
    port_name: str
    selector: Dict[str, str] = field(default_factory=dict)
    protocol: str = KUBERNETES_SVC_PROTOCOL
    service_type: str = DEFAULT_SERVICE_TYPE


@dataclass
class PodAutoscalerModel:
    enabled: bool = True
    min_replicas: Optional[int] = None  # defaults to the deployment replicas
    max_replicas: Optional[int] = None  # defaults to min + 1
    cpu_percentage: int = DEFAULT_HPA_CPU_PERCENTAGE
    memory_percentage: Optional[int] = None


@dataclass
class DeploymentModel:
    name: Optional[str] = None
    image: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    replicas: int = 1
    ports: List[ContainerPort] = field(default_factory=list)
    env_vars: List[EnvVarModel] = field(default_factory=list)
    min_memory: Optional[str] = None
    max_memory: Optional[str] = None
    min_cpu: Optional[str] = None
    max_cpu: Optional[str] = None
    readiness_probe: Optional[ProbeModel] = None
    liveness_probe: Optional[ProbeModel] = None
    volume_claims: List[PersistentVolumeClaimModel] = field(default_factory=list)
    secrets: List[SecretModel] = field(default_factory=list)
    pod_autoscaler: PodAutoscalerModel = field(default_factory=PodAutoscalerModel)
    image_pull_policy: str = DEFAULT_IMAGE_PULL_POLICY
    base_image: str = DEFAULT_BASE_IMAGE
    registry: Optional[str] = None
    cmd: Optional[str] = None
    push: bool = False
    build_image: bool = False
    single_yaml: bool = True

    def add_label(self, key: str, value: str) -> None:
        self.labels[key] = value

    def add_port(self, port: ContainerPort) -> None:
        if any(p.container_port == port.container_port for p in self.ports):
            return
        self.ports.append(port)


@dataclass
class JobModel:
    name: Optional[str] = None
    image: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    schedule: Optional[str] = None
    restart_policy: str = "OnFailure"
    backoff_limit: int = 3
    env_vars: List[EnvVarModel] = field(default_factory=list)
    image_pull_policy: str = DEFAULT_IMAGE_PULL_POLICY
    base_image: str = DEFAULT_BASE_IMAGE
    registry: Optional[str] = None
    cmd: Optional[str] = None
    push: bool = False
    build_image: bool = False
    single_yaml: bool = True


@dataclass
class HPAModel:
    name: str
    deployment_name: str
    min_replicas: int
    max_replicas: int
    labels: Dict[str, str] = field(default_factory=dict)
    cpu_percentage: Optional[int] = DEFAULT_HPA_CPU_PERCENTAGE
    memory_percentage: Optional[int] = None

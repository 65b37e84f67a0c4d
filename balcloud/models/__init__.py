from .docker import CopyFileModel, DockerModel
from .kubernetes import (
    ContainerPort,
    DeploymentModel,
    EnvVarModel,
    HPAModel,
    JobModel,
    PersistentVolumeClaimModel,
    PodAutoscalerModel,
    ProbeModel,
    SecretModel,
    ServiceModel,
)

__all__ = [
    "ContainerPort",
    "CopyFileModel",
    "DeploymentModel",
    "DockerModel",
    "EnvVarModel",
    "HPAModel",
    "JobModel",
    "PersistentVolumeClaimModel",
    "PodAutoscalerModel",
    "ProbeModel",
    "SecretModel",
    "ServiceModel",
]

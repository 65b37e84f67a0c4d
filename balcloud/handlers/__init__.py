"""
Artifact handlers and the order they run in.
"""

from typing import List

from balcloud.context import BuildContext

from .base import Artifact, ArtifactHandler
from .deployment import DeploymentHandler, register_service_ports
from .docker import DockerHandler, build_image, push_image
from .hpa import HorizontalPodAutoscalerHandler
from .job import JobHandler
from .pvc import PersistentVolumeClaimHandler
from .secret import SecretHandler
from .service import ServiceHandler

# Deployment needs the Service ports, Docker needs the final deployment.
SERVICE_HANDLERS = [
    ServiceHandler,
    PersistentVolumeClaimHandler,
    SecretHandler,
    DeploymentHandler,
    HorizontalPodAutoscalerHandler,
    DockerHandler,
]

JOB_HANDLERS = [
    JobHandler,
    DockerHandler,
]


def handlers_for(ctx: BuildContext) -> List[ArtifactHandler]:
    """Handlers of the mode the build is in; a job never gets service artifacts."""
    handler_classes = JOB_HANDLERS if ctx.is_job else SERVICE_HANDLERS
    return [cls() for cls in handler_classes]


__all__ = [
    "Artifact",
    "ArtifactHandler",
    "DeploymentHandler",
    "DockerHandler",
    "HorizontalPodAutoscalerHandler",
    "JOB_HANDLERS",
    "JobHandler",
    "PersistentVolumeClaimHandler",
    "SERVICE_HANDLERS",
    "SecretHandler",
    "ServiceHandler",
    "build_image",
    "push_image",
    "handlers_for",
    "register_service_ports",
]

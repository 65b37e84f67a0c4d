from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from balcloud.constants import HPA_FILE_POSTFIX, HPA_POSTFIX
from balcloud.context import BuildContext
from balcloud.errors import BuildError
from balcloud.models import HPAModel
from balcloud.utils import get_valid_name

from .base import Artifact, ArtifactHandler, metadata

logger = logging.getLogger(__name__)


def build_hpa_model(ctx: BuildContext) -> Optional[HPAModel]:
    deployment = ctx.deployment_model
    autoscaler = deployment.pod_autoscaler
    if not autoscaler.enabled:
        return None
    min_replicas = autoscaler.min_replicas if autoscaler.min_replicas is not None else deployment.replicas
    max_replicas = autoscaler.max_replicas if autoscaler.max_replicas is not None else min_replicas + 1
    if min_replicas < 1 or max_replicas < min_replicas:
        raise BuildError(
            f"invalid autoscaling range for '{deployment.name}': "
            f"min_replicas={min_replicas}, max_replicas={max_replicas}"
        )
    return HPAModel(
        name=get_valid_name(ctx.base_name) + HPA_POSTFIX,
        deployment_name=deployment.name,
        min_replicas=min_replicas,
        max_replicas=max_replicas,
        labels=dict(deployment.labels),
        cpu_percentage=autoscaler.cpu_percentage,
        memory_percentage=autoscaler.memory_percentage,
    )


def _utilization(resource: str, percentage: int) -> Dict[str, Any]:
    return {
        "type": "Resource",
        "resource": {
            "name": resource,
            "target": {"type": "Utilization", "averageUtilization": percentage},
        },
    }


class HorizontalPodAutoscalerHandler(ArtifactHandler):
    kind = "HorizontalPodAutoscaler"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        model = build_hpa_model(ctx)
        if model is None:
            logger.info("Autoscaling disabled; skipping HorizontalPodAutoscaler")
            return None
        metrics: List[Dict[str, Any]] = []
        if model.cpu_percentage:
            metrics.append(_utilization("cpu", model.cpu_percentage))
        if model.memory_percentage:
            metrics.append(_utilization("memory", model.memory_percentage))

        manifest = {
            "apiVersion": "autoscaling/v2",
            "kind": "HorizontalPodAutoscaler",
            "metadata": metadata(model.name, model.labels),
            "spec": {
                "scaleTargetRef": {
                    "apiVersion": "apps/v1",
                    "kind": "Deployment",
                    "name": self.require(model.deployment_name, "deployment name"),
                },
                "minReplicas": model.min_replicas,
                "maxReplicas": model.max_replicas,
                "metrics": metrics,
            },
        }
        return Artifact(kind=self.kind, file_suffix=HPA_FILE_POSTFIX, documents=[manifest])

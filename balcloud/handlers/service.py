"""
Kubernetes Service generation.
"""

from __future__ import annotations

import logging
from typing import Optional

from balcloud.constants import SVC_FILE_POSTFIX
from balcloud.context import BuildContext
from balcloud.models import ServiceModel

from .base import Artifact, ArtifactHandler, metadata

logger = logging.getLogger(__name__)


def service_manifest(model: ServiceModel, labels) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": metadata(model.name, labels),
        "spec": {
            "type": model.service_type,
            "selector": dict(model.selector),
            "ports": [
                {
                    "name": model.port_name,
                    "port": model.port,
                    "targetPort": model.target_port,
                    "protocol": model.protocol,
                }
            ],
        },
    }


class ServiceHandler(ArtifactHandler):
    kind = "Service"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        if not ctx.service_models:
            return None
        labels = ctx.deployment_model.labels
        documents = []
        for model in ctx.service_models:
            self.require(model.name, "name")
            if model.port <= 0:
                self.require(None, "port")
            documents.append(service_manifest(model, labels))
        logger.info(f"Generated {len(documents)} Service manifest(s)")
        return Artifact(kind=self.kind, file_suffix=SVC_FILE_POSTFIX, documents=documents)

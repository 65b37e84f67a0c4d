from __future__ import annotations

import logging
from typing import Optional

from balcloud.constants import VOLUME_CLAIM_FILE_POSTFIX
from balcloud.context import BuildContext

from .base import Artifact, ArtifactHandler, metadata

logger = logging.getLogger(__name__)


class PersistentVolumeClaimHandler(ArtifactHandler):
    kind = "PersistentVolumeClaim"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        claims = ctx.deployment_model.volume_claims
        if not claims:
            return None
        documents = []
        for claim in claims:
            documents.append({
                "apiVersion": "v1",
                "kind": "PersistentVolumeClaim",
                "metadata": metadata(self.require(claim.name, "name"), ctx.deployment_model.labels),
                "spec": {
                    "accessModes": [claim.access_mode],
                    "resources": {"requests": {"storage": claim.size}},
                },
            })
        logger.info(f"Generated {len(documents)} volume claim(s)")
        return Artifact(kind=self.kind, file_suffix=VOLUME_CLAIM_FILE_POSTFIX, documents=documents)

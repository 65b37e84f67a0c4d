"""
Secrets for the key stores and certificates of TLS listeners.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

from balcloud.constants import SECRET_FILE_POSTFIX
from balcloud.context import BuildContext

from .base import Artifact, ArtifactHandler, metadata

logger = logging.getLogger(__name__)


class SecretHandler(ArtifactHandler):
    kind = "Secret"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        secrets = ctx.secret_models
        if not secrets:
            return None
        documents = []
        for secret in secrets:
            documents.append({
                "apiVersion": "v1",
                "kind": "Secret",
                "metadata": metadata(self.require(secret.name, "name"), ctx.deployment_model.labels),
                "type": "Opaque",
                "data": {
                    file_name: base64.b64encode(content).decode("ascii")
                    for file_name, content in sorted(secret.data.items())
                },
            })
        logger.info(f"Generated {len(documents)} secret(s) for TLS listeners")
        return Artifact(kind=self.kind, file_suffix=SECRET_FILE_POSTFIX, documents=documents)

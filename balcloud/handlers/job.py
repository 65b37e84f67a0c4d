"""
Scheduled task generation as a batch/v1 CronJob.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from balcloud.constants import JOB_FILE_POSTFIX
from balcloud.context import BuildContext

from .base import Artifact, ArtifactHandler, env_entries, metadata

logger = logging.getLogger(__name__)


class JobHandler(ArtifactHandler):
    kind = "CronJob"

    def create_artifacts(self, ctx: BuildContext) -> Optional[Artifact]:
        job = ctx.job_model
        if job is None:
            return None
        self.require(job.name, "name")
        self.require(job.image, "image")
        self.require(job.schedule, "schedule")

        container: Dict[str, Any] = {
            "name": job.name,
            "image": job.image,
            "imagePullPolicy": job.image_pull_policy,
        }
        if job.env_vars:
            container["env"] = env_entries(job.env_vars)

        manifest = {
            "apiVersion": "batch/v1",
            "kind": "CronJob",
            "metadata": metadata(job.name, job.labels),
            "spec": {
                "schedule": job.schedule,
                "jobTemplate": {
                    "spec": {
                        "backoffLimit": job.backoff_limit,
                        "template": {
                            "metadata": {"labels": dict(job.labels)},
                            "spec": {
                                "restartPolicy": job.restart_policy,
                                "containers": [container],
                            },
                        },
                    },
                },
            },
        }
        logger.info(f"Generated CronJob '{job.name}' with schedule '{job.schedule}'")
        return Artifact(kind=self.kind, file_suffix=JOB_FILE_POSTFIX, documents=[manifest])

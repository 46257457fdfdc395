"""
Face matching compute trigger port.

Submission is fire-and-forget: results come back later through the
compute callback webhook. Selected by COMPUTE_BACKEND.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol
from uuid import UUID

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from eventphoto.core.config import settings
from eventphoto.core.exceptions import UpstreamFailure
from eventphoto.core.structured_logging import build_log_context

logger = logging.getLogger(__name__)


class ComputeTrigger(Protocol):
    def submit_face_matching(self, event_id: UUID, task_id: UUID) -> None:
        ...


class LoggingComputeTrigger:
    """Development backend: records the submission and does nothing else."""

    def submit_face_matching(self, event_id: UUID, task_id: UUID) -> None:
        logger.info(
            "Face matching submitted (log backend)",
            extra=build_log_context(event_id=event_id, task_id=task_id),
        )


def get_lambda_client() -> BaseClient:
    return boto3.client(
        "lambda",
        region_name=settings.S3_REGION or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        config=Config(retries={"mode": "standard", "max_attempts": settings.AWS_MAX_ATTEMPTS}),
    )


class LambdaComputeTrigger:
    """Asynchronous Lambda invocation with payload {"eventId", "taskId"}."""

    def __init__(self, client: BaseClient | None = None, function_name: str | None = None):
        self.client = client or get_lambda_client()
        self.function_name = function_name or settings.FACE_MATCHING_LAMBDA_NAME

    def submit_face_matching(self, event_id: UUID, task_id: UUID) -> None:
        payload = json.dumps({"eventId": str(event_id), "taskId": str(task_id)})
        try:
            response = self.client.invoke(
                FunctionName=self.function_name,
                InvocationType="Event",
                Payload=payload.encode("utf-8"),
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamFailure(f"Face matching submission failed: {e}") from e

        status = response.get("StatusCode")
        if status != 202:
            raise UpstreamFailure(f"Face matching submission rejected (status {status})")
        logger.info(
            "Face matching submitted",
            extra=build_log_context(event_id=event_id, task_id=task_id),
        )


def get_compute_trigger() -> ComputeTrigger:
    backend = settings.COMPUTE_BACKEND
    if backend == "lambda":
        return LambdaComputeTrigger()
    if backend == "log":
        return LoggingComputeTrigger()
    raise ValueError(f"Unknown COMPUTE_BACKEND: {backend}")

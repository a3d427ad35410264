"""CloudWatch Logs helpers."""

from typing import Any

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import StepOutcome
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_log_group


def ensure_log_group(session: Any, log_group_name: str) -> StepOutcome:
    """Ensure a CloudWatch log group exists."""
    if probe_log_group(session, log_group_name).exists:
        return StepOutcome.REUSED

    logs = session.client("logs")
    try:
        logs.create_log_group(logGroupName=log_group_name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to create log group {log_group_name}: {exc}") from exc
    return StepOutcome.CREATED

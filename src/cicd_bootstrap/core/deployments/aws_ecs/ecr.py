"""ECR helpers for the CI/CD stack."""

from typing import Any, cast

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import StepOutcome
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_repository


def ensure_repository(session: Any, name: str) -> tuple[str, StepOutcome]:
    """Ensure an ECR repository exists and return its URI."""
    ecr = session.client("ecr")
    outcome = StepOutcome.REUSED
    if not probe_repository(session, name).exists:
        try:
            ecr.create_repository(
                repositoryName=name,
                imageScanningConfiguration={"scanOnPush": True},
            )
        except ClientError as exc:
            raise RuntimeError(f"Failed to create ECR repo {name}: {exc}") from exc
        outcome = StepOutcome.CREATED

    # Re-read so the URI is the one AWS holds even if someone else created it.
    try:
        response = ecr.describe_repositories(repositoryNames=[name])
    except ClientError as exc:
        raise RuntimeError(f"Failed to read ECR repo {name}: {exc}") from exc
    return cast(str, response["repositories"][0]["repositoryUri"]), outcome

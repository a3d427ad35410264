"""AWS session helpers."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import StackConfig


class CredentialsCheckError(RuntimeError):
    """The caller identity could not be read, so no resource was touched."""

    def __init__(self, profile: str | None, region: str, cause: Exception) -> None:
        self.profile = profile
        self.region = region
        source = f"profile {profile}" if profile else "the default credential chain"
        super().__init__(
            f"AWS credentials are not configured for {source} in {region}. "
            f"Run 'aws configure' first: {cause}"
        )


def create_session(config: StackConfig) -> boto3.session.Session:
    """Create a boto3 session for the stack's profile and region."""
    if config.aws_profile:
        return boto3.session.Session(
            profile_name=config.aws_profile,
            region_name=config.aws_region,
        )

    return boto3.session.Session(region_name=config.aws_region)


def get_identity(session: boto3.session.Session) -> dict[str, str]:
    """Fetch the caller identity, failing fast when credentials are unusable.

    This is the only call made before the first resource is probed, so a
    failure here guarantees the account was left untouched.
    """
    client = session.client("sts")
    try:
        response = client.get_caller_identity()
    except (BotoCoreError, ClientError) as exc:
        raise CredentialsCheckError(
            getattr(session, "profile_name", None),
            getattr(session, "region_name", None) or "an unset region",
            exc,
        ) from exc

    return {
        "Account": str(response.get("Account", "")),
        "Arn": str(response.get("Arn", "")),
        "UserId": str(response.get("UserId", "")),
    }

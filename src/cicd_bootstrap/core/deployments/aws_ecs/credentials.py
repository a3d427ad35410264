"""Access key issuing for the CI user."""

import logging
from typing import Any

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import AccessKeyResult

logger = logging.getLogger(__name__)


def issue_access_key(session: Any, user_name: str) -> AccessKeyResult:
    """Create a new access key pair for the user.

    IAM allows two keys per user. When both slots are taken the call is
    rejected with ``LimitExceeded`` and placeholders are returned instead, so
    the operator can reuse or rotate an existing key by hand. The secret is
    returned to the caller only; nothing is written to disk.
    """
    iam = session.client("iam")
    try:
        response = iam.create_access_key(UserName=user_name)
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code")
        if code == "LimitExceeded":
            logger.warning(f"User {user_name} already has the maximum number of access keys")
            return AccessKeyResult.placeholder()
        raise RuntimeError(f"Failed to create access key for {user_name}: {exc}") from exc

    access_key = response["AccessKey"]
    return AccessKeyResult(
        access_key_id=str(access_key["AccessKeyId"]),
        secret_access_key=str(access_key["SecretAccessKey"]),
    )

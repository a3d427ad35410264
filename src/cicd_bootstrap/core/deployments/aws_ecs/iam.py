"""IAM helpers for the task execution role and the CI user."""

import json
from typing import Any, cast

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import StepOutcome
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_execution_role, probe_user

EXECUTION_ROLE_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
CI_USER_POLICY_ARNS = (
    "arn:aws:iam::aws:policy/AmazonECS_FullAccess",
    "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryFullAccess",
    "arn:aws:iam::aws:policy/AmazonEC2ReadOnlyAccess",
)


def ensure_execution_role(session: Any, role_name: str) -> StepOutcome:
    """Create the task execution role if it does not exist."""
    if probe_execution_role(session, role_name).exists:
        return StepOutcome.REUSED

    iam = session.client("iam")
    try:
        iam.create_role(
            RoleName=role_name,
            AssumeRolePolicyDocument=json.dumps(_ecs_trust_policy()),
        )
    except ClientError as exc:
        raise RuntimeError(f"Failed to create role {role_name}: {exc}") from exc
    return StepOutcome.CREATED


def ensure_role_policy(session: Any, role_name: str, policy_arn: str) -> StepOutcome:
    """Attach a managed policy to a role if it is missing."""
    iam = session.client("iam")
    try:
        response = iam.list_attached_role_policies(RoleName=role_name)
        attached = {policy["PolicyArn"] for policy in response.get("AttachedPolicies", [])}
        if policy_arn in attached:
            return StepOutcome.REUSED
        iam.attach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
    except ClientError as exc:
        raise RuntimeError(f"Failed to attach {policy_arn} to {role_name}: {exc}") from exc
    return StepOutcome.ATTACHED


def get_role_arn(session: Any, role_name: str) -> str:
    """Return the ARN of an existing role."""
    iam = session.client("iam")
    try:
        response = iam.get_role(RoleName=role_name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to read role {role_name}: {exc}") from exc
    return cast(str, response["Role"]["Arn"])


def ensure_ci_user(session: Any, user_name: str) -> StepOutcome:
    """Create the CI user with its managed policies if it does not exist.

    An existing user is reused as-is; its policy set is not re-checked.
    """
    if probe_user(session, user_name).exists:
        return StepOutcome.REUSED

    iam = session.client("iam")
    try:
        iam.create_user(UserName=user_name)
        for policy_arn in CI_USER_POLICY_ARNS:
            iam.attach_user_policy(UserName=user_name, PolicyArn=policy_arn)
    except ClientError as exc:
        raise RuntimeError(f"Failed to create IAM user {user_name}: {exc}") from exc
    return StepOutcome.CREATED


def _ecs_trust_policy() -> dict[str, Any]:
    """Return the ECS task trust policy."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }
        ],
    }

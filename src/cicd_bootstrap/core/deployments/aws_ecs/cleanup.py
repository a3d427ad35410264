"""Clean-up helpers for the CI/CD stack.

Teardown is best effort. Every call is wrapped on its own, a failure is
logged and recorded, and the next step runs regardless. A resource that is
already gone shows up as a failed step just like a genuine error, and so
does a transport or credential error raised by botocore itself.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cicd_bootstrap.core.deployments.aws_ecs.iam import (
    CI_USER_POLICY_ARNS,
    EXECUTION_ROLE_POLICY_ARN,
)
from cicd_bootstrap.core.deployments.aws_ecs.models import StackConfig, StepOutcome, StepResult
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_security_group

logger = logging.getLogger(__name__)


class _Teardown:
    """Ordered record of teardown steps."""

    def __init__(self, reporter: Callable[[str], None]) -> None:
        self.reporter = reporter
        self.results: list[StepResult] = []

    @contextmanager
    def step(self, name: str, done: StepOutcome = StepOutcome.DELETED) -> Iterator[None]:
        """Run one teardown call, recording ``done`` or FAILED."""
        self.reporter(name)
        try:
            yield
        except (BotoCoreError, ClientError) as exc:
            logger.warning(f"{name} failed (may not exist): {exc}")
            self.results.append(StepResult(name, StepOutcome.FAILED, str(exc)))
            return
        self.results.append(StepResult(name, done))

    def skip(self, name: str, detail: str) -> None:
        """Record a step that had nothing to do."""
        self.reporter(f"{name}: {detail}")
        self.results.append(StepResult(name, StepOutcome.SKIPPED, detail))


def cleanup_resources(
    session: Any,
    config: StackConfig,
    reporter: Callable[[str], None],
) -> list[StepResult]:
    """Delete the stack in reverse dependency order and return every step outcome."""
    teardown = _Teardown(reporter)
    ecs = session.client("ecs")
    ecr = session.client("ecr")
    logs = session.client("logs")
    iam = session.client("iam")
    ec2 = session.client("ec2")

    with teardown.step(f"Scaling ECS service {config.service_name} to zero", StepOutcome.UPDATED):
        ecs.update_service(
            cluster=config.cluster_name,
            service=config.service_name,
            desiredCount=0,
        )

    with teardown.step(f"Deleting ECS service {config.service_name}"):
        ecs.delete_service(cluster=config.cluster_name, service=config.service_name, force=True)

    with teardown.step(f"Deleting ECS cluster {config.cluster_name}"):
        ecs.delete_cluster(cluster=config.cluster_name)

    _deregister_task_definitions(teardown, ecs, config.task_family)

    with teardown.step(f"Deleting ECR repository {config.repository_name}"):
        ecr.delete_repository(repositoryName=config.repository_name, force=True)

    with teardown.step(f"Deleting log group {config.log_group_name}"):
        logs.delete_log_group(logGroupName=config.log_group_name)

    with teardown.step(
        f"Detaching execution policy from {config.role_name}", StepOutcome.DETACHED
    ):
        iam.detach_role_policy(RoleName=config.role_name, PolicyArn=EXECUTION_ROLE_POLICY_ARN)

    with teardown.step(f"Deleting IAM role {config.role_name}"):
        iam.delete_role(RoleName=config.role_name)

    _delete_security_group(teardown, session, ec2, config.security_group_name)
    _delete_ci_user(teardown, iam, config.ci_user_name)

    failed = sum(1 for item in teardown.results if item.outcome is StepOutcome.FAILED)
    reporter(f"Clean up finished: {len(teardown.results)} steps, {failed} failed")
    return teardown.results


def _deregister_task_definitions(teardown: _Teardown, ecs: Any, family: str) -> None:
    """Deregister every revision of the task family."""
    arns: list[str] = []
    with teardown.step(f"Listing task definitions for {family}", StepOutcome.DISCOVERED):
        paginator = ecs.get_paginator("list_task_definitions")
        for page in paginator.paginate(familyPrefix=family):
            for arn in page.get("taskDefinitionArns", []):
                if _family(arn) == family:
                    arns.append(arn)

    if not arns:
        teardown.skip(f"Deregistering task definitions for {family}", "none found")
        return

    for arn in arns:
        with teardown.step(f"Deregistering task definition {arn}"):
            ecs.deregister_task_definition(taskDefinition=arn)


def _family(task_definition_arn: str) -> str:
    """Return the family from ``arn:...:task-definition/<family>:<revision>``."""
    return task_definition_arn.rsplit("/", 1)[-1].rsplit(":", 1)[0]


def _delete_security_group(teardown: _Teardown, session: Any, ec2: Any, group_name: str) -> None:
    """Delete the named security group if it can be found."""
    probe = probe_security_group(session, group_name)
    if not probe.exists:
        teardown.skip(f"Deleting security group {group_name}", "not found")
        return

    with teardown.step(f"Deleting security group {group_name} ({probe.identifier})"):
        ec2.delete_security_group(GroupId=probe.identifier)


def _delete_ci_user(teardown: _Teardown, iam: Any, user_name: str) -> None:
    """Delete the CI user after removing its keys and policies."""
    key_ids: list[str] = []
    with teardown.step(f"Listing access keys for {user_name}", StepOutcome.DISCOVERED):
        response = iam.list_access_keys(UserName=user_name)
        key_ids = [key["AccessKeyId"] for key in response.get("AccessKeyMetadata", [])]

    for key_id in key_ids:
        with teardown.step(f"Deleting access key {key_id}"):
            iam.delete_access_key(UserName=user_name, AccessKeyId=key_id)

    for policy_arn in CI_USER_POLICY_ARNS:
        policy_name = policy_arn.rsplit("/", 1)[-1]
        with teardown.step(f"Detaching {policy_name} from {user_name}", StepOutcome.DETACHED):
            iam.detach_user_policy(UserName=user_name, PolicyArn=policy_arn)

    with teardown.step(f"Deleting IAM user {user_name}"):
        iam.delete_user(UserName=user_name)

"""Provisioning entrypoint for the CI/CD stack."""

import logging
from collections.abc import Callable
from typing import Any

from cicd_bootstrap.core.deployments.aws_ecs.credentials import issue_access_key
from cicd_bootstrap.core.deployments.aws_ecs.ecr import ensure_repository
from cicd_bootstrap.core.deployments.aws_ecs.ecs_tasks import (
    ensure_cluster,
    ensure_service,
    register_task_definition,
)
from cicd_bootstrap.core.deployments.aws_ecs.iam import (
    EXECUTION_ROLE_POLICY_ARN,
    ensure_ci_user,
    ensure_execution_role,
    ensure_role_policy,
    get_role_arn,
)
from cicd_bootstrap.core.deployments.aws_ecs.logs import ensure_log_group
from cicd_bootstrap.core.deployments.aws_ecs.models import (
    ProvisionResult,
    StackConfig,
    StepOutcome,
)
from cicd_bootstrap.core.deployments.aws_ecs.network import discover_default_network
from cicd_bootstrap.core.deployments.aws_ecs.security_groups import ensure_security_group
from cicd_bootstrap.core.deployments.aws_ecs.session import get_identity

logger = logging.getLogger(__name__)

STEP_REPOSITORY = "ECR repository"
STEP_EXECUTION_ROLE = "Execution role"
STEP_ROLE_POLICY = "Execution role policy"
STEP_CLUSTER = "ECS cluster"
STEP_NETWORK = "Default VPC"
STEP_SECURITY_GROUP = "Security group"
STEP_LOG_GROUP = "Log group"
STEP_TASK_DEFINITION = "Task definition"
STEP_SERVICE = "ECS service"
STEP_CI_USER = "CI user"
STEP_ACCESS_KEY = "Access key"


def provision_stack(
    session: Any,
    config: StackConfig,
    reporter: Callable[[str], None],
) -> ProvisionResult:
    """Create every missing stack resource in dependency order.

    Each step consumes identifiers produced by the ones before it, so the
    first failure raises and stops the run. Nothing is rolled back; a re-run
    skips whatever already exists.
    """
    result = ProvisionResult()

    reporter("Checking AWS credentials")
    identity = get_identity(session)
    reporter(f"Using AWS account {identity['Account']} ({identity['Arn']})")

    reporter(f"Ensuring ECR repository {config.repository_name}")
    uri, outcome = ensure_repository(session, config.repository_name)
    result.repository_uri = uri
    _record(result, reporter, STEP_REPOSITORY, outcome, uri)

    reporter(f"Ensuring task execution role {config.role_name}")
    outcome = ensure_execution_role(session, config.role_name)
    _record(result, reporter, STEP_EXECUTION_ROLE, outcome, config.role_name)
    outcome = ensure_role_policy(session, config.role_name, EXECUTION_ROLE_POLICY_ARN)
    _record(result, reporter, STEP_ROLE_POLICY, outcome, EXECUTION_ROLE_POLICY_ARN)
    role_arn = get_role_arn(session, config.role_name)
    result.execution_role_arn = role_arn

    reporter(f"Ensuring ECS cluster {config.cluster_name}")
    cluster_arn, outcome = ensure_cluster(session, config.cluster_name)
    result.cluster_arn = cluster_arn
    _record(result, reporter, STEP_CLUSTER, outcome, cluster_arn)

    reporter("Discovering default VPC and subnets")
    network = discover_default_network(session)
    result.network = network
    _record(
        result,
        reporter,
        STEP_NETWORK,
        StepOutcome.DISCOVERED,
        f"{network.vpc_id} ({', '.join(network.subnet_ids)})",
    )

    reporter(f"Ensuring security group {config.security_group_name}")
    group_id, outcome = ensure_security_group(
        session,
        network.vpc_id,
        config.security_group_name,
        config.security_group_description,
        config.container_port,
    )
    result.security_group_id = group_id
    _record(result, reporter, STEP_SECURITY_GROUP, outcome, group_id)

    reporter(f"Ensuring CloudWatch log group {config.log_group_name}")
    outcome = ensure_log_group(session, config.log_group_name)
    _record(result, reporter, STEP_LOG_GROUP, outcome, config.log_group_name)

    reporter(f"Registering task definition {config.task_family}")
    task_definition_arn = register_task_definition(session, config, role_arn)
    result.task_definition_arn = task_definition_arn
    _record(result, reporter, STEP_TASK_DEFINITION, StepOutcome.REGISTERED, task_definition_arn)

    reporter(f"Ensuring ECS service {config.service_name}")
    service_arn, outcome = ensure_service(session, config, network, group_id)
    result.service_arn = service_arn
    _record(result, reporter, STEP_SERVICE, outcome, service_arn or config.service_name)

    reporter(f"Ensuring CI user {config.ci_user_name}")
    outcome = ensure_ci_user(session, config.ci_user_name)
    _record(result, reporter, STEP_CI_USER, outcome, config.ci_user_name)

    reporter("Creating access key for the CI user")
    access_key = issue_access_key(session, config.ci_user_name)
    result.access_key = access_key
    if access_key.quota_reached:
        reporter("Could not create a new access key (2 keys already exist); reuse an existing one")
        _record(result, reporter, STEP_ACCESS_KEY, StepOutcome.QUOTA_REACHED)
    else:
        _record(result, reporter, STEP_ACCESS_KEY, StepOutcome.ISSUED, access_key.access_key_id)

    return result


def _record(
    result: ProvisionResult,
    reporter: Callable[[str], None],
    step: str,
    outcome: StepOutcome,
    detail: str = "",
) -> None:
    """Record a step outcome and report it."""
    result.record(step, outcome, detail)
    logger.debug(f"{step}: {outcome} {detail}".rstrip())
    reporter(f"{step} {outcome}")

"""Deployment status checks for the CI/CD stack."""

from typing import Any

from cicd_bootstrap.core.deployments.aws_ecs.models import ProbeResult, StackConfig
from cicd_bootstrap.core.deployments.aws_ecs.probe import (
    probe_cluster,
    probe_execution_role,
    probe_log_group,
    probe_repository,
    probe_security_group,
    probe_service,
    probe_user,
)

STATUS_KEY_REPOSITORY = "ECR repository"
STATUS_KEY_EXECUTION_ROLE = "Execution role"
STATUS_KEY_CLUSTER = "ECS cluster"
STATUS_KEY_SECURITY_GROUP = "Security group"
STATUS_KEY_LOG_GROUP = "Log group"
STATUS_KEY_SERVICE = "ECS service"
STATUS_KEY_CI_USER = "CI user"


def check_deployment(session: Any, config: StackConfig) -> dict[str, ProbeResult]:
    """Probe every named resource, in provisioning order."""
    return {
        STATUS_KEY_REPOSITORY: probe_repository(session, config.repository_name),
        STATUS_KEY_EXECUTION_ROLE: probe_execution_role(session, config.role_name),
        STATUS_KEY_CLUSTER: probe_cluster(session, config.cluster_name),
        STATUS_KEY_SECURITY_GROUP: probe_security_group(session, config.security_group_name),
        STATUS_KEY_LOG_GROUP: probe_log_group(session, config.log_group_name),
        STATUS_KEY_SERVICE: probe_service(session, config.cluster_name, config.service_name),
        STATUS_KEY_CI_USER: probe_user(session, config.ci_user_name),
    }


def status_targets(config: StackConfig) -> dict[str, str]:
    """Return the resource name shown next to each status key."""
    return {
        STATUS_KEY_REPOSITORY: config.repository_name,
        STATUS_KEY_EXECUTION_ROLE: config.role_name,
        STATUS_KEY_CLUSTER: config.cluster_name,
        STATUS_KEY_SECURITY_GROUP: config.security_group_name,
        STATUS_KEY_LOG_GROUP: config.log_group_name,
        STATUS_KEY_SERVICE: config.service_name,
        STATUS_KEY_CI_USER: config.ci_user_name,
    }

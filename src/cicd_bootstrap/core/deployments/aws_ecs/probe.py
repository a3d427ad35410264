"""Read-only existence checks for stack resources.

Every probe issues a single describe/list call and normalises the answer to a
:class:`ResourceState`. A failed call, whether rejected by AWS or lost in
transport, is treated exactly like a missing resource; there are no retries
beyond botocore's own.
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import ABSENT, ProbeResult, ResourceState

logger = logging.getLogger(__name__)


def probe_repository(session: Any, name: str) -> ProbeResult:
    """Check whether an ECR repository exists."""
    ecr = session.client("ecr")
    try:
        response = ecr.describe_repositories(repositoryNames=[name])
    except (BotoCoreError, ClientError) as exc:
        return _absent("ECR repository", name, exc)

    repositories = response.get("repositories", [])
    if not repositories:
        return ABSENT
    return ProbeResult(ResourceState.ACTIVE, repositories[0].get("repositoryUri"))


def probe_execution_role(session: Any, role_name: str) -> ProbeResult:
    """Check whether an IAM role exists."""
    iam = session.client("iam")
    try:
        response = iam.get_role(RoleName=role_name)
    except (BotoCoreError, ClientError) as exc:
        return _absent("IAM role", role_name, exc)
    return ProbeResult(ResourceState.ACTIVE, response["Role"]["Arn"])


def probe_cluster(session: Any, cluster_name: str) -> ProbeResult:
    """Check an ECS cluster and classify its status."""
    ecs = session.client("ecs")
    try:
        response = ecs.describe_clusters(clusters=[cluster_name])
    except (BotoCoreError, ClientError) as exc:
        return _absent("ECS cluster", cluster_name, exc)

    clusters = response.get("clusters", [])
    if not clusters:
        return ABSENT

    cluster = clusters[0]
    status = str(cluster.get("status", ""))
    if status == "ACTIVE":
        state = ResourceState.ACTIVE
    elif status == "INACTIVE":
        state = ResourceState.INACTIVE
    else:
        state = ResourceState.OTHER
    return ProbeResult(state, cluster.get("clusterArn"), status)


def probe_security_group(session: Any, group_name: str) -> ProbeResult:
    """Look up a security group by name."""
    ec2 = session.client("ec2")
    try:
        response = ec2.describe_security_groups(
            Filters=[{"Name": "group-name", "Values": [group_name]}]
        )
    except (BotoCoreError, ClientError) as exc:
        return _absent("security group", group_name, exc)

    groups = response.get("SecurityGroups", [])
    if not groups or not groups[0].get("GroupId"):
        return ABSENT
    return ProbeResult(ResourceState.ACTIVE, groups[0]["GroupId"])


def probe_log_group(session: Any, log_group_name: str) -> ProbeResult:
    """Check a CloudWatch log group by exact name.

    The API only supports prefix search, so ``/ecs/app`` would also return
    ``/ecs/app-worker``. Only an exact name match counts as present.
    """
    logs = session.client("logs")
    paginator = logs.get_paginator("describe_log_groups")
    try:
        for page in paginator.paginate(logGroupNamePrefix=log_group_name):
            for group in page.get("logGroups", []):
                if group.get("logGroupName") == log_group_name:
                    return ProbeResult(ResourceState.ACTIVE, group.get("arn"))
    except (BotoCoreError, ClientError) as exc:
        return _absent("log group", log_group_name, exc)
    return ABSENT


def probe_service(session: Any, cluster_name: str, service_name: str) -> ProbeResult:
    """Check an ECS service and classify its status."""
    ecs = session.client("ecs")
    try:
        response = ecs.describe_services(cluster=cluster_name, services=[service_name])
    except (BotoCoreError, ClientError) as exc:
        return _absent("ECS service", service_name, exc)

    services = response.get("services", [])
    if not services:
        return ABSENT

    service = services[0]
    status = str(service.get("status", ""))
    if status == "ACTIVE":
        state = ResourceState.ACTIVE
    elif status in {"DRAINING", "INACTIVE"}:
        state = ResourceState.INACTIVE
    else:
        state = ResourceState.OTHER
    return ProbeResult(state, service.get("serviceArn"), status)


def probe_user(session: Any, user_name: str) -> ProbeResult:
    """Check whether an IAM user exists."""
    iam = session.client("iam")
    try:
        response = iam.get_user(UserName=user_name)
    except (BotoCoreError, ClientError) as exc:
        return _absent("IAM user", user_name, exc)
    return ProbeResult(ResourceState.ACTIVE, response["User"]["Arn"])


def _absent(kind: str, name: str, exc: BotoCoreError | ClientError) -> ProbeResult:
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
    else:
        code = type(exc).__name__
    logger.debug(f"Treating {kind} {name} as absent ({code})")
    return ABSENT

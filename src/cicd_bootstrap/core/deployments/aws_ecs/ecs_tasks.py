"""ECS cluster, task definition and service helpers."""

from typing import Any, cast

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import (
    NetworkSelection,
    ResourceState,
    StackConfig,
    StepOutcome,
)
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_cluster, probe_service


def ensure_cluster(session: Any, cluster_name: str) -> tuple[str, StepOutcome]:
    """Ensure an ACTIVE ECS cluster exists and return its ARN.

    An INACTIVE cluster cannot be reactivated, so it is deleted and created
    again under the same name. A delete answered with "not found" still
    counts, since the goal is only to clear the name.
    """
    probe = probe_cluster(session, cluster_name)
    ecs = session.client("ecs")

    match probe.state:
        case ResourceState.ACTIVE:
            return cast(str, probe.identifier), StepOutcome.REUSED
        case ResourceState.INACTIVE:
            try:
                ecs.delete_cluster(cluster=cluster_name)
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code")
                if code != "ClusterNotFoundException":
                    raise RuntimeError(
                        f"Failed to delete inactive cluster {cluster_name}: {exc}"
                    ) from exc
            outcome = StepOutcome.RECREATED
        case ResourceState.ABSENT:
            outcome = StepOutcome.CREATED
        case ResourceState.OTHER:
            raise RuntimeError(
                f"ECS cluster {cluster_name} is in unexpected status {probe.status} "
                "and cannot be used."
            )

    try:
        response = ecs.create_cluster(clusterName=cluster_name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to create cluster {cluster_name}: {exc}") from exc
    return cast(str, response["cluster"]["clusterArn"]), outcome


def register_task_definition(session: Any, config: StackConfig, execution_role_arn: str) -> str:
    """Register a new revision of the task family and return its ARN."""
    if not execution_role_arn:
        raise RuntimeError("Execution role must be created before registering the task definition.")

    ecs = session.client("ecs")
    container_definitions = [
        {
            "name": config.container_name,
            "image": config.container_image,
            "essential": True,
            "portMappings": [{"containerPort": config.container_port, "protocol": "tcp"}],
            "environment": [{"name": name, "value": value} for name, value in config.environment],
            "logConfiguration": {
                "logDriver": "awslogs",
                "options": {
                    "awslogs-group": config.log_group_name,
                    "awslogs-region": config.aws_region,
                    "awslogs-stream-prefix": config.log_stream_prefix,
                },
            },
        }
    ]

    try:
        response = ecs.register_task_definition(
            family=config.task_family,
            networkMode="awsvpc",
            requiresCompatibilities=["FARGATE"],
            cpu=str(config.task_cpu),
            memory=str(config.task_memory),
            executionRoleArn=execution_role_arn,
            containerDefinitions=container_definitions,
        )
    except ClientError as exc:
        raise RuntimeError(f"Failed to register task definition: {exc}") from exc
    return cast(str, response["taskDefinition"]["taskDefinitionArn"])


def ensure_service(
    session: Any,
    config: StackConfig,
    network: NetworkSelection,
    security_group_id: str,
) -> tuple[str | None, StepOutcome]:
    """Ensure the ECS service exists.

    An ACTIVE service is reused without touching its desired count or task
    definition. A new service references the family name so it always
    resolves to the latest revision.
    """
    probe = probe_service(session, config.cluster_name, config.service_name)
    if probe.state is ResourceState.ACTIVE:
        return probe.identifier, StepOutcome.REUSED

    if not network.subnet_ids or not security_group_id:
        raise RuntimeError("Network configuration must be resolved before creating the service.")

    ecs = session.client("ecs")
    try:
        response = ecs.create_service(
            cluster=config.cluster_name,
            serviceName=config.service_name,
            taskDefinition=config.task_family,
            desiredCount=config.desired_count,
            launchType="FARGATE",
            networkConfiguration={
                "awsvpcConfiguration": {
                    "subnets": network.subnet_ids,
                    "securityGroups": [security_group_id],
                    "assignPublicIp": "ENABLED",
                }
            },
        )
    except ClientError as exc:
        raise RuntimeError(f"Failed to create service {config.service_name}: {exc}") from exc
    return cast(str, response["service"]["serviceArn"]), StepOutcome.CREATED

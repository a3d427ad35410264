"""Security group management for ECS."""

from typing import Any

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import StepOutcome
from cicd_bootstrap.core.deployments.aws_ecs.probe import probe_security_group


def ensure_security_group(
    session: Any,
    vpc_id: str,
    name: str,
    description: str,
    port: int,
) -> tuple[str, StepOutcome]:
    """Return the id of the named security group, creating it if needed.

    A new group opens ``port`` to the world. Rules on an existing group are
    left untouched.
    """
    probe = probe_security_group(session, name)
    if probe.exists and probe.identifier:
        return probe.identifier, StepOutcome.REUSED

    ec2 = session.client("ec2")
    try:
        response = ec2.create_security_group(
            VpcId=vpc_id,
            GroupName=name,
            Description=description,
        )
        group_id = str(response["GroupId"])
        ec2.create_tags(Resources=[group_id], Tags=[{"Key": "Name", "Value": name}])
        ec2.authorize_security_group_ingress(
            GroupId=group_id,
            IpPermissions=[
                {
                    "IpProtocol": "tcp",
                    "FromPort": port,
                    "ToPort": port,
                    "IpRanges": [{"CidrIp": "0.0.0.0/0"}],
                }
            ],
        )
    except ClientError as exc:
        raise RuntimeError(f"Failed to create security group {name}: {exc}") from exc

    return group_id, StepOutcome.CREATED

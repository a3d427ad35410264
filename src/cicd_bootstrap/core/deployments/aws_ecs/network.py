"""Default VPC discovery for ECS."""

from typing import Any

from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs.models import NetworkSelection


def discover_default_network(session: Any) -> NetworkSelection:
    """Return the default VPC and all of its subnets.

    No VPC is ever created here; a missing default VPC aborts provisioning.
    """
    ec2 = session.client("ec2")
    try:
        response = ec2.describe_vpcs(Filters=[{"Name": "is-default", "Values": ["true"]}])
    except ClientError as exc:
        raise RuntimeError(f"Failed to look up the default VPC: {exc}") from exc

    vpcs = response.get("Vpcs", [])
    if not vpcs:
        raise RuntimeError("No default VPC found in this region.")
    vpc_id = str(vpcs[0]["VpcId"])

    try:
        response = ec2.describe_subnets(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
    except ClientError as exc:
        raise RuntimeError(f"Failed to list subnets for {vpc_id}: {exc}") from exc

    subnet_ids = [str(subnet["SubnetId"]) for subnet in response.get("Subnets", [])]
    if not subnet_ids:
        raise RuntimeError(f"Default VPC {vpc_id} has no subnets.")
    return NetworkSelection(vpc_id=vpc_id, subnet_ids=subnet_ids)

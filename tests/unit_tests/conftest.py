"""Shared fixtures: an in-memory stand-in for the AWS control plane."""

from collections.abc import Callable
from typing import Any

import pytest
from botocore.exceptions import ClientError

from cicd_bootstrap.core.deployments.aws_ecs import StackConfig

ACCOUNT_ID = "123456789012"
REGION = "us-west-2"
LOG_GROUP_ARN_PREFIX = f"arn:aws:logs:{REGION}:{ACCOUNT_ID}:log-group:"


def client_error(code: str, operation: str = "Operation") -> ClientError:
    """Build a ClientError carrying an AWS error code."""
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class _FakePaginator:
    def __init__(self, method: Callable[..., dict[str, Any]]) -> None:
        self._method = method

    def paginate(self, **kwargs: Any) -> list[dict[str, Any]]:
        return [self._method(**kwargs)]


class _FakeClient:
    """Routes ``client.operation(**kwargs)`` to ``FakeAws.<service>_<operation>``."""

    def __init__(self, aws: "FakeAws", service: str) -> None:
        self._aws = aws
        self._service = service

    def get_paginator(self, operation: str) -> _FakePaginator:
        return _FakePaginator(getattr(self, operation))

    def __getattr__(self, operation: str) -> Callable[..., dict[str, Any]]:
        handler = getattr(self._aws, f"{self._service}_{operation}")

        def call(**kwargs: Any) -> dict[str, Any]:
            self._aws.calls.append((self._service, operation, kwargs))
            failure = self._aws.failures.get((self._service, operation))
            if isinstance(failure, Exception):
                raise failure
            if failure:
                raise client_error(failure, operation)
            return handler(**kwargs)

        return call


class FakeAws:
    """Stateful fake of the handful of AWS APIs the stack touches.

    It doubles as a boto3 session: ``client(name)`` returns a fake client.
    Every call is recorded in ``calls``. ``failures`` forces an error for a
    given ``(service, operation)``: a string becomes a ``ClientError`` with
    that code, an exception instance is raised as is.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.failures: dict[tuple[str, str], str | Exception] = {}

        self.repositories: dict[str, str] = {}
        self.roles: dict[str, dict[str, Any]] = {}
        self.clusters: dict[str, str] = {}
        self.default_vpc: str | None = "vpc-default"
        self.subnets = ["subnet-a", "subnet-b", "subnet-c"]
        self.security_groups: dict[str, str] = {}
        self.ingress: dict[str, list[dict[str, Any]]] = {}
        self.log_groups: list[str] = []
        self.task_definitions: dict[str, dict[str, Any]] = {}
        self.services: dict[str, dict[str, Any]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self._counter = 0

    def client(self, service: str) -> _FakeClient:
        return _FakeClient(self, service)

    def called(self, service: str, operation: str) -> list[dict[str, Any]]:
        """Return kwargs of every recorded call to an operation."""
        return [kw for svc, op, kw in self.calls if (svc, op) == (service, operation)]

    def call_index(self, service: str, operation: str, last: bool = False) -> int:
        """Return the position of the first (or last) call to an operation."""
        positions = [
            index
            for index, (svc, op, _) in enumerate(self.calls)
            if (svc, op) == (service, operation)
        ]
        if not positions:
            raise AssertionError(f"{service}.{operation} was never called")
        return positions[-1] if last else positions[0]

    def _next_id(self) -> int:
        self._counter += 1
        return self._counter

    # STS
    def sts_get_caller_identity(self) -> dict[str, Any]:
        return {
            "Account": ACCOUNT_ID,
            "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user/admin",
            "UserId": "AIDAEXAMPLE",
        }

    # ECR
    def ecr_describe_repositories(self, repositoryNames: list[str]) -> dict[str, Any]:
        name = repositoryNames[0]
        if name not in self.repositories:
            raise client_error("RepositoryNotFoundException", "DescribeRepositories")
        uri = self.repositories[name]
        return {"repositories": [{"repositoryName": name, "repositoryUri": uri}]}

    def ecr_create_repository(self, repositoryName: str, **_: Any) -> dict[str, Any]:
        uri = f"{ACCOUNT_ID}.dkr.ecr.{REGION}.amazonaws.com/{repositoryName}"
        self.repositories[repositoryName] = uri
        return {"repository": {"repositoryName": repositoryName, "repositoryUri": uri}}

    def ecr_delete_repository(self, repositoryName: str, force: bool) -> dict[str, Any]:
        if repositoryName not in self.repositories:
            raise client_error("RepositoryNotFoundException", "DeleteRepository")
        del self.repositories[repositoryName]
        return {}

    # IAM roles
    def iam_get_role(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "GetRole")
        return {"Role": {"RoleName": RoleName, "Arn": self.roles[RoleName]["arn"]}}

    def iam_create_role(self, RoleName: str, AssumeRolePolicyDocument: str) -> dict[str, Any]:
        arn = f"arn:aws:iam::{ACCOUNT_ID}:role/{RoleName}"
        self.roles[RoleName] = {
            "arn": arn,
            "trust": AssumeRolePolicyDocument,
            "policies": set(),
        }
        return {"Role": {"RoleName": RoleName, "Arn": arn}}

    def iam_list_attached_role_policies(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "ListAttachedRolePolicies")
        policies = self.roles[RoleName]["policies"]
        return {"AttachedPolicies": [{"PolicyArn": arn} for arn in sorted(policies)]}

    def iam_attach_role_policy(self, RoleName: str, PolicyArn: str) -> dict[str, Any]:
        self.roles[RoleName]["policies"].add(PolicyArn)
        return {}

    def iam_detach_role_policy(self, RoleName: str, PolicyArn: str) -> dict[str, Any]:
        role = self.roles.get(RoleName)
        if role is None or PolicyArn not in role["policies"]:
            raise client_error("NoSuchEntity", "DetachRolePolicy")
        role["policies"].discard(PolicyArn)
        return {}

    def iam_delete_role(self, RoleName: str) -> dict[str, Any]:
        role = self.roles.get(RoleName)
        if role is None:
            raise client_error("NoSuchEntity", "DeleteRole")
        if role["policies"]:
            raise client_error("DeleteConflict", "DeleteRole")
        del self.roles[RoleName]
        return {}

    # IAM users
    def iam_get_user(self, UserName: str) -> dict[str, Any]:
        if UserName not in self.users:
            raise client_error("NoSuchEntity", "GetUser")
        arn = f"arn:aws:iam::{ACCOUNT_ID}:user/{UserName}"
        return {"User": {"UserName": UserName, "Arn": arn}}

    def iam_create_user(self, UserName: str) -> dict[str, Any]:
        self.users[UserName] = {"policies": set(), "keys": []}
        return {"User": {"UserName": UserName}}

    def iam_attach_user_policy(self, UserName: str, PolicyArn: str) -> dict[str, Any]:
        self.users[UserName]["policies"].add(PolicyArn)
        return {}

    def iam_detach_user_policy(self, UserName: str, PolicyArn: str) -> dict[str, Any]:
        user = self.users.get(UserName)
        if user is None or PolicyArn not in user["policies"]:
            raise client_error("NoSuchEntity", "DetachUserPolicy")
        user["policies"].discard(PolicyArn)
        return {}

    def iam_list_access_keys(self, UserName: str) -> dict[str, Any]:
        if UserName not in self.users:
            raise client_error("NoSuchEntity", "ListAccessKeys")
        keys = self.users[UserName]["keys"]
        return {"AccessKeyMetadata": [{"AccessKeyId": key_id} for key_id in keys]}

    def iam_create_access_key(self, UserName: str) -> dict[str, Any]:
        user = self.users.get(UserName)
        if user is None:
            raise client_error("NoSuchEntity", "CreateAccessKey")
        if len(user["keys"]) >= 2:
            raise client_error("LimitExceeded", "CreateAccessKey")
        key_id = f"AKIAEXAMPLE{self._next_id():04d}"
        user["keys"].append(key_id)
        return {
            "AccessKey": {
                "UserName": UserName,
                "AccessKeyId": key_id,
                "SecretAccessKey": f"secret-{key_id}",
                "Status": "Active",
            }
        }

    def iam_delete_access_key(self, UserName: str, AccessKeyId: str) -> dict[str, Any]:
        self.users[UserName]["keys"].remove(AccessKeyId)
        return {}

    def iam_delete_user(self, UserName: str) -> dict[str, Any]:
        user = self.users.get(UserName)
        if user is None:
            raise client_error("NoSuchEntity", "DeleteUser")
        if user["keys"] or user["policies"]:
            raise client_error("DeleteConflict", "DeleteUser")
        del self.users[UserName]
        return {}

    # ECS clusters
    def _cluster_arn(self, name: str) -> str:
        return f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:cluster/{name}"

    def ecs_describe_clusters(self, clusters: list[str]) -> dict[str, Any]:
        name = clusters[0]
        if name not in self.clusters:
            failure = {"arn": self._cluster_arn(name), "reason": "MISSING"}
            return {"clusters": [], "failures": [failure]}
        return {
            "clusters": [
                {
                    "clusterArn": self._cluster_arn(name),
                    "clusterName": name,
                    "status": self.clusters[name],
                }
            ],
            "failures": [],
        }

    def ecs_create_cluster(self, clusterName: str) -> dict[str, Any]:
        self.clusters[clusterName] = "ACTIVE"
        return {"cluster": {"clusterArn": self._cluster_arn(clusterName), "status": "ACTIVE"}}

    def ecs_delete_cluster(self, cluster: str) -> dict[str, Any]:
        if self.clusters.get(cluster) != "ACTIVE":
            raise client_error("ClusterNotFoundException", "DeleteCluster")
        self.clusters[cluster] = "INACTIVE"
        return {"cluster": {"clusterArn": self._cluster_arn(cluster), "status": "INACTIVE"}}

    # ECS task definitions
    def ecs_register_task_definition(self, family: str, **kwargs: Any) -> dict[str, Any]:
        revision = 1 + sum(1 for item in self.task_definitions.values() if item["family"] == family)
        arn = f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:task-definition/{family}:{revision}"
        self.task_definitions[arn] = {"family": family, "status": "ACTIVE", **kwargs}
        return {
            "taskDefinition": {"taskDefinitionArn": arn, "family": family, "revision": revision}
        }

    def ecs_list_task_definitions(self, familyPrefix: str) -> dict[str, Any]:
        arns = [
            arn
            for arn, item in self.task_definitions.items()
            if item["family"].startswith(familyPrefix) and item["status"] == "ACTIVE"
        ]
        return {"taskDefinitionArns": arns}

    def ecs_deregister_task_definition(self, taskDefinition: str) -> dict[str, Any]:
        self.task_definitions[taskDefinition]["status"] = "INACTIVE"
        return {"taskDefinition": {"taskDefinitionArn": taskDefinition, "status": "INACTIVE"}}

    # ECS services
    def ecs_describe_services(self, cluster: str, services: list[str]) -> dict[str, Any]:
        name = services[0]
        service = self.services.get(name)
        if service is None:
            return {"services": [], "failures": [{"reason": "MISSING"}]}
        return {
            "services": [
                {"serviceArn": service["arn"], "serviceName": name, "status": service["status"]}
            ],
            "failures": [],
        }

    def ecs_create_service(self, cluster: str, serviceName: str, **kwargs: Any) -> dict[str, Any]:
        if self.clusters.get(cluster) != "ACTIVE":
            raise client_error("ClusterNotFoundException", "CreateService")
        arn = f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:service/{cluster}/{serviceName}"
        self.services[serviceName] = {"arn": arn, "status": "ACTIVE", **kwargs}
        return {"service": {"serviceArn": arn, "status": "ACTIVE"}}

    def ecs_update_service(self, cluster: str, service: str, desiredCount: int) -> dict[str, Any]:
        if self.services.get(service, {}).get("status") != "ACTIVE":
            raise client_error("ServiceNotFoundException", "UpdateService")
        self.services[service]["desiredCount"] = desiredCount
        return {"service": {"serviceArn": self.services[service]["arn"]}}

    def ecs_delete_service(self, cluster: str, service: str, force: bool) -> dict[str, Any]:
        if self.services.get(service, {}).get("status") != "ACTIVE":
            raise client_error("ServiceNotFoundException", "DeleteService")
        self.services[service]["status"] = "DRAINING"
        return {"service": {"serviceArn": self.services[service]["arn"], "status": "DRAINING"}}

    # EC2
    def ec2_describe_vpcs(self, Filters: list[dict[str, Any]]) -> dict[str, Any]:
        if self.default_vpc is None:
            return {"Vpcs": []}
        return {"Vpcs": [{"VpcId": self.default_vpc, "IsDefault": True}]}

    def ec2_describe_subnets(self, Filters: list[dict[str, Any]]) -> dict[str, Any]:
        return {"Subnets": [{"SubnetId": subnet_id} for subnet_id in self.subnets]}

    def ec2_describe_security_groups(self, Filters: list[dict[str, Any]]) -> dict[str, Any]:
        name = Filters[0]["Values"][0]
        if name not in self.security_groups:
            return {"SecurityGroups": []}
        return {"SecurityGroups": [{"GroupId": self.security_groups[name], "GroupName": name}]}

    def ec2_create_security_group(
        self, VpcId: str, GroupName: str, Description: str
    ) -> dict[str, Any]:
        group_id = f"sg-{self._next_id():08d}"
        self.security_groups[GroupName] = group_id
        return {"GroupId": group_id}

    def ec2_create_tags(self, Resources: list[str], Tags: list[dict[str, str]]) -> dict[str, Any]:
        return {}

    def ec2_authorize_security_group_ingress(
        self, GroupId: str, IpPermissions: list[dict[str, Any]]
    ) -> dict[str, Any]:
        self.ingress.setdefault(GroupId, []).extend(IpPermissions)
        return {"Return": True}

    def ec2_delete_security_group(self, GroupId: str) -> dict[str, Any]:
        for name, group_id in list(self.security_groups.items()):
            if group_id == GroupId:
                del self.security_groups[name]
                return {}
        raise client_error("InvalidGroup.NotFound", "DeleteSecurityGroup")

    # CloudWatch Logs
    def logs_describe_log_groups(self, logGroupNamePrefix: str) -> dict[str, Any]:
        return {
            "logGroups": [
                {"logGroupName": name, "arn": f"{LOG_GROUP_ARN_PREFIX}{name}"}
                for name in self.log_groups
                if name.startswith(logGroupNamePrefix)
            ]
        }

    def logs_create_log_group(self, logGroupName: str) -> dict[str, Any]:
        self.log_groups.append(logGroupName)
        return {}

    def logs_delete_log_group(self, logGroupName: str) -> dict[str, Any]:
        if logGroupName not in self.log_groups:
            raise client_error("ResourceNotFoundException", "DeleteLogGroup")
        self.log_groups.remove(logGroupName)
        return {}


@pytest.fixture
def aws() -> FakeAws:
    """Return a fresh fake account with only a default VPC."""
    return FakeAws()


@pytest.fixture
def config() -> StackConfig:
    """Return the default stack configuration."""
    return StackConfig()


@pytest.fixture
def messages() -> list[str]:
    """Collect reporter output."""
    return []

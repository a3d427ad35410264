"""AWS ECS CI/CD stack helpers."""

from cicd_bootstrap.core.deployments.aws_ecs.cleanup import cleanup_resources
from cicd_bootstrap.core.deployments.aws_ecs.credentials import issue_access_key
from cicd_bootstrap.core.deployments.aws_ecs.deploy import provision_stack
from cicd_bootstrap.core.deployments.aws_ecs.models import (
    AccessKeyResult,
    NetworkSelection,
    ProbeResult,
    ProvisionResult,
    ResourceState,
    StackConfig,
    StepOutcome,
    StepResult,
)
from cicd_bootstrap.core.deployments.aws_ecs.session import (
    CredentialsCheckError,
    create_session,
    get_identity,
)
from cicd_bootstrap.core.deployments.aws_ecs.status import check_deployment, status_targets

__all__ = [
    "AccessKeyResult",
    "CredentialsCheckError",
    "NetworkSelection",
    "ProbeResult",
    "ProvisionResult",
    "ResourceState",
    "StackConfig",
    "StepOutcome",
    "StepResult",
    "check_deployment",
    "cleanup_resources",
    "create_session",
    "get_identity",
    "issue_access_key",
    "provision_stack",
    "status_targets",
]

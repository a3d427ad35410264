"""cicd-bootstrap - provision a minimal ECS/Fargate target for CI/CD pipelines."""

from cicd_bootstrap.core.deployments.aws_ecs import (
    StackConfig,
    cleanup_resources,
    provision_stack,
)
from cicd_bootstrap.core.settings import StackSettings, get_settings

__all__ = [
    "StackConfig",
    "StackSettings",
    "cleanup_resources",
    "get_settings",
    "provision_stack",
]

"""Runtime settings for the CI/CD stack."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cicd_bootstrap.config.paths import env_path
from cicd_bootstrap.core.deployments.aws_ecs.models import StackConfig

ENV_FILE_PATH = str(env_path())


class StackSettings(BaseSettings):
    """Resource names for the stack.

    Defaults describe the single stack this tool manages. Any value can be
    overridden with a ``CICD_`` environment variable or the user env file,
    which is how a second stack gets its own names.
    """

    model_config = SettingsConfigDict(
        env_prefix="CICD_",
        env_file=ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    aws_region: str = Field(default="us-west-2", description="AWS region")
    aws_profile: str | None = Field(default=None, description="Named AWS profile")

    repository_name: str = Field(default="my-webapp", description="ECR repository name")
    cluster_name: str = Field(default="webapp-cicd-cluster", description="ECS cluster name")
    service_name: str = Field(default="webapp-cicd-service", description="ECS service name")
    task_family: str = Field(default="webapp-cicd-task", description="Task definition family")
    security_group_name: str = Field(default="webapp-cicd-sg")
    execution_role_name: str | None = Field(
        default=None,
        description="Task execution role (defaults to ecsTaskExecutionRole-<cluster>)",
    )
    ci_user_name: str = Field(default="github-actions-user", description="IAM user for CI")

    container_image: str = Field(default="nginx:latest", description="Placeholder image")
    container_port: int = Field(default=3001, ge=1, le=65535)
    task_cpu: int = 256
    task_memory: int = 512

    def to_stack_config(self, **overrides: str | None) -> StackConfig:
        """Build the immutable stack configuration.

        Args:
            overrides: Non-empty values replace the loaded settings, used for
                CLI options such as ``--region``.

        Returns:
            The stack configuration passed to the reconciler.
        """
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value})
        return StackConfig(**values)


def get_settings() -> StackSettings:
    """Load and return the stack settings."""
    return StackSettings()

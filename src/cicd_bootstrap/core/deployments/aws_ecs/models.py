"""Data models for the ECS CI/CD stack."""

from dataclasses import dataclass, field
from enum import StrEnum

ACCESS_KEY_PLACEHOLDER = "[Use existing or create new access key]"
SECRET_KEY_PLACEHOLDER = "[Use existing or create new secret key]"


@dataclass(frozen=True)
class StackConfig:
    """Names and sizing for the fixed CI/CD stack."""

    aws_region: str = "us-west-2"
    aws_profile: str | None = None
    repository_name: str = "my-webapp"
    cluster_name: str = "webapp-cicd-cluster"
    service_name: str = "webapp-cicd-service"
    task_family: str = "webapp-cicd-task"
    security_group_name: str = "webapp-cicd-sg"
    security_group_description: str = "Webapp CI/CD SG"
    execution_role_name: str | None = None
    ci_user_name: str = "github-actions-user"
    container_name: str = "webapp"
    container_image: str = "nginx:latest"
    container_port: int = 3001
    task_cpu: int = 256
    task_memory: int = 512
    desired_count: int = 1
    environment: tuple[tuple[str, str], ...] = (("ENVIRONMENT", "production"),)
    log_stream_prefix: str = "ecs"

    @property
    def log_group_name(self) -> str:
        """Return the CloudWatch log group used by the task definition."""
        return f"/ecs/{self.task_family}"

    @property
    def role_name(self) -> str:
        """Return the task execution role name."""
        return self.execution_role_name or f"ecsTaskExecutionRole-{self.cluster_name}"


class ResourceState(StrEnum):
    """Normalised state of a probed resource."""

    ABSENT = "absent"
    ACTIVE = "active"
    INACTIVE = "inactive"
    OTHER = "other"


@dataclass(frozen=True)
class ProbeResult:
    """Result of a read-only existence check."""

    state: ResourceState
    identifier: str | None = None
    status: str | None = None

    @property
    def exists(self) -> bool:
        """Return true when the resource was found in any state."""
        return self.state is not ResourceState.ABSENT


ABSENT = ProbeResult(ResourceState.ABSENT)


@dataclass
class NetworkSelection:
    """Default VPC and the subnets tasks are placed in."""

    vpc_id: str
    subnet_ids: list[str] = field(default_factory=list)


class StepOutcome(StrEnum):
    """Outcome of a single reconciliation step."""

    CREATED = "created"
    ATTACHED = "attached"
    RECREATED = "recreated"
    REUSED = "reused"
    REGISTERED = "registered"
    DISCOVERED = "discovered"
    ISSUED = "issued"
    QUOTA_REACHED = "quota reached"
    UPDATED = "updated"
    DETACHED = "detached"
    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


CREATING_OUTCOMES = frozenset({StepOutcome.CREATED, StepOutcome.ATTACHED, StepOutcome.RECREATED})


@dataclass(frozen=True)
class StepResult:
    """A step name paired with what happened to it."""

    step: str
    outcome: StepOutcome
    detail: str = ""


@dataclass(frozen=True)
class AccessKeyResult:
    """Access key pair for the CI user, or placeholders when none was issued."""

    access_key_id: str
    secret_access_key: str
    quota_reached: bool = False

    @classmethod
    def placeholder(cls) -> "AccessKeyResult":
        """Return the result used when the key quota is exhausted."""
        return cls(ACCESS_KEY_PLACEHOLDER, SECRET_KEY_PLACEHOLDER, quota_reached=True)


@dataclass
class ProvisionResult:
    """Identifiers and step outcomes collected during provisioning."""

    steps: list[StepResult] = field(default_factory=list)
    repository_uri: str | None = None
    execution_role_arn: str | None = None
    cluster_arn: str | None = None
    network: NetworkSelection | None = None
    security_group_id: str | None = None
    task_definition_arn: str | None = None
    service_arn: str | None = None
    access_key: AccessKeyResult | None = None

    def record(self, step: str, outcome: StepOutcome, detail: str = "") -> None:
        """Append a step outcome."""
        self.steps.append(StepResult(step, outcome, detail))

    @property
    def created(self) -> list[StepResult]:
        """Return steps that created or attached something."""
        return [item for item in self.steps if item.outcome in CREATING_OUTCOMES]

"""Operator-facing summaries for the CLI."""

from rich.table import Table
from rich.text import Text

from cicd_bootstrap.cli.ui import console
from cicd_bootstrap.core.deployments.aws_ecs import (
    ProbeResult,
    ProvisionResult,
    ResourceState,
    StackConfig,
    StepOutcome,
    StepResult,
    status_targets,
)

_OUTCOME_STYLES = {
    StepOutcome.CREATED: "green",
    StepOutcome.ATTACHED: "green",
    StepOutcome.RECREATED: "yellow",
    StepOutcome.REGISTERED: "green",
    StepOutcome.ISSUED: "green",
    StepOutcome.DELETED: "green",
    StepOutcome.DETACHED: "green",
    StepOutcome.QUOTA_REACHED: "yellow",
    StepOutcome.SKIPPED: "yellow",
    StepOutcome.FAILED: "red",
}


def print_provision_plan(config: StackConfig) -> None:
    """Print the resources a provision run will ensure.

    Args:
        config: Stack configuration.
    """
    console.print("[bold]Setting up AWS infrastructure for CI/CD[/bold]")
    console.print(f"- Cluster: {config.cluster_name}")
    console.print(f"- Service: {config.service_name}")
    console.print(f"- ECR repository: {config.repository_name}")
    console.print(f"- Region: {config.aws_region}")


def print_cleanup_summary(config: StackConfig) -> None:
    """Print a summary of resources to be cleaned up.

    Args:
        config: Stack configuration.
    """
    console.print("[bold]Resources to clean up:[/bold]")
    console.print(f"- ECS service: {config.service_name}")
    console.print(f"- ECS cluster: {config.cluster_name}")
    console.print(f"- Task definitions: every revision of {config.task_family}")
    console.print(f"- ECR repo (including images): {config.repository_name}")
    console.print(f"- Log group: {config.log_group_name}")
    console.print(f"- IAM role: {config.role_name}")
    console.print(f"- Security group: {config.security_group_name}")
    console.print(f"- IAM user and access keys: {config.ci_user_name}")
    console.print(f"- Region: {config.aws_region}")


def print_ci_secrets(config: StackConfig, result: ProvisionResult) -> None:
    """Print the values to store as CI repository secrets.

    The secret key is shown once and never saved.

    Args:
        config: Stack configuration.
        result: Result of the provision run.
    """
    access_key = result.access_key
    console.print()
    console.print("[bold green]SETUP COMPLETE![/bold green]")
    console.print()
    if access_key is not None and access_key.quota_reached:
        console.print(
            "[yellow]Could not create new access keys (2 keys already exist). "
            "Reuse an existing key or rotate one manually.[/yellow]"
        )
    console.print("[bold]GitHub repository secrets to add:[/bold]")
    console.print()
    lines = [
        ("AWS_ACCESS_KEY_ID", access_key.access_key_id if access_key else ""),
        ("AWS_SECRET_ACCESS_KEY", access_key.secret_access_key if access_key else ""),
        ("AWS_REGION", config.aws_region),
        ("ECR_REPOSITORY", config.repository_name),
        ("ECR_REGISTRY", result.repository_uri or ""),
        ("ECS_CLUSTER", config.cluster_name),
        ("ECS_SERVICE", config.service_name),
        ("ECS_TASK_DEFINITION", config.task_family),
    ]
    for key, value in lines:
        console.print(f"{key}: {value}", markup=False, highlight=False)

    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print("1. Add the above secrets to your GitHub repository")
    console.print("2. Push your code to trigger the first deployment")
    console.print("3. Watch the GitHub Actions workflow")
    console.print()
    console.print("[dim]To clean up later: cicd-bootstrap deprovision[/dim]")


def print_step_results(title: str, results: list[StepResult]) -> None:
    """Print step outcomes as a table.

    Args:
        title: Table title.
        results: Ordered step outcomes.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Step", style="white")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Detail", style="dim")

    for item in results:
        style = _OUTCOME_STYLES.get(item.outcome, "white")
        # Step names and details carry raw AWS text, never markup.
        table.add_row(Text(item.step), Text(str(item.outcome), style=style), Text(item.detail))

    console.print(table)


def print_status_table(config: StackConfig, results: dict[str, ProbeResult]) -> None:
    """Print a deployment status table.

    Args:
        config: Stack configuration.
        results: Probe results keyed by resource label.
    """
    targets = status_targets(config)
    table = Table(title="Deployment resources", show_header=True, header_style="bold cyan")
    table.add_column("Resource", style="white", no_wrap=True)
    table.add_column("Name/ID", style="bright_white")
    table.add_column("Status", style="white", no_wrap=True)

    for name, probe in results.items():
        table.add_row(name, probe.identifier or targets.get(name, "-"), style_state(probe))

    console.print(table)


def style_state(probe: ProbeResult) -> str:
    """Return colourised state text for terminal output.

    Args:
        probe: Probe result for one resource.

    Returns:
        Rich-marked status text.
    """
    label = str(probe.state)
    if probe.status and probe.state is not ResourceState.ACTIVE:
        label = f"{label} ({probe.status})"
    match probe.state:
        case ResourceState.ACTIVE:
            return f"[green]{label}[/green]"
        case ResourceState.ABSENT:
            return f"[red]{label}[/red]"
        case ResourceState.INACTIVE | ResourceState.OTHER:
            return f"[yellow]{label}[/yellow]"

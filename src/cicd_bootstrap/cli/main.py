"""CLI entrypoint for cicd-bootstrap."""

import logging

import click
import questionary

from cicd_bootstrap.cli.errors import report_remote_error
from cicd_bootstrap.cli.output import (
    print_ci_secrets,
    print_cleanup_summary,
    print_provision_plan,
    print_status_table,
    print_step_results,
)
from cicd_bootstrap.cli.ui import console, report_step
from cicd_bootstrap.core.deployments.aws_ecs import (
    StackConfig,
    check_deployment,
    cleanup_resources,
    create_session,
    provision_stack,
)
from cicd_bootstrap.core.settings import get_settings


@click.group()
@click.option("--region", default=None, help="AWS region (overrides CICD_AWS_REGION).")
@click.option("--profile", default=None, help="Named AWS profile to use.")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, region: str | None, profile: str | None, verbose: bool) -> None:
    """Provision and tear down the ECS/Fargate CI/CD target.

    Args:
        ctx: Click context for the command invocation.
        region: Optional region override.
        profile: Optional AWS profile override.
        verbose: Whether to log at debug level.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    ctx.obj = get_settings().to_stack_config(aws_region=region, aws_profile=profile)


@cli.command()
@click.pass_obj
def provision(config: StackConfig) -> None:
    """Create any missing stack resources and print CI secrets."""
    print_provision_plan(config)
    try:
        session = create_session(config)
        result = provision_stack(session, config, report_step)
    except Exception as exc:  # noqa: BLE001
        report_remote_error(exc)
        raise click.exceptions.Exit(1) from exc

    print_step_results("Provisioning steps", result.steps)
    print_ci_secrets(config, result)


@cli.command()
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def deprovision(config: StackConfig, yes: bool) -> None:
    """Delete every stack resource, continuing past failures."""
    console.print("[bold red]Cleaning up AWS CI/CD resources[/bold red]")
    print_cleanup_summary(config)

    if not yes:
        confirm = questionary.confirm(
            "This will delete the resources listed above. Continue?",
            default=False,
        ).ask()
        if not confirm:
            console.print("[dim]Clean up cancelled.[/dim]")
            return

    try:
        session = create_session(config)
    except Exception as exc:  # noqa: BLE001
        report_remote_error(exc, "Clean up")
        raise click.exceptions.Exit(1) from exc

    results = cleanup_resources(session, config, report_step)
    print_step_results("Clean up steps", results)


@cli.command()
@click.pass_obj
def status(config: StackConfig) -> None:
    """Show the live state of every stack resource."""
    console.print("[cyan]Checking current deployment (live AWS status scan)...[/cyan]")
    try:
        session = create_session(config)
        results = check_deployment(session, config)
    except Exception as exc:  # noqa: BLE001
        report_remote_error(exc, "Status check")
        raise click.exceptions.Exit(1) from exc
    print_status_table(config, results)


def main() -> None:
    """Run the CLI."""
    cli()

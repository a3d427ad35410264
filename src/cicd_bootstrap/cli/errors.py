"""Classify AWS failures and print operator guidance."""

from typing import TypeVar

from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    NoRegionError,
    ProfileNotFound,
)
from rich.markup import escape

from cicd_bootstrap.cli.ui import console
from cicd_bootstrap.core.deployments.aws_ecs import CredentialsCheckError

TOKEN_ERROR_CODES = frozenset(
    {
        "ExpiredToken",
        "ExpiredTokenException",
        # spellchecker:ignore-next-line
        "UnrecognizedClientException",
        "InvalidClientTokenId",
        "InvalidSignatureException",
    }
)
PERMISSION_ERROR_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedOperation",
    }
)

E = TypeVar("E", bound=BaseException)


def report_remote_error(exc: Exception, action: str = "Provisioning") -> None:
    """Print what went wrong and what to do about it.

    Args:
        exc: Exception raised while talking to AWS.
        action: Name of the failed command, used in the fallback message.
    """
    check = find_in_chain(exc, CredentialsCheckError)
    if check is not None or is_aws_auth_error(exc):
        console.print(
            "[red]AWS authentication failed. Your credentials are missing, invalid, "
            "or expired.[/red]"
        )
        console.print(
            "[dim]Run 'aws configure' (or 'aws sso login --profile <profile>') "
            "and retry.[/dim]"
        )
        if check is not None:
            console.print(f"[dim]{escape(str(check))}[/dim]")
            console.print("[dim]The credentials check runs first, so nothing was touched.[/dim]")
        return

    denied = find_permission_error(exc)
    if denied is not None:
        console.print(
            f"[red]AWS denied {escape(denied.operation_name)}. The identity in use "
            "lacks a permission this tool needs.[/red]"
        )
        console.print(
            "[dim]Grant the caller access to ECR, ECS, IAM, EC2 and CloudWatch Logs, "
            "then re-run. Resources created so far are kept and reused.[/dim]"
        )
        return

    if is_aws_endpoint_error(exc):
        console.print("[red]Could not reach AWS endpoint from this environment.[/red]")
        console.print("[dim]Check network connectivity and the --region option.[/dim]")
        return

    console.print(f"[red]{action} failed: {escape(str(exc))}[/red]")
    console.print("[dim]Nothing was rolled back. Re-running is safe once the cause is fixed.[/dim]")


def is_aws_auth_error(exc: Exception) -> bool:
    """Return true when credentials are missing, expired or rejected.

    A permission denial is not an auth error: the credentials worked, the
    policy did not.
    """
    for item in exception_chain(exc):
        if isinstance(item, (NoCredentialsError, ProfileNotFound, NoRegionError)):
            return True
        if isinstance(item, ClientError) and _error_code(item) in TOKEN_ERROR_CODES:
            return True
    return False


def find_permission_error(exc: Exception) -> ClientError | None:
    """Return the first access-denied ``ClientError`` in the chain, if any."""
    for item in exception_chain(exc):
        if isinstance(item, ClientError) and _error_code(item) in PERMISSION_ERROR_CODES:
            return item
    return None


def is_aws_endpoint_error(exc: Exception) -> bool:
    """Return true when an exception chain indicates endpoint/network errors."""
    return find_in_chain(exc, EndpointConnectionError) is not None


def find_in_chain(exc: BaseException, kind: type[E]) -> E | None:
    """Return the first exception of ``kind`` in the chain."""
    for item in exception_chain(exc):
        if isinstance(item, kind):
            return item
    return None


def exception_chain(exc: BaseException) -> list[BaseException]:
    """Return exceptions in cause/context chain, outermost first."""
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))

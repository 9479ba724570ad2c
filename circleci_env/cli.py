"""Command-line interface: ``circleci-env [OPTIONS] {list,get,set,del}``."""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import NoReturn

import click

from ._version import __version__
from .client import CircleCI
from .exceptions import CircleCIError
from .logging_config import configure_logging, get_logger
from .types import VCS_TYPES, EnvironmentVariable

log = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Operation(Enum):
    LIST = "list"
    GET = "get"
    SET = "set"
    DELETE = "del"


@dataclass
class Target:
    """Project the operation applies to."""

    vcs_type: str
    account: str
    project: str


@dataclass
class CliState:
    token: str | None
    target: Target


def run_operation(
    client: CircleCI,
    operation: Operation,
    target: Target,
    key: str | None = None,
    value: str | None = None,
) -> list[EnvironmentVariable]:
    """Run a single operation and return the variables to print.

    ``set`` and ``del`` return an empty list on success.
    """
    if operation is Operation.LIST:
        return client.list_env(target.vcs_type, target.account, target.project)
    elif operation is Operation.GET:
        return [client.get_env(target.vcs_type, target.account, target.project, key)]
    elif operation is Operation.SET:
        client.set_env(target.vcs_type, target.account, target.project, key, value)
        return []
    elif operation is Operation.DELETE:
        client.delete_env(target.vcs_type, target.account, target.project, key)
        return []
    raise ValueError(f"unsupported operation: {operation!r}")


def _fail(ctx: click.Context, message: str) -> NoReturn:
    click.echo(f"error: {message}", err=True)
    ctx.exit(1)


def _dispatch(
    ctx: click.Context,
    operation: Operation,
    key: str | None = None,
    value: str | None = None,
) -> None:
    state: CliState = ctx.obj
    if not state.token:
        _fail(ctx, "the circle token is required")

    try:
        client = CircleCI(token=state.token)
    except CircleCIError as e:
        _fail(ctx, f"cannot create circleci client: {e.message}")
    ctx.call_on_close(client.close)

    target = state.target
    log.debug(
        "operation_dispatched",
        operation=operation.value,
        vcs_type=target.vcs_type,
        account=target.account,
        project=target.project,
        key=key,
    )
    try:
        envs = run_operation(client, operation, target, key, value)
    except CircleCIError as e:
        log.debug("operation_failed", operation=operation.value, status=e.status, error=e.message)
        _fail(ctx, e.message)

    for env in envs:
        click.echo(f"{env.key}={env.value}")


@click.group()
@click.option("-t", "--token", envvar="CIRCLECI_TOKEN", help="CircleCI API token.")
@click.option(
    "-v",
    "--vcs-type",
    default="github",
    show_default=True,
    help=f"VCS type of the project, passed as-is to the API (e.g. {', '.join(VCS_TYPES)}).",
)
@click.option(
    "-u", "--username", envvar="CIRCLECI_USERNAME", default="", help="User or organization hosting the project."
)
@click.option("-p", "--project", envvar="CIRCLECI_PROJECT", default="", help="CircleCI project name.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (logs go to stderr).",
)
@click.version_option(__version__, prog_name="circleci-env")
@click.pass_context
def cli(
    ctx: click.Context,
    token: str | None,
    vcs_type: str,
    username: str,
    project: str,
    log_level: str,
) -> None:
    """Manage environment variables of a CircleCI project."""
    configure_logging(log_level)
    ctx.obj = CliState(
        token=token,
        target=Target(vcs_type=vcs_type, account=username, project=project),
    )


@cli.command("list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    """List environment variables (values are obfuscated)."""
    _dispatch(ctx, Operation.LIST)


@cli.command("get")
@click.argument("key")
@click.pass_context
def get_cmd(ctx: click.Context, key: str) -> None:
    """Get an environment variable."""
    _dispatch(ctx, Operation.GET, key=key)


@cli.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_cmd(ctx: click.Context, key: str, value: str) -> None:
    """Create or update an environment variable."""
    _dispatch(ctx, Operation.SET, key=key, value=value)


@cli.command("del")
@click.argument("key")
@click.pass_context
def del_cmd(ctx: click.Context, key: str) -> None:
    """Delete an environment variable."""
    _dispatch(ctx, Operation.DELETE, key=key)


def main() -> None:
    """Console entry point. Every error, usage errors included, exits with status 1."""
    try:
        code = cli.main(prog_name="circleci-env", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code or 0)

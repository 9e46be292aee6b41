#!/usr/bin/env python
"""Command-line interface for ksecret.

This module provides the ``ksecret`` command group. It turns command-line
arguments into typed commands, sets up the Kubectl facade and maps expected
failures to a one-line error and exit status 1.
"""

import asyncio
import functools
import sys
from collections.abc import Callable
from typing import Any, TypeVar

import click
from icecream import ic
from rich.markup import escape

from ksecret import __version__, console
from ksecret.core.cluster import select_context
from ksecret.core.kubectl import Kubectl
from ksecret.exceptions import KsecretError, KubectlError
from ksecret.models import ConnectionOptions, CreateCommand, GetCommand, OutputFormat, SecretTarget, SetCommand
from ksecret.secrets.operations import create_secret, get_secret, set_secret
from ksecret.validation import data_keys_callback, secret_name_callback

F = TypeVar("F", bound=Callable[..., Any])


def exit_on_error(func: F) -> F:
    """Turn KsecretError into an error message on stderr and exit status 1.

    kubectl's own stderr is forwarded verbatim. Any other exception is a bug
    and propagates with its traceback.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KubectlError as e:
            click.echo(e.stderr, err=True, nl=False)
            if e.hint or not e.stderr.strip():
                console.error(escape(str(e)))
            sys.exit(1)
        except KsecretError as e:
            console.error(escape(str(e)))
            sys.exit(1)

    return wrapper  # type: ignore[return-value]


def connect(options: ConnectionOptions) -> Kubectl:
    """Create the Kubectl facade for a subcommand.

    Args:
        options: Connection options collected by the command group.

    Returns:
        A Kubectl instance, already verified unless --no-verify was given.

    Raises:
        ClusterConnectionError: If --select is used without a usable kubeconfig.
        KubectlError: If verification fails.

    """
    context = select_context() if options.select_context else options.context
    kubectl = Kubectl(binary=options.binary, namespace=options.namespace, context=context)
    ic(kubectl)
    if options.verify:
        kubectl.verify()
    return kubectl


@click.group(help="A helper for managing Secrets in Kubernetes.")
@click.version_option(__version__, "--version", "-v", message="%(version)s")
@click.option(
    "--namespace",
    "-n",
    envvar="KSECRET_NAMESPACE",
    help="namespace to look for secrets in (defaults to the context's namespace)",
)
@click.option("--context", envvar="KSECRET_CONTEXT", help="kubeconfig context to use")
@click.option("--select", is_flag=True, default=False, help="prompt for context select")
@click.option(
    "--kubectl",
    "kubectl_binary",
    envvar="KSECRET_KUBECTL",
    default="kubectl",
    show_default=True,
    help="kubectl binary to run",
)
@click.option(
    "--verify/--no-verify",
    envvar="KSECRET_VERIFY",
    default=True,
    show_default=True,
    help="check kubectl credentials before running the command",
)
@click.option("--debug", is_flag=True, default=False, help="print debug information")
@click.pass_context
def cli(
    ctx: click.Context,
    namespace: str | None,
    context: str | None,
    select: bool,
    kubectl_binary: str,
    verify: bool,
    debug: bool,
) -> None:
    """Collect the connection options shared by all subcommands.

    Args:
        ctx: The click context; its obj receives the ConnectionOptions.
        namespace: Namespace of the secret.
        context: Kubeconfig context, ignored when select is set.
        select: Prompt for the kubeconfig context.
        kubectl_binary: Name or path of kubectl.
        verify: Run ``kubectl version`` before the command.
        debug: Enable debug output.

    """
    if not debug:
        ic.disable()

    ctx.obj = ConnectionOptions(
        binary=kubectl_binary,
        namespace=namespace,
        context=context,
        select_context=select,
        verify=verify,
    )
    ic(ctx.obj)


@cli.command(
    "get",
    short_help="Reads an existing Secret's value(s).",
    help="Reads an existing Secret's value(s). This can print the encoded value, or print the raw, decoded value.",
)
@click.option("--decode", "-d", is_flag=True, default=False, help="Display decoded values instead of base64-encoded values.")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Print only newline-separated key values without any other text. "
    "Useful for redirecting output to files. The final value will not have a newline.",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice([fmt.value for fmt in OutputFormat]),
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Output format.",
)
@click.argument("name", callback=secret_name_callback)
@click.argument("keys", nargs=-1, callback=data_keys_callback)
@click.pass_obj
@exit_on_error
def get_command(
    options: ConnectionOptions,
    decode: bool,
    quiet: bool,
    output: str,
    name: str,
    keys: tuple[str, ...],
) -> None:
    """Print the values of KEYS in secret NAME, or all values if no KEYS are given."""
    command = GetCommand(
        target=SecretTarget(name=name, namespace=options.namespace),
        keys=keys,
        decode=decode,
        quiet=quiet,
        output=OutputFormat(output),
    )
    ic(command)
    get_secret(connect(options), command)


@cli.command(
    "set",
    short_help="Sets keys in an existing secret.",
    help="Sets keys in an existing secret. This can accept raw values or encoded values. "
    "Values are read from stdin, one line per key, in the order the keys are given. "
    "If no keys are given, values for all existing keys are read.",
)
@click.option(
    "--encoded",
    "-e",
    is_flag=True,
    default=False,
    help="Read keys as base64-encoded values from stdin, instead of assuming raw values.",
)
@click.argument("name", callback=secret_name_callback)
@click.argument("keys", nargs=-1, callback=data_keys_callback)
@click.pass_obj
@exit_on_error
def set_command(options: ConnectionOptions, encoded: bool, name: str, keys: tuple[str, ...]) -> None:
    """Read new values for KEYS of secret NAME from stdin and store them."""
    command = SetCommand(target=SecretTarget(name=name, namespace=options.namespace), keys=keys, encoded=encoded)
    ic(command)
    asyncio.run(set_secret(connect(options), command, sys.stdin, sys.stdout))


@cli.command(
    "create",
    short_help="Creates a new secret, optionally storing key values.",
    help="Creates a new secret, optionally storing key values. An empty secret can have keys added "
    "to it later using `set`. If no key names are provided, input is ignored. Note that if one "
    "of the key values is malformed, an empty secret will still be created.",
)
@click.option(
    "--encoded",
    "-e",
    is_flag=True,
    default=False,
    help="Read keys as base64-encoded values from stdin, instead of assuming raw values.",
)
@click.argument("name", callback=secret_name_callback)
@click.argument("keys", nargs=-1, callback=data_keys_callback)
@click.pass_obj
@exit_on_error
def create_command(options: ConnectionOptions, encoded: bool, name: str, keys: tuple[str, ...]) -> None:
    """Create secret NAME, then read values for KEYS from stdin."""
    command = CreateCommand(target=SecretTarget(name=name, namespace=options.namespace), keys=keys, encoded=encoded)
    ic(command)
    asyncio.run(create_secret(connect(options), command, sys.stdin, sys.stdout))


if __name__ == "__main__":
    cli()

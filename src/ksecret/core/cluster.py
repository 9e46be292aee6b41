"""Kubeconfig context discovery.

kubectl does all the cluster communication; this module only reads the
kubeconfig so the user can pick which context kubectl should use.
"""

import click
import questionary
from icecream import ic
from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from ksecret import console
from ksecret.exceptions import ClusterConnectionError
from ksecret.styles import POINTER, PROMPT_STYLE, QMARK


def list_contexts() -> tuple[list[str], str | None]:
    """List the contexts defined in the kubeconfig.

    Returns:
        The context names and the name of the current context (None if the
        kubeconfig has no current-context).

    Raises:
        ClusterConnectionError: If the kubeconfig is invalid or missing.

    """
    try:
        contexts, current_context = config.list_kube_config_contexts()
    except ConfigException as e:
        raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

    names: list[str] = [context["name"] for context in contexts]
    ic(names)
    current = current_context["name"] if current_context else None
    return names, current


def select_context() -> str:
    """Prompt the user to pick a kubeconfig context.

    Returns:
        The selected context name.

    Raises:
        ClusterConnectionError: If the kubeconfig has no contexts.
        click.Abort: If the user cancels the selection.

    """
    names, current = list_contexts()
    if not names:
        raise ClusterConnectionError("No contexts found in kubeconfig")

    context: str | None = questionary.select(
        "Select context to work with",
        choices=names,
        default=current if current in names else None,
        style=PROMPT_STYLE,
        pointer=POINTER,
        qmark=QMARK,
    ).ask()
    if context is None:
        console.warning("Context selection cancelled.")
        raise click.Abort()

    console.action(f"Working with {console.highlight(context)} cluster")
    return context

"""Secret operations.

This module implements ``get``, ``set`` and ``create`` on top of the Kubectl
facade, the codec and the line buffer. Each call fetches the secret fresh;
nothing is cached between invocations.
"""

from collections.abc import Sequence
from typing import TextIO

import click
from icecream import ic

from ksecret import console
from ksecret.core.kubectl import Kubectl
from ksecret.exceptions import InputClosedError
from ksecret.models import CreateCommand, GetCommand, OutputFormat, PendingEdit, SecretKeyValue, SetCommand
from ksecret.secrets.codec import (
    build_patch_payload,
    decode_value,
    encode_pending_edits,
    parse_key_listing,
    parse_secret_dump,
    render_structured,
    render_text,
    select_keys,
    serialize_payload,
)
from ksecret.secrets.prompts import LineBuffer


def value_prompt(key: str, *, encoded: bool) -> str:
    """Return the prompt shown before reading the value of a key."""
    if encoded:
        return f"New encoded value for {key}: "
    return f"New unencoded value for {key}: "


def get_secret(kubectl: Kubectl, command: GetCommand) -> None:
    """Print the values of a secret, optionally restricted to some keys.

    Args:
        kubectl: Kubectl instance to fetch the secret with.
        command: Parsed ``get`` arguments.

    Raises:
        KubectlError: If the secret cannot be fetched.
        KeyNotFoundError: If a requested key does not exist. Nothing is
            printed in that case.

    """
    name = command.target.name
    plain = command.output is OutputFormat.TEXT
    status = None if command.quiet or not plain else f"Fetching {name}..."

    raw = kubectl.get_secret_dump(name, status=status)
    selected = select_keys(parse_secret_dump(raw), command.keys, name)
    entries = [
        SecretKeyValue(key, decode_value(value) if command.decode else value) for key, value in selected.items()
    ]

    if not plain:
        click.echo(render_structured(entries, command.output), nl=False)
        return

    if not command.quiet:
        header = "Selected keys from" if command.keys else "All keys from"
        click.echo(f"{header} {name} -")
    click.echo(render_text(entries, quiet=command.quiet), nl=False)


async def collect_values(buffer: LineBuffer, keys: Sequence[str], *, encoded: bool) -> list[PendingEdit]:
    """Read one value per key, strictly in key order.

    Each value is awaited before the next prompt is issued, since only one
    line request may be outstanding at a time.

    Args:
        buffer: An open LineBuffer.
        keys: Keys to read values for, in prompt order.
        encoded: Whether the user is expected to enter base64.

    Returns:
        The collected values, in key order.

    Raises:
        InputClosedError: If input ends before every key has a value.

    """
    edits: list[PendingEdit] = []
    for key in keys:
        try:
            value = await buffer.request_line(value_prompt(key, encoded=encoded))
        except InputClosedError as err:
            raise InputClosedError(f"Input ended before a value for '{key}' was read") from err
        edits.append(PendingEdit(key, value))
    return edits


async def set_secret(kubectl: Kubectl, command: SetCommand, instream: TextIO, outstream: TextIO) -> None:
    """Read new values from the user and patch them into an existing secret.

    Args:
        kubectl: Kubectl instance to read and patch the secret with.
        command: Parsed ``set`` arguments. Without keys, every existing key
            of the secret is prompted for.
        instream: Where values are read from, one line per key.
        outstream: Where prompts are written when instream is a terminal.

    Raises:
        KubectlError: If listing keys or patching fails.
        InputClosedError: If input ends early. Nothing is patched then.

    """
    name = command.target.name
    keys = list(command.keys) or parse_key_listing(kubectl.get_secret_keys(name))
    ic(keys)
    if not keys:
        console.warning(f"Secret {console.highlight(name)} has no keys to set")
        return

    async with LineBuffer(instream, outstream) as buffer:
        edits = await collect_values(buffer, keys, encoded=command.encoded)
        pairs = encode_pending_edits(edits, skip_encode=command.encoded)
        kubectl.patch_secret(name, serialize_payload(build_patch_payload(pairs)), keys)
        console.success(f"{name} updated.")


async def create_secret(kubectl: Kubectl, command: CreateCommand, instream: TextIO, outstream: TextIO) -> None:
    """Create an empty secret, then set the requested keys.

    If setting the keys fails the empty secret is left in place.

    Args:
        kubectl: Kubectl instance to create and patch the secret with.
        command: Parsed ``create`` arguments. Without keys no input is read.
        instream: Where values are read from, one line per key.
        outstream: Where prompts are written when instream is a terminal.

    Raises:
        KubectlError: If creating or patching fails.

    """
    name = command.target.name
    kubectl.create_secret(name)
    if not command.keys:
        return
    await set_secret(kubectl, command.as_set_command(), instream, outstream)

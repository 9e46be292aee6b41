"""Data models for ksecret.

This module provides the typed structures that flow between the CLI, the
orchestrator and the codec, in place of loosely-typed argument objects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class OutputFormat(str, Enum):
    """Display formats supported by ``ksecret get``.

    Inherits from str so the values can be used directly as click choices.
    """

    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


class SecretKeyValue(NamedTuple):
    """A single entry of a secret's data.

    Attributes:
        key: The data key. Never contains a colon.
        value: The base64 text, or the decoded bytes when displaying.

    """

    key: str
    value: str | bytes


class PendingEdit(NamedTuple):
    """A value read from the user that has not been encoded yet.

    Attributes:
        key: The data key being set.
        raw_value: The line exactly as it was read, without its terminator.

    """

    key: str
    raw_value: str


@dataclass(frozen=True, slots=True)
class ConnectionOptions:
    """How kubectl should be run, as given on the command line.

    Attributes:
        binary: Name or path of the kubectl binary.
        namespace: Namespace passed to kubectl, or None for the default.
        context: Kubeconfig context, or None for the current one.
        select_context: If True, prompt for the context instead.
        verify: If True, run ``kubectl version`` before the command.

    """

    binary: str = "kubectl"
    namespace: str | None = None
    context: str | None = None
    select_context: bool = False
    verify: bool = True


@dataclass(frozen=True, slots=True)
class SecretTarget:
    """The secret an invocation operates on.

    Attributes:
        name: The name of the secret.
        namespace: The namespace, or None for the context's default.

    """

    name: str
    namespace: str | None = None


@dataclass(frozen=True, slots=True)
class GetCommand:
    """Parsed arguments of ``ksecret get``."""

    target: SecretTarget
    keys: tuple[str, ...] = ()
    decode: bool = False
    quiet: bool = False
    output: OutputFormat = OutputFormat.TEXT


@dataclass(frozen=True, slots=True)
class SetCommand:
    """Parsed arguments of ``ksecret set``.

    Attributes:
        target: The secret to update.
        keys: Keys to set, in prompt order. Empty means every existing key.
        encoded: If True, input lines are already base64 and are stored as-is.

    """

    target: SecretTarget
    keys: tuple[str, ...] = ()
    encoded: bool = False


@dataclass(frozen=True, slots=True)
class CreateCommand:
    """Parsed arguments of ``ksecret create``.

    Attributes:
        target: The secret to create.
        keys: Keys to populate after creation. Empty means none.
        encoded: If True, input lines are already base64 and are stored as-is.

    """

    target: SecretTarget
    keys: tuple[str, ...] = ()
    encoded: bool = False

    def as_set_command(self) -> SetCommand:
        """Return the set command that fills in the keys after creation."""
        return SetCommand(target=self.target, keys=self.keys, encoded=self.encoded)

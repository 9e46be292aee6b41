"""Kubectl facade class.

This module provides the Kubectl class, the only place where ksecret starts
external processes. Every command is run synchronously; stdout is returned on
success and failures are raised as KsecretError subclasses.
"""

import contextlib
import subprocess
from collections.abc import Iterable

from icecream import ic

from ksecret import console
from ksecret.exceptions import BinaryNotFoundError, KsecretError, KubectlError

# Go templates handed to ``kubectl get secret -o``. Colons are not allowed in
# secret keys and base64 values have no newlines, so both delimiters are safe.
DUMP_TEMPLATE = "go-template={{range $key, $value := .data}}{{$key}}:{{$value}}\n{{end}}"
KEYS_TEMPLATE = "go-template={{range $key, $ignored := .data}}{{$key}}\n{{end}}"

# Error message constants
_ERR_NOT_FOUND = "Could not find `{binary}`. Is this installed?"
_ERR_UNKNOWN = "Unknown error executing `{binary}`: {reason}"
_ERR_VERIFY = "Error validating `{binary}` credentials. See above for details."


class Kubectl:
    """Wrapper for the kubectl operations ksecret needs on a single secret.

    Attributes:
        binary: Name or path of the kubectl binary.
        namespace: Namespace passed with ``-n``, or None for the context default.
        context: Context passed with ``--context``, or None for the current one.

    """

    def __init__(self, *, binary: str = "kubectl", namespace: str | None = None, context: str | None = None) -> None:
        """Initialize Kubectl.

        Args:
            binary: Name or path of the kubectl binary.
            namespace: Namespace to operate in. Must be passed as a keyword.
            context: Kubeconfig context to use. Must be passed as a keyword.

        """
        self.binary: str = binary
        self.namespace: str | None = namespace
        self.context: str | None = context

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Kubectl(binary={self.binary!r}, namespace={self.namespace!r}, context={self.context!r})"

    def _build_kubectl_cmd(self, args: Iterable[str]) -> list[str]:
        """Build a kubectl command with the global flags.

        Args:
            args: The verb and its arguments.

        Returns:
            List of command arguments ready for subprocess execution.

        """
        cmd: list[str] = [self.binary]
        if self.context:
            cmd.extend(["--context", self.context])
        if self.namespace:
            cmd.extend(["-n", self.namespace])
        cmd.extend(args)
        return cmd

    def run(
        self,
        args: Iterable[str],
        *,
        error_message: str | None = None,
        status: str | None = None,
        trace: bool = True,
    ) -> str:
        """Run kubectl and return its standard output.

        Args:
            args: The verb and its arguments.
            error_message: Hint shown after kubectl's stderr on failure.
            status: If set, a spinner with this text is shown while waiting.
            trace: If False, the command line is not sent to the debug log
                because it carries secret values.

        Returns:
            kubectl's standard output.

        Raises:
            BinaryNotFoundError: If the binary cannot be found.
            KubectlError: If kubectl exits with a non-zero status.
            KsecretError: If the binary cannot be started for another reason.

        """
        cmd = self._build_kubectl_cmd(args)
        if trace:
            ic(cmd)

        waiting = console.spinner(status) if status else contextlib.nullcontext()
        try:
            with waiting:
                result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", check=True)
        except FileNotFoundError as err:
            raise BinaryNotFoundError(_ERR_NOT_FOUND.format(binary=self.binary)) from err
        except subprocess.CalledProcessError as err:
            raise KubectlError(err.returncode, err.stderr or "", hint=error_message) from err
        except OSError as err:
            raise KsecretError(_ERR_UNKNOWN.format(binary=self.binary, reason=err)) from err

        return result.stdout

    def verify(self) -> None:
        """Check that kubectl runs and can reach the cluster.

        Raises:
            KubectlError: If ``kubectl version`` fails.

        """
        self.run(["version"], error_message=_ERR_VERIFY.format(binary=self.binary))

    def get_secret_dump(self, name: str, *, status: str | None = None) -> str:
        """Return every ``key:base64value`` record of a secret."""
        return self.run(["get", "secret", name, "-o", DUMP_TEMPLATE], status=status)

    def get_secret_keys(self, name: str) -> str:
        """Return the newline-terminated list of a secret's keys."""
        return self.run(["get", "secret", name, "-o", KEYS_TEMPLATE])

    def create_secret(self, name: str) -> str:
        """Create an empty generic secret."""
        return self.run(["create", "secret", "generic", name])

    def patch_secret(self, name: str, payload: str, keys: Iterable[str]) -> str:
        """Apply a JSON patch to a secret.

        Args:
            name: The secret to patch.
            payload: The serialized patch document.
            keys: The keys the payload sets, for the debug log only.

        Returns:
            kubectl's standard output.

        """
        ic(name, list(keys))
        return self.run(["patch", "secret", name, "-p", payload], trace=False)

"""Custom exceptions for ksecret.

This module defines the exception hierarchy used throughout the application.
Everything deriving from KsecretError is an expected failure that the CLI turns
into a one-line message and exit status 1.
"""


class KsecretError(Exception):
    """Base exception for all expected ksecret failures.

    The CLI catches this class at the top level, so anything raised as a
    KsecretError ends the process cleanly with exit status 1.
    """

    pass


class KubectlError(KsecretError):
    """Raised when a kubectl invocation exits with a non-zero status.

    Attributes:
        returncode: The exit status of kubectl.
        stderr: kubectl's standard error, forwarded verbatim to the user.
        hint: Optional extra context printed after stderr.

    """

    def __init__(self, returncode: int, stderr: str, hint: str | None = None) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.hint = hint
        super().__init__(hint or stderr.strip() or f"kubectl exited with status {returncode}")


class BinaryNotFoundError(KsecretError):
    """Raised when the kubectl binary cannot be executed.

    This can occur when:
    - kubectl is not installed
    - kubectl is not in the system PATH
    - --kubectl points at a path that does not exist
    """

    pass


class KeyNotFoundError(KsecretError):
    """Raised when a requested key is absent from the fetched secret."""

    def __init__(self, key: str, secret_name: str) -> None:
        self.key = key
        self.secret_name = secret_name
        super().__init__(f'Key "{key}" not found in secret "{secret_name}".')


class SecretParsingError(KsecretError):
    """Raised when kubectl output does not have the expected key:value shape."""

    pass


class InputClosedError(KsecretError):
    """Raised when standard input ends while a value is still being waited for."""

    pass


class ClusterConnectionError(KsecretError):
    """Raised when the kubeconfig cannot be read.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The kubeconfig lists no contexts
    """

    pass


class LineRequestPendingError(RuntimeError):
    """Raised when a line is requested while a previous request is unresolved.

    This is a programming error rather than a user-facing failure, so it does
    not derive from KsecretError and is never converted into a clean exit.
    """

    pass

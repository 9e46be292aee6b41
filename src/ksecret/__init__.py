"""ksecret: read, create and update Kubernetes Secrets through kubectl.

Example usage:
    from ksecret import Kubectl
    from ksecret.models import GetCommand, SecretTarget
    from ksecret.secrets import get_secret

    kubectl = Kubectl(namespace="default")
    get_secret(kubectl, GetCommand(target=SecretTarget("db-credentials"), decode=True))
"""

__version__ = "0.3.0"

from ksecret.cli import cli
from ksecret.core.kubectl import Kubectl
from ksecret.exceptions import (
    BinaryNotFoundError,
    ClusterConnectionError,
    InputClosedError,
    KeyNotFoundError,
    KsecretError,
    KubectlError,
    LineRequestPendingError,
    SecretParsingError,
)

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Kubectl",
    # Exceptions
    "KsecretError",
    "KubectlError",
    "BinaryNotFoundError",
    "KeyNotFoundError",
    "SecretParsingError",
    "InputClosedError",
    "ClusterConnectionError",
    "LineRequestPendingError",
]

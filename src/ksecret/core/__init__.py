"""Core infrastructure subpackage.

This package contains the Kubectl facade and kubeconfig context discovery.
"""

from ksecret.core.cluster import list_contexts, select_context
from ksecret.core.kubectl import Kubectl

__all__ = [
    "Kubectl",
    "list_contexts",
    "select_context",
]

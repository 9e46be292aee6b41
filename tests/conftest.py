"""Shared test fixtures for ksecret tests."""

import io
from unittest.mock import MagicMock, patch

import pytest

from ksecret.core.kubectl import DUMP_TEMPLATE, KEYS_TEMPLATE, Kubectl


class TtyStringIO(io.StringIO):
    """In-memory stream that claims to be a terminal."""

    def isatty(self) -> bool:
        return True


def kubectl_verb(cmd: list[str]) -> str:
    """Return the kubectl verb of a command, skipping the global flags."""
    args = iter(cmd[1:])
    for arg in args:
        if arg in ("--context", "-n"):
            next(args, None)
            continue
        return arg
    return ""


@pytest.fixture
def tty_stream():
    """Factory for in-memory input streams that look like a terminal."""
    return TtyStringIO


@pytest.fixture
def sample_dump():
    """kubectl output for a secret with two keys."""
    return "foo:YmFy\nbaz:cXV1eA==\n"


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock


@pytest.fixture
def kubectl_responses(mock_subprocess):
    """Answer mocked kubectl calls with canned stdout, chosen by verb.

    ``get`` returns the "dump" entry when asked for key:value records and the
    "keys" entry when asked for the key listing.
    """
    responses: dict[str, str] = {}

    def run(cmd, **kwargs):  # noqa: ARG001
        verb = kubectl_verb(cmd)
        if verb == "get" and DUMP_TEMPLATE in cmd:
            stdout = responses.get("dump", "")
        elif verb == "get" and KEYS_TEMPLATE in cmd:
            stdout = responses.get("keys", "")
        else:
            stdout = responses.get(verb, "")
        return MagicMock(returncode=0, stdout=stdout, stderr="")

    mock_subprocess.side_effect = run
    return responses


@pytest.fixture
def called_verbs(mock_subprocess):
    """Return a function listing the kubectl verbs run so far."""

    def verbs() -> list[str]:
        return [kubectl_verb(c.args[0]) for c in mock_subprocess.call_args_list]

    return verbs


@pytest.fixture
def mock_kubectl(sample_dump):
    """Kubectl double that never starts a process."""
    kubectl = MagicMock(spec=Kubectl)
    kubectl.namespace = None
    kubectl.get_secret_dump.return_value = sample_dump
    kubectl.get_secret_keys.return_value = "foo\nbaz\n"
    return kubectl


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = (
            [{"name": "dev"}, {"name": "staging"}, {"name": "production"}],
            {"name": "staging"},
        )
        yield mock

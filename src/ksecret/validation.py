"""Validation of secret names and data keys.

The validators return True or an error message string so they can be used both
as click callbacks (through the helpers below) and as questionary validators.
"""

import re

import click

# Kubernetes DNS subdomain name validation (RFC 1123)
_DNS_SUBDOMAIN_MAX_LENGTH = 253
_DNS_SUBDOMAIN_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"

# Secret data keys: alphanumerics, '-', '_' or '.'
_DATA_KEY_PATTERN = re.compile(r"^[-._a-zA-Z0-9]+$")


def validate_secret_name(name: str) -> bool | str:
    """Validate a Secret name (DNS subdomain).

    Args:
        name: The name to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not name:
        return "Name cannot be empty"
    if len(name) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return f"Name must be {_DNS_SUBDOMAIN_MAX_LENGTH} characters or less"
    if not re.match(_DNS_SUBDOMAIN_PATTERN, name):
        return "Name must consist of lowercase alphanumeric characters, '-' or '.', and must start and end with an alphanumeric character"
    return True


def validate_data_key(key: str) -> bool | str:
    """Validate a key of a Secret's data map.

    Args:
        key: The key to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not key:
        return "Key cannot be empty"
    if len(key) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return f"Key must be {_DNS_SUBDOMAIN_MAX_LENGTH} characters or less"
    if not _DATA_KEY_PATTERN.match(key):
        return f"Key '{key}' must consist of alphanumeric characters, '-', '_' or '.'"
    return True


def secret_name_callback(_ctx: click.Context, _param: click.Parameter, value: str) -> str:
    """Click callback rejecting invalid secret names as usage errors."""
    result = validate_secret_name(value)
    if result is not True:
        raise click.BadParameter(str(result))
    return value


def data_keys_callback(_ctx: click.Context, _param: click.Parameter, value: tuple[str, ...]) -> tuple[str, ...]:
    """Click callback rejecting invalid data keys as usage errors."""
    for key in value:
        result = validate_data_key(key)
        if result is not True:
            raise click.BadParameter(str(result))
    return value

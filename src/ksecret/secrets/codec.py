"""Translation between kubectl's secret output and ksecret's internal data.

kubectl is asked to render a secret with a go-template that emits one
``key:base64value`` record per line (see ksecret.core.kubectl). This module
parses that text, picks out the requested keys, converts values to and from
base64, and builds the JSON patch documents written back through
``kubectl patch``.
"""

import base64
import json
import re
from collections.abc import Iterable, Mapping, Sequence

import yaml
from icecream import ic

from ksecret.exceptions import KeyNotFoundError, SecretParsingError
from ksecret.models import OutputFormat, PendingEdit, SecretKeyValue

_NON_BASE64_CHARS = re.compile(r"[^A-Za-z0-9+/]")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _records(raw_text: str) -> list[str]:
    """Split newline-terminated output into records, dropping the final empty one."""
    records = raw_text.split("\n")
    if records and records[-1] == "":
        records.pop()
    return records


def parse_secret_dump(raw_text: str) -> dict[str, str]:
    """Parse ``key:base64value`` records into an ordered mapping.

    Args:
        raw_text: Output of kubectl rendered with DUMP_TEMPLATE.

    Returns:
        Mapping of key to encoded value, in the order kubectl emitted them.

    Raises:
        SecretParsingError: If a record has no colon.

    """
    values: dict[str, str] = {}
    for record in _records(raw_text):
        key, sep, encoded = record.partition(":")
        if not sep:
            raise SecretParsingError(f"Unexpected line in kubectl output: {record!r}")
        values[key] = encoded
    ic(list(values))
    return values


def parse_key_listing(raw_text: str) -> list[str]:
    """Parse a key-only listing rendered with KEYS_TEMPLATE.

    Args:
        raw_text: One key per line, newline-terminated.

    Returns:
        The keys in the order kubectl emitted them.

    """
    return _records(raw_text)


def select_keys(mapping: Mapping[str, str], requested_keys: Sequence[str], secret_name: str) -> dict[str, str]:
    """Restrict a parsed secret to the requested keys.

    Args:
        mapping: Parsed secret data, in source order.
        requested_keys: Keys to keep, in display order. Empty keeps everything.
        secret_name: Name of the secret, used in error messages.

    Returns:
        The selected entries, in requested order (or source order if none
        were requested).

    Raises:
        KeyNotFoundError: If any requested key is missing. Nothing is returned
            in that case, so callers never print partial output.

    """
    if not requested_keys:
        return dict(mapping)

    selected: dict[str, str] = {}
    for key in requested_keys:
        if key not in mapping:
            raise KeyNotFoundError(key, secret_name)
        selected[key] = mapping[key]
    return selected


def decode_value(encoded: str) -> bytes:
    """Decode base64 as leniently as possible.

    Characters outside the base64 alphabet are skipped, the URL-safe alphabet
    is accepted, padding is optional and anything after the first "=" is
    ignored. Malformed input is never rejected
    here; the API server validates values when they are written back.

    Args:
        encoded: The base64 text.

    Returns:
        The decoded bytes.

    """
    # Decoding stops at the first padding character.
    data = encoded.split("=", 1)[0]
    cleaned = _NON_BASE64_CHARS.sub("", data.translate(_URLSAFE_TO_STANDARD))
    # A single leftover character holds fewer than eight bits.
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    return base64.b64decode(cleaned + "=" * (-len(cleaned) % 4))


def encode_value(raw: bytes) -> str:
    """Encode bytes as standard base64 text."""
    return base64.b64encode(raw).decode("ascii")


def encode_pending_edits(edits: Iterable[PendingEdit], *, skip_encode: bool) -> list[SecretKeyValue]:
    """Turn raw user input into the values stored in the secret.

    Args:
        edits: Values collected from the user, in prompt order.
        skip_encode: If True the input is already base64 and is passed through
            unchanged, even if it is malformed.

    Returns:
        Key/value pairs ready for build_patch_payload.

    """
    if skip_encode:
        return [SecretKeyValue(edit.key, edit.raw_value) for edit in edits]
    return [SecretKeyValue(edit.key, encode_value(edit.raw_value.encode("utf-8"))) for edit in edits]


def build_patch_payload(pairs: Iterable[SecretKeyValue]) -> dict[str, dict[str, str]]:
    """Build a strategic-merge patch that sets the given data keys."""
    return {"data": {pair.key: pair.value for pair in pairs}}


def serialize_payload(payload: Mapping[str, object]) -> str:
    """Serialize a patch payload as compact JSON for ``kubectl patch -p``."""
    return json.dumps(payload, separators=(",", ":"))


def _as_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def _as_text(value: str | bytes) -> str:
    return value.decode("utf-8", errors="backslashreplace") if isinstance(value, bytes) else value


def render_text(entries: Sequence[SecretKeyValue], *, quiet: bool) -> bytes:
    """Render entries for plain display.

    Args:
        entries: The entries to show, in display order.
        quiet: If True, emit only the values separated by newlines with no
            trailing newline, so a single value can be redirected to a file
            byte for byte.

    Returns:
        The bytes to write to standard output.

    """
    if quiet:
        return b"\n".join(_as_bytes(entry.value) for entry in entries)
    return b"".join(entry.key.encode("utf-8") + b": " + _as_bytes(entry.value) + b"\n" for entry in entries)


def render_structured(entries: Sequence[SecretKeyValue], output: OutputFormat) -> str:
    """Render entries as a JSON or YAML mapping of key to value.

    Decoded values that are not valid UTF-8 are shown with backslash escapes.

    Args:
        entries: The entries to show, in display order.
        output: OutputFormat.JSON or OutputFormat.YAML.

    Returns:
        The document text, newline-terminated.

    Raises:
        ValueError: If output is not a structured format.

    """
    data = {entry.key: _as_text(entry.value) for entry in entries}
    match output:
        case OutputFormat.JSON:
            return json.dumps(data, indent=2) + "\n"
        case OutputFormat.YAML:
            return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
        case _:
            raise ValueError(f"Not a structured output format: {output}")

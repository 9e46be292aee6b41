"""Secrets management subpackage.

This package contains the codec for kubectl's secret output, the buffered
line input used to read values, and the get/set/create operations.
"""

from ksecret.secrets.codec import (
    build_patch_payload,
    decode_value,
    encode_value,
    parse_secret_dump,
    select_keys,
)
from ksecret.secrets.operations import create_secret, get_secret, set_secret
from ksecret.secrets.prompts import LineBuffer, StreamLineSource

__all__ = [
    # codec
    "parse_secret_dump",
    "select_keys",
    "decode_value",
    "encode_value",
    "build_patch_payload",
    # prompts
    "LineBuffer",
    "StreamLineSource",
    # operations
    "get_secret",
    "set_secret",
    "create_secret",
]

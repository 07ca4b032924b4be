"""Shared AWS helpers for service clients."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Optional

import boto3


def decode_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode a base64 ``ACCESS:SECRET`` key pair into its components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except (binascii.Error, ValueError):
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


def create_boto3_client(
    service_name: str,
    *,
    region_name: str,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> Any:
    """Instantiate a boto3 client, using explicit credentials when both are given."""

    client_kwargs: dict[str, Any] = {"region_name": region_name}
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client", "decode_api_key"]

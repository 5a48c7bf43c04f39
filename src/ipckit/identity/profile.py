"""
Profile documents.

A profile is a schema.org ``Person`` that names the identity by MNID and
carries the controlling key's public key.  It is serialized with RFC 8785
canonical JSON so the same profile always hashes to the same content
address.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import rfc8785

from .. import mnid
from ..errors import SchemaError
from ..models import Address, NetworkEndpoint

SCHEMA_CONTEXT = "http://schema.org"


def image_object(content_hash: str, name: str = "avatar") -> dict[str, str]:
    return {
        "@type": "ImageObject",
        "name": name,
        "contentURL": f"/ipfs/{content_hash}",
    }


def build_profile(
    name: str,
    identity: Address,
    endpoint: NetworkEndpoint,
    public_key: Optional[str] = None,
    image_hash: Optional[str] = None,
) -> dict[str, Any]:
    profile: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Person",
        "name": name,
        "address": mnid.encode(identity, endpoint.mnid_chain_id),
        "network": endpoint.name,
    }
    if public_key:
        profile["publicKey"] = public_key
    if image_hash:
        profile["image"] = image_object(image_hash)
    return profile


def serialize_profile(profile: dict[str, Any]) -> bytes:
    return rfc8785.dumps(profile)


def parse_profile(data: bytes) -> dict[str, Any]:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SchemaError(f"Profile document is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SchemaError("Profile document is not a JSON object")
    return payload

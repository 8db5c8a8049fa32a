"""Derivation of release names from broker instance ids."""

from __future__ import annotations

import hashlib
import re

MAX_RELEASE_NAME_LENGTH = 53
_INVALID = re.compile(r"[^a-z0-9-]+")


def release_name_for(instance_id: str, *, prefix: str = "") -> str:
    """Map an instance id onto a DNS-1123 label usable as a release name.

    Ids that are already valid (lower-case UUIDs, for instance) are kept as-is.
    Anything that has to be rewritten or shortened gets a digest suffix so that
    distinct ids cannot collapse onto the same release.
    """

    candidate = f"{prefix}{instance_id}".lower()
    sanitized = _INVALID.sub("-", candidate).strip("-")
    if sanitized == f"{prefix}{instance_id}" and len(sanitized) <= MAX_RELEASE_NAME_LENGTH:
        return sanitized

    suffix = hashlib.sha256(instance_id.encode("utf-8")).hexdigest()[:10]
    head = sanitized[: MAX_RELEASE_NAME_LENGTH - len(suffix) - 1].rstrip("-")
    if not head:
        head = "release"
    return f"{head}-{suffix}"


__all__ = ["MAX_RELEASE_NAME_LENGTH", "release_name_for"]

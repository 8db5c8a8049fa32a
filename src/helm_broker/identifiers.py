"""Encoding between catalog service identities and chart references.

Two strategies exist and a deployment uses exactly one of them:

* ``name`` (default): the service id and name are the chart reference with the
  repository separator ``/`` replaced by ``.``; decoding is the reverse
  substitution and needs no lookup.
* ``digest``: the service id is the first 24 characters of the chart digest.
  Digests are not reversible, so decoding searches the live repository index.

Identifiers produced by one strategy are meaningless to the other.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from helm_broker.charts.search import SearchResult
from helm_broker.domain import IdentifierStrategy, PackageReference, ServiceId
from helm_broker.exceptions import InvalidFormatError, NotFoundError

SERVICE_ID_LENGTH = 24
REFERENCE_SEPARATOR = "/"
NAME_DELIMITER = "."


def encode_service_id(digest: str) -> ServiceId:
    """Truncate a chart digest to a fixed-length service id."""

    if len(digest) < SERVICE_ID_LENGTH:
        msg = f"invalid id pattern: digest {digest!r} is shorter than {SERVICE_ID_LENGTH}"
        raise InvalidFormatError(msg)
    return ServiceId(digest[:SERVICE_ID_LENGTH])


def encode_service_name(name: str) -> str:
    """Turn ``repo/chart`` into the catalog-safe ``repo.chart``."""

    if REFERENCE_SEPARATOR not in name:
        raise InvalidFormatError(f"invalid name pattern: {name!r} has no {REFERENCE_SEPARATOR!r}")
    if NAME_DELIMITER in name:
        # A literal dot would decode back into a separator.
        raise InvalidFormatError(
            f"invalid name pattern: {name!r} already contains {NAME_DELIMITER!r}"
        )
    return name.replace(REFERENCE_SEPARATOR, NAME_DELIMITER)


def decode_package_reference(service_id: str) -> PackageReference:
    """Reverse :func:`encode_service_name`."""

    if NAME_DELIMITER not in service_id:
        raise InvalidFormatError(
            f"invalid name pattern: {service_id!r} has no {NAME_DELIMITER!r}"
        )
    return PackageReference(service_id.replace(NAME_DELIMITER, REFERENCE_SEPARATOR))


IndexLookup = Callable[[], Awaitable[Sequence[SearchResult]]]


class IdentifierCodec(Protocol):
    """Derives catalog identities from charts and maps them back."""

    strategy: IdentifierStrategy

    def service_id(self, result: SearchResult) -> ServiceId: ...

    def service_name(self, result: SearchResult) -> str: ...

    async def package_reference(self, service_id: str) -> PackageReference: ...


class NameIdentifierCodec:
    strategy = IdentifierStrategy.NAME

    def service_id(self, result: SearchResult) -> ServiceId:
        return ServiceId(encode_service_name(result.name))

    def service_name(self, result: SearchResult) -> str:
        return encode_service_name(result.name)

    async def package_reference(self, service_id: str) -> PackageReference:
        return decode_package_reference(service_id)


class DigestIdentifierCodec:
    """Digest-prefix identities resolved through the repository index."""

    strategy = IdentifierStrategy.DIGEST

    def __init__(self, lookup: IndexLookup) -> None:
        self._lookup = lookup

    def service_id(self, result: SearchResult) -> ServiceId:
        return encode_service_id(result.chart.digest or "")

    def service_name(self, result: SearchResult) -> str:
        return encode_service_name(result.name)

    async def package_reference(self, service_id: str) -> PackageReference:
        if len(service_id) != SERVICE_ID_LENGTH:
            raise InvalidFormatError(f"invalid id pattern: {service_id!r}")
        for result in await self._lookup():
            digest = result.chart.digest or ""
            if digest[:SERVICE_ID_LENGTH] == service_id:
                return PackageReference(result.name)
        raise NotFoundError(f"no chart with digest prefix {service_id}")


def build_codec(strategy: IdentifierStrategy, lookup: IndexLookup) -> IdentifierCodec:
    """Return the codec for the configured identifier strategy."""

    if strategy is IdentifierStrategy.DIGEST:
        return DigestIdentifierCodec(lookup)
    return NameIdentifierCodec()


__all__ = [
    "SERVICE_ID_LENGTH",
    "DigestIdentifierCodec",
    "IdentifierCodec",
    "IndexLookup",
    "NameIdentifierCodec",
    "build_codec",
    "decode_package_reference",
    "encode_service_id",
    "encode_service_name",
]

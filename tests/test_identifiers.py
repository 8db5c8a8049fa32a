from __future__ import annotations

import asyncio

import pytest

from helm_broker.charts import ChartVersion, SearchResult
from helm_broker.domain import IdentifierStrategy
from helm_broker.exceptions import InvalidFormatError, NotFoundError
from helm_broker.identifiers import (
    SERVICE_ID_LENGTH,
    DigestIdentifierCodec,
    NameIdentifierCodec,
    build_codec,
    decode_package_reference,
    encode_service_id,
    encode_service_name,
)


def _result(name: str, digest: str | None = None) -> SearchResult:
    chart = ChartVersion(name=name.split("/")[-1], version="1.0.0", digest=digest)
    return SearchResult(name=name, chart=chart)


@pytest.mark.parametrize("name", ["team/app", "stable/mysql", "a/b"])
def test_name_encoding_is_reversible(name: str) -> None:
    encoded = encode_service_name(name)
    assert "/" not in encoded
    assert decode_package_reference(encoded) == name


def test_encode_service_name_replaces_separator() -> None:
    assert encode_service_name("team/app") == "team.app"


def test_encode_service_name_requires_separator() -> None:
    with pytest.raises(InvalidFormatError):
        encode_service_name("app")


def test_encode_service_name_rejects_existing_delimiter() -> None:
    with pytest.raises(InvalidFormatError):
        encode_service_name("team/app.v2")


def test_decode_requires_delimiter() -> None:
    with pytest.raises(InvalidFormatError):
        decode_package_reference("teamapp")


def test_encode_service_id_truncates_digest() -> None:
    digest = "0123456789abcdef0123456789abcdef"
    assert encode_service_id(digest) == digest[:SERVICE_ID_LENGTH]
    assert len(encode_service_id("x" * SERVICE_ID_LENGTH)) == SERVICE_ID_LENGTH


def test_encode_service_id_rejects_short_digest() -> None:
    with pytest.raises(InvalidFormatError):
        encode_service_id("abc123")


def test_name_codec_uses_encoded_name_for_id_and_name() -> None:
    codec = NameIdentifierCodec()
    result = _result("team/app")

    assert codec.service_id(result) == "team.app"
    assert codec.service_name(result) == "team.app"
    assert asyncio.run(codec.package_reference("team.app")) == "team/app"


def test_digest_codec_looks_up_prefix_in_index() -> None:
    digest = "fedcba9876543210fedcba9876543210"
    results = [_result("team/app", "0" * 32), _result("team/db", digest)]

    async def _lookup() -> list[SearchResult]:
        return results

    codec = DigestIdentifierCodec(_lookup)
    assert codec.service_id(results[1]) == digest[:SERVICE_ID_LENGTH]
    assert asyncio.run(codec.package_reference(digest[:SERVICE_ID_LENGTH])) == "team/db"

    with pytest.raises(NotFoundError):
        asyncio.run(codec.package_reference("1" * SERVICE_ID_LENGTH))
    with pytest.raises(InvalidFormatError):
        asyncio.run(codec.package_reference("team.db"))


def test_digest_codec_rejects_chart_without_digest() -> None:
    async def _lookup() -> list[SearchResult]:
        return []

    codec = DigestIdentifierCodec(_lookup)
    with pytest.raises(InvalidFormatError):
        codec.service_id(_result("team/app"))


def test_build_codec_selects_strategy() -> None:
    async def _lookup() -> list[SearchResult]:
        return []

    assert isinstance(build_codec(IdentifierStrategy.NAME, _lookup), NameIdentifierCodec)
    digest_codec = build_codec(IdentifierStrategy.DIGEST, _lookup)
    assert digest_codec.strategy is IdentifierStrategy.DIGEST

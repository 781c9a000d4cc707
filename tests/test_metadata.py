import asyncio
import os

import pytest

from loaderkit.exceptions import APIServerError, MetadataUnavailableError
from loaderkit.services.metadata import (
    FABRIC_META_URL,
    NEOFORGE_META_URL,
    QUILT_META_URL,
    LoaderVersionsService,
    MetadataCache,
    parse_neoforge_response,
)

from conftest import FakeHttp


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


FABRIC_DATA = [
    {"version": "0.16.10", "stable": False, "build": 10, "maven": "net.fabricmc:fabric-loader:0.16.10"},
    {"version": "0.16.9", "stable": True, "build": 9, "maven": "net.fabricmc:fabric-loader:0.16.9"},
]


def make_service(tmp_path, http, clock):
    return LoaderVersionsService(http, cache_dir=str(tmp_path / "meta"), ttl=60, clock=clock)


def test_cache_is_reused_within_ttl(tmp_path):
    http = FakeHttp(json_routes={FABRIC_META_URL: FABRIC_DATA})
    clock = Clock()
    service = make_service(tmp_path, http, clock)

    first = asyncio.run(service.get_versions("fabric"))
    clock.now += 30
    second = asyncio.run(service.get_versions("fabric"))

    assert [v.version for v in first] == ["0.16.10", "0.16.9"]
    assert second == first
    assert second[1].stable and second[1].build_number == 9
    assert http.json_calls == [FABRIC_META_URL]
    assert os.path.isfile(tmp_path / "meta" / "fabric.json")


def test_cache_expires_after_ttl(tmp_path):
    http = FakeHttp(json_routes={FABRIC_META_URL: FABRIC_DATA})
    clock = Clock()
    service = make_service(tmp_path, http, clock)

    asyncio.run(service.get_versions("fabric"))
    clock.now += 61
    asyncio.run(service.get_versions("fabric"))
    asyncio.run(service.get_versions("fabric", force_refresh=True))

    assert http.json_calls == [FABRIC_META_URL] * 3


def test_invalidate_drops_cache(tmp_path):
    http = FakeHttp(json_routes={QUILT_META_URL: [{"version": "0.27.1", "build": 1}]})
    service = make_service(tmp_path, http, Clock())

    versions = asyncio.run(service.get_versions("quilt"))
    asyncio.run(service.invalidate("quilt"))
    asyncio.run(service.get_versions("quilt"))

    assert versions[0].stable
    assert len(http.json_calls) == 2


def test_corrupt_cache_is_ignored(tmp_path):
    http = FakeHttp(json_routes={FABRIC_META_URL: FABRIC_DATA})
    service = make_service(tmp_path, http, Clock())
    os.makedirs(tmp_path / "meta")
    (tmp_path / "meta" / "fabric.json").write_text("{not json", encoding="utf-8")

    assert len(asyncio.run(service.get_versions("fabric"))) == 2


def test_remote_failure_raises(tmp_path):
    http = FakeHttp(json_routes={FABRIC_META_URL: APIServerError("HTTP 503")})
    service = make_service(tmp_path, http, Clock())

    with pytest.raises(MetadataUnavailableError):
        asyncio.run(service.get_versions("fabric"))


def test_unknown_ecosystem(tmp_path):
    service = make_service(tmp_path, FakeHttp(), Clock())

    with pytest.raises(MetadataUnavailableError):
        asyncio.run(service.get_versions("liteloader"))


def test_neoforge_manifest_is_flattened_without_duplicates():
    data = {
        "gameVersions": [
            {"id": "1.21.1", "loaders": [{"id": "21.1.72", "stable": True}, {"id": "21.1.71", "stable": True}]},
            {"id": "1.21", "loaders": [{"id": "21.0.167", "stable": True}, {"id": "21.1.72", "stable": True}]},
        ]
    }

    versions = parse_neoforge_response(data)

    assert [v.version for v in versions] == ["21.1.72", "21.1.71", "21.0.167"]


def test_neoforge_source(tmp_path):
    http = FakeHttp(json_routes={NEOFORGE_META_URL: {"gameVersions": []}})
    service = make_service(tmp_path, http, Clock())

    assert asyncio.run(service.get_versions("neoforge")) == []


def test_cache_interface_requires_get_versions():
    with pytest.raises(TypeError):
        MetadataCache()

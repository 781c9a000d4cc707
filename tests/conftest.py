import asyncio
import copy
import json
import os

import pytest

from loaderkit.config import LoaderKitConfig
from loaderkit.exceptions import (
    APINotFoundError,
    DownloadNetworkError,
    MetadataUnavailableError,
)
from loaderkit.manager import LoaderManager
from loaderkit.models import JavaInstallation, MetadataVersion
from loaderkit.services.java import JavaLocator
from loaderkit.services.metadata import MetadataCache
from loaderkit.services.process import ProcessResult


class FakeHttp:
    """按 URL 返回预设数据的 HTTP 客户端"""

    def __init__(self, json_routes=None, files=None, delays=None):
        self.json_routes = dict(json_routes or {})
        self.files = dict(files or {})
        self.delays = dict(delays or {})
        self.json_calls = []
        self.download_calls = []

    async def get_json(self, url, params=None):
        self.json_calls.append(url)
        if url not in self.json_routes:
            raise APINotFoundError(f"not found: {url}")
        value = self.json_routes[url]
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)

    async def download(self, url, dest_path):
        self.download_calls.append(url)
        if url in self.delays:
            await asyncio.sleep(self.delays[url])
        value = self.files.get(url)
        if value is None:
            raise DownloadNetworkError("HTTP 404", context={"url": url})
        if isinstance(value, Exception):
            raise value
        with open(dest_path, "wb") as f:
            f.write(value)
        return len(value)

    async def close(self):
        pass


class FakeRunner:
    """模拟外部安装器进程"""

    def __init__(self, returncode=0, profile=None, error=None):
        self.returncode = returncode
        self.profile = profile
        self.error = error
        self.calls = []

    async def run(self, args, cwd=None, timeout=None):
        self.calls.append(list(args))
        if self.error is not None:
            raise self.error
        if self.profile is not None:
            game_dir = args[-1]
            version_id = self.profile["id"]
            version_dir = os.path.join(game_dir, "versions", version_id)
            os.makedirs(version_dir, exist_ok=True)
            with open(os.path.join(version_dir, f"{version_id}.json"), "w") as f:
                json.dump(self.profile, f)
        return ProcessResult(self.returncode, stdout="installer output", stderr="")


class FakeJavaLocator(JavaLocator):
    def __init__(self, installations=None):
        self.installations = list(installations or [])

    async def detect(self):
        return list(self.installations)


class FakeMetadata(MetadataCache):
    def __init__(self, versions=None, error=None):
        self.versions = dict(versions or {})
        self.error = error
        self.calls = []

    async def get_versions(self, ecosystem, force_refresh=False):
        self.calls.append(ecosystem)
        if self.error is not None:
            raise self.error
        if ecosystem not in self.versions:
            raise MetadataUnavailableError(f"no data for {ecosystem}")
        return [
            v if isinstance(v, MetadataVersion) else MetadataVersion(version=v)
            for v in self.versions[ecosystem]
        ]


def java(path="/opt/java/bin/java", major=21):
    return JavaInstallation(path=path, version=f"{major}.0.1", major_version=major)


def read_json(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def config(tmp_path):
    return LoaderKitConfig(
        library_root=str(tmp_path / "libraries"),
        cache_dir=str(tmp_path / "cache"),
    )


@pytest.fixture
def game_dir(tmp_path):
    path = tmp_path / "instance"
    path.mkdir()
    return str(path)


@pytest.fixture
def make_manager(config):
    def _make(http=None, metadata=None, java_locator=None, runner=None):
        return LoaderManager(
            config=config,
            http=http or FakeHttp(),
            metadata=metadata if metadata is not None else FakeMetadata(),
            java_locator=java_locator or FakeJavaLocator([java()]),
            runner=runner or FakeRunner(),
        )

    return _make

"""
加载器版本元数据缓存

定义元数据缓存接口，并提供基于本地 JSON 文件的默认实现。
"""

import json
import os
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import aiofiles
from loguru import logger

from loaderkit.config import METADATA_TTL
from loaderkit.download.locks import path_lock, write_atomic
from loaderkit.exceptions import APIError, MetadataUnavailableError
from loaderkit.models import MetadataVersion


FABRIC_META_URL = "https://meta.fabricmc.net/v2/versions/loader"
NEOFORGE_META_URL = "https://launcher-meta.modrinth.com/neo/v0/manifest.json"
QUILT_META_URL = "https://meta.quiltmc.org/v3/versions/loader"


class MetadataCache(ABC):
    """元数据缓存接口"""

    @abstractmethod
    async def get_versions(
        self, ecosystem: str, force_refresh: bool = False
    ) -> List[MetadataVersion]:
        """
        获取某个生态的全部加载器版本

        Raises:
            MetadataUnavailableError: 缓存与远端均不可用
        """


def parse_fabric_response(data) -> List[MetadataVersion]:
    return [
        MetadataVersion(
            version=item["version"],
            stable=bool(item.get("stable", False)),
            build_number=item.get("build"),
            maven_coords=item.get("maven"),
        )
        for item in data
    ]


def parse_neoforge_response(data) -> List[MetadataVersion]:
    versions: List[MetadataVersion] = []
    seen = set()
    for game_version in data.get("gameVersions", []):
        for loader in game_version.get("loaders", []):
            loader_id = loader.get("id")
            if not loader_id or loader_id in seen:
                continue
            seen.add(loader_id)
            versions.append(
                MetadataVersion(
                    version=loader_id,
                    stable=bool(loader.get("stable", False)),
                    maven_coords=loader.get("url"),
                )
            )
    return versions


def parse_quilt_response(data) -> List[MetadataVersion]:
    # Quilt 没有 stable 字段，全部视为稳定版
    return [
        MetadataVersion(
            version=item["version"],
            stable=True,
            build_number=item.get("build"),
            maven_coords=item.get("maven"),
        )
        for item in data
    ]


SOURCES: Dict[str, tuple] = {
    "fabric": (FABRIC_META_URL, parse_fabric_response),
    "neoforge": (NEOFORGE_META_URL, parse_neoforge_response),
    "quilt": (QUILT_META_URL, parse_quilt_response),
}


class LoaderVersionsService(MetadataCache):
    """带 TTL 的加载器版本缓存"""

    def __init__(
        self,
        http,
        cache_dir: str,
        ttl: float = METADATA_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.http = http
        self.cache_dir = cache_dir
        self.ttl = ttl
        self._clock = clock

    def _cache_path(self, ecosystem: str) -> str:
        return os.path.join(self.cache_dir, f"{ecosystem}.json")

    async def _read_cache(self, ecosystem: str) -> Optional[dict]:
        path = self._cache_path(ecosystem)
        if not os.path.exists(path):
            return None
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.warning(f"[元数据] 缓存文件损坏，忽略: {path} ({e})")
            return None

    async def _write_cache(self, ecosystem: str, versions: List[MetadataVersion]):
        path = self._cache_path(ecosystem)
        payload = {
            "fetched_at": self._clock(),
            "versions": [v.to_dict() for v in versions],
        }
        try:
            async with path_lock(path):
                await write_atomic(path, json.dumps(payload, indent=2))
        except OSError as e:
            logger.warning(f"[元数据] 写入 {ecosystem} 缓存失败: {e}")

    async def get_versions(
        self, ecosystem: str, force_refresh: bool = False
    ) -> List[MetadataVersion]:
        if ecosystem not in SOURCES:
            raise MetadataUnavailableError(
                f"未知的元数据类型: {ecosystem}", context={"ecosystem": ecosystem}
            )

        if not force_refresh:
            cached = await self._read_cache(ecosystem)
            if cached and cached.get("versions"):
                age = self._clock() - float(cached.get("fetched_at", 0))
                if age < self.ttl:
                    logger.debug(f"[元数据] 使用 {ecosystem} 缓存 ({age:.0f}s)")
                    return [MetadataVersion.from_dict(v) for v in cached["versions"]]

        url, parser = SOURCES[ecosystem]
        try:
            data = await self.http.get_json(url)
            versions = parser(data)
        except (APIError, KeyError, TypeError, AttributeError) as e:
            raise MetadataUnavailableError(
                f"获取 {ecosystem} 版本失败: {e}",
                context={"ecosystem": ecosystem, "url": url},
            )

        await self._write_cache(ecosystem, versions)
        logger.info(f"[元数据] 已刷新 {ecosystem} 版本列表 ({len(versions)} 个)")
        return versions

    async def invalidate(self, ecosystem: str) -> None:
        """清除某个生态的缓存"""
        path = self._cache_path(ecosystem)
        async with path_lock(path):
            if os.path.exists(path):
                os.remove(path)

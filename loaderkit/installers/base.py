"""
加载器安装器基类

每种加载器实现同一组能力：列出版本、推荐版本、安装、检查、计算版本 ID。
"""

import json
import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from loguru import logger

from loaderkit.config import LoaderKitConfig
from loaderkit.download.fetcher import ArtifactFetcher
from loaderkit.download.locks import path_lock, write_atomic
from loaderkit.exceptions import ValidationError
from loaderkit.models import InstallProfile, LoaderVariant, LoaderVersionDescriptor
from loaderkit.services.http import HttpClient
from loaderkit.services.java import JavaLocator
from loaderkit.services.metadata import MetadataCache
from loaderkit.services.process import ProcessRunner


ProgressCallback = Callable[[str, int, int], None]


@dataclass
class InstallerContext:
    """安装器共享的依赖"""

    http: HttpClient
    fetcher: ArtifactFetcher
    config: LoaderKitConfig
    metadata: Optional[MetadataCache] = None
    java_locator: Optional[JavaLocator] = None
    runner: Optional[ProcessRunner] = None

    @property
    def library_root(self) -> str:
        return self.config.shared_libraries_dir()


def profile_path(game_dir: str, version_id: str) -> str:
    """版本配置文件路径: {gameDir}/versions/{id}/{id}.json"""
    return os.path.join(game_dir, "versions", version_id, f"{version_id}.json")


class LoaderInstaller(ABC):
    """加载器安装器"""

    variant: LoaderVariant
    display_name: str = ""

    def __init__(self, context: InstallerContext):
        self.context = context

    @property
    def http(self) -> HttpClient:
        return self.context.http

    @property
    def fetcher(self) -> ArtifactFetcher:
        return self.context.fetcher

    @abstractmethod
    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        """列出加载器版本；提供 base_version 时只返回兼容版本"""

    def pick_recommended(
        self, descriptors: List[LoaderVersionDescriptor]
    ) -> Optional[str]:
        """默认规则：第一个稳定版，否则第一个版本"""
        for descriptor in descriptors:
            if descriptor.stable:
                return descriptor.version
        return descriptors[0].version if descriptors else None

    async def recommended_version(self, base_version: str) -> Optional[str]:
        descriptors = await self.list_versions(base_version)
        return self.pick_recommended(descriptors)

    @abstractmethod
    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """安装并返回版本 ID"""

    @abstractmethod
    def version_id(
        self, base_version: str, loader_version: Optional[str] = None
    ) -> str:
        """计算版本 ID（纯函数，不做任何 I/O）"""

    async def is_installed(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        """只检查配置文件是否存在，不校验库文件"""
        version_id = self.version_id(base_version, loader_version)
        return os.path.isfile(profile_path(game_dir, version_id))

    async def uninstall(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        """删除 versions/{id}/ 目录，返回是否确实删除了内容"""
        version_id = self.version_id(base_version, loader_version)
        version_dir = os.path.join(game_dir, "versions", version_id)
        async with path_lock(profile_path(game_dir, version_id)):
            if not os.path.isdir(version_dir):
                return False
            shutil.rmtree(version_dir)
        logger.info(f"[{self.display_name}] 已卸载: {version_id}")
        return True

    async def write_profile(self, game_dir: str, profile: InstallProfile) -> str:
        """原子写入版本配置文件"""
        path = profile_path(game_dir, profile.id)
        async with path_lock(path):
            await write_atomic(path, json.dumps(profile.to_dict(), indent=2))
        logger.info(f"[{self.display_name}] 配置文件已保存: {path}")
        return path

    def library_path(self, relative_path: str) -> str:
        """共享库目录下的绝对路径"""
        return os.path.join(self.context.library_root, *relative_path.split("/"))

    @staticmethod
    def _report(
        on_progress: Optional[ProgressCallback],
        message: str,
        current: int,
        total: int,
    ):
        if on_progress:
            on_progress(message, current, total)

    def _require_loader_version(self, loader_version: Optional[str]) -> str:
        if not loader_version:
            raise ValidationError(
                f"{self.display_name} loader version is required",
                context={"loader": self.variant.value},
            )
        return loader_version

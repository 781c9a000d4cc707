"""
NeoForge 安装器

运行官方安装器生成版本配置文件。安装器失败时生成一个直接继承原版的
降级配置文件，游戏仍可按原版方式启动。库文件在游戏首次启动时由 NeoForge
自行下载，这里只尝试预取 universal 构件。
"""

import json
import os
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from loaderkit.download.locks import path_lock, write_atomic
from loaderkit.exceptions import (
    APIError,
    InstallerSubprocessError,
    MetadataUnavailableError,
)
from loaderkit.installers.base import LoaderInstaller, ProgressCallback, profile_path
from loaderkit.models import InstallProfile, LoaderVariant, LoaderVersionDescriptor
from loaderkit.services.version_filter import filter_compatible, is_stable_version


NEOFORGE_MAVEN = "https://maven.neoforged.net/releases"
NEOFORGE_VERSIONS_API = (
    "https://maven.neoforged.net/api/maven/versions/releases/net/neoforged/neoforge"
)
VANILLA_MAIN_CLASS = "net.minecraft.client.main.Main"
MIN_JAVA_MAJOR = 17


class NeoForgeInstaller(LoaderInstaller):
    """NeoForge 安装器"""

    variant = LoaderVariant.NEOFORGE
    display_name = "NeoForge"

    async def _all_versions(self) -> List[str]:
        metadata = self.context.metadata
        if metadata is not None:
            try:
                versions = await metadata.get_versions("neoforge")
                return [v.version for v in versions]
            except MetadataUnavailableError as e:
                logger.warning(f"[NeoForge] 元数据缓存不可用，直接请求 NeoForge Maven: {e}")

        try:
            data = await self.http.get_json(NEOFORGE_VERSIONS_API)
            versions = list(data["versions"])
        except (APIError, KeyError, TypeError) as e:
            raise MetadataUnavailableError(
                f"获取 NeoForge 版本失败: {e}", context={"url": NEOFORGE_VERSIONS_API}
            )
        # Maven API 按从旧到新排列
        versions.reverse()
        return versions

    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        versions = await self._all_versions()
        if base_version:
            versions = filter_compatible(base_version, versions)
            logger.debug(
                f"[NeoForge] Minecraft {base_version} 可用 {len(versions)} 个版本: "
                f"{versions[:3]}"
            )
        return [LoaderVersionDescriptor(v, is_stable_version(v)) for v in versions]

    def version_id(self, base_version: str, loader_version: Optional[str] = None) -> str:
        loader_version = self._require_loader_version(loader_version)
        return f"neoforge-{loader_version}"

    async def ensure_launcher_profiles(self, game_dir: str):
        """安装器要求游戏目录下存在 launcher_profiles.json"""
        path = os.path.join(game_dir, "launcher_profiles.json")
        async with path_lock(path):
            if os.path.exists(path):
                return
            profiles = {
                "profiles": {},
                "selectedProfile": "(Default)",
                "clientToken": "00000000-0000-0000-0000-000000000000",
                "launcherVersion": {"name": "loaderkit", "format": 21},
            }
            await write_atomic(path, json.dumps(profiles, indent=2))
        logger.debug(f"[NeoForge] 已创建 {path}")

    async def run_installer(
        self, base_version: str, loader_version: str, game_dir: str, java_path: str
    ) -> str:
        """
        下载并运行官方安装器

        Raises:
            InstallerSubprocessError: 退出码非 0 或没有生成配置文件
        """
        version_id = self.version_id(base_version, loader_version)
        await self.ensure_launcher_profiles(game_dir)

        installer_name = f"neoforge-{loader_version}-installer.jar"
        installer_path = os.path.join(game_dir, ".temp", installer_name)
        installer_url = (
            f"{NEOFORGE_MAVEN}/net/neoforged/neoforge/{loader_version}/{installer_name}"
        )
        await self.fetcher.fetch(installer_path, [installer_url], label=installer_name)

        logger.info(f"[NeoForge] 正在使用 {java_path} 运行安装器...")
        result = await self.context.runner.run(
            [java_path, "-jar", installer_path, "--install-client", game_dir],
            cwd=game_dir,
            timeout=self.context.config.installer_timeout,
        )
        for line in result.stdout.splitlines():
            logger.debug(f"[NeoForge Installer] {line}")
        for line in result.stderr.splitlines():
            logger.debug(f"[NeoForge Installer Error] {line}")

        if not result.ok:
            raise InstallerSubprocessError(
                f"NeoForge 安装器退出码 {result.returncode}",
                context={"returncode": result.returncode, "stderr": result.stderr[-2000:]},
            )
        if not os.path.isfile(profile_path(game_dir, version_id)):
            raise InstallerSubprocessError(
                "NeoForge 安装器没有生成配置文件",
                context={"version_id": version_id},
            )
        return version_id

    async def create_fallback_profile(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> str:
        """生成直接继承原版的降级配置文件"""
        version_id = self.version_id(base_version, loader_version)
        now = datetime.now(timezone.utc).isoformat()
        profile = InstallProfile(
            id=version_id,
            inherits_from=base_version,
            main_class=VANILLA_MAIN_CLASS,
            extra={"releaseTime": now, "time": now, "type": "release"},
        )
        await self.write_profile(game_dir, profile)
        logger.warning(
            f"[NeoForge] 已生成降级配置文件 {version_id}，将以原版方式运行。"
            "完整的 NeoForge 支持需要安装器成功执行"
        )
        return version_id

    async def prefetch_universal(self, loader_version: str):
        """尝试预取 universal 构件，任何失败都忽略"""
        relative = (
            f"net/neoforged/neoforge/{loader_version}/"
            f"neoforge-{loader_version}-universal.jar"
        )
        try:
            await self.fetcher.fetch(
                self.library_path(relative),
                [f"{NEOFORGE_MAVEN}/{relative}"],
                label=f"neoforge-{loader_version}-universal.jar",
            )
        except Exception as e:
            logger.info(f"[NeoForge] universal 构件不可用，将在首次启动时下载: {e}")

    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        self._require_loader_version(loader_version)
        logger.info(
            f"[NeoForge] 正在为 Minecraft {base_version} 安装 NeoForge {loader_version}..."
        )

        # 1. Java
        self._report(on_progress, "Preparing NeoForge installer...", 1, 4)
        java = await self.context.java_locator.select(min_major=MIN_JAVA_MAJOR)
        logger.info(f"[NeoForge] 使用 Java {java.version}: {java.path}")

        # 2. 官方安装器，失败时降级
        self._report(on_progress, "Running NeoForge installer...", 2, 4)
        try:
            version_id = await self.run_installer(
                base_version, loader_version, game_dir, java.path
            )
            logger.info(f"[NeoForge] 安装器执行成功: {version_id}")
        except Exception as e:
            logger.warning(f"[NeoForge] 安装器失败: {e}")
            self._report(on_progress, "Creating fallback profile...", 2, 4)
            version_id = await self.create_fallback_profile(
                base_version, loader_version, game_dir
            )

        # 3. 库文件由 NeoForge 在启动时处理
        self._report(on_progress, "Downloading NeoForge libraries...", 3, 4)
        await self.prefetch_universal(loader_version)
        self._report(on_progress, "Downloading libraries (1/1)...", 3, 4)

        # 4. 完成
        self._report(on_progress, "NeoForge installation completed", 4, 4)
        logger.success(f"[NeoForge] 安装完成: {version_id}")
        return version_id

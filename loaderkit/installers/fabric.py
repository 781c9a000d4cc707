"""
Fabric 安装器

下载 Fabric 配置文件，并发下载全部库文件；任一库失败即终止安装。
"""

import asyncio
from typing import List, Optional

from loguru import logger

from loaderkit.exceptions import (
    APIError,
    APINotFoundError,
    InstallError,
    MetadataUnavailableError,
    ValidationError,
)
from loaderkit.installers.base import LoaderInstaller, ProgressCallback
from loaderkit.models import (
    InstallProfile,
    LibraryDescriptor,
    LoaderVariant,
    LoaderVersionDescriptor,
    MavenCoordinate,
)
from loaderkit.services.metadata import FABRIC_META_URL, parse_fabric_response


class FabricInstaller(LoaderInstaller):
    """Fabric 安装器"""

    variant = LoaderVariant.FABRIC
    display_name = "Fabric"

    async def _all_versions(self) -> List[LoaderVersionDescriptor]:
        metadata = self.context.metadata
        versions = None
        if metadata is not None:
            try:
                versions = await metadata.get_versions("fabric")
            except MetadataUnavailableError as e:
                logger.warning(f"[Fabric] 元数据缓存不可用，直接请求 Fabric Meta: {e}")

        if versions is None:
            try:
                versions = parse_fabric_response(await self.http.get_json(FABRIC_META_URL))
            except (APIError, KeyError, TypeError) as e:
                raise MetadataUnavailableError(
                    f"获取 Fabric 加载器版本失败: {e}", context={"url": FABRIC_META_URL}
                )

        logger.debug(f"[Fabric] 共 {len(versions)} 个加载器版本")
        return [LoaderVersionDescriptor(v.version, v.stable) for v in versions]

    async def _versions_for_game(self, base_version: str) -> List[LoaderVersionDescriptor]:
        url = f"{FABRIC_META_URL}/{base_version}"
        try:
            data = await self.http.get_json(url)
        except APINotFoundError:
            return []
        except APIError as e:
            raise MetadataUnavailableError(
                f"获取 Minecraft {base_version} 的 Fabric 加载器失败: {e}",
                context={"url": url},
            )

        # 响应结构: [{loader: {...}, intermediary: {...}, launcherMeta: {...}}]
        loaders = [
            LoaderVersionDescriptor(
                version=item["loader"]["version"],
                stable=bool(item["loader"].get("stable", False)),
            )
            for item in data
            if isinstance(item, dict) and item.get("loader")
        ]
        logger.debug(f"[Fabric] Minecraft {base_version} 可用 {len(loaders)} 个加载器")
        return loaders

    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        if base_version:
            return await self._versions_for_game(base_version)
        return await self._all_versions()

    def version_id(self, base_version: str, loader_version: Optional[str] = None) -> str:
        loader_version = self._require_loader_version(loader_version)
        return f"fabric-loader-{loader_version}-{base_version}"

    def resolve_library(self, library: dict) -> LibraryDescriptor:
        """配置文件中的 url 优先，其后依次尝试备用 Maven 仓库"""
        coordinate = MavenCoordinate.parse(library["name"])
        repositories = []
        if library.get("url"):
            repositories.append(library["url"])
        repositories.extend(self.context.config.fabric_mirrors)

        urls: List[str] = []
        for repository in repositories:
            url = f"{repository.rstrip('/')}/{coordinate.path}"
            if url not in urls:
                urls.append(url)

        return LibraryDescriptor(
            coordinate=library["name"],
            relative_path=coordinate.path,
            candidate_urls=urls,
            expected_size=library.get("size"),
            sha1=library.get("sha1"),
        )

    async def download_libraries(
        self,
        libraries: List[LibraryDescriptor],
        on_progress: Optional[ProgressCallback] = None,
    ):
        """每个库一个任务并发下载，第一个失败的库会取消其余任务"""
        total = len(libraries)
        completed = 0
        logger.info(f"[Fabric] 开始下载 {total} 个库文件...")

        async def fetch_one(library: LibraryDescriptor):
            nonlocal completed
            await self.fetcher.fetch(
                self.library_path(library.relative_path),
                library.candidate_urls,
                expected_sha1=library.sha1,
                label=library.coordinate,
            )
            completed += 1
            self._report(
                on_progress, f"Downloading libraries ({completed}/{total})...", 2, 3
            )

        tasks = [
            asyncio.create_task(fetch_one(library), name=f"fabric-{library.coordinate}")
            for library in libraries
        ]
        if not tasks:
            return

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                if task.exception() is not None:
                    raise task.exception()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        logger.info("[Fabric] 所有库文件已就绪")

    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        version_id = self.version_id(base_version, loader_version)
        logger.info(f"[Fabric] 正在为 Minecraft {base_version} 安装 Fabric {loader_version}...")

        # 1. 配置文件
        self._report(on_progress, "Downloading Fabric profile...", 1, 3)
        url = f"{FABRIC_META_URL}/{base_version}/{loader_version}/profile/json"
        try:
            document = await self.http.get_json(url)
        except APIError as e:
            raise InstallError(
                f"Fabric 配置文件下载失败: {e}",
                context={"url": url, "version_id": version_id},
            )

        profile = InstallProfile.from_dict(document)
        if profile.id != version_id:
            logger.debug(f"[Fabric] 配置文件 ID {profile.id!r} 已改写为 {version_id!r}")
            profile.id = version_id
        await self.write_profile(game_dir, profile)

        # 2. 库文件（共享库目录）
        self._report(on_progress, "Downloading Fabric libraries...", 2, 3)
        libraries = []
        for index, library in enumerate(profile.libraries):
            try:
                if not library.get("name"):
                    raise ValidationError("库条目缺少 name", context={"library": library})
                libraries.append(self.resolve_library(library))
            except ValidationError as e:
                logger.error(f"[Fabric] 第 {index + 1} 个库条目无法解析: {e}")
                raise InstallError(
                    f"Fabric 配置文件中的库条目无效: {e.message}",
                    context={"version_id": version_id, "index": index, "library": library},
                )
        await self.download_libraries(libraries, on_progress)

        # 3. 完成
        self._report(on_progress, "Fabric installation completed", 3, 3)
        logger.success(f"[Fabric] 安装完成: {version_id}")
        return version_id

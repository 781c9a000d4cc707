"""
Quilt 安装器

顺序下载库文件，单个失败不会中断，全部尝试后统一报告失败数量。
"""

from typing import List, Optional

from loguru import logger

from loaderkit.exceptions import (
    APIError,
    ArtifactUnreachableError,
    InstallError,
    LibraryInstallError,
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
from loaderkit.services.metadata import QUILT_META_URL


QUILT_RELEASE_MAVEN = "https://maven.quiltmc.org/repository/release/"


def resolve_library(library: dict) -> Optional[LibraryDescriptor]:
    """
    将库条目规范化为 LibraryDescriptor

    支持两种形式：标准的 ``downloads.artifact``，或只有 Maven ``name``。
    两者都没有时返回 None。
    """
    artifact = (library.get("downloads") or {}).get("artifact")
    if artifact and artifact.get("path") and artifact.get("url"):
        return LibraryDescriptor(
            coordinate=library.get("name", artifact["path"]),
            relative_path=artifact["path"],
            candidate_urls=[artifact["url"]],
            expected_size=artifact.get("size"),
            sha1=artifact.get("sha1"),
        )

    name = library.get("name")
    if not name:
        return None

    coordinate = MavenCoordinate.parse(name)
    urls = [f"{QUILT_RELEASE_MAVEN}{coordinate.path}"]
    # 例如 intermediary 只发布在 Fabric Maven 上
    if library.get("url"):
        extra = f"{library['url'].rstrip('/')}/{coordinate.path}"
        if extra not in urls:
            urls.append(extra)
    return LibraryDescriptor(
        coordinate=name,
        relative_path=coordinate.path,
        candidate_urls=urls,
        expected_size=library.get("size"),
    )


class QuiltInstaller(LoaderInstaller):
    """Quilt 安装器"""

    variant = LoaderVariant.QUILT
    display_name = "Quilt"

    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        if base_version:
            # 缓存数据不区分游戏版本，这里直接请求 Quilt Meta
            url = f"{QUILT_META_URL}/{base_version}"
            try:
                data = await self.http.get_json(url)
                versions = [item["loader"]["version"] for item in data]
            except (APIError, KeyError, TypeError) as e:
                raise MetadataUnavailableError(
                    f"获取 Minecraft {base_version} 的 Quilt 版本失败: {e}",
                    context={"url": url},
                )
        else:
            if self.context.metadata is None:
                raise MetadataUnavailableError("未配置元数据缓存，无法获取 Quilt 版本")
            versions = [v.version for v in await self.context.metadata.get_versions("quilt")]

        return [LoaderVersionDescriptor(v, True) for v in versions]

    def pick_recommended(
        self, descriptors: List[LoaderVersionDescriptor]
    ) -> Optional[str]:
        # Quilt Meta 已按从新到旧排列
        return descriptors[0].version if descriptors else None

    def version_id(self, base_version: str, loader_version: Optional[str] = None) -> str:
        loader_version = self._require_loader_version(loader_version)
        return f"quilt-loader-{loader_version}-{base_version}"

    async def download_libraries(
        self,
        profile: InstallProfile,
        on_progress: Optional[ProgressCallback] = None,
    ):
        libraries = profile.libraries
        total = len(libraries)
        logger.info(f"[Quilt] 开始下载 {total} 个库文件到: {self.context.library_root}")

        completed = 0
        skipped = 0
        failed = 0

        for library in libraries:
            try:
                descriptor = resolve_library(library)
            except ValidationError as e:
                failed += 1
                logger.error(f"[Quilt] 库条目无效: {e}")
                continue
            if descriptor is None:
                failed += 1
                logger.error(f"[Quilt] 库条目既没有 artifact 也没有 name: {library}")
                continue

            try:
                downloaded = await self.fetcher.fetch(
                    self.library_path(descriptor.relative_path),
                    descriptor.candidate_urls,
                    expected_size=descriptor.expected_size,
                    expected_sha1=descriptor.sha1,
                    label=descriptor.relative_path,
                )
            except ArtifactUnreachableError as e:
                failed += 1
                logger.error(f"[Quilt] 库文件下载失败: {descriptor.relative_path} ({e})")
                continue

            if not downloaded:
                skipped += 1
            completed += 1
            self._report(
                on_progress, f"Downloading libraries ({completed}/{total})...", 2, 3
            )

        logger.info(
            f"[Quilt] 库文件汇总: {completed} 完成, {skipped} 跳过, {failed} 失败"
        )
        if failed > 0:
            raise LibraryInstallError(
                f"有 {failed} 个 Quilt 库下载失败",
                context={"failed": failed, "total": total},
            )

    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        version_id = self.version_id(base_version, loader_version)
        logger.info(f"[Quilt] 正在为 Minecraft {base_version} 安装 Quilt {loader_version}...")

        # 1. 配置文件
        self._report(on_progress, "Fetching Quilt profile...", 1, 3)
        url = f"{QUILT_META_URL}/{base_version}/{loader_version}/profile/json"
        try:
            document = await self.http.get_json(url)
        except APIError as e:
            raise InstallError(
                f"Quilt 配置文件下载失败: {e}",
                context={"url": url, "version_id": version_id},
            )

        profile = InstallProfile.from_dict(document)
        if profile.id != version_id:
            logger.debug(f"[Quilt] 配置文件 ID {profile.id!r} 已改写为 {version_id!r}")
            profile.id = version_id
        await self.write_profile(game_dir, profile)

        # 2. 库文件
        self._report(on_progress, "Downloading Quilt libraries...", 2, 3)
        await self.download_libraries(profile, on_progress)

        # 3. 完成
        self._report(on_progress, "Quilt installation completed", 3, 3)
        logger.success(f"[Quilt] 安装完成: {version_id}")
        return version_id

"""
加载器管理器

对外的统一入口：按加载器类型从注册表中取出安装器并分发调用。
"""

from typing import Dict, List, Optional, Union

from loguru import logger

from loaderkit.config import LoaderKitConfig
from loaderkit.download.fetcher import ArtifactFetcher
from loaderkit.exceptions import UnsupportedVariantError
from loaderkit.installers import (
    InstallerContext,
    LoaderInstaller,
    ProgressCallback,
    create_installer_registry,
)
from loaderkit.models import LoaderVariant, LoaderVersionDescriptor
from loaderkit.services.http import HttpClient
from loaderkit.services.java import JavaLocator, SystemJavaLocator
from loaderkit.services.metadata import LoaderVersionsService, MetadataCache
from loaderkit.services.process import ProcessRunner


VariantLike = Union[LoaderVariant, str]


def _name(variant: VariantLike) -> str:
    return variant.value if isinstance(variant, LoaderVariant) else str(variant)


class LoaderManager:
    """加载器管理器"""

    def __init__(
        self,
        config: Optional[LoaderKitConfig] = None,
        http: Optional[HttpClient] = None,
        metadata: Optional[MetadataCache] = None,
        java_locator: Optional[JavaLocator] = None,
        runner: Optional[ProcessRunner] = None,
        registry: Optional[Dict[LoaderVariant, LoaderInstaller]] = None,
    ):
        self.config = config or LoaderKitConfig()
        self._owned_http = http is None
        self.http = http or HttpClient(
            request_timeout=self.config.request_timeout,
            download_timeout=self.config.download_timeout,
        )
        runner = runner or ProcessRunner()
        if metadata is None:
            metadata = LoaderVersionsService(
                self.http,
                cache_dir=self.config.metadata_cache_dir(),
                ttl=self.config.metadata_ttl,
            )

        self.context = InstallerContext(
            http=self.http,
            fetcher=ArtifactFetcher(
                self.http,
                max_retries=self.config.max_retries,
                retry_delay=self.config.retry_delay,
            ),
            config=self.config,
            metadata=metadata,
            java_locator=java_locator or SystemJavaLocator(self.config.java_path, runner),
            runner=runner,
        )
        self._installers = (
            registry if registry is not None else create_installer_registry(self.context)
        )

    def register(self, installer: LoaderInstaller):
        """注册或替换某个加载器类型的安装器"""
        self._installers[installer.variant] = installer

    def get_installer(self, variant: VariantLike) -> LoaderInstaller:
        variant = LoaderVariant.parse(variant)
        installer = self._installers.get(variant)
        if installer is None:
            raise UnsupportedVariantError(
                f"Unsupported loader type: {variant.value}",
                context={"loader": variant.value},
            )
        return installer

    async def list_versions(
        self,
        variant: VariantLike,
        base_version: Optional[str] = None,
        include_unstable: bool = False,
    ) -> List[LoaderVersionDescriptor]:
        """获取加载器版本列表，默认只返回稳定版"""
        try:
            installer = self.get_installer(variant)
            versions = await installer.list_versions(base_version)
            recommended = installer.pick_recommended(versions)
            for descriptor in versions:
                descriptor.recommended = descriptor.version == recommended
            if not include_unstable:
                versions = [v for v in versions if v.stable]
            return versions
        except Exception as e:
            logger.error(f"[LoaderManager] 获取 {_name(variant)} 版本失败: {e}")
            raise

    async def recommended_version(
        self, variant: VariantLike, base_version: str
    ) -> Optional[str]:
        """获取推荐的加载器版本"""
        try:
            return await self.get_installer(variant).recommended_version(base_version)
        except Exception as e:
            logger.error(f"[LoaderManager] 获取 {_name(variant)} 推荐版本失败: {e}")
            raise

    async def install(
        self,
        variant: VariantLike,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """安装加载器，返回可启动的版本 ID"""
        try:
            installer = self.get_installer(variant)
            logger.info(
                f"[LoaderManager] 安装 {installer.variant.value} {loader_version} "
                f"(Minecraft {base_version})..."
            )
            return await installer.install(
                base_version, loader_version, game_dir, on_progress
            )
        except Exception as e:
            logger.error(f"[LoaderManager] 安装 {_name(variant)} 失败: {e}")
            raise

    async def is_installed(
        self,
        variant: VariantLike,
        base_version: str,
        loader_version: str,
        game_dir: str,
    ) -> bool:
        """检查加载器是否已安装，任何错误都返回 False"""
        try:
            return await self.get_installer(variant).is_installed(
                base_version, loader_version, game_dir
            )
        except Exception as e:
            logger.error(f"[LoaderManager] 检查 {_name(variant)} 安装状态失败: {e}")
            return False

    async def uninstall(
        self,
        variant: VariantLike,
        base_version: str,
        loader_version: str,
        game_dir: str,
    ) -> bool:
        try:
            return await self.get_installer(variant).uninstall(
                base_version, loader_version, game_dir
            )
        except Exception as e:
            logger.error(f"[LoaderManager] 卸载 {_name(variant)} 失败: {e}")
            raise

    def version_id(
        self,
        variant: VariantLike,
        base_version: str,
        loader_version: Optional[str] = None,
    ) -> str:
        """计算要启动的版本 ID（纯函数）"""
        return self.get_installer(variant).version_id(base_version, loader_version)

    async def close(self):
        if self._owned_http:
            await self.http.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

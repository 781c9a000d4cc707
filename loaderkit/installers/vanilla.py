"""
原版与 Forge

原版不需要安装任何东西；Forge 已弃用，只保留识别。
"""

from typing import List, Optional

from loguru import logger

from loaderkit.exceptions import UnsupportedVariantError
from loaderkit.installers.base import LoaderInstaller, ProgressCallback
from loaderkit.models import LoaderVariant, LoaderVersionDescriptor


FORGE_DEPRECATED = "Forge is deprecated, please use NeoForge instead"


class VanillaInstaller(LoaderInstaller):
    """原版：所有操作都是空操作"""

    variant = LoaderVariant.VANILLA
    display_name = "Vanilla"

    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        return []

    async def recommended_version(self, base_version: str) -> Optional[str]:
        return None

    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        return base_version

    def version_id(self, base_version: str, loader_version: Optional[str] = None) -> str:
        return base_version

    async def is_installed(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        return True

    async def uninstall(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        # 原版文件不归加载器管理
        return False


class ForgeInstaller(LoaderInstaller):
    """已弃用的 Forge"""

    variant = LoaderVariant.FORGE
    display_name = "Forge"

    async def list_versions(
        self, base_version: Optional[str] = None
    ) -> List[LoaderVersionDescriptor]:
        logger.warning(f"[LoaderManager] {FORGE_DEPRECATED}")
        return []

    async def recommended_version(self, base_version: str) -> Optional[str]:
        logger.warning(f"[LoaderManager] {FORGE_DEPRECATED}")
        return None

    async def install(
        self,
        base_version: str,
        loader_version: str,
        game_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        raise UnsupportedVariantError(FORGE_DEPRECATED, context={"loader": "forge"})

    def version_id(self, base_version: str, loader_version: Optional[str] = None) -> str:
        raise UnsupportedVariantError(FORGE_DEPRECATED, context={"loader": "forge"})

    async def is_installed(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        return False

    async def uninstall(
        self, base_version: str, loader_version: str, game_dir: str
    ) -> bool:
        raise UnsupportedVariantError(FORGE_DEPRECATED, context={"loader": "forge"})

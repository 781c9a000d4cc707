"""
loaderkit - Minecraft 模组加载器安装引擎

支持 Fabric、NeoForge、Quilt 的版本查询与安装。
"""

from loaderkit.config import LoaderKitConfig, load_config
from loaderkit.manager import LoaderManager
from loaderkit.models import LoaderVariant, LoaderVersionDescriptor

__version__ = "0.1.0"

__all__ = [
    "LoaderManager",
    "LoaderKitConfig",
    "LoaderVariant",
    "LoaderVersionDescriptor",
    "load_config",
    "__version__",
]

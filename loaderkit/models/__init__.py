"""
loaderkit 数据模型包
"""

from loaderkit.models.loader import (
    LoaderVariant,
    LoaderVersionDescriptor,
    MetadataVersion,
    MavenCoordinate,
    LibraryDescriptor,
    InstallProfile,
    JavaInstallation,
)

__all__ = [
    "LoaderVariant",
    "LoaderVersionDescriptor",
    "MetadataVersion",
    "MavenCoordinate",
    "LibraryDescriptor",
    "InstallProfile",
    "JavaInstallation",
]

"""
loaderkit 安装器

每种加载器一个安装器，通过注册表按类型分发。
"""

from typing import Dict

from loaderkit.installers.base import (
    InstallerContext,
    LoaderInstaller,
    ProgressCallback,
    profile_path,
)
from loaderkit.installers.fabric import FabricInstaller
from loaderkit.installers.neoforge import NeoForgeInstaller
from loaderkit.installers.quilt import QuiltInstaller
from loaderkit.installers.vanilla import ForgeInstaller, VanillaInstaller
from loaderkit.models import LoaderVariant


def create_installer_registry(
    context: InstallerContext,
) -> Dict[LoaderVariant, LoaderInstaller]:
    installers = [
        VanillaInstaller(context),
        FabricInstaller(context),
        NeoForgeInstaller(context),
        QuiltInstaller(context),
        ForgeInstaller(context),
    ]
    return {installer.variant: installer for installer in installers}


__all__ = [
    "InstallerContext",
    "LoaderInstaller",
    "ProgressCallback",
    "profile_path",
    "FabricInstaller",
    "NeoForgeInstaller",
    "QuiltInstaller",
    "VanillaInstaller",
    "ForgeInstaller",
    "create_installer_registry",
]

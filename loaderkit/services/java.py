"""
Java 运行时检测

扫描常见位置的 Java 安装并解析版本号。
"""

import glob
import os
import platform
import re
import shutil
from abc import ABC, abstractmethod
from typing import List, Optional

from loguru import logger

from loaderkit.exceptions import InstallerSubprocessError, MissingRuntimeError
from loaderkit.models import JavaInstallation
from loaderkit.services.process import ProcessRunner


VERSION_RE = re.compile(r'version "([^"]+)"')


def parse_major_version(version: str) -> int:
    """
    解析 Java 主版本号

    "1.8.0_292" -> 8, "17.0.2" -> 17, "21" -> 21
    """
    parts = re.split(r"[._+\-]", version)
    try:
        if parts[0] == "1" and len(parts) > 1:
            return int(parts[1])
        return int(parts[0])
    except (ValueError, IndexError):
        return 0


def parse_version_output(output: str) -> Optional[str]:
    match = VERSION_RE.search(output)
    return match.group(1) if match else None


def _java_executable() -> str:
    return "java.exe" if platform.system() == "Windows" else "java"


def candidate_paths(java_path: Optional[str] = None) -> List[str]:
    """按优先级列出可能的 java 可执行文件"""
    exe = _java_executable()
    candidates: List[str] = []

    if java_path:
        candidates.append(java_path)

    java_home = os.environ.get("JAVA_HOME")
    if java_home:
        candidates.append(os.path.join(java_home, "bin", exe))

    on_path = shutil.which("java")
    if on_path:
        candidates.append(on_path)

    system = platform.system()
    if system == "Darwin":
        patterns = [
            "/Library/Java/JavaVirtualMachines/*/Contents/Home/bin/java",
            os.path.expanduser(
                "~/Library/Java/JavaVirtualMachines/*/Contents/Home/bin/java"
            ),
        ]
    elif system == "Windows":
        patterns = [
            os.path.join(root, vendor, "*", "bin", exe)
            for root in (
                os.environ.get("ProgramFiles", r"C:\Program Files"),
                os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"),
            )
            for vendor in ("Java", "Eclipse Adoptium", "Microsoft", "Zulu")
        ]
    else:
        patterns = ["/usr/lib/jvm/*/bin/java", "/opt/java/*/bin/java"]

    for pattern in patterns:
        candidates.extend(sorted(glob.glob(pattern)))

    seen = set()
    unique = []
    for path in candidates:
        key = os.path.realpath(path)
        if key in seen:
            continue
        seen.add(key)
        unique.append(path)
    return unique


class JavaLocator(ABC):
    """Java 检测器接口"""

    @abstractmethod
    async def detect(self) -> List[JavaInstallation]:
        """列出本机可用的 Java 安装"""

    async def select(self, min_major: int = 17) -> JavaInstallation:
        """
        选择一个 Java 运行时

        优先返回主版本号 >= min_major 的安装，否则返回第一个检测到的。
        """
        installations = await self.detect()
        if not installations:
            raise MissingRuntimeError(
                "未找到 Java，请先安装 Java 后再安装该加载器",
                context={"min_major": min_major},
            )
        for java in installations:
            if java.major_version >= min_major:
                return java
        logger.warning(
            f"[Java] 没有 >= {min_major} 的 Java，将使用 {installations[0].version}"
        )
        return installations[0]


class SystemJavaLocator(JavaLocator):
    """扫描本机的 Java 安装"""

    def __init__(self, java_path: Optional[str] = None, runner=None):
        self.java_path = java_path
        self.runner = runner or ProcessRunner()
        self._cache: Optional[List[JavaInstallation]] = None

    async def probe(self, path: str) -> Optional[JavaInstallation]:
        """执行 java -version 并解析输出"""
        if not os.path.isfile(path):
            return None
        try:
            result = await self.runner.run([path, "-version"], timeout=15)
        except InstallerSubprocessError as e:
            logger.debug(f"[Java] 无法执行 {path}: {e}")
            return None

        output = result.stderr or result.stdout
        version = parse_version_output(output)
        if not version:
            return None
        return JavaInstallation(
            path=path,
            version=version,
            major_version=parse_major_version(version),
            architecture="x64" if "64-Bit" in output else "x86",
        )

    async def detect(self, force_refresh: bool = False) -> List[JavaInstallation]:
        if self._cache is not None and not force_refresh:
            return list(self._cache)

        installations = []
        for path in candidate_paths(self.java_path):
            java = await self.probe(path)
            if java:
                logger.debug(f"[Java] 发现 Java {java.version}: {java.path}")
                installations.append(java)

        self._cache = installations
        return list(installations)

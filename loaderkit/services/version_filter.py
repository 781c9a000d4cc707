"""
版本兼容性过滤

纯函数：解析游戏版本与加载器版本，判断兼容性并排序。
"""

import re
from typing import Iterable, List, Optional, Tuple


BASE_VERSION_RE = re.compile(r"^1\.(\d+)(?:\.(\d+))?")
LOADER_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)")

UNSTABLE_MARKERS = ("beta", "alpha")


def parse_base_version(base_version: str) -> Optional[Tuple[int, int]]:
    """
    解析游戏版本 ``1.{major}.{minor}``

    minor 缺省为 0，例如 "1.21" -> (21, 0)。无法解析时返回 None。
    """
    match = BASE_VERSION_RE.match(base_version.strip())
    if not match:
        return None
    major = int(match.group(1))
    minor = int(match.group(2)) if match.group(2) else 0
    return major, minor


def parse_loader_version(loader_version: str) -> Optional[Tuple[int, int, int]]:
    """解析加载器版本开头的 ``{major}.{minor}.{build}``"""
    match = LOADER_VERSION_RE.match(loader_version.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def build_number(loader_version: str) -> int:
    parsed = parse_loader_version(loader_version)
    return parsed[2] if parsed else 0


def is_compatible(base_version: str, loader_version: str) -> bool:
    """major 与 minor 完全一致才算兼容，build 不参与判断"""
    base = parse_base_version(base_version)
    loader = parse_loader_version(loader_version)
    if base is None or loader is None:
        return False
    return loader[:2] == base


def filter_compatible(base_version: str, candidates: Iterable[str]) -> List[str]:
    """
    过滤出兼容版本，按 build 号降序排列（最新在前）

    不做"最接近版本"的回退：不兼容时返回空列表。
    """
    compatible = [v for v in candidates if is_compatible(base_version, v)]
    compatible.sort(key=build_number, reverse=True)
    return compatible


def is_stable_version(version: str) -> bool:
    lowered = version.lower()
    return not any(marker in lowered for marker in UNSTABLE_MARKERS)

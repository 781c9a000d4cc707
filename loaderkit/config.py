"""
配置模块

定义 loaderkit 的运行配置，支持从 TOML / JSON / YAML 文件加载。
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
import yaml

from loaderkit.exceptions import ConfigParseError, ConfigValidationError


DEFAULT_FABRIC_MIRRORS = [
    "https://maven.fabricmc.net/",
    "https://repo1.maven.org/maven2/",
    "https://libraries.minecraft.net/",
]

METADATA_TTL = 6 * 60 * 60

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def default_home() -> str:
    """数据根目录，可通过 LOADERKIT_HOME 覆盖"""
    home = os.environ.get("LOADERKIT_HOME")
    if home:
        return home
    return os.path.join(os.path.expanduser("~"), ".loaderkit")


@dataclass
class LoaderKitConfig:
    """运行配置"""

    library_root: str = field(
        default_factory=lambda: os.path.join(default_home(), "shared", "libraries")
    )
    cache_dir: str = field(
        default_factory=lambda: os.path.join(default_home(), "cache")
    )
    metadata_ttl: float = METADATA_TTL
    request_timeout: Optional[float] = 30.0
    download_timeout: Optional[float] = None
    installer_timeout: Optional[float] = None
    max_retries: int = 0
    retry_delay: float = 1.0
    java_path: Optional[str] = None
    fabric_mirrors: List[str] = field(
        default_factory=lambda: list(DEFAULT_FABRIC_MIRRORS)
    )
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        """校验配置取值"""
        if not self.library_root:
            raise ConfigValidationError("library_root 不能为空")
        if not self.cache_dir:
            raise ConfigValidationError("cache_dir 不能为空")
        if self.metadata_ttl < 0:
            raise ConfigValidationError(
                "metadata_ttl 不能为负数", context={"metadata_ttl": self.metadata_ttl}
            )
        for name in ("request_timeout", "download_timeout", "installer_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigValidationError(
                    f"{name} 必须大于 0", context={name: value}
                )
        if not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ConfigValidationError(
                "max_retries 必须为非负整数", context={"max_retries": self.max_retries}
            )
        if self.retry_delay < 0:
            raise ConfigValidationError("retry_delay 不能为负数")
        if isinstance(self.fabric_mirrors, str):
            self.fabric_mirrors = [self.fabric_mirrors]
        self.fabric_mirrors = [
            m if m.endswith("/") else f"{m}/" for m in self.fabric_mirrors
        ]
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigValidationError(f"未知的日志级别: {self.log_level}")

    def shared_libraries_dir(self) -> str:
        """所有实例共享的库目录"""
        return os.path.abspath(os.path.expanduser(self.library_root))

    def metadata_cache_dir(self) -> str:
        return os.path.join(
            os.path.abspath(os.path.expanduser(self.cache_dir)), "loader-versions"
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LoaderKitConfig":
        """从字典创建配置，未知键会被拒绝"""
        data = dict(data or {})
        # 允许整个配置放在 [loaderkit] 段落下
        if "loaderkit" in data and isinstance(data["loaderkit"], dict):
            data = dict(data["loaderkit"])

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"未知的配置项: {', '.join(unknown)}", context={"unknown": unknown}
            )
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigValidationError(f"配置项类型错误: {e}")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(config_path: str) -> LoaderKitConfig:
    """加载配置文件"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigParseError(
            f"配置文件不存在: {config_path}", context={"path": config_path}
        )

    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigParseError(
                f"不支持的配置文件格式: {suffix}", context={"path": config_path}
            )
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        )

    return LoaderKitConfig.from_dict(data)

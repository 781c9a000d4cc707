"""
加载器数据模型

定义加载器类型、版本描述、安装配置文件和库描述等数据类。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from loaderkit.exceptions import UnsupportedVariantError, ValidationError


class LoaderVariant(Enum):
    """加载器类型"""

    VANILLA = "vanilla"
    FABRIC = "fabric"
    NEOFORGE = "neoforge"
    QUILT = "quilt"
    FORGE = "forge"  # 已弃用，仅保留识别

    @classmethod
    def parse(cls, value: Union[str, "LoaderVariant"]) -> "LoaderVariant":
        """从字符串解析加载器类型，不区分大小写"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedVariantError(
                f"Unsupported loader type: {value}",
                context={"loader": str(value)},
            )


@dataclass
class LoaderVersionDescriptor:
    """加载器版本描述"""

    version: str
    stable: bool
    recommended: bool = False


@dataclass
class MetadataVersion:
    """元数据缓存中的单条加载器版本记录"""

    version: str
    stable: bool = True
    build_number: Optional[int] = None
    maven_coords: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "stable": self.stable,
            "build_number": self.build_number,
            "maven_coords": self.maven_coords,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetadataVersion":
        return cls(
            version=data["version"],
            stable=bool(data.get("stable", True)),
            build_number=data.get("build_number"),
            maven_coords=data.get("maven_coords"),
        )


@dataclass
class MavenCoordinate:
    """
    Maven 坐标

    支持 ``group:artifact:version[:classifier][@extension]`` 形式。
    """

    group: str
    artifact: str
    version: str
    classifier: Optional[str] = None
    extension: str = "jar"

    @classmethod
    def parse(cls, name: str) -> "MavenCoordinate":
        extension = "jar"
        if "@" in name:
            name, extension = name.split("@", 1)
        parts = name.split(":")
        if len(parts) < 3 or not all(parts[:3]):
            raise ValidationError(
                f"无效的 Maven 坐标: {name}", context={"coordinate": name}
            )
        classifier = parts[3] if len(parts) > 3 and parts[3] else None
        return cls(
            group=parts[0],
            artifact=parts[1],
            version=parts[2],
            classifier=classifier,
            extension=extension,
        )

    @property
    def filename(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact}-{self.version}{suffix}.{self.extension}"

    @property
    def path(self) -> str:
        """相对于仓库根的路径（始终使用 / 分隔）"""
        group_path = self.group.replace(".", "/")
        return f"{group_path}/{self.artifact}/{self.version}/{self.filename}"

    def __str__(self) -> str:
        name = f"{self.group}:{self.artifact}:{self.version}"
        if self.classifier:
            name += f":{self.classifier}"
        if self.extension != "jar":
            name += f"@{self.extension}"
        return name


@dataclass
class LibraryDescriptor:
    """单个库文件的解析结果，只在安装期间存在"""

    coordinate: str
    relative_path: str
    candidate_urls: List[str]
    expected_size: Optional[int] = None
    sha1: Optional[str] = None


@dataclass
class InstallProfile:
    """
    版本配置文件（启动描述符）

    保存在 ``{gameDir}/versions/{id}/{id}.json``，远端文档中的其他字段
    原样保留在 ``extra`` 中。
    """

    id: str
    inherits_from: str = ""
    main_class: str = ""
    game_arguments: List[Any] = field(default_factory=list)
    jvm_arguments: List[Any] = field(default_factory=list)
    libraries: List[dict] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("id", "inheritsFrom", "mainClass", "arguments", "libraries")

    @classmethod
    def from_dict(cls, data: dict) -> "InstallProfile":
        arguments = data.get("arguments") or {}
        return cls(
            id=data.get("id", ""),
            inherits_from=data.get("inheritsFrom", "") or "",
            main_class=data.get("mainClass", ""),
            game_arguments=list(arguments.get("game", [])),
            jvm_arguments=list(arguments.get("jvm", [])),
            libraries=list(data.get("libraries", [])),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.inherits_from:
            data["inheritsFrom"] = self.inherits_from
        data.update(self.extra)
        data["mainClass"] = self.main_class
        data["arguments"] = {
            "game": list(self.game_arguments),
            "jvm": list(self.jvm_arguments),
        }
        data["libraries"] = list(self.libraries)
        return data


@dataclass
class JavaInstallation:
    """Java 安装信息"""

    path: str
    version: str
    major_version: int
    vendor: Optional[str] = None
    architecture: str = ""

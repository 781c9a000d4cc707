"""
loaderkit 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional
import aiohttp


class LoaderKitError(Exception):
    """loaderkit 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(LoaderKitError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class APIError(LoaderKitError):
    """元数据 API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class APINotFoundError(APIError):
    """API 资源不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class APIRateLimitError(APIError):
    """API 速率限制"""

    def _get_default_code(self) -> str:
        return "E429"


class APIServerError(APIError):
    """API 服务器错误"""

    def _get_default_code(self) -> str:
        return "E500"


class MetadataUnavailableError(LoaderKitError):
    """加载器版本元数据不可用（缓存与远端均失败）"""

    def _get_default_code(self) -> str:
        return "E210"


class DownloadError(LoaderKitError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadChecksumError(DownloadError):
    """下载校验错误（SHA1 或文件大小不匹配）"""

    def _get_default_code(self) -> str:
        return "E302"


class DownloadFileError(DownloadError):
    """下载文件操作错误"""

    def _get_default_code(self) -> str:
        return "E303"


class ArtifactUnreachableError(DownloadError):
    """某个构件的所有候选源均已失败"""

    def _get_default_code(self) -> str:
        return "E310"


class InstallError(LoaderKitError):
    """安装相关错误"""

    def _get_default_code(self) -> str:
        return "E600"


class LibraryInstallError(InstallError):
    """库文件批量下载失败（汇总）"""

    def _get_default_code(self) -> str:
        return "E610"


class InstallerSubprocessError(InstallError):
    """外部安装器进程失败或未生成配置文件"""

    def _get_default_code(self) -> str:
        return "E620"


class MissingRuntimeError(InstallError):
    """未找到可用的 Java 运行时"""

    def _get_default_code(self) -> str:
        return "E630"


class UnsupportedVariantError(LoaderKitError):
    """不支持的加载器类型（包括已弃用的 Forge）"""

    def _get_default_code(self) -> str:
        return "E640"


class VersionIncompatibleError(LoaderKitError):
    """没有与游戏版本兼容的加载器版本"""

    def _get_default_code(self) -> str:
        return "E650"


class ValidationError(LoaderKitError):
    """参数验证错误"""

    def _get_default_code(self) -> str:
        return "E700"


__all__ = [
    # 基础异常
    "LoaderKitError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # API / 元数据异常
    "APIError",
    "APINotFoundError",
    "APIRateLimitError",
    "APIServerError",
    "MetadataUnavailableError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "DownloadChecksumError",
    "DownloadFileError",
    "ArtifactUnreachableError",
    # 安装异常
    "InstallError",
    "LibraryInstallError",
    "InstallerSubprocessError",
    "MissingRuntimeError",
    "UnsupportedVariantError",
    "VersionIncompatibleError",
    # 验证异常
    "ValidationError",
]

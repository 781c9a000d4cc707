"""
loaderkit 服务层

包含外部边界（HTTP、子进程、Java 检测、元数据缓存）与版本兼容性过滤。
"""

from loaderkit.services.http import HttpClient
from loaderkit.services.java import JavaLocator, SystemJavaLocator
from loaderkit.services.metadata import LoaderVersionsService, MetadataCache
from loaderkit.services.process import ProcessResult, ProcessRunner

__all__ = [
    "HttpClient",
    "JavaLocator",
    "SystemJavaLocator",
    "LoaderVersionsService",
    "MetadataCache",
    "ProcessResult",
    "ProcessRunner",
]

"""
loaderkit 下载层

包含构件下载、路径锁、文件校验等功能。
"""

from loaderkit.download.fetcher import ArtifactFetcher, DownloadStats
from loaderkit.download.locks import path_lock, write_atomic
from loaderkit.download.verifier import FileVerifier

__all__ = [
    "ArtifactFetcher",
    "DownloadStats",
    "FileVerifier",
    "path_lock",
    "write_atomic",
]

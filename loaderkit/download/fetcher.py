"""
构件下载器

按候选源顺序下载单个构件，已存在且大小正确的文件直接跳过。
写入先落到临时文件再原子替换，并按目标路径加锁。
"""

import asyncio
import os
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from loaderkit.download.locks import path_lock, temp_path_for
from loaderkit.download.verifier import FileVerifier
from loaderkit.exceptions import (
    ArtifactUnreachableError,
    DownloadChecksumError,
    DownloadError,
)


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    bytes_downloaded: int = 0


class ArtifactFetcher:
    """构件下载器"""

    def __init__(
        self,
        http,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        self.http = http
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.verifier = FileVerifier()
        self.stats = DownloadStats()

    async def fetch(
        self,
        dest_path: str,
        urls: List[str],
        expected_size: Optional[int] = None,
        expected_sha1: Optional[str] = None,
        label: Optional[str] = None,
    ) -> bool:
        """
        下载单个构件

        Args:
            dest_path: 目标路径
            urls: 按优先级排列的候选地址
            expected_size: 预期文件大小，用于跳过判断和下载后校验
            expected_sha1: 预期 SHA1，仅用于下载后校验
            label: 日志中显示的名称

        Returns:
            True 表示实际发生了下载，False 表示已存在而跳过

        Raises:
            ArtifactUnreachableError: 所有候选源都失败
        """
        label = label or os.path.basename(dest_path)
        self.stats.total += 1

        async with path_lock(dest_path):
            if self.verifier.is_present(dest_path, expected_size):
                self.stats.skipped += 1
                logger.debug(f"[跳过] '{label}' 已存在")
                return False

            os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)
            errors: List[str] = []

            for url in urls:
                for attempt in range(self.max_retries + 1):
                    try:
                        await self._download_once(
                            url, dest_path, expected_size, expected_sha1
                        )
                        self.stats.completed += 1
                        logger.debug(f"[完成] '{label}' <- {url}")
                        return True
                    except (DownloadError, OSError) as e:
                        errors.append(f"{url}: {e}")
                        if attempt < self.max_retries:
                            delay = self.retry_delay * (2**attempt)
                            logger.warning(
                                f"[重试] 下载 '{label}' 失败 (第 {attempt + 1} 次): {e}. "
                                f"{delay:.1f}s 后重试..."
                            )
                            await asyncio.sleep(delay)
                        else:
                            logger.warning(f"[镜像] '{label}' 从 {url} 下载失败: {e}")

            self.stats.failed += 1
            logger.error(f"[错误] '{label}' 的所有候选源均不可用")
            raise ArtifactUnreachableError(
                f"无法下载构件: {label}",
                context={"artifact": label, "urls": list(urls), "errors": errors},
            )

    async def _download_once(
        self,
        url: str,
        dest_path: str,
        expected_size: Optional[int],
        expected_sha1: Optional[str],
    ):
        tmp_path = temp_path_for(dest_path)
        try:
            written = await self.http.download(url, tmp_path)
            self.stats.bytes_downloaded += written or 0

            if not self.verifier.size_matches(tmp_path, expected_size):
                raise DownloadChecksumError(
                    "文件大小不匹配",
                    context={
                        "expected": expected_size,
                        "actual": self.verifier.get_size(tmp_path),
                    },
                )
            if not await self.verifier.verify_sha1(tmp_path, expected_sha1):
                raise DownloadChecksumError(
                    "SHA1 校验失败", context={"expected": expected_sha1}
                )

            os.replace(tmp_path, dest_path)
        finally:
            # 清理不完整的文件
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def get_stats(self) -> DownloadStats:
        """获取下载统计"""
        return self.stats

"""
HTTP 客户端

封装 aiohttp，为元数据请求和构件下载提供统一、可替换的网络边界。
"""

import asyncio
from typing import Any, Optional

import aiofiles
import aiohttp
from loguru import logger

from loaderkit.exceptions import (
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
    DownloadFileError,
    DownloadNetworkError,
)


USER_AGENT = "loaderkit/0.1.0"


class HttpClient:
    """基于 aiohttp 的 HTTP 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        request_timeout: Optional[float] = 30.0,
        download_timeout: Optional[float] = None,
    ):
        self._session = session
        self._owned_session = session is None
        self.request_timeout = request_timeout
        self.download_timeout = download_timeout

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owned_session = True
        return self._session

    async def get_json(self, url: str, params: Optional[dict] = None) -> Any:
        """
        请求 JSON 数据

        Raises:
            APINotFoundError: 404
            APIRateLimitError: 429
            APIServerError: 5xx
            APIError: 其他非 200 状态或网络错误
        """
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        logger.debug(f"[HTTP] GET {url}")
        try:
            async with self.session.get(url, params=params, timeout=timeout) as response:
                if response.status == 200:
                    return await response.json(content_type=None)
                if response.status == 404:
                    raise APINotFoundError(f"资源不存在: {url}", response=response)
                if response.status == 429:
                    raise APIRateLimitError(f"请求过于频繁: {url}", response=response)
                if response.status >= 500:
                    raise APIServerError(
                        f"服务器错误 (状态码: {response.status})", response=response
                    )
                raise APIError(
                    f"API 请求失败 (状态码: {response.status})", response=response
                )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise APIError(
                f"API 请求失败: {e!r}", context={"url": url, "error": str(e)}
            )

    async def download(self, url: str, dest_path: str) -> int:
        """
        下载文件到指定路径

        Returns:
            写入的字节数
        """
        timeout = aiohttp.ClientTimeout(total=self.download_timeout)
        downloaded = 0
        try:
            async with self.session.get(url, timeout=timeout) as response:
                if response.status != 200:
                    raise DownloadNetworkError(
                        f"HTTP {response.status}",
                        context={"url": url, "status": response.status},
                    )
                async with aiofiles.open(dest_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(65536):
                        await f.write(chunk)
                        downloaded += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadNetworkError(
                f"网络错误: {e!r}", context={"url": url, "error": str(e)}
            )
        except OSError as e:
            raise DownloadFileError(
                f"写入文件失败: {e}", context={"path": dest_path, "error": str(e)}
            )
        return downloaded

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

"""
路径锁

进程级的按目标路径加锁，保证同一文件不会被并发写入。
"""

import asyncio
import os
import uuid
import weakref
from contextlib import asynccontextmanager
from typing import Any

import aiofiles


_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _key(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


def get_lock(path: str) -> asyncio.Lock:
    """获取某个路径对应的锁，同一路径始终返回同一个锁对象"""
    key = _key(path)
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    return lock


@asynccontextmanager
async def path_lock(path: str):
    """对目标路径加锁的异步上下文管理器"""
    lock = get_lock(path)
    async with lock:
        yield lock


def temp_path_for(path: str) -> str:
    """同目录下的唯一临时文件名，便于原子替换"""
    return f"{path}.{uuid.uuid4().hex[:8]}.part"


async def write_atomic(path: str, data: Any, mode: str = "w") -> None:
    """
    先写入临时文件再重命名到目标路径

    调用方需自行持有 path_lock。
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    tmp_path = temp_path_for(path)
    try:
        if "b" in mode:
            async with aiofiles.open(tmp_path, mode) as f:
                await f.write(data)
        else:
            async with aiofiles.open(tmp_path, mode, encoding="utf-8") as f:
                await f.write(data)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

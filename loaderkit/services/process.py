"""
子进程执行

基于 asyncio 的外部进程调用，作为可替换的进程边界。
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from loaderkit.exceptions import InstallerSubprocessError


@dataclass
class ProcessResult:
    """进程执行结果"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """外部进程执行器"""

    async def run(
        self,
        args: List[str],
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """
        运行进程直到结束，捕获 stdout / stderr

        Raises:
            InstallerSubprocessError: 无法启动或超时
        """
        logger.debug(f"[进程] 执行: {' '.join(args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InstallerSubprocessError(
                f"无法启动进程: {e}", context={"args": args, "error": str(e)}
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise InstallerSubprocessError(
                f"进程在 {timeout}s 内未结束，已终止",
                context={"args": args, "timeout": timeout},
            )
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        return ProcessResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

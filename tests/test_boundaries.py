import asyncio
import sys

import pytest
from aiohttp import web

from loaderkit.exceptions import (
    APINotFoundError,
    APIServerError,
    DownloadNetworkError,
    InstallerSubprocessError,
)
from loaderkit.services.http import HttpClient
from loaderkit.services.process import ProcessRunner


def test_process_result_captures_output():
    runner = ProcessRunner()

    result = asyncio.run(
        runner.run([sys.executable, "-c", "import sys; print('hi'); sys.exit(3)"])
    )

    assert result.returncode == 3
    assert not result.ok
    assert result.stdout.strip() == "hi"


def test_process_timeout_kills_child():
    runner = ProcessRunner()

    with pytest.raises(InstallerSubprocessError):
        asyncio.run(
            runner.run([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
        )


def test_process_spawn_failure():
    with pytest.raises(InstallerSubprocessError):
        asyncio.run(ProcessRunner().run(["/nonexistent/loaderkit-java", "-version"]))


async def _with_server(action):
    async def versions(request):
        return web.json_response([{"version": "0.16.9", "stable": True}])

    async def artifact(request):
        return web.Response(body=b"jar-bytes")

    async def broken(request):
        return web.Response(status=503)

    app = web.Application()
    app.router.add_get("/versions", versions)
    app.router.add_get("/lib.jar", artifact)
    app.router.add_get("/broken", broken)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        async with HttpClient(request_timeout=5) as http:
            return await action(http, f"http://{host}:{port}")
    finally:
        await runner.cleanup()


def test_get_json():
    async def action(http, base):
        return await http.get_json(f"{base}/versions")

    assert asyncio.run(_with_server(action)) == [{"version": "0.16.9", "stable": True}]


def test_get_json_status_errors():
    async def action(http, base):
        with pytest.raises(APINotFoundError):
            await http.get_json(f"{base}/missing")
        with pytest.raises(APIServerError) as excinfo:
            await http.get_json(f"{base}/broken")
        assert excinfo.value.context["status_code"] == 503

    asyncio.run(_with_server(action))


def test_download(tmp_path):
    dest = tmp_path / "lib.jar"

    async def action(http, base):
        written = await http.download(f"{base}/lib.jar", str(dest))
        with pytest.raises(DownloadNetworkError):
            await http.download(f"{base}/missing.jar", str(tmp_path / "missing.jar"))
        return written

    assert asyncio.run(_with_server(action)) == len(b"jar-bytes")
    assert dest.read_bytes() == b"jar-bytes"

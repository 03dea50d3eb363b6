# File: tests/test_fetcher.py
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from image_scout.config import CrawlSettings
from image_scout.crawler.fetcher import DownloadError, FetchError, Fetcher


@pytest_asyncio.fixture
async def server() -> AsyncIterator[str]:
    app = web.Application()

    async def handle_page(_):
        return web.Response(text="<h1>hello</h1>", content_type="text/html")

    async def handle_agent(request):
        agent = request.headers.get("User-Agent", "")
        return web.Response(text=f"<p>{agent}</p>", content_type="text/html")

    async def handle_json(_):
        return web.json_response({"a": 1})

    async def handle_image(_):
        return web.Response(body=b"\x89PNG\r\n", content_type="image/png")

    async def handle_error(_):
        return web.Response(status=500)

    app.router.add_get("/page", handle_page)
    app.router.add_get("/agent", handle_agent)
    app.router.add_get("/data.json", handle_json)
    app.router.add_get("/img.png", handle_image)
    app.router.add_get("/error", handle_error)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def settings() -> CrawlSettings:
    return CrawlSettings(request_timeout=2.0, user_agent="TestAgent/1.0")


@pytest.mark.asyncio()
async def test_fetch_document_returns_body(server, settings):
    async with Fetcher(settings) as fetcher:
        body = await fetcher.fetch_document(f"{server}/page")
    assert body == b"<h1>hello</h1>"


@pytest.mark.asyncio()
@pytest.mark.parametrize("path,reason", [("/missing", "HTTP 404"), ("/error", "HTTP 500")])
async def test_fetch_document_bad_status(server, settings, path, reason):
    async with Fetcher(settings) as fetcher:
        with pytest.raises(FetchError) as info:
            await fetcher.fetch_document(f"{server}{path}")
    assert info.value.cause == reason
    assert info.value.url.endswith(path)


@pytest.mark.asyncio()
async def test_fetch_document_rejects_non_html(server, settings):
    async with Fetcher(settings) as fetcher:
        with pytest.raises(FetchError, match="not an HTML document"):
            await fetcher.fetch_document(f"{server}/data.json")


@pytest.mark.asyncio()
async def test_fetch_document_connection_refused(settings):
    async with Fetcher(settings) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch_document("http://127.0.0.1:1/")


@pytest.mark.asyncio()
async def test_download_writes_file(server, settings, tmp_path: Path):
    target = tmp_path / "img.png"
    async with Fetcher(settings) as fetcher:
        await fetcher.download_to(f"{server}/img.png", target)
    assert target.read_bytes() == b"\x89PNG\r\n"


@pytest.mark.asyncio()
async def test_download_failure_leaves_no_file(server, settings, tmp_path: Path):
    target = tmp_path / "missing.png"
    async with Fetcher(settings) as fetcher:
        with pytest.raises(DownloadError):
            await fetcher.download_to(f"{server}/missing.png", target)
    assert not target.exists()


@pytest.mark.asyncio()
async def test_download_into_missing_directory(server, settings, tmp_path: Path):
    target = tmp_path / "nope" / "img.png"
    async with Fetcher(settings) as fetcher:
        with pytest.raises(DownloadError) as info:
            await fetcher.download_to(f"{server}/img.png", target)
    assert isinstance(info.value.cause, OSError)


@pytest.mark.asyncio()
async def test_session_sends_user_agent_and_is_closed(server, settings):
    fetcher = Fetcher(settings)
    async with fetcher:
        body = await fetcher.fetch_document(f"{server}/agent")
    assert body == b"<p>TestAgent/1.0</p>"
    assert fetcher.session.closed


@pytest.mark.asyncio()
async def test_calls_outside_context_fail(settings):
    with pytest.raises(RuntimeError):
        await Fetcher(settings).fetch_document("http://example.com/")

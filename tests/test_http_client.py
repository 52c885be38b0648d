"""Tests for AsyncHttpClient against a local aiohttp server."""

import asyncio

import pytest
from aiohttp import test_utils, web
from htmltomd.errors import FetchError
from htmltomd.http.client import AsyncHttpClient
from htmltomd.http.protocols import HttpResponse


def origin_app() -> web.Application:
    async def page(request: web.Request) -> web.Response:
        return web.Response(body=b"<p>hello</p>", content_type="text/html", charset="utf-8")

    async def latin1(request: web.Request) -> web.Response:
        return web.Response(body="<p>Grüße</p>".encode("iso-8859-1"), content_type="text/html", charset="iso-8859-1")

    async def big(request: web.Request) -> web.Response:
        return web.Response(body=b"x" * 50_000, content_type="text/html")

    async def streamed(request: web.Request) -> web.StreamResponse:
        # Chunked, so no Content-Length to check up front
        response = web.StreamResponse(headers={"Content-Type": "text/html"})
        await response.prepare(request)
        for _ in range(10):
            await response.write(b"y" * 10_000)
        await response.write_eof()
        return response

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.Response(body=b"<p>late</p>", content_type="text/html")

    async def missing(request: web.Request) -> web.Response:
        return web.Response(body=b"<p>nope</p>", status=404, content_type="text/html")

    async def echo_agent(request: web.Request) -> web.Response:
        return web.Response(text=request.headers.get("User-Agent", ""), content_type="text/plain")

    app = web.Application()
    app.router.add_get("/page", page)
    app.router.add_get("/latin1", latin1)
    app.router.add_get("/big", big)
    app.router.add_get("/streamed", streamed)
    app.router.add_get("/slow", slow)
    app.router.add_get("/missing", missing)
    app.router.add_get("/agent", echo_agent)
    return app


class TestAsyncHttpClient:
    """Tests for AsyncHttpClient."""

    @pytest.mark.asyncio
    async def test_fetches_page(self):
        """Test a successful fetch."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient() as client:
                response = await client.get(str(origin.make_url("/page")))

        assert isinstance(response, HttpResponse)
        assert response.status_code == 200
        assert response.content == b"<p>hello</p>"
        assert response.charset == "utf-8"

    @pytest.mark.asyncio
    async def test_reports_declared_charset(self):
        """Test that the Content-Type charset is exposed."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient() as client:
                response = await client.get(str(origin.make_url("/latin1")))

        assert response.charset == "iso-8859-1"
        assert response.content.decode(response.charset) == "<p>Grüße</p>"

    @pytest.mark.asyncio
    async def test_error_status_returned(self):
        """Test that a 404 is returned with its body rather than raised."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient() as client:
                response = await client.get(str(origin.make_url("/missing")))

        assert response.status_code == 404
        assert response.content == b"<p>nope</p>"

    @pytest.mark.asyncio
    async def test_content_length_over_limit(self):
        """Test that a declared oversize body is rejected."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient(max_content_size=1000) as client:
                with pytest.raises(FetchError, match="too large"):
                    await client.get(str(origin.make_url("/big")))

    @pytest.mark.asyncio
    async def test_streamed_body_over_limit(self):
        """Test that an oversize chunked body is cut off."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient(max_content_size=25_000) as client:
                with pytest.raises(FetchError, match="limit exceeded"):
                    await client.get(str(origin.make_url("/streamed")))

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that a slow origin raises FetchError."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient() as client:
                with pytest.raises(FetchError, match="Timed out"):
                    await client.get(str(origin.make_url("/slow")), timeout=0.2)

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        """Test that an unreachable host raises FetchError."""
        async with test_utils.TestServer(origin_app()) as origin:
            url = str(origin.make_url("/page"))
        # Server is closed now

        async with AsyncHttpClient() as client:
            with pytest.raises(FetchError):
                await client.get(url, timeout=2)

    @pytest.mark.asyncio
    async def test_user_agent(self):
        """Test default and custom User-Agent headers."""
        async with test_utils.TestServer(origin_app()) as origin:
            async with AsyncHttpClient() as client:
                default = await client.get(str(origin.make_url("/agent")))
            async with AsyncHttpClient(user_agent="custom/1.0") as client:
                custom = await client.get(str(origin.make_url("/agent")))

        assert b"htmltomd/" in default.content
        assert custom.content == b"custom/1.0"

    @pytest.mark.asyncio
    async def test_requires_start(self):
        """Test that get() before start() is an error."""
        client = AsyncHttpClient()
        with pytest.raises(RuntimeError):
            await client.get("https://example.com")


class TestHttpResponse:
    """Tests for HttpResponse."""

    @pytest.mark.parametrize(
        "content_type,expected",
        [
            ("text/html; charset=utf-8", "utf-8"),
            ('text/html; Charset="ISO-8859-1"', "ISO-8859-1"),
            ("text/html", None),
            ("", None),
            ("text/html; charset=", None),
        ],
    )
    def test_charset(self, content_type, expected):
        """Test charset extraction from Content-Type."""
        response = HttpResponse(status_code=200, content=b"", content_type=content_type, headers={}, url="u")
        assert response.charset == expected

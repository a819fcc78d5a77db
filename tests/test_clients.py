import asyncio
import json
import urllib.request

import pytest

import rested


async def error(self):
    await asyncio.sleep(0)
    raise ValueError("foo")


async def using_aiohttp(req):
    aiohttp = pytest.importorskip("aiohttp")
    session = aiohttp.ClientSession()
    try:
        return await rested.send_async(session, req)
    finally:
        await rested.close_async(session)


async def using_httpx_async(req):
    httpx = pytest.importorskip("httpx")
    async with httpx.AsyncClient() as client:
        return await rested.send_async(client, req)


def using_httpx_sync(req):
    httpx = pytest.importorskip("httpx")
    with httpx.Client() as client:
        return rested.send(client, req)


def test_send_with_unknown_client():
    class MyClass(object):
        pass

    with pytest.raises(TypeError, match="MyClass"):
        rested.send(MyClass(), rested.Request("GET", "foo"))


def test_async_send_with_unknown_client():
    class MyClass(object):
        pass

    with pytest.raises(TypeError, match="MyClass"):
        rested.send_async(MyClass(), rested.Request("GET", "foo"))


class TestClose:
    def test_calls_close_method(self):
        class MyClient:
            closed = 0

            def close(self):
                self.closed += 1

        client = MyClient()
        rested.close(client)
        assert client.closed == 1

    def test_without_close_method(self):
        rested.close(object())

    def test_event_loop_left_open(self):
        loop = asyncio.new_event_loop()
        try:
            rested.close(loop)
            assert not loop.is_closed()
        finally:
            loop.close()

    def test_async_falls_back_to_close(self):
        class MyClient:
            closed = 0

            def close(self):
                self.closed += 1

        client = MyClient()
        asyncio.run(rested.close_async(client))
        assert client.closed == 1


class TestSendWithUrllib:
    def test_no_contenttype(self, mocker, httpbin):
        req = rested.Request(
            "POST",
            httpbin.url + "/post",
            content=b"foo",
            headers={"Accept": "application/json"},
            params={"foo": "bar"},
        )
        client = urllib.request.build_opener()
        response = rested.send(client, req)
        assert response == rested.Response(
            200, mocker.ANY, headers=mocker.ANY
        )
        data = json.loads(response.content.decode())
        assert data["args"] == {"foo": "bar"}
        assert data["data"] == "foo"
        assert data["headers"]["Accept"] == "application/json"
        assert data["headers"]["Content-Type"] == "application/octet-stream"

    def test_no_data(self, mocker, httpbin):
        req = rested.Request(
            "GET",
            httpbin.url + "/get",
            headers={"Accept": "application/json"},
            params={"foo": "bar"},
        )
        client = urllib.request.build_opener()
        response = rested.send(client, req)
        assert response == rested.Response(
            200, mocker.ANY, headers=mocker.ANY
        )
        data = json.loads(response.content.decode())
        assert data["args"] == {"foo": "bar"}
        assert data["headers"]["Accept"] == "application/json"
        assert "Content-Type" not in data["headers"]

    def test_no_params(self, httpbin):
        req = rested.Request("GET", httpbin.url + "/get")
        response = rested.send(urllib.request.build_opener(), req)
        data = json.loads(response.content.decode())
        assert data["args"] == {}
        assert data["url"].endswith("/get")

    def test_http_error_status(self, mocker, httpbin):
        req = rested.Request("POST", httpbin.url + "/status/404")
        client = urllib.request.build_opener()
        response = rested.send(client, req)
        assert response == rested.Response(404, b"", headers=mocker.ANY)
        assert not response.success


@pytest.mark.live
class TestSendWithAsyncio:
    def test_https(self, mocker):
        req = rested.Request(
            "GET",
            "https://httpbingo.org/get",
            params={"param1": "foo"},
            headers={"Accept": "application/json"},
        )
        response = asyncio.run(rested.send_async(None, req))
        assert response == rested.Response(
            200, mocker.ANY, headers=mocker.ANY
        )
        data = json.loads(response.content.decode())
        assert data["args"] == {"param1": ["foo"]}
        assert data["headers"]["User-Agent"][0].startswith("Python-asyncio/")

    def test_timeout(self):
        req = rested.Request("GET", "http://httpbingo.org/delay/2")
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(rested.send_async(None, req, timeout=0.5))


def test_requests_send(mocker, httpbin):
    requests = pytest.importorskip("requests")
    session = requests.Session()

    req = rested.Request(
        "POST",
        httpbin.url + "/post",
        content=b'{"foo": 4}',
        params={"bla": "99"},
        headers={"Accept": "application/json"},
    )

    response = rested.send(session, req)
    assert response == rested.Response(200, mocker.ANY, headers=mocker.ANY)
    data = json.loads(response.content.decode())
    assert data["args"] == {"bla": "99"}
    assert json.loads(data["data"]) == {"foo": 4}
    assert data["headers"]["Accept"] == "application/json"


def test_requests_send_drops_content_encoding(httpbin):
    requests = pytest.importorskip("requests")
    response = rested.send(
        requests.Session(), rested.Request("GET", httpbin.url + "/gzip")
    )
    assert json.loads(response.content.decode())["gzipped"] is True
    assert rested.get_header(response.headers, "Content-Encoding") is None


class TestAiohttpSend:
    def test_ok(self, mocker, httpbin):
        req = rested.Request(
            "POST",
            httpbin.url + "/post",
            content=b'{"foo": 4}',
            params={"bla": "99"},
            headers={"Accept": "application/json"},
        )

        response = asyncio.run(using_aiohttp(req))
        assert response == rested.Response(
            200, mocker.ANY, headers=mocker.ANY
        )
        data = json.loads(response.content.decode())
        assert data["args"] == {"bla": "99"}
        assert json.loads(data["data"]) == {"foo": 4}
        assert data["headers"]["Accept"] == "application/json"

    def test_error(self, mocker, httpbin):
        pytest.importorskip("aiohttp")

        req = rested.Request(
            "POST",
            httpbin.url + "/post",
            content=b'{"foo": 4}',
            params={"bla": "99"},
            headers={"Accept": "application/json"},
        )
        mocker.patch("aiohttp.client_reqrep.ClientResponse.read", error)

        with pytest.raises(ValueError, match="foo"):
            asyncio.run(using_aiohttp(req))


class TestHttpxSend:
    def test_ok_sync(self, mocker, httpbin):
        req = rested.Request(
            "POST",
            httpbin.url + "/post",
            content=b'{"foo": 4}',
            params={"bla": "99"},
            headers={"Accept": "application/json"},
        )
        response = using_httpx_sync(req)
        assert rested.Response(200, mocker.ANY, mocker.ANY) == response
        data = json.loads(response.content.decode())
        assert data["args"] == {"bla": "99"}
        assert json.loads(data["data"]) == {"foo": 4}
        assert data["headers"]["Accept"] == "application/json"

    def test_ok_async(self, mocker, httpbin):
        req = rested.Request(
            "POST",
            httpbin.url + "/post",
            content=b'{"foo": 4}',
            params={"bla": "99"},
            headers={"Accept": "application/json"},
        )
        response = asyncio.run(using_httpx_async(req))
        assert rested.Response(200, mocker.ANY, mocker.ANY) == response
        data = json.loads(response.content.decode())
        assert data["args"] == {"bla": "99"}
        assert json.loads(data["data"]) == {"foo": 4}
        assert data["headers"]["Accept"] == "application/json"
